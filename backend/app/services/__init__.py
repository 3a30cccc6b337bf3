# Services Package
from app.services.employee_service import EmployeeService  # noqa
from app.services.reporting_structure import build_node, count_reports  # noqa
