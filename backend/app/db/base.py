# Import all the models, so that Base has them before
# metadata.create_all() is called
from app.db.base_class import Base  # noqa

from app.models.employee import Employee, EmployeeDirectReport  # noqa
from app.models.compensation import Compensation  # noqa
