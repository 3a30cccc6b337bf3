"""
Employee and compensation operations.

Empty or unknown identifiers yield None rather than raising; the HTTP layer
turns None into a 404.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.exceptions import CompensationAlreadyExistsError
from app.repositories.employee_repository import EmployeeRepository
from app.schemas.employee import Compensation, CompensationCreate, Employee, EmployeeCreate
from app.schemas.reporting import ReportingStructure
from app.services.reporting_structure import build_node, count_reports

logger = logging.getLogger("personnel.services.employee")


class EmployeeService:
    def __init__(self, repository: EmployeeRepository, reporting_depth: Optional[int] = None):
        self.repository = repository
        self.reporting_depth = reporting_depth or settings.REPORTING_STRUCTURE_DEPTH

    async def create(self, employee: Optional[EmployeeCreate]) -> Optional[Employee]:
        if employee is None:
            return None

        logger.debug(f"Creating employee '{employee.first_name} {employee.last_name}'")
        created = await self.repository.add(employee)
        await self.repository.commit()
        return created

    async def get_by_id(self, employee_id: str) -> Optional[Employee]:
        if not employee_id:
            return None
        return await self.repository.get_by_id(employee_id)

    async def update(self, employee: Employee) -> Employee:
        """Overwrite every attribute of an existing employee. Fields are not merged."""
        logger.debug(f"Updating employee '{employee.employee_id}'")

        updated = await self.repository.update(employee)
        await self.repository.commit()
        return updated

    async def employee_exists(self, employee_id: str) -> bool:
        return await self.repository.employee_exists(employee_id)

    async def compensation_exists(self, employee_id: str) -> bool:
        return await self.repository.compensation_exists(employee_id)

    async def get_reporting_structure(self, employee_id: str) -> Optional[ReportingStructure]:
        """
        Pair an employee with the number of people reporting to them,
        directly or through their direct reports.

        Only the levels loaded by the repository are counted.
        """
        if not employee_id:
            return None

        logger.debug(f"Retrieving reporting structure for employee '{employee_id}'")

        tree = await self.repository.get_reporting_structure(employee_id, depth=self.reporting_depth)
        if tree is None:
            return None

        number_of_reports = count_reports(tree, tree.root_id)
        logger.debug(f"Employee '{employee_id}' has {number_of_reports} report(s)")

        return ReportingStructure(
            employee=build_node(tree, tree.root_id),
            number_of_reports=number_of_reports,
        )

    async def create_compensation(self, compensation: Optional[CompensationCreate]) -> Optional[Compensation]:
        """
        Persist a compensation. Preconditions (employee id present, employee
        exists, no existing compensation) are checked by the caller.

        Raises:
            CompensationAlreadyExistsError: another compensation for the same
                employee was committed between the caller's check and ours.
        """
        if compensation is None:
            return None

        logger.debug(f"Creating compensation for employee '{compensation.employee_id}'")

        created = await self.repository.add_compensation(compensation)
        try:
            await self.repository.commit()
        except IntegrityError:
            await self.repository.rollback()
            if await self.repository.compensation_exists(compensation.employee_id):
                logger.warning(
                    f"Concurrent compensation insert for employee '{compensation.employee_id}' rejected"
                )
                raise CompensationAlreadyExistsError(compensation.employee_id)
            raise

        return created

    async def get_compensation_by_employee_id(self, employee_id: str) -> Optional[Compensation]:
        if not employee_id:
            return None

        logger.debug(f"Retrieving compensation for employee '{employee_id}'")
        return await self.repository.get_compensation_by_employee_id(employee_id)
