"""
Load the bundled sample organisation into an empty database.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.compensation import Compensation as CompensationRow
from app.models.employee import Employee as EmployeeRow, EmployeeDirectReport
from app.schemas.employee import Compensation, Employee

logger = logging.getLogger("personnel.seed")

EMPLOYEES_FILE = "employees.json"
COMPENSATIONS_FILE = "compensations.json"


def load_employees(seed_dir: Union[str, Path]) -> List[Employee]:
    path = Path(seed_dir) / EMPLOYEES_FILE
    with path.open(encoding="utf-8") as f:
        return [Employee.model_validate(item) for item in json.load(f)]


def load_compensations(seed_dir: Union[str, Path]) -> List[Compensation]:
    path = Path(seed_dir) / COMPENSATIONS_FILE
    if not path.exists():
        return []
    with path.open(encoding="utf-8") as f:
        return [Compensation.model_validate(item) for item in json.load(f)]


async def seed_database(db: AsyncSession, seed_dir: Union[str, Path]) -> int:
    """
    Insert the seed employees, their reporting edges and compensation.

    Does nothing if any employee already exists. Returns the number of
    employees inserted.
    """
    existing = await db.scalar(select(func.count()).select_from(EmployeeRow))
    if existing:
        logger.info(f"Skipping seed data: {existing} employee(s) already present")
        return 0

    employees = load_employees(seed_dir)
    compensations = load_compensations(seed_dir)

    db.add_all(
        EmployeeRow(
            id=employee.employee_id,
            first_name=employee.first_name,
            last_name=employee.last_name,
            position=employee.position,
            department=employee.department,
        )
        for employee in employees
    )
    # Employees must exist before edges and compensation reference them
    await db.flush()

    db.add_all(
        EmployeeDirectReport(manager_id=employee.employee_id, report_id=report_id, ordinal=ordinal)
        for employee in employees
        for ordinal, report_id in enumerate(employee.direct_reports)
    )
    db.add_all(
        CompensationRow(
            id=compensation.compensation_id,
            employee_id=compensation.employee_id,
            salary=compensation.salary,
            effective_date=compensation.effective_date,
        )
        for compensation in compensations
    )
    await db.commit()

    logger.info(f"Seeded {len(employees)} employee(s) and {len(compensations)} compensation(s)")
    return len(employees)
