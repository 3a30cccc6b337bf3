"""
Persistence gateway for employees and compensation.

Reads return fresh pydantic copies, never ORM instances, so a record fetched
before an update can't collide with the row being written. Mutations are
staged on the session and only become durable on commit().
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy import delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.compensation import Compensation as CompensationRow
from app.models.employee import Employee as EmployeeRow, EmployeeDirectReport
from app.schemas.employee import (
    Compensation,
    CompensationCreate,
    Employee,
    EmployeeBase,
)
from app.schemas.reporting import ReportingTree

logger = logging.getLogger("personnel.repository")

DEFAULT_REPORTING_DEPTH = 2


def _new_id() -> str:
    return str(uuid.uuid4())


def _compensation_from_row(row: CompensationRow) -> Compensation:
    return Compensation(
        compensation_id=row.id,
        employee_id=row.employee_id,
        salary=row.salary,
        effective_date=row.effective_date,
    )


def _employee_from_row(
    row: EmployeeRow,
    direct_reports: Optional[List[str]] = None,
    compensation: Optional[Compensation] = None,
) -> Employee:
    return Employee(
        employee_id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        position=row.position,
        department=row.department,
        direct_reports=list(direct_reports or []),
        compensation=compensation,
    )


def _columns(employee: EmployeeBase) -> Dict[str, Optional[str]]:
    return {
        "first_name": employee.first_name,
        "last_name": employee.last_name,
        "position": employee.position,
        "department": employee.department,
    }


class EmployeeRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # Employees

    async def get_by_id(self, employee_id: str) -> Optional[Employee]:
        row = await self.db.scalar(select(EmployeeRow).where(EmployeeRow.id == employee_id))
        if row is None:
            return None

        direct_reports = await self._direct_report_ids(employee_id)
        compensation = await self.get_compensation_by_employee_id(employee_id)
        return _employee_from_row(row, direct_reports, compensation)

    async def employee_exists(self, employee_id: str) -> bool:
        return bool(await self.db.scalar(select(exists().where(EmployeeRow.id == employee_id))))

    async def add(self, employee: EmployeeBase) -> Employee:
        """Stage a new employee. The id is assigned here, not by the caller."""
        employee_id = _new_id()
        self.db.add(EmployeeRow(id=employee_id, **_columns(employee)))
        direct_reports = self._stage_direct_reports(employee_id, employee.direct_reports)
        return Employee(employee_id=employee_id, direct_reports=direct_reports, **_columns(employee))

    async def update(self, employee: Employee) -> Employee:
        """Stage a full overwrite of an existing employee, direct reports included."""
        await self.db.execute(
            update(EmployeeRow)
            .where(EmployeeRow.id == employee.employee_id)
            .values(**_columns(employee))
        )
        await self.db.execute(
            delete(EmployeeDirectReport).where(EmployeeDirectReport.manager_id == employee.employee_id)
        )
        direct_reports = self._stage_direct_reports(employee.employee_id, employee.direct_reports)
        return employee.model_copy(update={"direct_reports": direct_reports})

    async def remove(self, employee_id: str) -> None:
        """Stage removal of an employee with its reporting edges and compensation."""
        await self.db.execute(
            delete(EmployeeDirectReport).where(
                (EmployeeDirectReport.manager_id == employee_id)
                | (EmployeeDirectReport.report_id == employee_id)
            )
        )
        await self.db.execute(delete(CompensationRow).where(CompensationRow.employee_id == employee_id))
        await self.db.execute(delete(EmployeeRow).where(EmployeeRow.id == employee_id))

    async def get_reporting_structure(
        self, employee_id: str, depth: int = DEFAULT_REPORTING_DEPTH
    ) -> Optional[ReportingTree]:
        """
        Load an employee and its direct reports `depth` levels down.

        Fetches one level per query. Reports below `depth` are not loaded and
        an employee already in the tree is never expanded a second time.
        """
        row = await self.db.scalar(select(EmployeeRow).where(EmployeeRow.id == employee_id))
        if row is None:
            return None

        tree = ReportingTree(root_id=row.id, nodes={row.id: _employee_from_row(row)})
        frontier = [row.id]

        for _ in range(depth):
            if not frontier:
                break
            result = await self.db.execute(
                select(EmployeeDirectReport.manager_id, EmployeeRow)
                .join(EmployeeRow, EmployeeRow.id == EmployeeDirectReport.report_id)
                .where(EmployeeDirectReport.manager_id.in_(frontier))
                .order_by(EmployeeDirectReport.manager_id, EmployeeDirectReport.ordinal)
            )
            next_frontier = []
            for manager_id, report_row in result.all():
                if tree.add_edge(manager_id, _employee_from_row(report_row)):
                    next_frontier.append(report_row.id)
            frontier = next_frontier

        logger.debug(f"Loaded reporting tree for {employee_id}: {len(tree.nodes)} node(s), depth {depth}")
        return tree

    # Compensation

    async def get_compensation_by_employee_id(self, employee_id: str) -> Optional[Compensation]:
        row = await self.db.scalar(
            select(CompensationRow).where(CompensationRow.employee_id == employee_id)
        )
        return _compensation_from_row(row) if row is not None else None

    async def compensation_exists(self, employee_id: str) -> bool:
        return bool(
            await self.db.scalar(select(exists().where(CompensationRow.employee_id == employee_id)))
        )

    async def add_compensation(self, compensation: CompensationCreate) -> Compensation:
        """Stage a new compensation. The id is assigned here."""
        compensation_id = _new_id()
        self.db.add(
            CompensationRow(
                id=compensation_id,
                employee_id=compensation.employee_id,
                salary=compensation.salary,
                effective_date=compensation.effective_date,
            )
        )
        return Compensation(
            compensation_id=compensation_id,
            employee_id=compensation.employee_id,
            salary=compensation.salary,
            effective_date=compensation.effective_date,
        )

    # Unit of work

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def _direct_report_ids(self, manager_id: str) -> List[str]:
        result = await self.db.execute(
            select(EmployeeDirectReport.report_id)
            .where(EmployeeDirectReport.manager_id == manager_id)
            .order_by(EmployeeDirectReport.ordinal)
        )
        return list(result.scalars().all())

    def _stage_direct_reports(self, manager_id: str, report_ids: List[str]) -> List[str]:
        """Stage one edge per distinct non-empty id. Returns the ids as they will be stored."""
        staged: List[str] = []
        for ordinal, report_id in enumerate(report_ids):
            # The edge table is keyed on (manager, report); keep the first occurrence
            if not report_id or report_id in staged:
                continue
            staged.append(report_id)
            self.db.add(EmployeeDirectReport(manager_id=manager_id, report_id=report_id, ordinal=ordinal))
        return staged
