from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import AsyncSessionLocal
from app.repositories.employee_repository import EmployeeRepository
from app.services.employee_service import EmployeeService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def get_db_session():
    """
    Context manager version of get_db for use outside request handling.

    Usage:
        async with get_db_session() as db:
            # use db session
    """
    async with AsyncSessionLocal() as session:
        yield session


def get_employee_service(db: AsyncSession = Depends(get_db)) -> EmployeeService:
    return EmployeeService(EmployeeRepository(db))
