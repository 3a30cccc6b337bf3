"""
Shared test fixtures and configuration for the Personnel API tests.
"""
import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "true"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["SEED_DATA_ON_STARTUP"] = "false"
os.environ["API_PREFIX"] = ""

from app.core.config import settings  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.seed import seed_database  # noqa: E402
from app.repositories.employee_repository import EmployeeRepository  # noqa: E402
from tests.utils.org_test_data import PETE_BEST_ID  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with the schema created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    """Session factory bound to the test engine, pre-loaded with the seed data."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db:
        await seed_database(db, settings.SEED_DATA_PATH)
    return factory


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, one database session per request."""
    from app.api.deps import get_db
    from app.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def mock_repository():
    """Create a mock persistence gateway."""
    return AsyncMock(spec=EmployeeRepository)


@pytest.fixture
def mock_request():
    """Create a mock FastAPI request object."""
    request = MagicMock()
    request.cookies = {}
    request.client = MagicMock()
    request.client.host = "127.0.0.1"
    request.headers = {}
    request.url = MagicMock()
    request.url.path = "/employee/test"
    request.method = "GET"
    request.state = SimpleNamespace(request_id="abc12345")
    return request


@pytest.fixture
def compensation_payload():
    """Valid POST /employee/compensation body for an employee without compensation."""
    return {
        "employeeId": PETE_BEST_ID,
        "salary": 123456.78,
        "effectiveDate": "2024-01-01",
    }


@pytest.fixture
def sample_compensation_values():
    return {"salary": Decimal("123456.78"), "effective_date": date(2024, 1, 1)}
