"""
Tests for app/repositories/employee_repository.py against an in-memory database.
"""
import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import func, select

from app.core.config import settings
from app.db.seed import seed_database
from app.models.employee import Employee as EmployeeRow
from app.repositories.employee_repository import EmployeeRepository
from app.schemas.employee import CompensationCreate, EmployeeCreate
from tests.utils.org_test_data import (
    GEORGE_HARRISON_ID,
    JOHN_LENNON_ID,
    PAUL_MCCARTNEY_ID,
    PETE_BEST_ID,
    RINGO_STARR_ID,
    SEEDED_EMPLOYEE_IDS,
)


class TestEmployeeLookup:
    """Test reads of seeded employees."""

    @pytest.mark.asyncio
    async def test_get_by_id_returns_reports_in_order(self, db_session):
        repo = EmployeeRepository(db_session)

        john = await repo.get_by_id(JOHN_LENNON_ID)

        assert john.first_name == "John"
        assert john.last_name == "Lennon"
        assert john.direct_reports == [PAUL_MCCARTNEY_ID, RINGO_STARR_ID]

    @pytest.mark.asyncio
    async def test_get_by_id_includes_compensation(self, db_session):
        repo = EmployeeRepository(db_session)

        john = await repo.get_by_id(JOHN_LENNON_ID)

        assert john.compensation is not None
        assert john.compensation.salary == Decimal("205000")
        assert john.compensation.effective_date == date(2024, 1, 1)

    @pytest.mark.asyncio
    async def test_get_by_id_unknown_returns_none(self, db_session):
        repo = EmployeeRepository(db_session)

        assert await repo.get_by_id("no-such-employee") is None

    @pytest.mark.asyncio
    async def test_employee_exists(self, db_session):
        repo = EmployeeRepository(db_session)

        assert await repo.employee_exists(PETE_BEST_ID) is True
        assert await repo.employee_exists("no-such-employee") is False


class TestEmployeeWrites:
    """Test staged writes and commit."""

    @pytest.mark.asyncio
    async def test_add_assigns_id_and_persists(self, db_session):
        repo = EmployeeRepository(db_session)

        created = await repo.add(
            EmployeeCreate(
                first_name="Stuart",
                last_name="Sutcliffe",
                position="Bassist",
                department="Music",
                direct_reports=[PETE_BEST_ID],
            )
        )
        await repo.commit()

        assert created.employee_id
        assert created.employee_id not in SEEDED_EMPLOYEE_IDS

        fetched = await repo.get_by_id(created.employee_id)
        assert fetched.first_name == "Stuart"
        assert fetched.department == "Music"
        assert fetched.direct_reports == [PETE_BEST_ID]
        assert fetched.compensation is None

    @pytest.mark.asyncio
    async def test_add_generates_distinct_ids(self, db_session):
        repo = EmployeeRepository(db_session)

        first = await repo.add(EmployeeCreate(first_name="A"))
        second = await repo.add(EmployeeCreate(first_name="B"))

        assert first.employee_id != second.employee_id

    @pytest.mark.asyncio
    async def test_update_replaces_attributes_and_reports(self, db_session):
        repo = EmployeeRepository(db_session)
        ringo = await repo.get_by_id(RINGO_STARR_ID)

        replacement = ringo.model_copy(
            update={
                "position": "Singer",
                "department": None,
                "direct_reports": [GEORGE_HARRISON_ID, GEORGE_HARRISON_ID],
            }
        )
        returned = await repo.update(replacement)
        await repo.commit()

        assert returned.direct_reports == [GEORGE_HARRISON_ID]
        fetched = await repo.get_by_id(RINGO_STARR_ID)
        assert fetched.position == "Singer"
        assert fetched.department is None
        assert fetched.direct_reports == [GEORGE_HARRISON_ID]

    @pytest.mark.asyncio
    async def test_fetched_copy_is_unaffected_by_update(self, db_session):
        repo = EmployeeRepository(db_session)
        before = await repo.get_by_id(PETE_BEST_ID)

        await repo.update(before.model_copy(update={"position": "Manager"}))
        await repo.commit()

        assert before.position == "Developer II"

    @pytest.mark.asyncio
    async def test_duplicate_report_ids_are_stored_once(self, db_session):
        repo = EmployeeRepository(db_session)

        created = await repo.add(EmployeeCreate(direct_reports=[PETE_BEST_ID, PETE_BEST_ID, ""]))
        await repo.commit()

        assert created.direct_reports == [PETE_BEST_ID]
        fetched = await repo.get_by_id(created.employee_id)
        assert fetched.direct_reports == [PETE_BEST_ID]

    @pytest.mark.asyncio
    async def test_remove_deletes_employee_edges_and_compensation(self, db_session):
        repo = EmployeeRepository(db_session)

        await repo.remove(JOHN_LENNON_ID)
        await repo.commit()

        assert await repo.get_by_id(JOHN_LENNON_ID) is None
        assert await repo.compensation_exists(JOHN_LENNON_ID) is False
        # Paul is still there, just without a manager
        assert await repo.employee_exists(PAUL_MCCARTNEY_ID) is True

    @pytest.mark.asyncio
    async def test_rollback_discards_staged_writes(self, db_session):
        repo = EmployeeRepository(db_session)

        created = await repo.add(EmployeeCreate(first_name="Nobody"))
        await repo.rollback()

        assert await repo.get_by_id(created.employee_id) is None


class TestReportingTreeLoading:
    """Test level-by-level loading of reporting trees."""

    @pytest.mark.asyncio
    async def test_loads_two_levels(self, db_session):
        repo = EmployeeRepository(db_session)

        tree = await repo.get_reporting_structure(JOHN_LENNON_ID, depth=2)

        assert set(tree.nodes) == set(SEEDED_EMPLOYEE_IDS)
        assert tree.children[JOHN_LENNON_ID] == [PAUL_MCCARTNEY_ID, RINGO_STARR_ID]
        assert tree.children[RINGO_STARR_ID] == [PETE_BEST_ID, GEORGE_HARRISON_ID]

    @pytest.mark.asyncio
    async def test_depth_limits_loaded_levels(self, db_session):
        repo = EmployeeRepository(db_session)

        tree = await repo.get_reporting_structure(JOHN_LENNON_ID, depth=1)

        assert set(tree.nodes) == {JOHN_LENNON_ID, PAUL_MCCARTNEY_ID, RINGO_STARR_ID}
        assert RINGO_STARR_ID not in tree.children

    @pytest.mark.asyncio
    async def test_third_level_is_not_loaded(self, db_session):
        """A report of Pete Best sits three levels below John and is left out."""
        repo = EmployeeRepository(db_session)
        created = await repo.add(EmployeeCreate(first_name="Stuart"))
        pete = await repo.get_by_id(PETE_BEST_ID)
        await repo.update(pete.model_copy(update={"direct_reports": [created.employee_id]}))
        await repo.commit()

        tree = await repo.get_reporting_structure(JOHN_LENNON_ID, depth=2)

        assert created.employee_id not in tree.nodes

    @pytest.mark.asyncio
    async def test_unknown_root_returns_none(self, db_session):
        repo = EmployeeRepository(db_session)

        assert await repo.get_reporting_structure("no-such-employee") is None


class TestCompensationStore:
    """Test compensation reads and writes."""

    @pytest.mark.asyncio
    async def test_add_compensation_persists(self, db_session, sample_compensation_values):
        repo = EmployeeRepository(db_session)

        created = await repo.add_compensation(
            CompensationCreate(employee_id=PETE_BEST_ID, **sample_compensation_values)
        )
        await repo.commit()

        fetched = await repo.get_compensation_by_employee_id(PETE_BEST_ID)
        assert fetched.compensation_id == created.compensation_id
        assert fetched.salary == Decimal("123456.78")
        assert fetched.effective_date == date(2024, 1, 1)

    @pytest.mark.asyncio
    async def test_compensation_exists(self, db_session):
        repo = EmployeeRepository(db_session)

        assert await repo.compensation_exists(JOHN_LENNON_ID) is True
        assert await repo.compensation_exists(PETE_BEST_ID) is False

    @pytest.mark.asyncio
    async def test_missing_compensation_returns_none(self, db_session):
        repo = EmployeeRepository(db_session)

        assert await repo.get_compensation_by_employee_id(PAUL_MCCARTNEY_ID) is None


class TestSeedDatabase:
    """Test loading of the bundled sample organisation."""

    @pytest.mark.asyncio
    async def test_seed_skips_populated_database(self, db_session):
        inserted = await seed_database(db_session, settings.SEED_DATA_PATH)

        count = await db_session.scalar(select(func.count()).select_from(EmployeeRow))
        assert inserted == 0
        assert count == len(SEEDED_EMPLOYEE_IDS)
