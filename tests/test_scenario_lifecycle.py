"""
Tests for scenario creation, activation, locking and the writability gate.
"""
from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from planledger.database import unit_of_work
from planledger.errors import ConflictError, NotFoundError, ReadOnlyScenarioError, ValidationError
from planledger.scenarios.models import Scenario
from planledger.scenarios.services import ScenarioLifecycle, build_scenario
from planledger.scenarios.stores import lock_scenario_rows
from helpers import ACTOR, count_current_scenarios

FY25 = (date(2025, 1, 1), date(2025, 12, 31))
FY26 = (date(2026, 1, 1), date(2026, 12, 31))


# =============================================================================
# Create
# =============================================================================

class TestCreate:

    @pytest.mark.asyncio
    async def test_new_scenario_is_neither_current_nor_locked(self, db):
        scenario = await ScenarioLifecycle(db).create("FY2025 plan", "first cut", *FY25, ACTOR)

        assert scenario.id.startswith("scn_")
        assert scenario.is_current is False
        assert scenario.is_locked is False
        assert scenario.created_by == ACTOR
        assert scenario.updated_by == ACTOR

    @pytest.mark.asyncio
    async def test_single_day_range_is_valid(self, db):
        day = date(2025, 3, 1)
        scenario = await ScenarioLifecycle(db).create("One day", None, day, day, ACTOR)
        assert scenario.start_date == scenario.end_date == day

    @pytest.mark.asyncio
    async def test_start_after_end_rejected(self, db):
        lifecycle = ScenarioLifecycle(db)
        with pytest.raises(ValidationError):
            await lifecycle.create("Backwards", None, date(2025, 12, 31), date(2025, 1, 1), ACTOR)
        assert await lifecycle.list_all() == []

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_name_rejected(self, name):
        with pytest.raises(ValidationError):
            build_scenario(name, None, *FY25, ACTOR)


# =============================================================================
# Reads
# =============================================================================

class TestReads:

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, db):
        with pytest.raises(NotFoundError) as exc_info:
            await ScenarioLifecycle(db).get("scn_missing")
        assert exc_info.value.entity_id == "scn_missing"

    @pytest.mark.asyncio
    async def test_list_all_newest_first(self, db):
        lifecycle = ScenarioLifecycle(db)
        await lifecycle.create("FY2025", None, *FY25, ACTOR)
        await lifecycle.create("FY2026", None, *FY26, ACTOR)

        names = [s.name for s in await lifecycle.list_all()]
        assert names == ["FY2026", "FY2025"]


# =============================================================================
# Activate
# =============================================================================

class TestActivate:

    @pytest.mark.asyncio
    async def test_activate_makes_current(self, db):
        lifecycle = ScenarioLifecycle(db)
        scenario = await lifecycle.create("FY2025", None, *FY25, ACTOR)

        await lifecycle.activate(scenario.id, "user_other")

        reloaded = await lifecycle.get(scenario.id)
        assert reloaded.is_current is True
        assert reloaded.updated_by == "user_other"

    @pytest.mark.asyncio
    async def test_activate_demotes_previous_current(self, db):
        lifecycle = ScenarioLifecycle(db)
        first = await lifecycle.create("FY2025", None, *FY25, ACTOR)
        second = await lifecycle.create("FY2026", None, *FY26, ACTOR)
        first_id, second_id = first.id, second.id

        await lifecycle.activate(first_id, ACTOR)
        await lifecycle.activate(second_id, ACTOR)

        assert (await lifecycle.get(first_id)).is_current is False
        assert (await lifecycle.get(second_id)).is_current is True
        assert await count_current_scenarios(db) == 1

    @pytest.mark.asyncio
    async def test_at_most_one_current_across_sequence(self, db):
        lifecycle = ScenarioLifecycle(db)
        ids = [
            (await lifecycle.create(f"Plan {year}", None, date(year, 1, 1), date(year, 12, 31), ACTOR)).id
            for year in (2024, 2025, 2026)
        ]
        assert await count_current_scenarios(db) == 0

        for scenario_id in [ids[0], ids[2], ids[1], ids[1], ids[0]]:
            await lifecycle.activate(scenario_id, ACTOR)
            assert await count_current_scenarios(db) == 1
            assert (await lifecycle.get(scenario_id)).is_current is True

    @pytest.mark.asyncio
    async def test_activate_missing_raises_not_found(self, db, scenario_id):
        lifecycle = ScenarioLifecycle(db)
        with pytest.raises(NotFoundError):
            await lifecycle.activate("scn_missing", ACTOR)

        # Previous current scenario untouched
        assert (await lifecycle.get(scenario_id)).is_current is True

    @pytest.mark.asyncio
    async def test_storage_rejects_second_current_row(self, db):
        with pytest.raises(ConflictError) as exc_info:
            async with unit_of_work(db):
                for name in ("A", "B"):
                    scenario = build_scenario(name, None, *FY25, ACTOR)
                    scenario.is_current = True
                    db.add(scenario)

        assert exc_info.value.retryable is True
        assert await ScenarioLifecycle(db).list_all() == []

    @pytest.mark.asyncio
    async def test_activations_from_separate_sessions_leave_one_current(self, db, engine):
        lifecycle = ScenarioLifecycle(db)
        first_id = (await lifecycle.create("FY2025", None, *FY25, ACTOR)).id
        second_id = (await lifecycle.create("FY2026", None, *FY26, ACTOR)).id

        session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with session_factory() as first_session, session_factory() as second_session:
            await ScenarioLifecycle(first_session).activate(first_id, "user_a")
            await ScenarioLifecycle(second_session).activate(second_id, "user_b")

        assert await count_current_scenarios(db) == 1
        result = await db.execute(select(Scenario.id).where(Scenario.is_current.is_(True)))
        assert result.scalars().all() == [second_id]

    def test_activation_locks_scenario_rows_on_postgres(self):
        sql = str(lock_scenario_rows().compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" in sql
        assert "ORDER BY scenarios.id" in sql


# =============================================================================
# Writability and lock
# =============================================================================

class TestEnsureWritable:

    @pytest.mark.asyncio
    async def test_current_scenario_is_writable(self, db, scenario_id):
        scenario = await ScenarioLifecycle(db).ensure_writable(scenario_id)
        assert scenario.id == scenario_id

    @pytest.mark.asyncio
    async def test_non_current_is_read_only(self, db):
        lifecycle = ScenarioLifecycle(db)
        scenario = await lifecycle.create("Draft", None, *FY25, ACTOR)
        with pytest.raises(ReadOnlyScenarioError):
            await lifecycle.ensure_writable(scenario.id)

    @pytest.mark.asyncio
    async def test_missing_is_not_found(self, db):
        with pytest.raises(NotFoundError):
            await ScenarioLifecycle(db).ensure_writable("scn_missing")

    @pytest.mark.asyncio
    async def test_locked_current_is_read_only(self, db, scenario_id):
        lifecycle = ScenarioLifecycle(db)
        locked = await lifecycle.lock(scenario_id, ACTOR)
        assert locked.is_locked is True

        with pytest.raises(ReadOnlyScenarioError):
            await lifecycle.ensure_writable(scenario_id)


class TestLock:

    @pytest.mark.asyncio
    async def test_locked_scenario_cannot_be_activated(self, db):
        lifecycle = ScenarioLifecycle(db)
        scenario = await lifecycle.create("Closed", None, *FY25, ACTOR)
        scenario_id = scenario.id
        await lifecycle.lock(scenario_id, ACTOR)

        with pytest.raises(ReadOnlyScenarioError):
            await lifecycle.activate(scenario_id, ACTOR)
        assert await count_current_scenarios(db) == 0

    @pytest.mark.asyncio
    async def test_lock_is_idempotent(self, db, scenario_id):
        lifecycle = ScenarioLifecycle(db)
        await lifecycle.lock(scenario_id, ACTOR)
        again = await lifecycle.lock(scenario_id, ACTOR)
        assert again.is_locked is True

    @pytest.mark.asyncio
    async def test_lock_missing_raises_not_found(self, db):
        with pytest.raises(NotFoundError):
            await ScenarioLifecycle(db).lock("scn_missing", ACTOR)
