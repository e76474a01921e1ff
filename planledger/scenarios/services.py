"""
Scenario Lifecycle Service

A scenario is created non-current and unlocked. Activation demotes every
other scenario and promotes the target in one transaction, so at most one
scenario is ever current. Only the current, unlocked scenario accepts
writes; ensure_writable is the single gate the tree and the ledger consult.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from planledger.database import unit_of_work
from planledger.errors import NotFoundError, ReadOnlyScenarioError, ValidationError
from planledger.scenarios.models import Scenario
from planledger.scenarios.stores import ScenarioStore, SqlScenarioStore
from planledger.utils import utcnow

logger = logging.getLogger(__name__)


def build_scenario(
    name: str,
    description: Optional[str],
    start_date: date,
    end_date: date,
    actor_id: str,
) -> Scenario:
    """Validate fields and construct an unsaved, non-current scenario."""
    if name is None or not name.strip():
        raise ValidationError("Name cannot be empty")
    if start_date > end_date:
        raise ValidationError(f"Start date {start_date} must not be after end date {end_date}")

    now = utcnow()
    return Scenario(
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        is_locked=False,
        is_current=False,
        created_at=now,
        updated_at=now,
        created_by=actor_id,
        updated_by=actor_id,
    )


class ScenarioLifecycle:
    """
    Service for creating, activating and locking scenarios.

    Usage:
        scenarios = ScenarioLifecycle(db)
        scenario = await scenarios.create("FY2026 plan", None, start, end, actor_id="user_1")
        await scenarios.activate(scenario.id, actor_id="user_1")

    The ``stage_*`` methods do the same work without committing, for
    callers that compose several operations into one transaction.
    """

    def __init__(self, db: AsyncSession, store: Optional[ScenarioStore] = None):
        self.db = db
        self.store = store or SqlScenarioStore()

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get(self, scenario_id: str) -> Scenario:
        scenario = await self.store.find_by_id(self.db, scenario_id)
        if scenario is None:
            raise NotFoundError("Scenario", scenario_id)
        return scenario

    async def list_all(self) -> List[Scenario]:
        return await self.store.find_all(self.db)

    async def ensure_writable(self, scenario_id: str) -> Scenario:
        """
        Fail unless the scenario exists, is current and is not locked.

        Returns the loaded scenario so callers can avoid a second lookup.
        """
        scenario = await self.get(scenario_id)
        if scenario.is_locked:
            raise ReadOnlyScenarioError(scenario_id, "scenario is locked")
        if not scenario.is_current:
            raise ReadOnlyScenarioError(scenario_id, "past scenarios cannot be edited")
        return scenario

    # ==========================================================================
    # Mutations
    # ==========================================================================

    async def create(
        self,
        name: str,
        description: Optional[str],
        start_date: date,
        end_date: date,
        actor_id: str,
    ) -> Scenario:
        async with unit_of_work(self.db):
            scenario = await self.stage_create(name, description, start_date, end_date, actor_id)
        logger.info(f"Scenario created: {scenario.id} '{scenario.name}' ({start_date} - {end_date})")
        return scenario

    async def stage_create(
        self,
        name: str,
        description: Optional[str],
        start_date: date,
        end_date: date,
        actor_id: str,
    ) -> Scenario:
        scenario = build_scenario(name, description, start_date, end_date, actor_id)
        return await self.store.create(self.db, scenario)

    async def activate(self, scenario_id: str, actor_id: str) -> Scenario:
        async with unit_of_work(self.db):
            scenario = await self.stage_activate(scenario_id, actor_id)
        logger.info(f"Scenario activated: {scenario_id}")
        return scenario

    async def stage_activate(self, scenario_id: str, actor_id: str) -> Scenario:
        scenario = await self.get(scenario_id)
        if scenario.is_locked:
            raise ReadOnlyScenarioError(scenario_id, "a locked scenario cannot be activated")

        if not await self.store.set_current(self.db, scenario_id, actor_id):
            raise NotFoundError("Scenario", scenario_id)
        return scenario

    async def lock(self, scenario_id: str, actor_id: str) -> Scenario:
        """Close a scenario for edits permanently."""
        async with unit_of_work(self.db):
            scenario = await self.get(scenario_id)
            if not scenario.is_locked:
                scenario.is_locked = True
                scenario.updated_at = utcnow()
                scenario.updated_by = actor_id
                await self.store.save(self.db, scenario)
        logger.info(f"Scenario locked: {scenario_id}")
        return scenario
