"""
Scenario persistence.

ScenarioStore is the port the services depend on; SqlScenarioStore is the
SQLAlchemy implementation. Every method takes the caller's AsyncSession so
that store calls made by one operation share its transaction.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from planledger.scenarios.models import Scenario
from planledger.utils import utcnow


def lock_scenario_rows():
    """
    Row-lock every scenario in id order.

    A second activator blocks here until the first commits; its demote then
    runs on a fresh snapshot and sees the row the first one promoted.
    SQLite ignores FOR UPDATE and serializes writers on its own.
    """
    return select(Scenario.id).order_by(Scenario.id).with_for_update()


class ScenarioStore(ABC):
    """Storage contract for scenarios."""

    @abstractmethod
    async def create(self, db: AsyncSession, scenario: Scenario) -> Scenario:
        pass

    @abstractmethod
    async def find_by_id(self, db: AsyncSession, scenario_id: str) -> Optional[Scenario]:
        """Return the scenario unless it is missing or soft-deleted."""
        pass

    @abstractmethod
    async def find_all(self, db: AsyncSession) -> List[Scenario]:
        """All live scenarios, newest start_date first."""
        pass

    @abstractmethod
    async def set_current(self, db: AsyncSession, scenario_id: str, actor_id: str) -> bool:
        """
        Demote every scenario and promote ``scenario_id`` in the caller's
        transaction. Returns False when no row was promoted.
        """
        pass

    @abstractmethod
    async def save(self, db: AsyncSession, scenario: Scenario) -> Scenario:
        """Flush field changes made to a loaded scenario."""
        pass


class SqlScenarioStore(ScenarioStore):
    """SQLAlchemy-backed scenario store."""

    async def create(self, db: AsyncSession, scenario: Scenario) -> Scenario:
        db.add(scenario)
        await db.flush()
        return scenario

    async def find_by_id(self, db: AsyncSession, scenario_id: str) -> Optional[Scenario]:
        result = await db.execute(
            select(Scenario).where(
                Scenario.id == scenario_id,
                Scenario.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def find_all(self, db: AsyncSession) -> List[Scenario]:
        result = await db.execute(
            select(Scenario)
            .where(Scenario.deleted_at.is_(None))
            .order_by(Scenario.start_date.desc(), Scenario.created_at.desc())
        )
        return list(result.scalars().all())

    async def set_current(self, db: AsyncSession, scenario_id: str, actor_id: str) -> bool:
        await db.execute(lock_scenario_rows())

        # Demote first: the partial unique index on is_current rejects two
        # current rows even inside one transaction.
        await db.execute(
            update(Scenario)
            .where(Scenario.is_current.is_(True))
            .values(is_current=False)
            .execution_options(synchronize_session="fetch")
        )
        result = await db.execute(
            update(Scenario)
            .where(Scenario.id == scenario_id, Scenario.deleted_at.is_(None))
            .values(is_current=True, updated_at=utcnow(), updated_by=actor_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0

    async def save(self, db: AsyncSession, scenario: Scenario) -> Scenario:
        await db.flush()
        return scenario
