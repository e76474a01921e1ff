"""P/L entry and entry history persistence: ports + SQLAlchemy implementations."""
from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from planledger.entries.models import EntryCategory, PlEntry, PlEntryHistory
from planledger.nodes.models import PlanNode


class PlEntryStore(ABC):
    """Storage contract for entry cells."""

    @abstractmethod
    async def find_by_cell(
        self,
        db: AsyncSession,
        node_id: str,
        account_item_id: str,
        target_month: date,
        category: EntryCategory,
    ) -> Optional[PlEntry]:
        pass

    @abstractmethod
    async def find_by_id(self, db: AsyncSession, entry_id: str) -> Optional[PlEntry]:
        pass

    @abstractmethod
    async def create(self, db: AsyncSession, entry: PlEntry) -> PlEntry:
        pass

    @abstractmethod
    async def create_many(self, db: AsyncSession, entries: Sequence[PlEntry]) -> None:
        pass

    @abstractmethod
    async def update(self, db: AsyncSession, entry: PlEntry) -> PlEntry:
        pass

    @abstractmethod
    async def delete(self, db: AsyncSession, entry: PlEntry) -> None:
        pass

    @abstractmethod
    async def find_by_node(self, db: AsyncSession, node_id: str, category: EntryCategory) -> List[PlEntry]:
        pass

    @abstractmethod
    async def find_by_node_ids(self, db: AsyncSession, node_ids: Iterable[str]) -> List[PlEntry]:
        pass

    @abstractmethod
    async def find_by_scenario_id(self, db: AsyncSession, scenario_id: str) -> List[PlEntry]:
        pass

    @abstractmethod
    async def count_by_node(self, db: AsyncSession, node_id: str) -> int:
        pass


class PlEntryHistoryStore(ABC):
    """Append-only storage contract for entry history."""

    @abstractmethod
    async def create(self, db: AsyncSession, history: PlEntryHistory) -> PlEntryHistory:
        pass

    @abstractmethod
    async def find_by_entry(self, db: AsyncSession, entry_id: str) -> List[PlEntryHistory]:
        """Oldest first."""
        pass


def _ordered(stmt):
    return stmt.order_by(
        PlEntry.target_month.asc(),
        PlEntry.account_item_id.asc(),
        PlEntry.entry_category.asc(),
    )


class SqlPlEntryStore(PlEntryStore):
    """SQLAlchemy-backed entry store."""

    async def find_by_cell(
        self,
        db: AsyncSession,
        node_id: str,
        account_item_id: str,
        target_month: date,
        category: EntryCategory,
    ) -> Optional[PlEntry]:
        result = await db.execute(
            select(PlEntry).where(
                PlEntry.node_id == node_id,
                PlEntry.account_item_id == account_item_id,
                PlEntry.target_month == target_month,
                PlEntry.entry_category == category,
            )
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, db: AsyncSession, entry_id: str) -> Optional[PlEntry]:
        result = await db.execute(select(PlEntry).where(PlEntry.id == entry_id))
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, entry: PlEntry) -> PlEntry:
        db.add(entry)
        await db.flush()
        return entry

    async def create_many(self, db: AsyncSession, entries: Sequence[PlEntry]) -> None:
        db.add_all(list(entries))
        await db.flush()

    async def update(self, db: AsyncSession, entry: PlEntry) -> PlEntry:
        await db.flush()
        return entry

    async def delete(self, db: AsyncSession, entry: PlEntry) -> None:
        await db.delete(entry)
        await db.flush()

    async def find_by_node(self, db: AsyncSession, node_id: str, category: EntryCategory) -> List[PlEntry]:
        result = await db.execute(
            _ordered(
                select(PlEntry).where(
                    PlEntry.node_id == node_id,
                    PlEntry.entry_category == category,
                )
            )
        )
        return list(result.scalars().all())

    async def find_by_node_ids(self, db: AsyncSession, node_ids: Iterable[str]) -> List[PlEntry]:
        node_ids = list(node_ids)
        if not node_ids:
            return []
        result = await db.execute(_ordered(select(PlEntry).where(PlEntry.node_id.in_(node_ids))))
        return list(result.scalars().all())

    async def find_by_scenario_id(self, db: AsyncSession, scenario_id: str) -> List[PlEntry]:
        result = await db.execute(
            _ordered(
                select(PlEntry)
                .join(PlanNode, PlanNode.id == PlEntry.node_id)
                .where(
                    PlanNode.scenario_id == scenario_id,
                    PlanNode.deleted_at.is_(None),
                )
            )
        )
        return list(result.scalars().all())

    async def count_by_node(self, db: AsyncSession, node_id: str) -> int:
        result = await db.execute(select(func.count(PlEntry.id)).where(PlEntry.node_id == node_id))
        return result.scalar_one()


class SqlPlEntryHistoryStore(PlEntryHistoryStore):
    """SQLAlchemy-backed history store. There is no update or delete."""

    async def create(self, db: AsyncSession, history: PlEntryHistory) -> PlEntryHistory:
        db.add(history)
        # Don't commit here - let caller manage transaction
        await db.flush()
        return history

    async def find_by_entry(self, db: AsyncSession, entry_id: str) -> List[PlEntryHistory]:
        result = await db.execute(
            select(PlEntryHistory)
            .where(PlEntryHistory.entry_id == entry_id)
            .order_by(PlEntryHistory.changed_at.asc())
        )
        return list(result.scalars().all())
