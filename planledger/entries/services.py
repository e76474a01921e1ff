"""
Entry Ledger Service - upsert P/L cells with an audit trail.

A cell is (node, account item, month, category) and holds at most one
PlEntry. Writing a cell:
1. Loads the node; it must exist and be an entity (job / adjustment_buffer)
2. Checks the node's scenario is writable and the account item exists
3. Creates the entry on first write (history: create)
4. Returns the entry untouched when amount and description are unchanged
5. Otherwise updates it in place (history: update, with the previous amount)

Bulk writes run every cell in one transaction; any failure aborts the batch.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from planledger.catalog.stores import AccountItemStore, SqlAccountItemStore
from planledger.config import settings
from planledger.database import unit_of_work
from planledger.entries.models import ChangeType, EntryCategory, PlEntry, PlEntryHistory
from planledger.entries.stores import (
    PlEntryHistoryStore,
    PlEntryStore,
    SqlPlEntryHistoryStore,
    SqlPlEntryStore,
)
from planledger.errors import InvalidHierarchyError, NotFoundError, ValidationError
from planledger.nodes.stores import PlanNodeStore, SqlPlanNodeStore
from planledger.nodes.types import is_entity
from planledger.scenarios.services import ScenarioLifecycle
from planledger.utils import generate_id, utcnow

logger = logging.getLogger(__name__)

# Numeric(15, 2)
MAX_AMOUNT = Decimal("1e13")


@dataclass
class EntryWrite:
    """One cell write, as accepted by save_bulk."""
    node_id: str
    account_item_id: str
    target_month: date
    entry_category: EntryCategory
    amount: Decimal
    description: Optional[str] = None


def parse_amount(value) -> Decimal:
    """
    Coerce ``value`` to an exact Decimal.

    Floats are refused: the idempotence check compares amounts exactly.
    """
    if isinstance(value, (float, bool)):
        raise ValidationError(f"Amount must be an exact decimal, got {type(value).__name__}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Amount is not a valid decimal: {value!r}") from None

    if not amount.is_finite():
        raise ValidationError(f"Amount must be finite: {value!r}")
    if amount.as_tuple().exponent < -2:
        raise ValidationError(f"Amount allows at most two decimal places: {value}")
    if abs(amount) >= MAX_AMOUNT:
        raise ValidationError(f"Amount out of range: {value}")
    return amount


def check_target_month(target_month: date) -> date:
    if not isinstance(target_month, date):
        raise ValidationError(f"target_month must be a date, got {target_month!r}")
    if target_month.day != 1:
        raise ValidationError(f"target_month must be the first day of a month, got {target_month}")
    return target_month


def parse_category(value) -> EntryCategory:
    try:
        return EntryCategory(value)
    except ValueError:
        raise ValidationError(f"Unknown entry category: {value!r}") from None


class EntryLedger:
    """
    Service for writing and reading P/L entries.

    Usage:
        ledger = EntryLedger(db)
        entry = await ledger.save_entry(job.id, rent.id, date(2025, 1, 1),
                                        EntryCategory.PLAN, Decimal("1000.00"),
                                        actor_id="user_1")
    """

    def __init__(
        self,
        db: AsyncSession,
        scenarios: Optional[ScenarioLifecycle] = None,
        nodes: Optional[PlanNodeStore] = None,
        entries: Optional[PlEntryStore] = None,
        history: Optional[PlEntryHistoryStore] = None,
        account_items: Optional[AccountItemStore] = None,
    ):
        self.db = db
        self.scenarios = scenarios or ScenarioLifecycle(db)
        self.nodes = nodes or SqlPlanNodeStore()
        self.entries = entries or SqlPlEntryStore()
        self.history = history or SqlPlEntryHistoryStore()
        self.account_items = account_items or SqlAccountItemStore()

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def save_entry(
        self,
        node_id: str,
        account_item_id: str,
        target_month: date,
        entry_category: EntryCategory,
        amount: Decimal,
        actor_id: str,
        description: Optional[str] = None,
    ) -> PlEntry:
        write = EntryWrite(node_id, account_item_id, target_month, entry_category, amount, description)
        async with unit_of_work(self.db):
            entry = await self.apply_entry(write, actor_id, settings.ENTRY_SOURCE_API)
        return entry

    async def save_bulk(self, writes: Sequence[EntryWrite], actor_id: str) -> List[PlEntry]:
        """Write every cell or none of them."""
        saved = []
        async with unit_of_work(self.db):
            for write in writes:
                saved.append(await self.apply_entry(write, actor_id, settings.ENTRY_SOURCE_BULK))
        logger.info(f"Bulk entry save committed: {len(saved)} cells")
        return saved

    async def apply_entry(self, write: EntryWrite, actor_id: str, source: str) -> PlEntry:
        """
        Upsert one cell inside the caller's transaction.

        Does not commit; callers wrap it in unit_of_work.
        """
        target_month = check_target_month(write.target_month)
        category = parse_category(write.entry_category)
        amount = parse_amount(write.amount)

        node = await self.nodes.find_by_id(self.db, write.node_id)
        if node is None:
            raise NotFoundError("PlanNode", write.node_id)
        if not is_entity(node.node_type):
            raise InvalidHierarchyError(
                "Cannot input entries to container nodes (initiative/project/sub_project)"
            )
        await self.scenarios.ensure_writable(node.scenario_id)

        if await self.account_items.find_by_id(self.db, write.account_item_id) is None:
            raise NotFoundError("AccountItem", write.account_item_id)

        entry = await self.entries.find_by_cell(
            self.db, write.node_id, write.account_item_id, target_month, category
        )
        now = utcnow()

        if entry is None:
            entry = PlEntry(
                id=generate_id("ent"),
                node_id=write.node_id,
                account_item_id=write.account_item_id,
                target_month=target_month,
                entry_category=category,
                amount=amount,
                description=write.description,
                created_at=now,
                updated_at=now,
                created_by=actor_id,
                updated_by=actor_id,
            )
            entry = await self.entries.create(self.db, entry)
            await self._append_history(entry.id, ChangeType.CREATE, None, amount, actor_id, source, now)
            logger.info(f"Entry created: {entry.id} node={entry.node_id} {target_month} {category.value} {amount}")
            return entry

        if entry.amount == amount and entry.description == write.description:
            logger.debug(f"Entry unchanged, skipping write: {entry.id}")
            return entry

        previous_amount = entry.amount
        entry.amount = amount
        entry.description = write.description
        entry.updated_at = now
        entry.updated_by = actor_id
        entry = await self.entries.update(self.db, entry)
        await self._append_history(entry.id, ChangeType.UPDATE, previous_amount, amount, actor_id, source, now)
        logger.info(f"Entry updated: {entry.id} {previous_amount} -> {amount}")
        return entry

    async def delete_entry(self, entry_id: str, actor_id: str) -> None:
        """Remove a cell and log its last amount."""
        async with unit_of_work(self.db):
            entry = await self.entries.find_by_id(self.db, entry_id)
            if entry is None:
                raise NotFoundError("PlEntry", entry_id)
            node = await self.nodes.find_by_id(self.db, entry.node_id)
            if node is None:
                raise NotFoundError("PlanNode", entry.node_id)
            await self.scenarios.ensure_writable(node.scenario_id)

            await self._append_history(
                entry.id, ChangeType.DELETE, entry.amount, Decimal("0"), actor_id,
                settings.ENTRY_SOURCE_API, utcnow(),
            )
            await self.entries.delete(self.db, entry)
        logger.info(f"Entry deleted: {entry_id}")

    async def _append_history(
        self,
        entry_id: str,
        change_type: ChangeType,
        previous_amount: Optional[Decimal],
        new_amount: Decimal,
        actor_id: str,
        source: str,
        changed_at,
    ) -> PlEntryHistory:
        record = PlEntryHistory(
            id=generate_id("hist"),
            entry_id=entry_id,
            change_type=change_type,
            previous_amount=previous_amount,
            new_amount=new_amount,
            changed_at=changed_at,
            changed_by=actor_id,
            operation_source=source,
        )
        return await self.history.create(self.db, record)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def list_by_node(self, node_id: str, category: EntryCategory) -> List[PlEntry]:
        return await self.entries.find_by_node(self.db, node_id, parse_category(category))

    async def list_by_scenario(self, scenario_id: str) -> List[PlEntry]:
        return await self.entries.find_by_scenario_id(self.db, scenario_id)

    async def history_for(self, entry_id: str) -> List[PlEntryHistory]:
        return await self.history.find_by_entry(self.db, entry_id)
