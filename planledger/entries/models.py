"""
P/L entry models.

PlEntry is one cell of the plan: (node, account item, month, category).
PlEntryHistory is the append-only audit trail of writes to those cells.
"""
import enum

from sqlalchemy import Column, String, DateTime, Date, Numeric, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy import Enum as SQLEnum

from planledger.database import Base
from planledger.utils import generate_id, utcnow


class EntryCategory(str, enum.Enum):
    """Whether an amount is a planned figure or an actual result."""
    PLAN = "plan"
    RESULT = "result"


class ChangeType(str, enum.Enum):
    """Kind of write recorded in the history log."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def _enum_values(e):
    return [m.value for m in e]


class PlEntry(Base):
    """A single planned or actual amount for one cell."""

    __tablename__ = "pl_entries"

    id = Column(String, primary_key=True, default=lambda: generate_id("ent"))
    node_id = Column(String, ForeignKey("plan_nodes.id", ondelete="CASCADE"), nullable=False, index=True)
    account_item_id = Column(String, ForeignKey("account_items.id"), nullable=False, index=True)
    target_month = Column(Date, nullable=False)  # always the 1st of the month
    entry_category = Column(
        SQLEnum(EntryCategory, name="entry_category", values_callable=_enum_values),
        nullable=False,
    )

    amount = Column(Numeric(precision=15, scale=2), nullable=False)
    description = Column(Text, nullable=True)

    # Audit
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_by = Column(String, nullable=False)
    updated_by = Column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "node_id", "account_item_id", "target_month", "entry_category",
            name="uq_pl_entries_cell",
        ),
        Index("ix_pl_entries_node_category", "node_id", "entry_category"),
    )

    def __repr__(self):
        return (
            f"<PlEntry {self.id}: node={self.node_id} account={self.account_item_id} "
            f"{self.target_month} {self.entry_category} {self.amount}>"
        )


class PlEntryHistory(Base):
    """
    Append-only record of one write to a PlEntry cell.

    Rows are never updated or deleted. entry_id is not a foreign key:
    the log outlives deleted entries.
    """

    __tablename__ = "pl_entry_histories"

    id = Column(String, primary_key=True, default=lambda: generate_id("hist"))
    entry_id = Column(String, nullable=False, index=True)

    change_type = Column(
        SQLEnum(ChangeType, name="entry_change_type", values_callable=_enum_values),
        nullable=False,
    )
    previous_amount = Column(Numeric(precision=15, scale=2), nullable=True)  # NULL for create
    new_amount = Column(Numeric(precision=15, scale=2), nullable=False)

    changed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    changed_by = Column(String, nullable=False)

    # Free-text provenance, e.g. "API" or "Bulk"
    operation_source = Column(String, nullable=True)

    def __repr__(self):
        return (
            f"<PlEntryHistory {self.id}: {self.change_type} on {self.entry_id} "
            f"{self.previous_amount} -> {self.new_amount}>"
        )
