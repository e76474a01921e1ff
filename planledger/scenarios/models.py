"""Scenario model - one versioned generation of the plan."""
from sqlalchemy import Column, String, DateTime, Date, Boolean, CheckConstraint, Index, text

from planledger.database import Base
from planledger.utils import generate_id, utcnow


class Scenario(Base):
    """
    A plan generation (e.g. "FY2026 master plan", "FY2026 revised plan").

    Exactly one scenario may be current at any time; it is the only one
    open for edits. A locked scenario is closed permanently.
    """
    __tablename__ = "scenarios"

    id = Column(String, primary_key=True, default=lambda: generate_id("scn"))

    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    is_locked = Column(Boolean, nullable=False, default=False)
    is_current = Column(Boolean, nullable=False, default=False)

    # Audit
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_by = Column(String, nullable=False)
    updated_by = Column(String, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_scenarios_date_range"),
        # At most one row may carry is_current = true
        Index(
            "uq_scenarios_single_current",
            "is_current",
            unique=True,
            postgresql_where=text("is_current"),
            sqlite_where=text("is_current = 1"),
        ),
        Index("ix_scenarios_start_date", "start_date"),
    )

    def __repr__(self):
        return f"<Scenario {self.id}: {self.name} current={self.is_current} locked={self.is_locked}>"
