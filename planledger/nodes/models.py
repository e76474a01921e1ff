"""Plan node model - the initiative/project/job tree of a scenario."""
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Index
from sqlalchemy import Enum as SQLEnum

from planledger.database import Base
from planledger.nodes.types import NodeType
from planledger.utils import generate_id, utcnow


class PlanNode(Base):
    """
    A node in a scenario's planning tree.

    A node belongs to exactly one scenario. ``lineage_id`` identifies the
    same conceptual node across scenario generations: it is minted once and
    copied verbatim by every rollover.
    """

    __tablename__ = "plan_nodes"

    id = Column(String, primary_key=True, default=lambda: generate_id("node"))
    scenario_id = Column(String, ForeignKey("scenarios.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(String, ForeignKey("plan_nodes.id"), nullable=True, index=True)
    lineage_id = Column(String, nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    node_type = Column(
        SQLEnum(NodeType, name="plan_node_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    display_order = Column(Integer, nullable=False, default=0)

    # Set for entity types (job / adjustment_buffer), NULL for containers
    service_id = Column(String, ForeignKey("services.id"), nullable=True, index=True)

    # Audit
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_by = Column(String, nullable=False)
    updated_by = Column(String, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(String, nullable=True)

    __table_args__ = (
        Index("ix_plan_nodes_scenario_order", "scenario_id", "display_order", "created_at"),
    )

    def __repr__(self):
        return f"<PlanNode {self.id}: {self.node_type} '{self.title}' scenario={self.scenario_id}>"
