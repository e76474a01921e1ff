"""Plan node persistence: port + SQLAlchemy implementation."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from planledger.nodes.models import PlanNode
from planledger.utils import utcnow


class PlanNodeStore(ABC):
    """Storage contract for plan nodes. Reads exclude soft-deleted rows."""

    @abstractmethod
    async def create(self, db: AsyncSession, node: PlanNode) -> PlanNode:
        pass

    @abstractmethod
    async def create_many(self, db: AsyncSession, nodes: Sequence[PlanNode]) -> None:
        """Insert in the given order (parents before children)."""
        pass

    @abstractmethod
    async def find_by_id(self, db: AsyncSession, node_id: str) -> Optional[PlanNode]:
        pass

    @abstractmethod
    async def find_by_scenario_id(self, db: AsyncSession, scenario_id: str) -> List[PlanNode]:
        """Ordered by display_order, then created_at."""
        pass

    @abstractmethod
    async def find_recent(self, db: AsyncSession, limit: int) -> List[PlanNode]:
        """Newest first, across all scenarios."""
        pass

    @abstractmethod
    async def count_children(self, db: AsyncSession, node_id: str) -> int:
        pass

    @abstractmethod
    async def update(self, db: AsyncSession, node: PlanNode, changes: Dict[str, Any], actor_id: str) -> PlanNode:
        """Apply only the supplied fields."""
        pass

    @abstractmethod
    async def delete(self, db: AsyncSession, node: PlanNode, actor_id: str) -> None:
        pass


class SqlPlanNodeStore(PlanNodeStore):
    """SQLAlchemy-backed plan node store."""

    async def create(self, db: AsyncSession, node: PlanNode) -> PlanNode:
        db.add(node)
        await db.flush()
        return node

    async def create_many(self, db: AsyncSession, nodes: Sequence[PlanNode]) -> None:
        db.add_all(list(nodes))
        await db.flush()

    async def find_by_id(self, db: AsyncSession, node_id: str) -> Optional[PlanNode]:
        result = await db.execute(
            select(PlanNode).where(
                PlanNode.id == node_id,
                PlanNode.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def find_by_scenario_id(self, db: AsyncSession, scenario_id: str) -> List[PlanNode]:
        result = await db.execute(
            select(PlanNode)
            .where(
                PlanNode.scenario_id == scenario_id,
                PlanNode.deleted_at.is_(None),
            )
            .order_by(PlanNode.display_order.asc(), PlanNode.created_at.asc())
        )
        return list(result.scalars().all())

    async def find_recent(self, db: AsyncSession, limit: int) -> List[PlanNode]:
        result = await db.execute(
            select(PlanNode)
            .where(PlanNode.deleted_at.is_(None))
            .order_by(PlanNode.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_children(self, db: AsyncSession, node_id: str) -> int:
        result = await db.execute(
            select(func.count(PlanNode.id)).where(
                PlanNode.parent_id == node_id,
                PlanNode.deleted_at.is_(None),
            )
        )
        return result.scalar_one()

    async def update(self, db: AsyncSession, node: PlanNode, changes: Dict[str, Any], actor_id: str) -> PlanNode:
        for field, value in changes.items():
            setattr(node, field, value)
        node.updated_at = utcnow()
        node.updated_by = actor_id
        await db.flush()
        return node

    async def delete(self, db: AsyncSession, node: PlanNode, actor_id: str) -> None:
        node.deleted_at = utcnow()
        node.deleted_by = actor_id
        await db.flush()
