"""
Plan Tree Service - create, edit and remove nodes of a scenario's tree.

Every mutation checks, before touching storage:
1. the owning scenario is writable (current and not locked)
2. the parent, if any, exists in the same scenario
3. the node type may sit under that parent (or at the root)
4. service_id is present exactly for entity types, and names an existing service
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from planledger.catalog.stores import ServiceStore, SqlServiceStore
from planledger.database import unit_of_work
from planledger.entries.stores import PlEntryStore, SqlPlEntryStore
from planledger.errors import (
    CrossScenarioParentError,
    InvalidHierarchyError,
    InvalidServiceBindingError,
    NonEmptyNodeError,
    NotFoundError,
    ValidationError,
)
from planledger.nodes.models import PlanNode
from planledger.nodes.stores import PlanNodeStore, SqlPlanNodeStore
from planledger.nodes.types import NodeType, can_be_child_of, can_be_root, is_entity
from planledger.scenarios.services import ScenarioLifecycle
from planledger.utils import generate_id, utcnow

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"title", "description", "display_order"})
RECENT_LIMIT = 100


def parse_node_type(value) -> NodeType:
    try:
        return NodeType(value)
    except ValueError:
        raise ValidationError(f"Unknown node type: {value!r}") from None


def check_service_binding(node_type: NodeType, service_id: Optional[str]) -> None:
    if is_entity(node_type):
        if not service_id:
            raise InvalidServiceBindingError(
                f"service_id is required for entity nodes ({node_type.value})"
            )
    elif service_id is not None:
        raise InvalidServiceBindingError(
            f"service_id must be empty for container nodes ({node_type.value})"
        )


def build_node(
    scenario_id: str,
    parent_id: Optional[str],
    title: str,
    description: Optional[str],
    node_type: NodeType,
    display_order: int,
    service_id: Optional[str],
    actor_id: str,
    lineage_id: Optional[str] = None,
) -> PlanNode:
    """
    Validate the node's own fields and construct an unsaved PlanNode.

    A fresh lineage_id is minted unless one is supplied (rollover clones
    carry their source node's lineage).
    """
    if title is None or not title.strip():
        raise ValidationError("Title cannot be empty")

    node_type = parse_node_type(node_type)
    if parent_id is None and not can_be_root(node_type):
        raise InvalidHierarchyError(f"Only initiative nodes can be roots, got '{node_type.value}'")
    check_service_binding(node_type, service_id)

    now = utcnow()
    return PlanNode(
        id=generate_id("node"),
        scenario_id=scenario_id,
        parent_id=parent_id,
        lineage_id=lineage_id or generate_id("lin"),
        title=title,
        description=description,
        node_type=node_type,
        display_order=display_order,
        service_id=service_id,
        created_at=now,
        updated_at=now,
        created_by=actor_id,
        updated_by=actor_id,
    )


class PlanTree:
    """Service for the node tree of a scenario."""

    def __init__(
        self,
        db: AsyncSession,
        scenarios: Optional[ScenarioLifecycle] = None,
        nodes: Optional[PlanNodeStore] = None,
        entries: Optional[PlEntryStore] = None,
        services: Optional[ServiceStore] = None,
    ):
        self.db = db
        self.scenarios = scenarios or ScenarioLifecycle(db)
        self.nodes = nodes or SqlPlanNodeStore()
        self.entries = entries or SqlPlEntryStore()
        self.services = services or SqlServiceStore()

    async def get(self, node_id: str) -> PlanNode:
        node = await self.nodes.find_by_id(self.db, node_id)
        if node is None:
            raise NotFoundError("PlanNode", node_id)
        return node

    async def list_by_scenario(self, scenario_id: str) -> List[PlanNode]:
        return await self.nodes.find_by_scenario_id(self.db, scenario_id)

    async def list_recent(self, limit: int = RECENT_LIMIT) -> List[PlanNode]:
        return await self.nodes.find_recent(self.db, limit)

    async def create(
        self,
        scenario_id: str,
        parent_id: Optional[str],
        title: str,
        node_type: NodeType,
        actor_id: str,
        description: Optional[str] = None,
        display_order: int = 0,
        service_id: Optional[str] = None,
        lineage_id: Optional[str] = None,
    ) -> PlanNode:
        node_type = parse_node_type(node_type)

        async with unit_of_work(self.db):
            await self.scenarios.ensure_writable(scenario_id)

            if parent_id is not None:
                parent = await self.nodes.find_by_id(self.db, parent_id)
                if parent is None:
                    raise NotFoundError("Parent node", parent_id)
                if parent.scenario_id != scenario_id:
                    raise CrossScenarioParentError(
                        f"Parent node {parent_id} belongs to scenario {parent.scenario_id}, not {scenario_id}"
                    )
                if not can_be_child_of(node_type, parent.node_type):
                    raise InvalidHierarchyError(
                        f"Node type '{node_type.value}' cannot be a child of "
                        f"'{NodeType(parent.node_type).value}'"
                    )

            node = build_node(
                scenario_id=scenario_id,
                parent_id=parent_id,
                title=title,
                description=description,
                node_type=node_type,
                display_order=display_order,
                service_id=service_id,
                actor_id=actor_id,
                lineage_id=lineage_id,
            )
            if service_id is not None and await self.services.find_by_id(self.db, service_id) is None:
                raise NotFoundError("Service", service_id)
            node = await self.nodes.create(self.db, node)

        logger.info(f"Plan node created: {node.id} ({node.node_type.value}) in scenario {scenario_id}")
        return node

    async def update(self, node_id: str, changes: Dict[str, Any], actor_id: str) -> PlanNode:
        """
        Partially update a node. Only keys present in ``changes`` are
        written; title, description and display_order are the editable fields.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        if "title" in changes and (changes["title"] is None or not str(changes["title"]).strip()):
            raise ValidationError("Title cannot be empty")
        if "display_order" in changes and changes["display_order"] is None:
            raise ValidationError("display_order cannot be null")

        async with unit_of_work(self.db):
            node = await self.get(node_id)
            await self.scenarios.ensure_writable(node.scenario_id)
            node = await self.nodes.update(self.db, node, changes, actor_id)
        return node

    async def delete(self, node_id: str, actor_id: str) -> None:
        """Soft-delete a leaf node that holds no entries."""
        async with unit_of_work(self.db):
            node = await self.get(node_id)
            await self.scenarios.ensure_writable(node.scenario_id)

            if await self.nodes.count_children(self.db, node_id):
                raise NonEmptyNodeError(f"Node {node_id} has child nodes")
            if await self.entries.count_by_node(self.db, node_id):
                raise NonEmptyNodeError(f"Node {node_id} has entries attached")

            await self.nodes.delete(self.db, node, actor_id)

        logger.info(f"Plan node deleted: {node_id}")
