"""
Scenario Rollover - clone a scenario's tree and entries into a new,
activated scenario.

Architecture:
1. Load the source scenario
2. Create the new scenario (non-current)
3. Load every node of the source
4. Mint a new id for every source node (old id -> new id)
5. Clone nodes with parent ids rewritten through the map; lineage_id is
   copied verbatim so a node can be followed across generations
6. Load every entry of the source nodes
7. Clone entries onto the mapped nodes (no history: this is a structural
   copy, not a user edit)
8. Activate the new scenario, demoting the source

Steps 2-8 run in one transaction; a failure leaves nothing behind.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from planledger.database import unit_of_work
from planledger.entries.models import PlEntry
from planledger.entries.stores import PlEntryStore, SqlPlEntryStore
from planledger.nodes.models import PlanNode
from planledger.nodes.stores import PlanNodeStore, SqlPlanNodeStore
from planledger.scenarios.models import Scenario
from planledger.scenarios.services import ScenarioLifecycle
from planledger.utils import generate_id, utcnow

logger = logging.getLogger(__name__)


@dataclass
class RolloverResult:
    """Outcome of a rollover, for callers that want more than the scenario."""
    scenario: Scenario
    source_scenario_id: str
    node_id_map: Dict[str, str] = field(default_factory=dict)  # source id -> new id
    nodes_cloned: int = 0
    entries_cloned: int = 0
    entries_skipped: int = 0


def map_node_ids(nodes: List[PlanNode]) -> Dict[str, str]:
    """Mint every new id before any clone is built; children may precede parents."""
    return {node.id: generate_id("node") for node in nodes}


def creation_stamps(nodes: List[PlanNode], now: datetime) -> Dict[str, datetime]:
    """
    One created_at per node, a microsecond apart in source order, so clones
    with equal display_order list in the same order as their sources.
    """
    return {node.id: now + timedelta(microseconds=index) for index, node in enumerate(nodes)}


def parents_first(nodes: List[PlanNode]) -> List[PlanNode]:
    """
    Order nodes so every parent precedes its children, keeping the input
    order among nodes of the same depth.
    """
    by_id = {node.id: node for node in nodes}
    depth_cache: Dict[str, int] = {}

    def depth(node: PlanNode) -> int:
        chain = []
        current = node
        while current.id not in depth_cache:
            parent = by_id.get(current.parent_id) if current.parent_id else None
            if parent is None:
                depth_cache[current.id] = 0
                break
            chain.append(current)
            current = parent
        base = depth_cache[current.id]
        for offset, item in enumerate(reversed(chain), start=1):
            depth_cache[item.id] = base + offset
        return depth_cache[node.id]

    return sorted(nodes, key=depth)


def clone_node(source: PlanNode, id_map: Dict[str, str], scenario_id: str, actor_id: str, now) -> PlanNode:
    return PlanNode(
        id=id_map[source.id],
        scenario_id=scenario_id,
        parent_id=id_map.get(source.parent_id) if source.parent_id else None,
        lineage_id=source.lineage_id,
        title=source.title,
        description=source.description,
        node_type=source.node_type,
        display_order=source.display_order,
        service_id=source.service_id,
        created_at=now,
        updated_at=now,
        created_by=actor_id,
        updated_by=actor_id,
    )


def clone_entry(source: PlEntry, node_id: str, actor_id: str, now) -> PlEntry:
    return PlEntry(
        id=generate_id("ent"),
        node_id=node_id,
        account_item_id=source.account_item_id,
        target_month=source.target_month,
        entry_category=source.entry_category,
        amount=source.amount,
        description=source.description,
        created_at=now,
        updated_at=now,
        created_by=actor_id,
        updated_by=actor_id,
    )


class RolloverEngine:
    """
    Service that starts a new plan generation from an existing scenario.

    Usage:
        engine = RolloverEngine(db)
        new_scenario = await engine.rollover(source.id, "FY2026 revised", start, end, actor_id="user_1")
    """

    def __init__(
        self,
        db: AsyncSession,
        scenarios: Optional[ScenarioLifecycle] = None,
        nodes: Optional[PlanNodeStore] = None,
        entries: Optional[PlEntryStore] = None,
    ):
        self.db = db
        self.scenarios = scenarios or ScenarioLifecycle(db)
        self.nodes = nodes or SqlPlanNodeStore()
        self.entries = entries or SqlPlEntryStore()

    async def rollover(
        self,
        source_scenario_id: str,
        new_name: str,
        new_start_date: date,
        new_end_date: date,
        actor_id: str,
    ) -> Scenario:
        result = await self.rollover_with_summary(
            source_scenario_id, new_name, new_start_date, new_end_date, actor_id
        )
        return result.scenario

    async def rollover_with_summary(
        self,
        source_scenario_id: str,
        new_name: str,
        new_start_date: date,
        new_end_date: date,
        actor_id: str,
    ) -> RolloverResult:
        async with unit_of_work(self.db):
            # Step 1: Source scenario
            source = await self.scenarios.get(source_scenario_id)

            # Step 2: New scenario, not yet current
            new_scenario = await self.scenarios.stage_create(
                name=new_name,
                description=f"Rolled over from '{source.name}'",
                start_date=new_start_date,
                end_date=new_end_date,
                actor_id=actor_id,
            )
            result = RolloverResult(scenario=new_scenario, source_scenario_id=source.id)

            # Step 3-4: Source nodes and the id map
            source_nodes = await self.nodes.find_by_scenario_id(self.db, source.id)
            id_map = map_node_ids(source_nodes)
            result.node_id_map = id_map

            # Step 5: Clone nodes
            now = utcnow()
            stamps = creation_stamps(source_nodes, now)
            cloned_nodes = [
                clone_node(node, id_map, new_scenario.id, actor_id, stamps[node.id])
                for node in parents_first(source_nodes)
            ]
            await self.nodes.create_many(self.db, cloned_nodes)
            result.nodes_cloned = len(cloned_nodes)

            # Step 6-7: Clone entries onto mapped nodes
            source_entries = await self.entries.find_by_node_ids(self.db, id_map.keys())
            cloned_entries = []
            for entry in source_entries:
                new_node_id = id_map.get(entry.node_id)
                if new_node_id is None:
                    result.entries_skipped += 1
                    continue
                cloned_entries.append(clone_entry(entry, new_node_id, actor_id, now))
            await self.entries.create_many(self.db, cloned_entries)
            result.entries_cloned = len(cloned_entries)

            # Step 8: Activate
            await self.scenarios.stage_activate(new_scenario.id, actor_id)

        logger.info(
            f"Rollover committed: {source_scenario_id} -> {new_scenario.id} "
            f"({result.nodes_cloned} nodes, {result.entries_cloned} entries, "
            f"{result.entries_skipped} skipped)"
        )
        return result
