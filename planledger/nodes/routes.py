"""Plan node API routes."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from planledger.database import get_db
from planledger.dependencies import get_actor_id
from planledger.nodes.schemas import PlanNodeCreate, PlanNodeResponse, PlanNodeUpdate
from planledger.nodes.services import PlanTree

router = APIRouter()


@router.post("", response_model=PlanNodeResponse, status_code=201)
async def create_node(
    data: PlanNodeCreate,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a node in the current scenario."""
    return await PlanTree(db).create(
        scenario_id=data.scenario_id,
        parent_id=data.parent_id,
        title=data.title,
        node_type=data.node_type,
        actor_id=actor_id,
        description=data.description,
        display_order=data.display_order,
        service_id=data.service_id,
    )


@router.get("", response_model=List[PlanNodeResponse])
async def list_nodes(
    scenario_id: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """All nodes of a scenario in display order, or the most recent nodes when no scenario is given."""
    plan = PlanTree(db)
    if scenario_id is None:
        return await plan.list_recent()
    return await plan.list_by_scenario(scenario_id)


@router.patch("/{node_id}", response_model=PlanNodeResponse)
async def update_node(
    node_id: str,
    data: PlanNodeUpdate,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    return await PlanTree(db).update(node_id, data.model_dump(exclude_unset=True), actor_id)


@router.delete("/{node_id}", status_code=204)
async def delete_node(
    node_id: str,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    await PlanTree(db).delete(node_id, actor_id)
