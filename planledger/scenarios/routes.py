"""Scenario API routes."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from planledger.database import get_db
from planledger.dependencies import get_actor_id
from planledger.scenarios.rollover import RolloverEngine
from planledger.scenarios.schemas import ScenarioCreate, ScenarioResponse, ScenarioRollover
from planledger.scenarios.services import ScenarioLifecycle

router = APIRouter()


@router.post("", response_model=ScenarioResponse, status_code=201)
async def create_scenario(
    data: ScenarioCreate,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a new (non-current) scenario."""
    return await ScenarioLifecycle(db).create(
        name=data.name,
        description=data.description,
        start_date=data.start_date,
        end_date=data.end_date,
        actor_id=actor_id,
    )


@router.get("", response_model=List[ScenarioResponse])
async def list_scenarios(db: AsyncSession = Depends(get_db)):
    """List scenarios, newest first."""
    return await ScenarioLifecycle(db).list_all()


@router.get("/{scenario_id}", response_model=ScenarioResponse)
async def get_scenario(scenario_id: str, db: AsyncSession = Depends(get_db)):
    return await ScenarioLifecycle(db).get(scenario_id)


@router.post("/{scenario_id}/activate", response_model=ScenarioResponse)
async def activate_scenario(
    scenario_id: str,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Make this the current scenario; the previous one becomes read-only."""
    return await ScenarioLifecycle(db).activate(scenario_id, actor_id)


@router.post("/{scenario_id}/lock", response_model=ScenarioResponse)
async def lock_scenario(
    scenario_id: str,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    return await ScenarioLifecycle(db).lock(scenario_id, actor_id)


@router.post("/{scenario_id}/rollover", response_model=ScenarioResponse, status_code=201)
async def rollover_scenario(
    scenario_id: str,
    data: ScenarioRollover,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Clone this scenario's tree and entries into a new current scenario."""
    return await RolloverEngine(db).rollover(
        scenario_id,
        new_name=data.name,
        new_start_date=data.start_date,
        new_end_date=data.end_date,
        actor_id=actor_id,
    )
