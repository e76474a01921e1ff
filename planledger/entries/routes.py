"""P/L entry API routes."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from planledger.database import get_db
from planledger.dependencies import get_actor_id
from planledger.entries.models import EntryCategory
from planledger.entries.schemas import (
    PlEntryBulkSave,
    PlEntryHistoryResponse,
    PlEntryResponse,
    PlEntrySave,
)
from planledger.entries.services import EntryLedger, EntryWrite

router = APIRouter()


def _to_write(data: PlEntrySave) -> EntryWrite:
    return EntryWrite(
        node_id=data.node_id,
        account_item_id=data.account_item_id,
        target_month=data.target_month,
        entry_category=data.entry_category,
        amount=data.amount,
        description=data.description,
    )


@router.put("", response_model=PlEntryResponse)
async def save_entry(
    data: PlEntrySave,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Create or update one cell."""
    return await EntryLedger(db).save_entry(
        node_id=data.node_id,
        account_item_id=data.account_item_id,
        target_month=data.target_month,
        entry_category=data.entry_category,
        amount=data.amount,
        actor_id=actor_id,
        description=data.description,
    )


@router.put("/bulk", response_model=List[PlEntryResponse])
async def save_entries_bulk(
    data: PlEntryBulkSave,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Write every cell in one transaction; one failure rejects the batch."""
    return await EntryLedger(db).save_bulk([_to_write(item) for item in data.entries], actor_id)


@router.get("", response_model=List[PlEntryResponse])
async def list_entries(
    node_id: str = Query(...),
    entry_category: EntryCategory = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return await EntryLedger(db).list_by_node(node_id, entry_category)


@router.get("/by-scenario/{scenario_id}", response_model=List[PlEntryResponse])
async def list_scenario_entries(scenario_id: str, db: AsyncSession = Depends(get_db)):
    return await EntryLedger(db).list_by_scenario(scenario_id)


@router.get("/{entry_id}/history", response_model=List[PlEntryHistoryResponse])
async def entry_history(entry_id: str, db: AsyncSession = Depends(get_db)):
    return await EntryLedger(db).history_for(entry_id)


@router.delete("/{entry_id}", status_code=204)
async def delete_entry(
    entry_id: str,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    await EntryLedger(db).delete_entry(entry_id, actor_id)
