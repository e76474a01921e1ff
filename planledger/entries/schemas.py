"""Pydantic schemas for P/L entries."""
from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from planledger.entries.models import ChangeType, EntryCategory


class PlEntrySave(BaseModel):
    """Schema for writing one cell."""
    node_id: str
    account_item_id: str
    target_month: date  # YYYY-MM-01
    entry_category: EntryCategory
    amount: Decimal = Field(..., max_digits=15, decimal_places=2)
    description: Optional[str] = None


class PlEntryBulkSave(BaseModel):
    """Schema for writing many cells atomically."""
    entries: List[PlEntrySave] = Field(..., min_length=1)


class PlEntryResponse(BaseModel):
    """Schema for entry response."""
    id: str
    node_id: str
    account_item_id: str
    target_month: date
    entry_category: EntryCategory
    amount: Decimal
    description: Optional[str] = None

    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str

    model_config = {"from_attributes": True}


class PlEntryHistoryResponse(BaseModel):
    """Schema for one history row."""
    id: str
    entry_id: str
    change_type: ChangeType
    previous_amount: Optional[Decimal] = None
    new_amount: Decimal
    changed_at: datetime
    changed_by: str
    operation_source: Optional[str] = None

    model_config = {"from_attributes": True}
