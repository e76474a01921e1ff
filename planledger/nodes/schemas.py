"""Pydantic schemas for plan nodes."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from planledger.nodes.types import NodeType


class PlanNodeCreate(BaseModel):
    """Schema for creating a plan node."""
    scenario_id: str
    parent_id: Optional[str] = None  # None for root initiatives
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    node_type: NodeType
    display_order: int = 0

    # Only for job / adjustment_buffer
    service_id: Optional[str] = None


class PlanNodeUpdate(BaseModel):
    """Schema for updating a plan node. Omitted fields are left untouched."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    display_order: Optional[int] = None


class PlanNodeResponse(BaseModel):
    """Schema for plan node response."""
    id: str
    scenario_id: str
    parent_id: Optional[str] = None
    lineage_id: str
    title: str
    description: Optional[str] = None
    node_type: NodeType
    display_order: int
    service_id: Optional[str] = None

    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str

    model_config = {"from_attributes": True}
