"""Pydantic schemas for scenarios and rollover."""
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional


class ScenarioCreate(BaseModel):
    """Schema for creating a scenario."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: date
    end_date: date


class ScenarioRollover(BaseModel):
    """Schema for rolling a scenario over into a new generation."""
    name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date


class ScenarioResponse(BaseModel):
    """Schema for scenario response."""
    id: str
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    is_locked: bool
    is_current: bool

    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str

    model_config = {"from_attributes": True}
