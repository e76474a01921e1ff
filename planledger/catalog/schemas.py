"""Pydantic schemas for account items and services."""
from pydantic import BaseModel, Field
from typing import Optional

from planledger.catalog.models import AccountType


class AccountItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=64)
    description: Optional[str] = None
    account_type: AccountType
    display_order: int = 0


class AccountItemResponse(BaseModel):
    id: str
    name: str
    code: str
    description: Optional[str] = None
    account_type: AccountType
    display_order: int

    model_config = {"from_attributes": True}


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., pattern="^[a-z0-9-]+$")
    display_order: int = 0


class ServiceResponse(BaseModel):
    id: str
    name: str
    slug: str
    display_order: int

    model_config = {"from_attributes": True}
