"""Reference data API routes."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from planledger.catalog.schemas import (
    AccountItemCreate,
    AccountItemResponse,
    ServiceCreate,
    ServiceResponse,
)
from planledger.catalog.services import AccountItemCatalog, ServiceCatalog
from planledger.database import get_db
from planledger.dependencies import get_actor_id

router = APIRouter()


@router.post("/account-items", response_model=AccountItemResponse, status_code=201)
async def create_account_item(
    data: AccountItemCreate,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    return await AccountItemCatalog(db).create(
        name=data.name,
        code=data.code,
        account_type=data.account_type,
        description=data.description,
        display_order=data.display_order,
    )


@router.get("/account-items", response_model=List[AccountItemResponse])
async def list_account_items(db: AsyncSession = Depends(get_db)):
    return await AccountItemCatalog(db).list_all()


@router.post("/services", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    actor_id: str = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    return await ServiceCatalog(db).create(name=data.name, slug=data.slug, display_order=data.display_order)


@router.get("/services", response_model=List[ServiceResponse])
async def list_services(db: AsyncSession = Depends(get_db)):
    return await ServiceCatalog(db).list_all()
