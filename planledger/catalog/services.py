"""Reference data services: the chart of accounts and the service list."""
import logging
import re
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from planledger.catalog.models import AccountItem, AccountType, Service
from planledger.catalog.stores import AccountItemStore, ServiceStore, SqlAccountItemStore, SqlServiceStore
from planledger.database import unit_of_work
from planledger.errors import ValidationError
from planledger.utils import generate_id, utcnow

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def _require(value: Optional[str], label: str) -> None:
    if value is None or not value.strip():
        raise ValidationError(f"{label} cannot be empty")


class AccountItemCatalog:
    """Create and list account items."""

    def __init__(self, db: AsyncSession, store: Optional[AccountItemStore] = None):
        self.db = db
        self.store = store or SqlAccountItemStore()

    async def create(
        self,
        name: str,
        code: str,
        account_type: AccountType,
        description: Optional[str] = None,
        display_order: int = 0,
    ) -> AccountItem:
        _require(name, "Name")
        _require(code, "Code")
        try:
            account_type = AccountType(account_type)
        except ValueError:
            raise ValidationError(f"Unknown account type: {account_type!r}") from None

        async with unit_of_work(self.db):
            if await self.store.find_by_code(self.db, code) is not None:
                raise ValidationError(f"Account code already exists: {code}")
            now = utcnow()
            item = await self.store.create(
                self.db,
                AccountItem(
                    id=generate_id("acct"),
                    name=name,
                    code=code,
                    description=description,
                    account_type=account_type,
                    display_order=display_order,
                    created_at=now,
                    updated_at=now,
                ),
            )
        logger.info(f"Account item created: {item.id} ({code})")
        return item

    async def list_all(self) -> List[AccountItem]:
        return await self.store.find_all(self.db)


class ServiceCatalog:
    """Create and list services."""

    def __init__(self, db: AsyncSession, store: Optional[ServiceStore] = None):
        self.db = db
        self.store = store or SqlServiceStore()

    async def create(self, name: str, slug: str, display_order: int = 0) -> Service:
        _require(name, "Name")
        if slug is None or not SLUG_PATTERN.fullmatch(slug):
            raise ValidationError("Slug must contain only lowercase letters, numbers, and hyphens")

        async with unit_of_work(self.db):
            if await self.store.find_by_slug(self.db, slug) is not None:
                raise ValidationError(f"Slug already exists: {slug}")
            now = utcnow()
            service = await self.store.create(
                self.db,
                Service(
                    id=generate_id("svc"),
                    name=name,
                    slug=slug,
                    display_order=display_order,
                    created_at=now,
                    updated_at=now,
                ),
            )
        logger.info(f"Service created: {service.id} ({slug})")
        return service

    async def list_all(self) -> List[Service]:
        return await self.store.find_all(self.db)
