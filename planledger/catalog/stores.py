"""Reference data persistence: account items and services."""
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from planledger.catalog.models import AccountItem, Service


class AccountItemStore(ABC):

    @abstractmethod
    async def create(self, db: AsyncSession, item: AccountItem) -> AccountItem:
        pass

    @abstractmethod
    async def find_all(self, db: AsyncSession) -> List[AccountItem]:
        pass

    @abstractmethod
    async def find_by_id(self, db: AsyncSession, item_id: str) -> Optional[AccountItem]:
        pass

    @abstractmethod
    async def find_by_code(self, db: AsyncSession, code: str) -> Optional[AccountItem]:
        pass


class ServiceStore(ABC):

    @abstractmethod
    async def create(self, db: AsyncSession, service: Service) -> Service:
        pass

    @abstractmethod
    async def find_all(self, db: AsyncSession) -> List[Service]:
        pass

    @abstractmethod
    async def find_by_id(self, db: AsyncSession, service_id: str) -> Optional[Service]:
        pass

    @abstractmethod
    async def find_by_slug(self, db: AsyncSession, slug: str) -> Optional[Service]:
        pass


class SqlAccountItemStore(AccountItemStore):

    async def create(self, db: AsyncSession, item: AccountItem) -> AccountItem:
        db.add(item)
        await db.flush()
        return item

    async def find_all(self, db: AsyncSession) -> List[AccountItem]:
        result = await db.execute(
            select(AccountItem)
            .where(AccountItem.deleted_at.is_(None))
            .order_by(AccountItem.display_order.asc(), AccountItem.code.asc())
        )
        return list(result.scalars().all())

    async def find_by_id(self, db: AsyncSession, item_id: str) -> Optional[AccountItem]:
        result = await db.execute(
            select(AccountItem).where(AccountItem.id == item_id, AccountItem.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def find_by_code(self, db: AsyncSession, code: str) -> Optional[AccountItem]:
        result = await db.execute(select(AccountItem).where(AccountItem.code == code))
        return result.scalar_one_or_none()


class SqlServiceStore(ServiceStore):

    async def create(self, db: AsyncSession, service: Service) -> Service:
        db.add(service)
        await db.flush()
        return service

    async def find_all(self, db: AsyncSession) -> List[Service]:
        result = await db.execute(
            select(Service)
            .where(Service.deleted_at.is_(None))
            .order_by(Service.display_order.asc(), Service.slug.asc())
        )
        return list(result.scalars().all())

    async def find_by_id(self, db: AsyncSession, service_id: str) -> Optional[Service]:
        result = await db.execute(
            select(Service).where(Service.id == service_id, Service.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def find_by_slug(self, db: AsyncSession, slug: str) -> Optional[Service]:
        result = await db.execute(select(Service).where(Service.slug == slug))
        return result.scalar_one_or_none()
