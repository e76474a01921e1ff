"""Reference data: account items (chart of accounts) and services."""
import enum

from sqlalchemy import Column, String, DateTime, Integer, Text
from sqlalchemy import Enum as SQLEnum

from planledger.database import Base
from planledger.utils import generate_id, utcnow


class AccountType(str, enum.Enum):
    """P/L section an account item reports under."""
    REVENUE = "revenue"
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    SELLING_GENERAL_ADMIN = "selling_general_admin"


class AccountItem(Base):
    """A P/L account line (e.g. "Rent", "Subscription revenue")."""
    __tablename__ = "account_items"

    id = Column(String, primary_key=True, default=lambda: generate_id("acct"))
    name = Column(String, nullable=False)
    code = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    account_type = Column(
        SQLEnum(AccountType, name="account_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    display_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<AccountItem {self.id}: {self.code} {self.name}>"


class Service(Base):
    """A business service that job and buffer nodes are booked against."""
    __tablename__ = "services"

    id = Column(String, primary_key=True, default=lambda: generate_id("svc"))
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)  # ^[a-z0-9-]+$
    display_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Service {self.id}: {self.slug}>"
