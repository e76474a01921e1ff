"""Shared test fixtures and configuration for plan ledger tests."""
import os

# Settings are read at import time; point them at SQLite before any
# planledger module is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from dataclasses import dataclass
from datetime import date

import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import planledger.models  # noqa: F401  (registers every table)
from planledger.catalog.models import AccountType
from planledger.catalog.services import AccountItemCatalog, ServiceCatalog
from planledger.database import Base
from planledger.nodes.services import PlanTree
from planledger.nodes.types import NodeType
from planledger.scenarios.services import ScenarioLifecycle

from helpers import ACTOR


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test, foreign keys enforced."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    """Database session; services commit through it like a request would."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# =============================================================================
# Reference data
# =============================================================================

@pytest_asyncio.fixture
async def service_id(db):
    service = await ServiceCatalog(db).create(name="Consulting", slug="consulting")
    return service.id


@pytest_asyncio.fixture
async def account_id(db):
    item = await AccountItemCatalog(db).create(
        name="Rent", code="6100", account_type=AccountType.SELLING_GENERAL_ADMIN
    )
    return item.id


@pytest_asyncio.fixture
async def second_account_id(db):
    item = await AccountItemCatalog(db).create(
        name="Sales", code="4000", account_type=AccountType.REVENUE
    )
    return item.id


# =============================================================================
# Scenarios and trees
# =============================================================================

@pytest_asyncio.fixture
async def scenario_id(db):
    """A current (writable) scenario."""
    lifecycle = ScenarioLifecycle(db)
    scenario = await lifecycle.create("FY2025 plan", None, date(2025, 1, 1), date(2025, 12, 31), ACTOR)
    await lifecycle.activate(scenario.id, ACTOR)
    return scenario.id


@dataclass
class Tree:
    """Ids of a minimal initiative -> project -> job tree."""
    scenario_id: str
    initiative_id: str
    project_id: str
    job_id: str


@pytest_asyncio.fixture
async def tree(db, scenario_id, service_id):
    plan = PlanTree(db)
    initiative = await plan.create(scenario_id, None, "Growth", NodeType.INITIATIVE, ACTOR)
    project = await plan.create(scenario_id, initiative.id, "Platform", NodeType.PROJECT, ACTOR)
    job = await plan.create(
        scenario_id, project.id, "Build", NodeType.JOB, ACTOR, service_id=service_id
    )
    return Tree(scenario_id, initiative.id, project.id, job.id)
