"""Query helpers shared by the test modules."""
from sqlalchemy import func, select

from planledger.entries.models import PlEntryHistory
from planledger.scenarios.models import Scenario

ACTOR = "user_test"


async def count_current_scenarios(db) -> int:
    result = await db.execute(select(func.count(Scenario.id)).where(Scenario.is_current.is_(True)))
    return result.scalar_one()


async def count_scenarios(db) -> int:
    result = await db.execute(select(func.count(Scenario.id)))
    return result.scalar_one()


async def count_history_rows(db) -> int:
    result = await db.execute(select(func.count(PlEntryHistory.id)))
    return result.scalar_one()
