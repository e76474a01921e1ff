"""
Shared Database Configuration

Single async engine and session factory for the application, plus the
unit_of_work scope every mutating service operation runs inside.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from planledger.config import settings
from planledger.errors import ConflictError, StorageError

Base = declarative_base()

is_sqlite = settings.DATABASE_URL.startswith("sqlite")

if is_sqlite:
    # SQLite configuration (development and tests only)
    engine = create_async_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=settings.SQL_ECHO,
    )
else:
    engine = create_async_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        echo=settings.SQL_ECHO,
    )

# expire_on_commit=False: services hand committed ORM objects back to callers,
# and an expired attribute cannot be lazily refreshed under asyncio.
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get a database session.
    Ensures the session is closed after the request.
    """
    async with AsyncSessionLocal() as db:
        yield db


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block as one transaction on ``db``.

    Commits when the block completes, rolls back on any exception. Driver
    failures are re-raised as StorageError (ConflictError for constraint
    violations); domain errors pass through unchanged.
    """
    try:
        yield db
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(f"Storage constraint violated: {e.orig}") from e
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(f"Storage failure: {e}") from e
    except Exception:
        await db.rollback()
        raise
