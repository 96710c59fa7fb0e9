"""Async SQLAlchemy engine, session factory and transaction helper.

Learn: One engine with connection pooling for the whole process. Each
request gets its own AsyncSession through the get_db dependency, and
services wrap their writes in atomic() so a failed commit always rolls
back and surfaces as a StorageError.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from boxoffice.config import settings
from boxoffice.errors import StorageError

# Connection pool: min 5, max 20 connections.
# echo=True in dev to see SQL queries.
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=5,
    max_overflow=15,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run the block as one transaction: commit on success, rollback otherwise.

    Database failures are re-raised as StorageError; domain errors raised
    inside the block (NotFoundError etc.) roll back and propagate unchanged.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError("Storage operation failed") from exc
    except BaseException:
        await db.rollback()
        raise
