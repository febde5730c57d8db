"""Database engine and session management.

PostgreSQL through psycopg3 when configured, SQLite through aiosqlite
otherwise. The engine and session factory are process-wide; sessions are
per request (or per CLI command).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from writing_service.core.database.base import Base
from writing_service.core.settings import get_app_settings, get_db_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

db_settings = get_db_settings()
app_settings = get_app_settings()

engine = create_async_engine(
    db_settings.effective_url,
    **{
        **db_settings.sqlalchemy_engine_kwargs(),
        "echo": db_settings.echo or app_settings.debug,
    },
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session.

    Example:
        async with get_async_session() as session:
            result = await session.execute(select(GoogleDoc))
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def _import_models() -> None:
    """Register every model on Base.metadata."""
    from writing_service.features.activities import models as _activities  # noqa: F401
    from writing_service.features.documents import models as _documents  # noqa: F401
    from writing_service.features.prompts import models as _prompts  # noqa: F401
    from writing_service.features.timelines import models as _timelines  # noqa: F401


async def create_tables(bind: AsyncEngine | None = None) -> list[str]:
    """Create missing tables for every registered model.

    Idempotent: existing tables are left untouched.

    Returns:
        Names of all tables known to the metadata.
    """
    _import_models()
    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    tables = sorted(Base.metadata.tables)
    logger.info("Database tables ensured", extra={"tables": tables})
    return tables


async def check_database(bind: AsyncEngine | None = None) -> bool:
    """Return True if a trivial query succeeds."""
    target = bind or engine
    async with target.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True


async def close_database() -> None:
    """Dispose the engine's connection pool.

    This should be called during application shutdown.
    """
    logger.info("Closing database connection")
    await engine.dispose()


__all__ = [
    "AsyncSessionLocal",
    "check_database",
    "close_database",
    "create_tables",
    "engine",
    "get_async_session",
]
