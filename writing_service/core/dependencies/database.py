"""Database dependencies for FastAPI route handlers.

`get_db_session()` is the FastAPI dependency; the GraphQL context getter
depends on it, so each GraphQL request gets exactly one session. CLI commands
use `get_async_session()` from the infrastructure layer directly.

Tests swap the session source with
``app.dependency_overrides[get_db_session] = ...``.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from writing_service.infra.database import get_async_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for database session.

    Yields:
        Database session that is automatically closed after request.
    """
    async with get_async_session() as session:
        yield session
