"""Pytest configuration and shared fixtures.

Organization:
    - Application Fixtures: FastAPI app and HTTP client
    - Database Fixtures: in-memory SQLite engine and session
    - Data Fixtures: helpers that seed stored documents
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from writing_service.features.documents.models import DocVersion

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DB_ENABLED", "false")
os.environ.setdefault("DB_SQLITE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Reload settings for every test so monkeypatched env vars apply."""
    from writing_service.core.settings import clear_all_caches

    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Async engine on a private in-memory SQLite database with all tables."""
    from writing_service.infra.database import create_tables

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    await create_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session bound to the test engine; rolled back after the test."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app(db_session: AsyncSession):
    """FastAPI application whose requests share the test session."""
    from writing_service.app.main import create_app
    from writing_service.core.dependencies.database import get_db_session

    application = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    application.dependency_overrides[get_db_session] = override_session
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """HTTPX client talking to the app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ============================================================================
# Data Fixtures
# ============================================================================

BASE_TIME = datetime(2025, 1, 15, 10, 0, tzinfo=UTC)


@pytest.fixture
async def doc_versions(db_session: AsyncSession) -> list[DocVersion]:
    """Six versions of one document, createdAt one minute apart, oldest first."""
    from writing_service.features.documents.models import DocVersion

    versions = [
        DocVersion(
            doc_id="doc-1",
            plain_text=f"version {index}",
            created_at=BASE_TIME + timedelta(minutes=index),
        )
        for index in range(6)
    ]
    db_session.add_all(versions)
    await db_session.commit()
    return versions
