"""Application lifespan management.

Startup:
1. Logging (always first)
2. Database tables, when ``DB_CREATE_TABLES`` is set or the service runs on
   the SQLite fallback

Shutdown: engine disposal, then the logging queue listener.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from writing_service.core.settings import (
    get_app_settings,
    get_db_settings,
    get_logging_settings,
)
from writing_service.infra.database import close_database, create_tables
from writing_service.infra.logging.config import setup_logging, shutdown

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start and stop application services."""
    app_settings = get_app_settings()
    db_settings = get_db_settings()

    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={
            "service": app_settings.service_name,
            "environment": app_settings.environment,
            "version": app_settings.version,
        },
    )

    if db_settings.create_tables or not db_settings.is_configured:
        tables = await create_tables()
        logger.info("Database schema ready", extra={"table_count": len(tables)})

    try:
        yield
    finally:
        await close_database()
        logger.info("Application stopped", extra={"service": app_settings.service_name})
        shutdown()


__all__ = ["lifespan"]
