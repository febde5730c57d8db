"""Database infrastructure: engine, sessions, schema creation."""

from writing_service.infra.database.session import (
    AsyncSessionLocal,
    check_database,
    close_database,
    create_tables,
    engine,
    get_async_session,
)

__all__ = [
    "AsyncSessionLocal",
    "check_database",
    "close_database",
    "create_tables",
    "engine",
    "get_async_session",
]
