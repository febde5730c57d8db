"""Database management commands.

Example:bash
    # Create missing tables for every model
    writing-service db create-tables

    # Verify connectivity
    writing-service db check
"""

import sys

import click
from sqlalchemy.exc import SQLAlchemyError

from writing_service.cli.utils import coro, error, info, success
from writing_service.core.settings import get_db_settings


def _describe_target() -> str:
    settings = get_db_settings()
    if settings.is_configured:
        return f"{settings.host}:{settings.port}/{settings.name}"
    return settings.sqlite_url


@click.group(name="db")
def db() -> None:
    """Database management commands."""


@db.command(name="create-tables")
@coro
async def create_tables_command() -> None:
    """Create missing tables; existing tables are left untouched."""
    from writing_service.infra.database import close_database, create_tables

    info(f"Creating tables on: {_describe_target()}")
    try:
        tables = await create_tables()
    except (SQLAlchemyError, OSError) as e:
        error(f"Failed to create tables: {e}")
        sys.exit(1)
    finally:
        await close_database()

    for table in tables:
        info(f"  {table}")
    success(f"{len(tables)} tables ready")


@db.command()
@coro
async def check() -> None:
    """Verify that the database accepts connections."""
    from writing_service.infra.database import check_database, close_database

    info(f"Connecting to: {_describe_target()}")
    try:
        await check_database()
    except (SQLAlchemyError, OSError) as e:
        error(f"Failed to connect to database: {e}")
        sys.exit(1)
    finally:
        await close_database()

    success("Database connected successfully!")
