"""Modular Pydantic Settings v2 configuration.

One frozen settings model per concern, each read from its own environment
prefix (``APP_``, ``DB_``, ``LOG_``, ``GRAPHQL_``, ``PAGINATION_``) and from an
optional ``.env`` file. Import settings via the cached loaders:

    from writing_service.core.settings import get_app_settings
"""

from __future__ import annotations

from .app import AppSettings
from .graphql import GraphQLSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_db_settings,
    get_graphql_settings,
    get_logging_settings,
    get_pagination_settings,
)
from .logs import LoggingSettings
from .pagination import PaginationSettings
from .postgres import PostgresSettings

__all__ = [
    "AppSettings",
    "GraphQLSettings",
    "LoggingSettings",
    "PaginationSettings",
    "PostgresSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_graphql_settings",
    "get_logging_settings",
    "get_pagination_settings",
]
