"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from writing_service.core.settings import get_graphql_settings
from writing_service.features.health.router import router as health_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from writing_service.core.settings.graphql import GraphQLSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, graphql_settings: GraphQLSettings | None = None) -> None:
    """Register the health and GraphQL routers with the application."""
    graphql_settings = graphql_settings or get_graphql_settings()

    app.include_router(health_router, tags=["health"])

    if graphql_settings.enabled:
        from writing_service.features.graphql.router import create_graphql_router

        app.include_router(create_graphql_router(), tags=["graphql"])
        logger.debug("GraphQL endpoint enabled", extra={"path": graphql_settings.path})
    else:
        logger.info("GraphQL endpoint disabled")


__all__ = ["setup_routers"]
