"""GraphQL router for FastAPI integration.

Provides:
- GraphQL endpoint at ``GRAPHQL_PATH`` (default /graphql)
- Optional in-browser IDE on GET
- Request context with the database session and caller identity
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, cast

from fastapi import BackgroundTasks, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import GraphQLRouter

from writing_service.core.dependencies.database import get_db_session
from writing_service.core.settings import get_graphql_settings
from writing_service.features.graphql.context import (
    USER_ID_HEADER,
    USER_ROLE_HEADER,
    GraphQLContext,
    parse_user_id,
    parse_user_role,
)
from writing_service.features.graphql.schema import schema

logger = logging.getLogger(__name__)


async def get_graphql_context(
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> GraphQLContext:
    """Create GraphQL context from FastAPI dependencies.

    The caller identity comes from the ``X-User-Id`` and ``X-User-Role``
    headers set by the upstream gateway; missing or malformed values mean an
    anonymous caller.
    """
    return GraphQLContext(
        request=request,
        response=response,
        background_tasks=background_tasks,
        session=session,
        user_id=parse_user_id(request.headers.get(USER_ID_HEADER)),
        user_role=parse_user_role(request.headers.get(USER_ROLE_HEADER)),
        request_id=getattr(request.state, "request_id", None),
    )


def create_graphql_router() -> GraphQLRouter:
    """Create GraphQL router with settings-based configuration."""
    settings = get_graphql_settings()

    router: GraphQLRouter = GraphQLRouter(
        schema,
        path=settings.path,
        context_getter=cast("Any", get_graphql_context),
        graphql_ide=cast("Any", settings.ide),
    )
    logger.debug("GraphQL router created", extra={"path": settings.path, "ide": settings.ide})
    return router


__all__ = ["create_graphql_router", "get_graphql_context"]
