"""GraphQL context for request-scoped dependencies.

The context is created fresh for each GraphQL request and provides:
- Database session (one per request)
- Caller identity as forwarded by the upstream gateway
- Request id (for log correlation)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from strawberry.fastapi import BaseContext

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from starlette.background import BackgroundTasks
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.websockets import WebSocket

USER_ID_HEADER = "x-user-id"
USER_ROLE_HEADER = "x-user-role"


class UserRole(str, Enum):
    """Roles the gateway may assign to a caller."""

    USER = "USER"
    ADMIN = "ADMIN"
    CONTENT_MANAGER = "CONTENT_MANAGER"


def parse_user_id(raw: str | None) -> UUID | None:
    """Caller id from a header value; anything but a UUID means anonymous."""
    if not raw:
        return None
    try:
        return UUID(raw.strip())
    except ValueError:
        return None


def parse_user_role(raw: str | None) -> UserRole | None:
    if not raw:
        return None
    try:
        return UserRole(raw.strip().upper())
    except ValueError:
        return None


@dataclass
class GraphQLContext(BaseContext):
    """Request context for GraphQL operations.

    Standard fields (per Strawberry docs):
    - request: The HTTP request (or None outside HTTP)
    - response: The HTTP response
    - background_tasks: FastAPI BackgroundTasks

    Custom fields:
    - session: Database session (request-scoped)
    - user_id: Caller id, None when anonymous
    - user_role: Caller role, None when unknown
    - request_id: Correlation id set by the request middleware

    Example usage in resolver:
        @strawberry.field
        async def fetch_prompt_runs(self, info: Info[GraphQLContext, None], ...) -> ...:
            ctx = info.context
            runs = await repo.list_for_user(ctx.session, user_id)
    """

    request: Request | WebSocket | None = None
    response: Response | None = None
    background_tasks: BackgroundTasks | None = None

    session: AsyncSession = field(default=None)  # type: ignore[assignment]
    user_id: UUID | None = None
    user_role: UserRole | None = None
    request_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.user_role is UserRole.ADMIN

    def has_role(self, *roles: UserRole) -> bool:
        return self.user_role in roles


__all__ = [
    "USER_ID_HEADER",
    "USER_ROLE_HEADER",
    "GraphQLContext",
    "UserRole",
    "parse_user_id",
    "parse_user_role",
]
