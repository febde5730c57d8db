"""GraphQL test fixtures.

Provides:
- A context factory bound to the in-memory test session
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from writing_service.features.graphql.context import GraphQLContext, UserRole

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_context(db_session: AsyncSession) -> Callable[..., GraphQLContext]:
    """Build a context for a caller on the test session.

    Example:
        ctx = make_context(user_id=uid, user_role=UserRole.ADMIN)
        result = await schema.execute(QUERY, context_value=ctx)
    """

    def factory(
        user_id: UUID | None = None,
        user_role: UserRole | None = None,
    ) -> GraphQLContext:
        return GraphQLContext(
            session=db_session,
            user_id=user_id,
            user_role=user_role,
            request_id="test-request",
        )

    return factory


@pytest.fixture
def graphql_context(make_context, user_id) -> GraphQLContext:
    """Context for a plain authenticated user."""
    return make_context(user_id=user_id, user_role=UserRole.USER)
