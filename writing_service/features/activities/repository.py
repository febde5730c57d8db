"""Repositories for the activities feature."""

from __future__ import annotations

from copy import deepcopy
from typing import TYPE_CHECKING, Any

from writing_service.core.database.repository import BaseRepository
from writing_service.features.activities.models import (
    ActivityVisibility,
    BuiltActivity,
    BuiltActivityVersion,
    UserActivityState,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

SHARED_VISIBILITIES = (ActivityVisibility.READ_ONLY.value, ActivityVisibility.EDITABLE.value)


def visibility_predicate(user_id: UUID | None, *, is_admin: bool) -> dict[str, Any]:
    """Predicate selecting the built activities a caller may see.

    Admins see everything; other callers see their own activities plus the
    shared ones.
    """
    if is_admin:
        return {}
    shared = {"visibility": {"$in": list(SHARED_VISIBILITIES)}}
    if user_id is None:
        return shared
    return {"$or": [{"user": user_id}, shared]}


class BuiltActivityRepository(BaseRepository[BuiltActivity]):
    """Repository for builder activities."""

    def __init__(self) -> None:
        super().__init__(BuiltActivity)

    async def list_visible(
        self,
        session: AsyncSession,
        user_id: UUID | None,
        *,
        is_admin: bool,
    ) -> Sequence[BuiltActivity]:
        """Live activities visible to the caller, newest first."""
        return await self.find(
            session,
            visibility_predicate(user_id, is_admin=is_admin),
            order_by=[BuiltActivity.created_at.desc(), BuiltActivity.id.desc()],
        )

    async def copy(
        self,
        session: AsyncSession,
        source: BuiltActivity,
        user_id: UUID | None,
    ) -> BuiltActivity:
        """Create a new activity with the content of source, owned by user_id."""
        duplicate = BuiltActivity(
            title=source.title,
            user=user_id,
            visibility=source.visibility,
            activity_type=source.activity_type,
            description=source.description,
            display_icon=source.display_icon,
            disabled=source.disabled,
            new_doc_recommend=source.new_doc_recommend,
            flows_list=deepcopy(source.flows_list),
        )
        duplicate = await self.create(session, duplicate)
        self._logger.info(
            "Copied built activity",
            extra={"source_id": str(source.id), "id": str(duplicate.id)},
        )
        return duplicate


class UserActivityStateRepository(BaseRepository[UserActivityState]):
    """Repository for per-user activity progress."""

    def __init__(self) -> None:
        super().__init__(UserActivityState)

    async def list_for_user(
        self,
        session: AsyncSession,
        user_id: UUID,
    ) -> Sequence[UserActivityState]:
        return await self.find(
            session,
            {"userId": user_id},
            order_by=[UserActivityState.created_at.asc(), UserActivityState.id.asc()],
        )


class BuiltActivityVersionRepository(BaseRepository[BuiltActivityVersion]):
    """Repository for built activity snapshots."""

    def __init__(self) -> None:
        super().__init__(BuiltActivityVersion)


# Factory functions for dependency injection
_built_activity_repository: BuiltActivityRepository | None = None
_user_activity_state_repository: UserActivityStateRepository | None = None
_built_activity_version_repository: BuiltActivityVersionRepository | None = None


def get_built_activity_repository() -> BuiltActivityRepository:
    """Get the shared BuiltActivityRepository instance."""
    global _built_activity_repository
    if _built_activity_repository is None:
        _built_activity_repository = BuiltActivityRepository()
    return _built_activity_repository


def get_user_activity_state_repository() -> UserActivityStateRepository:
    """Get the shared UserActivityStateRepository instance."""
    global _user_activity_state_repository
    if _user_activity_state_repository is None:
        _user_activity_state_repository = UserActivityStateRepository()
    return _user_activity_state_repository


def get_built_activity_version_repository() -> BuiltActivityVersionRepository:
    """Get the shared BuiltActivityVersionRepository instance."""
    global _built_activity_version_repository
    if _built_activity_version_repository is None:
        _built_activity_version_repository = BuiltActivityVersionRepository()
    return _built_activity_version_repository
