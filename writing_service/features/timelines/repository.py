"""Repositories for the timelines feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from writing_service.core.database.repository import BaseRepository
from writing_service.features.timelines.models import DocTimeline

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


class DocTimelineRepository(BaseRepository[DocTimeline]):
    """Repository for document timelines."""

    def __init__(self) -> None:
        super().__init__(DocTimeline)

    async def find_for_user(
        self,
        session: AsyncSession,
        doc_id: str,
        user_id: UUID,
    ) -> DocTimeline | None:
        return await self.find_one(session, {"docId": doc_id, "user": user_id})


# Factory functions for dependency injection
_doc_timeline_repository: DocTimelineRepository | None = None


def get_doc_timeline_repository() -> DocTimelineRepository:
    """Get the shared DocTimelineRepository instance."""
    global _doc_timeline_repository
    if _doc_timeline_repository is None:
        _doc_timeline_repository = DocTimelineRepository()
    return _doc_timeline_repository
