"""Repositories for the documents feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from writing_service.core.database.repository import BaseRepository
from writing_service.features.documents.models import DocVersion, GoogleDoc

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


class GoogleDocRepository(BaseRepository[GoogleDoc]):
    """Repository for GoogleDoc registrations."""

    def __init__(self) -> None:
        super().__init__(GoogleDoc)

    async def find_for_user(
        self,
        session: AsyncSession,
        google_doc_id: str,
        user_id: UUID,
    ) -> GoogleDoc | None:
        """Live registration of a document by a user."""
        return await self.find_one(
            session, {"googleDocId": google_doc_id, "user": user_id}
        )

    async def list_admin_docs(self, session: AsyncSession) -> Sequence[GoogleDoc]:
        """Live documents flagged as admin documents, newest first."""
        return await self.find(
            session,
            {"admin": True},
            order_by=[GoogleDoc.created_at.desc(), GoogleDoc.id.desc()],
        )


class DocVersionRepository(BaseRepository[DocVersion]):
    """Repository for DocVersion snapshots."""

    def __init__(self) -> None:
        super().__init__(DocVersion)

    async def most_recent(
        self,
        session: AsyncSession,
        google_doc_id: str,
    ) -> DocVersion | None:
        """Newest live version of a document by creation time."""
        version = await self.find_one(
            session,
            {"docId": google_doc_id},
            order_by=[DocVersion.created_at.desc(), DocVersion.id.desc()],
        )
        self._lazy.debug(
            lambda: f"db.most_recent({google_doc_id!r}) -> {version.id if version else None}"
        )
        return version

    async def list_for_doc(
        self,
        session: AsyncSession,
        google_doc_id: str,
    ) -> Sequence[DocVersion]:
        """All live versions of a document, oldest first."""
        return await self.find(
            session,
            {"docId": google_doc_id},
            order_by=[DocVersion.created_at.asc(), DocVersion.id.asc()],
        )

    async def list_by_ids(
        self,
        session: AsyncSession,
        ids: Sequence[UUID],
    ) -> Sequence[DocVersion]:
        """Live versions with the given ids, oldest first."""
        if not ids:
            return []
        return await self.find(
            session,
            {"_id": {"$in": list(ids)}},
            order_by=[DocVersion.created_at.asc(), DocVersion.id.asc()],
        )


# Factory functions for dependency injection
_google_doc_repository: GoogleDocRepository | None = None
_doc_version_repository: DocVersionRepository | None = None


def get_google_doc_repository() -> GoogleDocRepository:
    """Get the shared GoogleDocRepository instance."""
    global _google_doc_repository
    if _google_doc_repository is None:
        _google_doc_repository = GoogleDocRepository()
    return _google_doc_repository


def get_doc_version_repository() -> DocVersionRepository:
    """Get the shared DocVersionRepository instance."""
    global _doc_version_repository
    if _doc_version_repository is None:
        _doc_version_repository = DocVersionRepository()
    return _doc_version_repository
