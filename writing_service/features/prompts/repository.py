"""Repositories for the prompts feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from writing_service.core.database.repository import BaseRepository
from writing_service.features.prompts.models import Prompt, PromptRun

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


class PromptRepository(BaseRepository[Prompt]):
    """Repository for Prompt templates."""

    def __init__(self) -> None:
        super().__init__(Prompt)

    async def list_all(self, session: AsyncSession) -> Sequence[Prompt]:
        """Every live prompt, oldest first."""
        return await self.find(session, order_by=[Prompt.created_at.asc(), Prompt.id.asc()])


class PromptRunRepository(BaseRepository[PromptRun]):
    """Repository for PromptRun records."""

    def __init__(self) -> None:
        super().__init__(PromptRun)

    async def list_for_user(
        self,
        session: AsyncSession,
        user_id: UUID,
        google_doc_id: str | None = None,
    ) -> Sequence[PromptRun]:
        """Runs of a user, optionally narrowed to one document, newest first."""
        query: dict[str, object] = {"user": user_id}
        if google_doc_id:
            query["googleDocId"] = google_doc_id
        return await self.find(
            session,
            query,
            order_by=[PromptRun.created_at.desc(), PromptRun.id.desc()],
        )


# Factory functions for dependency injection
_prompt_repository: PromptRepository | None = None
_prompt_run_repository: PromptRunRepository | None = None


def get_prompt_repository() -> PromptRepository:
    """Get the shared PromptRepository instance."""
    global _prompt_repository
    if _prompt_repository is None:
        _prompt_repository = PromptRepository()
    return _prompt_repository


def get_prompt_run_repository() -> PromptRunRepository:
    """Get the shared PromptRunRepository instance."""
    global _prompt_run_repository
    if _prompt_run_repository is None:
        _prompt_run_repository = PromptRunRepository()
    return _prompt_run_repository
