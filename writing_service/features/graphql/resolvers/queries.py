"""Query resolvers for the GraphQL API.

Paginated lists (all arguments handled by ``find_all``):
- docVersions, googleDocs, prompts, promptRuns, builtActivities
- fetchBuiltActivityVersions: saved activity snapshots

Plain fetches:
- fetchMostRecentVersion(googleDocId): newest version of a document
- fetchGoogleDocVersions(googleDocId): every version of a document
- fetchVersionsById(ids): versions by id
- fetchAdminGoogleDocs: documents flagged as admin documents
- fetchPromptRuns(userId, googleDocId): runs of a user
- fetchUserActivityStates(userId): activity progress of a user
- fetchBuiltActivities: activities visible to the caller
- fetchDocTimeline(googleDocId, userId): a user's timeline of a document
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

import strawberry
from strawberry.types import Info

from writing_service.core.pagination import Connection
from writing_service.features.activities.repository import (
    SHARED_VISIBILITIES,
    get_built_activity_repository,
    get_built_activity_version_repository,
    get_user_activity_state_repository,
)
from writing_service.features.documents.repository import (
    get_doc_version_repository,
    get_google_doc_repository,
)
from writing_service.features.graphql.connection import find_all
from writing_service.features.graphql.context import GraphQLContext
from writing_service.features.graphql.error_handler import query_errors
from writing_service.features.graphql.resolvers.helpers import parse_id_argument
from writing_service.features.graphql.types.activities import (
    BuiltActivityType,
    BuiltActivityVersionType,
    UserActivityStateType,
)
from writing_service.features.graphql.types.documents import DocVersionType, GoogleDocType
from writing_service.features.graphql.types.prompts import PromptRunType, PromptType
from writing_service.features.graphql.types.timelines import DocTimelineType
from writing_service.features.prompts.repository import (
    get_prompt_repository,
    get_prompt_run_repository,
)
from writing_service.features.timelines.repository import get_doc_timeline_repository

logger = logging.getLogger(__name__)

UserIdArg = Annotated[strawberry.ID, strawberry.argument(description="User id")]
GoogleDocIdArg = Annotated[str, strawberry.argument(description="Editor document id")]


def is_visible_activity(activity: Any, ctx: GraphQLContext) -> bool:
    """Admins see everything; others see their own and shared activities."""
    if ctx.is_admin:
        return True
    if ctx.user_id is not None and activity.user == ctx.user_id:
        return True
    return activity.visibility in SHARED_VISIBILITIES


def drop_invisible_activities(page: Connection[Any], ctx: GraphQLContext) -> Connection[Any]:
    edges = [edge for edge in page.edges if is_visible_activity(edge.node, ctx)]
    if len(edges) == len(page.edges):
        return page
    return Connection(edges=edges, page_info=page.page_info)


@strawberry.type(description="Root query type")
class Query:
    """GraphQL Query resolvers."""

    doc_versions = find_all(
        get_doc_version_repository(),
        DocVersionType,
        DocVersionType.from_model,
        description="List document versions with cursor pagination",
    )
    google_docs = find_all(
        get_google_doc_repository(),
        GoogleDocType,
        GoogleDocType.from_model,
        description="List registered documents with cursor pagination",
    )
    prompts = find_all(
        get_prompt_repository(),
        PromptType,
        PromptType.from_model,
        description="List prompt templates with cursor pagination",
    )
    prompt_runs = find_all(
        get_prompt_run_repository(),
        PromptRunType,
        PromptRunType.from_model,
        description="List prompt runs with cursor pagination",
    )
    built_activities = find_all(
        get_built_activity_repository(),
        BuiltActivityType,
        BuiltActivityType.from_model,
        filter_invalid=drop_invisible_activities,
        description="List built activities visible to the caller with cursor pagination",
    )
    fetch_built_activity_versions = find_all(
        get_built_activity_version_repository(),
        BuiltActivityVersionType,
        BuiltActivityVersionType.from_model,
        description="List saved built activity versions with cursor pagination",
    )

    @strawberry.field(description="Newest version of a document, or null")
    async def fetch_most_recent_version(
        self,
        info: Info[GraphQLContext, None],
        google_doc_id: GoogleDocIdArg,
    ) -> DocVersionType | None:
        ctx = info.context
        with query_errors("graphql.fetch_most_recent_version", "DocVersion"):
            version = await get_doc_version_repository().most_recent(ctx.session, google_doc_id)
        return DocVersionType.from_model(version) if version else None

    @strawberry.field(description="Every version of a document, oldest first")
    async def fetch_google_doc_versions(
        self,
        info: Info[GraphQLContext, None],
        google_doc_id: GoogleDocIdArg,
    ) -> list[DocVersionType]:
        ctx = info.context
        with query_errors("graphql.fetch_google_doc_versions", "DocVersion"):
            versions = await get_doc_version_repository().list_for_doc(ctx.session, google_doc_id)
        return [DocVersionType.from_model(version) for version in versions]

    @strawberry.field(description="Document versions with the given ids; unknown ids are skipped")
    async def fetch_versions_by_id(
        self,
        info: Info[GraphQLContext, None],
        ids: list[strawberry.ID],
    ) -> list[DocVersionType]:
        ctx = info.context
        version_ids = [parse_id_argument(value, "ids") for value in ids]
        with query_errors("graphql.fetch_versions_by_id", "DocVersion"):
            versions = await get_doc_version_repository().list_by_ids(ctx.session, version_ids)
        return [DocVersionType.from_model(version) for version in versions]

    @strawberry.field(description="Documents flagged as admin documents")
    async def fetch_admin_google_docs(
        self,
        info: Info[GraphQLContext, None],
    ) -> list[GoogleDocType]:
        ctx = info.context
        with query_errors("graphql.fetch_admin_google_docs", "GoogleDoc"):
            docs = await get_google_doc_repository().list_admin_docs(ctx.session)
        return [GoogleDocType.from_model(doc) for doc in docs]

    @strawberry.field(description="Prompt runs of a user, newest first")
    async def fetch_prompt_runs(
        self,
        info: Info[GraphQLContext, None],
        user_id: UserIdArg,
        google_doc_id: str | None = None,
    ) -> list[PromptRunType]:
        ctx = info.context
        user_uuid = parse_id_argument(user_id, "userId")
        with query_errors("graphql.fetch_prompt_runs", "PromptRun"):
            runs = await get_prompt_run_repository().list_for_user(
                ctx.session, user_uuid, google_doc_id
            )
        return [PromptRunType.from_model(run) for run in runs]

    @strawberry.field(description="Activity progress of a user")
    async def fetch_user_activity_states(
        self,
        info: Info[GraphQLContext, None],
        user_id: UserIdArg,
    ) -> list[UserActivityStateType]:
        ctx = info.context
        user_uuid = parse_id_argument(user_id, "userId")
        with query_errors("graphql.fetch_user_activity_states", "UserActivityState"):
            states = await get_user_activity_state_repository().list_for_user(
                ctx.session, user_uuid
            )
        return [UserActivityStateType.from_model(state) for state in states]

    @strawberry.field(description="Built activities visible to the caller")
    async def fetch_built_activities(
        self,
        info: Info[GraphQLContext, None],
    ) -> list[BuiltActivityType]:
        ctx = info.context
        with query_errors("graphql.fetch_built_activities", "BuiltActivity"):
            activities = await get_built_activity_repository().list_visible(
                ctx.session, ctx.user_id, is_admin=ctx.is_admin
            )
        logger.debug("Fetched %d built activities", len(activities))
        return [BuiltActivityType.from_model(activity) for activity in activities]

    @strawberry.field(description="A user's timeline of a document, or null")
    async def fetch_doc_timeline(
        self,
        info: Info[GraphQLContext, None],
        google_doc_id: GoogleDocIdArg,
        user_id: UserIdArg,
    ) -> DocTimelineType | None:
        ctx = info.context
        user_uuid = parse_id_argument(user_id, "userId")
        with query_errors("graphql.fetch_doc_timeline", "DocTimeline"):
            timeline = await get_doc_timeline_repository().find_for_user(
                ctx.session, google_doc_id, user_uuid
            )
        return DocTimelineType.from_model(timeline) if timeline else None


__all__ = ["Query", "drop_invisible_activities", "is_visible_activity"]
