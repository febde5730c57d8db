"""Mutation resolvers for the GraphQL API.

Every mutation returns a ``<Name>Payload`` union: the success type, or a
``MutationError`` for expected failures (invalid input, unknown record,
caller not allowed). Storage failures roll the session back, are logged with
their traceback, and come back as ``INTERNAL_ERROR``.

Provides:
- submitGoogleDocVersion: store a document version
- storeGoogleDoc / deleteGoogleDoc: register or retire a document
- storePrompt / storePrompts / storePromptRun: prompt templates and executed runs
- addOrUpdateBuiltActivity / copyBuiltActivity / deleteBuiltActivity: builder activities
- storeBuiltActivityVersion: snapshot a built activity
- updateUserActivityState: per-user activity progress
- storeDocTimeline: a user's review timeline of a document
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from uuid import UUID

import strawberry
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from strawberry.types import Info

from writing_service.features.activities.models import (
    ActivityVisibility,
    BuiltActivity,
    BuiltActivityVersion,
)
from writing_service.features.activities.repository import (
    SHARED_VISIBILITIES,
    get_built_activity_repository,
    get_built_activity_version_repository,
    get_user_activity_state_repository,
)
from writing_service.features.activities.schemas import (
    BuiltActivityUpsert,
    UserActivityStateUpsert,
)
from writing_service.features.activities.steps import dump_flows
from writing_service.features.documents.models import DocVersion
from writing_service.features.documents.repository import (
    get_doc_version_repository,
    get_google_doc_repository,
)
from writing_service.features.documents.schemas import DocVersionCreate, GoogleDocUpsert
from writing_service.features.graphql.context import GraphQLContext, UserRole
from writing_service.features.graphql.resolvers.helpers import (
    id_or_new,
    input_to_data,
    not_a_uuid,
    storage_failure,
    to_columns,
    validation_failure,
)
from writing_service.features.graphql.types.activities import (
    BuiltActivityInput,
    BuiltActivityPayload,
    BuiltActivitySuccess,
    BuiltActivityType,
    BuiltActivityVersionPayload,
    BuiltActivityVersionSuccess,
    BuiltActivityVersionType,
    DeleteBuiltActivityPayload,
    DeleteBuiltActivitySuccess,
    UserActivityStatePayload,
    UserActivityStateSuccess,
    UserActivityStateType,
)
from writing_service.features.graphql.types.base import MutationError, MutationErrorCode
from writing_service.features.graphql.types.documents import (
    DocVersionPayload,
    DocVersionSuccess,
    DocVersionType,
    GoogleDocInput,
    GoogleDocPayload,
    GoogleDocSuccess,
    GoogleDocType,
    GoogleDocVersionInput,
)
from writing_service.features.graphql.types.prompts import (
    AiPromptStepInput,
    AiStepInput,
    PromptInput,
    PromptPayload,
    PromptRunPayload,
    PromptRunSuccess,
    PromptRunType,
    PromptsPayload,
    PromptsSuccess,
    PromptSuccess,
    PromptType,
)
from writing_service.features.graphql.types.timelines import (
    DocTimelineInput,
    DocTimelinePayload,
    DocTimelineSuccess,
    DocTimelineType,
)
from writing_service.features.prompts.models import PromptRun
from writing_service.features.prompts.repository import (
    get_prompt_repository,
    get_prompt_run_repository,
)
from writing_service.features.prompts.schemas import PromptRunCreate, PromptsUpsert, PromptUpsert
from writing_service.features.timelines.repository import get_doc_timeline_repository
from writing_service.features.timelines.schemas import DocTimelineUpsert

logger = logging.getLogger(__name__)

Authorize = Callable[[GraphQLContext, BuiltActivity], bool]

_INTENTION_FIELDS = {"session_intention", "document_intention", "day_intention"}


# ============================================================================
# Authorization
# ============================================================================


def author_or_admin(ctx: GraphQLContext, activity: BuiltActivity) -> bool:
    """Default authorization for activity updates."""
    if ctx.is_admin:
        return True
    return ctx.user_id is not None and activity.user == ctx.user_id


# ============================================================================
# Documents
# ============================================================================


async def submit_google_doc_version_mutation(
    info: Info[GraphQLContext, None],
    google_doc_data: GoogleDocVersionInput,
) -> DocVersionPayload:
    """Store a new version of a document."""
    ctx = info.context
    try:
        data = DocVersionCreate.model_validate(input_to_data(google_doc_data))
    except ValidationError as exc:
        return validation_failure(exc)

    try:
        version = DocVersion(**to_columns(data, json_fields=_INTENTION_FIELDS | {"chat_log"}))
        version = await get_doc_version_repository().create(ctx.session, version)
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.submit_google_doc_version")

    logger.info("Stored doc version", extra={"doc_id": data.doc_id, "id": str(version.id)})
    return DocVersionSuccess(doc_version=DocVersionType.from_model(version))


async def store_google_doc_mutation(
    info: Info[GraphQLContext, None],
    google_doc: GoogleDocInput,
) -> GoogleDocPayload:
    """Register a document for a user, or update the registration."""
    ctx = info.context
    try:
        data = GoogleDocUpsert.model_validate(input_to_data(google_doc))
    except ValidationError as exc:
        return validation_failure(exc)

    values = to_columns(
        data,
        json_fields={"document_intention", "current_day_intention"},
        exclude={"google_doc_id", "user"},
        exclude_unset=True,
    )
    try:
        doc, created = await get_google_doc_repository().upsert(
            ctx.session,
            {"googleDocId": data.google_doc_id, "user": data.user},
            values,
        )
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.store_google_doc")

    logger.info(
        "Stored google doc",
        extra={"google_doc_id": data.google_doc_id, "was_created": created},
    )
    return GoogleDocSuccess(google_doc=GoogleDocType.from_model(doc))


async def delete_google_doc_mutation(
    info: Info[GraphQLContext, None],
    google_doc_id: str,
    user_id: strawberry.ID,
) -> GoogleDocPayload:
    """Soft delete a user's registration of a document."""
    ctx = info.context
    try:
        user_uuid = UUID(str(user_id))
    except ValueError:
        return not_a_uuid("userId")

    repo = get_google_doc_repository()
    try:
        doc = await repo.find_for_user(ctx.session, google_doc_id, user_uuid)
        if doc is None:
            return MutationError(
                code=MutationErrorCode.NOT_FOUND,
                message=f"Google doc {google_doc_id} not found",
                field="googleDocId",
            )
        await repo.soft_delete(ctx.session, doc)
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.delete_google_doc")

    return GoogleDocSuccess(google_doc=GoogleDocType.from_model(doc))


# ============================================================================
# Prompts
# ============================================================================


async def store_prompt_mutation(
    info: Info[GraphQLContext, None],
    prompt: PromptInput,
) -> PromptPayload:
    """Create or update a prompt template.

    A missing or malformed id stores the prompt under a new id.
    """
    ctx = info.context
    try:
        data = PromptUpsert.model_validate(input_to_data(prompt))
    except ValidationError as exc:
        return validation_failure(exc)

    prompt_id = id_or_new(data.id)
    values = to_columns(
        data,
        json_fields={"ai_prompt_steps"},
        exclude={"id"},
        exclude_unset=True,
    )
    try:
        stored, created = await get_prompt_repository().upsert(
            ctx.session, {"_id": prompt_id}, values
        )
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.store_prompt")

    logger.info("Stored prompt", extra={"id": str(prompt_id), "was_created": created})
    return PromptSuccess(prompt=PromptType.from_model(stored))


async def store_prompts_mutation(
    info: Info[GraphQLContext, None],
    prompts: list[PromptInput],
) -> PromptsPayload:
    """Create or update several prompt templates and return every prompt.

    All prompts are validated before any is written, and they are stored in
    one transaction.
    """
    ctx = info.context
    try:
        data = PromptsUpsert.model_validate({"prompts": input_to_data(prompts)})
    except ValidationError as exc:
        return validation_failure(exc)

    repo = get_prompt_repository()
    try:
        for item in data.prompts:
            values = to_columns(
                item,
                json_fields={"ai_prompt_steps"},
                exclude={"id"},
                exclude_unset=True,
            )
            await repo.upsert(ctx.session, {"_id": id_or_new(item.id)}, values)
        await ctx.session.commit()
        stored = await repo.list_all(ctx.session)
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.store_prompts")

    logger.info("Stored prompts", extra={"count": len(data.prompts)})
    return PromptsSuccess(prompts=[PromptType.from_model(prompt) for prompt in stored])


async def store_prompt_run_mutation(
    info: Info[GraphQLContext, None],
    google_doc_id: str,
    user: strawberry.ID,
    ai_prompt_steps: list[AiPromptStepInput],
    ai_steps: list[AiStepInput],
) -> PromptRunPayload:
    """Record prompt steps executed against a document."""
    ctx = info.context
    try:
        data = PromptRunCreate.model_validate(
            {
                "google_doc_id": google_doc_id,
                "user": user,
                "ai_prompt_steps": input_to_data(ai_prompt_steps),
                "ai_steps": input_to_data(ai_steps),
            }
        )
    except ValidationError as exc:
        return validation_failure(exc)

    try:
        run = PromptRun(**to_columns(data, json_fields={"ai_prompt_steps", "ai_steps"}))
        run = await get_prompt_run_repository().create(ctx.session, run)
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.store_prompt_run")

    return PromptRunSuccess(prompt_run=PromptRunType.from_model(run))


# ============================================================================
# Activities
# ============================================================================


def add_or_update_built_activity(authorize: Authorize = author_or_admin) -> Any:
    """Build the ``addOrUpdateBuiltActivity`` mutation field.

    Args:
        authorize: Decides whether the caller may update an existing
            activity. EDITABLE activities may be updated regardless.

    Returns:
        A Strawberry mutation field
    """

    async def resolve(
        info: Info[GraphQLContext, None],
        activity: BuiltActivityInput,
    ) -> BuiltActivityPayload:
        ctx = info.context
        try:
            data = BuiltActivityUpsert.model_validate(input_to_data(activity))
        except ValidationError as exc:
            return validation_failure(exc)

        activity_id = id_or_new(data.id)
        values = to_columns(data, exclude={"id", "flows_list"}, exclude_unset=True)
        if "flows_list" in data.model_fields_set:
            values["flows_list"] = dump_flows(data.flows_list)

        repo = get_built_activity_repository()
        try:
            existing = await repo.get(ctx.session, activity_id)
            if existing is None:
                values.setdefault("user", ctx.user_id)
                stored = await repo.create(ctx.session, BuiltActivity(id=activity_id, **values))
            else:
                if not authorize(ctx, existing) and (
                    existing.visibility != ActivityVisibility.EDITABLE.value
                ):
                    logger.info(
                        "Built activity update refused",
                        extra={"id": str(activity_id), "user_id": str(ctx.user_id)},
                    )
                    return MutationError(
                        code=MutationErrorCode.UNAUTHORIZED,
                        message="Not allowed to update this activity",
                        field="id",
                    )
                stored = await repo.update(ctx.session, existing, values)
            await ctx.session.commit()
        except SQLAlchemyError:
            return await storage_failure(ctx, "graphql.add_or_update_built_activity")

        return BuiltActivitySuccess(built_activity=BuiltActivityType.from_model(stored))

    return strawberry.mutation(
        resolver=resolve,
        description="Create a built activity or update an existing one",
    )


async def copy_built_activity_mutation(
    info: Info[GraphQLContext, None],
    activity_id_to_copy: strawberry.ID,
) -> BuiltActivityPayload:
    """Copy an activity the caller can see into a new one owned by the caller.

    Callers without a role may not copy. Activities the caller cannot see
    are reported as not found.
    """
    ctx = info.context
    if ctx.user_role is None:
        return MutationError(
            code=MutationErrorCode.UNAUTHORIZED,
            message="Only signed-in users may copy activities",
        )

    try:
        activity_id = UUID(str(activity_id_to_copy))
    except ValueError:
        return not_a_uuid("activityIdToCopy")

    repo = get_built_activity_repository()
    try:
        source = await repo.get(ctx.session, activity_id)
        if (
            source is None
            or source.deleted
            or not (author_or_admin(ctx, source) or source.visibility in SHARED_VISIBILITIES)
        ):
            return MutationError(
                code=MutationErrorCode.NOT_FOUND,
                message=f"Activity {activity_id} not found",
                field="activityIdToCopy",
            )
        duplicate = await repo.copy(ctx.session, source, ctx.user_id)
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.copy_built_activity")

    return BuiltActivitySuccess(built_activity=BuiltActivityType.from_model(duplicate))


async def store_built_activity_version_mutation(
    info: Info[GraphQLContext, None],
    activity: BuiltActivityInput,
) -> BuiltActivityVersionPayload:
    """Save a snapshot of a built activity, timestamped now."""
    ctx = info.context
    try:
        data = BuiltActivityUpsert.model_validate(input_to_data(activity))
    except ValidationError as exc:
        return validation_failure(exc)

    snapshot = data.model_dump(mode="json", exclude={"flows_list"})
    snapshot["flows_list"] = dump_flows(data.flows_list)
    try:
        version = await get_built_activity_version_repository().create(
            ctx.session, BuiltActivityVersion(activity=snapshot)
        )
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.store_built_activity_version")

    logger.info(
        "Stored built activity version",
        extra={"id": str(version.id), "activity_id": data.id},
    )
    return BuiltActivityVersionSuccess(
        built_activity_version=BuiltActivityVersionType.from_model(version)
    )


async def delete_built_activity_mutation(
    info: Info[GraphQLContext, None],
    activity_id_to_delete: strawberry.ID,
) -> DeleteBuiltActivityPayload:
    """Soft delete an activity.

    Admins may delete any activity, content managers only their own.
    """
    ctx = info.context
    if not ctx.has_role(UserRole.ADMIN, UserRole.CONTENT_MANAGER):
        return MutationError(
            code=MutationErrorCode.UNAUTHORIZED,
            message="Only admins and content managers may delete activities",
        )

    try:
        activity_id = UUID(str(activity_id_to_delete))
    except ValueError:
        return not_a_uuid("activityIdToDelete")

    repo = get_built_activity_repository()
    try:
        activity = await repo.get(ctx.session, activity_id)
        if activity is None or activity.deleted:
            return MutationError(
                code=MutationErrorCode.NOT_FOUND,
                message=f"Activity {activity_id} not found",
                field="activityIdToDelete",
            )
        if not ctx.is_admin and activity.user != ctx.user_id:
            return MutationError(
                code=MutationErrorCode.UNAUTHORIZED,
                message="Not allowed to delete this activity",
                field="activityIdToDelete",
            )
        await repo.soft_delete(ctx.session, activity)
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.delete_built_activity")

    return DeleteBuiltActivitySuccess(activity_id=strawberry.ID(str(activity_id)))


async def update_user_activity_state_mutation(
    info: Info[GraphQLContext, None],
    user_id: strawberry.ID,
    activity_id: strawberry.ID,
    google_doc_id: str,
    metadata: str,
) -> UserActivityStatePayload:
    """Store a user's progress through an activity on a document."""
    ctx = info.context
    try:
        data = UserActivityStateUpsert.model_validate(
            {
                "user_id": user_id,
                "activity_id": activity_id,
                "google_doc_id": google_doc_id,
                "metadata": metadata,
            }
        )
    except ValidationError as exc:
        return validation_failure(exc)

    try:
        state, _ = await get_user_activity_state_repository().upsert(
            ctx.session,
            {
                "userId": data.user_id,
                "activityId": data.activity_id,
                "googleDocId": data.google_doc_id,
            },
            {"state_metadata": data.metadata, "deleted": False},
        )
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.update_user_activity_state")

    return UserActivityStateSuccess(user_activity_state=UserActivityStateType.from_model(state))


# ============================================================================
# Timelines
# ============================================================================


async def store_doc_timeline_mutation(
    info: Info[GraphQLContext, None],
    doc_timeline: DocTimelineInput,
) -> DocTimelinePayload:
    """Create or replace a user's timeline of a document."""
    ctx = info.context
    try:
        data = DocTimelineUpsert.model_validate(input_to_data(doc_timeline))
    except ValidationError as exc:
        return validation_failure(exc)

    values = to_columns(data, json_fields={"timeline_points"}, exclude={"doc_id", "user"})
    values["deleted"] = False
    try:
        timeline, created = await get_doc_timeline_repository().upsert(
            ctx.session,
            {"docId": data.doc_id, "user": data.user},
            values,
        )
        await ctx.session.commit()
    except SQLAlchemyError:
        return await storage_failure(ctx, "graphql.store_doc_timeline")

    logger.info(
        "Stored doc timeline",
        extra={
            "doc_id": data.doc_id,
            "points": len(data.timeline_points),
            "was_created": created,
        },
    )
    return DocTimelineSuccess(doc_timeline=DocTimelineType.from_model(timeline))


@strawberry.type(description="Root mutation type")
class Mutation:
    """GraphQL Mutation resolvers."""

    submit_google_doc_version = strawberry.mutation(
        resolver=submit_google_doc_version_mutation,
        description="Store a new version of a document",
    )
    store_google_doc = strawberry.mutation(
        resolver=store_google_doc_mutation,
        description="Register a document for a user or update it",
    )
    delete_google_doc = strawberry.mutation(
        resolver=delete_google_doc_mutation,
        description="Soft delete a user's document",
    )
    store_prompt = strawberry.mutation(
        resolver=store_prompt_mutation,
        description="Create or update a prompt template",
    )
    store_prompts = strawberry.mutation(
        resolver=store_prompts_mutation,
        description="Create or update several prompt templates",
    )
    store_prompt_run = strawberry.mutation(
        resolver=store_prompt_run_mutation,
        description="Record an executed prompt run",
    )
    add_or_update_built_activity = add_or_update_built_activity()
    copy_built_activity = strawberry.mutation(
        resolver=copy_built_activity_mutation,
        description="Copy a built activity into a new one owned by the caller",
    )
    store_built_activity_version = strawberry.mutation(
        resolver=store_built_activity_version_mutation,
        description="Save a snapshot of a built activity",
    )
    delete_built_activity = strawberry.mutation(
        resolver=delete_built_activity_mutation,
        description="Soft delete a built activity",
    )
    update_user_activity_state = strawberry.mutation(
        resolver=update_user_activity_state_mutation,
        description="Store a user's progress through an activity",
    )
    store_doc_timeline = strawberry.mutation(
        resolver=store_doc_timeline_mutation,
        description="Create or replace a user's timeline of a document",
    )


__all__ = [
    "Authorize",
    "Mutation",
    "add_or_update_built_activity",
    "author_or_admin",
]
