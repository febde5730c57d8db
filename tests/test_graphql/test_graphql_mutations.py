"""Tests for GraphQL mutation resolvers."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import quote
from uuid import UUID, uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from writing_service.features.activities.models import (
    BuiltActivity,
    BuiltActivityVersion,
    UserActivityState,
)
from writing_service.features.documents.models import DocVersion, GoogleDoc
from writing_service.features.graphql.context import GraphQLContext, UserRole
from writing_service.features.graphql.schema import schema
from writing_service.features.prompts.models import Prompt

ERROR_FIELDS = "... on MutationError { code message field }"

SUBMIT_VERSION = """
    mutation Submit($data: GoogleDocVersionInput!) {
        submitGoogleDocVersion(googleDocData: $data) {
            __typename
            ... on DocVersionSuccess {
                docVersion { id docId plainText chatLog { sender message } sessionIntention { description } }
            }
            %s
        }
    }
""" % ERROR_FIELDS

STORE_GOOGLE_DOC = """
    mutation Store($doc: GoogleDocInput!) {
        storeGoogleDoc(googleDoc: $doc) {
            __typename
            ... on GoogleDocSuccess { googleDoc { id googleDocId user title service deleted } }
            %s
        }
    }
""" % ERROR_FIELDS

DELETE_GOOGLE_DOC = """
    mutation Delete($googleDocId: String!, $userId: ID!) {
        deleteGoogleDoc(googleDocId: $googleDocId, userId: $userId) {
            __typename
            ... on GoogleDocSuccess { googleDoc { id deleted } }
            %s
        }
    }
""" % ERROR_FIELDS

STORE_PROMPT = """
    mutation StorePrompt($prompt: PromptInput!) {
        storePrompt(prompt: $prompt) {
            __typename
            ... on PromptSuccess {
                prompt { id title aiPromptSteps { outputDataType prompts { promptText includeEssay } } }
            }
            %s
        }
    }
""" % ERROR_FIELDS

STORE_PROMPT_RUN = """
    mutation StoreRun(
        $googleDocId: String!
        $user: ID!
        $aiPromptSteps: [AiPromptStepInput!]!
        $aiSteps: [AiStepInput!]!
    ) {
        storePromptRun(
            googleDocId: $googleDocId
            user: $user
            aiPromptSteps: $aiPromptSteps
            aiSteps: $aiSteps
        ) {
            __typename
            ... on PromptRunSuccess { promptRun { id googleDocId aiSteps { aiServiceResponse } } }
            %s
        }
    }
""" % ERROR_FIELDS

ADD_OR_UPDATE_ACTIVITY = """
    mutation Save($activity: BuiltActivityInput!) {
        addOrUpdateBuiltActivity(activity: $activity) {
            __typename
            ... on BuiltActivitySuccess {
                builtActivity {
                    id
                    title
                    user
                    visibility
                    flowsList {
                        name
                        steps {
                            __typename
                            ... on SystemMessageStep { stepId stepType message }
                            ... on RequestUserInputStep {
                                stepId
                                predefinedResponses { message jumpToStepId }
                            }
                            ... on PromptStep { stepId promptText }
                        }
                    }
                }
            }
            %s
        }
    }
""" % ERROR_FIELDS

DELETE_ACTIVITY = """
    mutation DeleteActivity($id: ID!) {
        deleteBuiltActivity(activityIdToDelete: $id) {
            __typename
            ... on DeleteBuiltActivitySuccess { activityId }
            %s
        }
    }
""" % ERROR_FIELDS

UPDATE_STATE = """
    mutation State($userId: ID!, $activityId: ID!, $googleDocId: String!, $metadata: String!) {
        updateUserActivityState(
            userId: $userId
            activityId: $activityId
            googleDocId: $googleDocId
            metadata: $metadata
        ) {
            __typename
            ... on UserActivityStateSuccess { userActivityState { id userId metadata } }
            %s
        }
    }
""" % ERROR_FIELDS


STORE_PROMPTS = """
    mutation StorePrompts($prompts: [PromptInput!]!) {
        storePrompts(prompts: $prompts) {
            __typename
            ... on PromptsSuccess { prompts { id title } }
            %s
        }
    }
""" % ERROR_FIELDS

COPY_ACTIVITY = """
    mutation Copy($id: ID!) {
        copyBuiltActivity(activityIdToCopy: $id) {
            __typename
            ... on BuiltActivitySuccess { builtActivity { id title user visibility } }
            %s
        }
    }
""" % ERROR_FIELDS

STORE_ACTIVITY_VERSION = """
    mutation Version($activity: BuiltActivityInput!) {
        storeBuiltActivityVersion(activity: $activity) {
            __typename
            ... on BuiltActivityVersionSuccess {
                builtActivityVersion {
                    id
                    versionTime
                    activity { id title flowsList { name steps { __typename } } }
                }
            }
            %s
        }
    }
""" % ERROR_FIELDS

ACTIVITY_VERSIONS_QUERY = """
    query Versions($filter: String) {
        fetchBuiltActivityVersions(limit: 10, filter: $filter) {
            edges { node { activity { title } } }
        }
    }
"""


async def run(query: str, ctx: GraphQLContext, **variables) -> dict:
    result = await schema.execute(query, variable_values=variables, context_value=ctx)
    assert result.errors is None, result.errors
    (payload,) = result.data.values()
    return payload


# ──────────────────────────────────────────────────────────────
# Documents
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_submit_google_doc_version(graphql_context, db_session) -> None:
    payload = await run(
        SUBMIT_VERSION,
        graphql_context,
        data={
            "docId": "doc-1",
            "plainText": "Hello",
            "chatLog": [{"sender": "USER", "message": "Help"}],
            "sessionIntention": {"description": "Finish intro"},
        },
    )

    assert payload["__typename"] == "DocVersionSuccess"
    version = payload["docVersion"]
    assert version["docId"] == "doc-1"
    assert version["chatLog"] == [{"sender": "USER", "message": "Help"}]
    assert version["sessionIntention"] == {"description": "Finish intro"}

    stored = await db_session.get(DocVersion, UUID(version["id"]))
    assert stored.session_intention["description"] == "Finish intro"


@pytest.mark.asyncio
async def test_submit_google_doc_version_requires_doc_id(graphql_context) -> None:
    payload = await run(
        SUBMIT_VERSION, graphql_context, data={"docId": "", "plainText": "Hello"}
    )

    assert payload["__typename"] == "MutationError"
    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["field"] == "doc_id"


@pytest.mark.asyncio
async def test_store_google_doc_upserts_per_user(graphql_context, db_session, user_id) -> None:
    doc = {"googleDocId": "g-1", "user": str(user_id), "title": "Draft"}

    created = await run(STORE_GOOGLE_DOC, graphql_context, doc=doc)
    updated = await run(
        STORE_GOOGLE_DOC,
        graphql_context,
        doc={**doc, "title": "Final", "service": "MICROSOFT_WORD"},
    )
    other_user = await run(STORE_GOOGLE_DOC, graphql_context, doc={**doc, "user": str(uuid4())})

    assert created["googleDoc"]["id"] == updated["googleDoc"]["id"]
    assert updated["googleDoc"]["title"] == "Final"
    assert updated["googleDoc"]["service"] == "MICROSOFT_WORD"
    assert other_user["googleDoc"]["id"] != created["googleDoc"]["id"]

    rows = (await db_session.execute(select(GoogleDoc))).scalars().all()
    assert len(rows) == 2


@pytest.mark.asyncio
async def test_store_google_doc_rejects_bad_user(graphql_context) -> None:
    payload = await run(
        STORE_GOOGLE_DOC, graphql_context, doc={"googleDocId": "g-1", "user": "nobody"}
    )

    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["field"] == "user"


@pytest.mark.asyncio
async def test_delete_google_doc(graphql_context, user_id) -> None:
    await run(STORE_GOOGLE_DOC, graphql_context, doc={"googleDocId": "g-1", "user": str(user_id)})

    deleted = await run(
        DELETE_GOOGLE_DOC, graphql_context, googleDocId="g-1", userId=str(user_id)
    )
    again = await run(DELETE_GOOGLE_DOC, graphql_context, googleDocId="g-1", userId=str(user_id))

    assert deleted["googleDoc"]["deleted"] is True
    assert again["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_google_doc_rejects_bad_user(graphql_context) -> None:
    payload = await run(DELETE_GOOGLE_DOC, graphql_context, googleDocId="g-1", userId="x")

    assert payload == {
        "__typename": "MutationError",
        "code": "VALIDATION_ERROR",
        "message": "userId must be a UUID",
        "field": "userId",
    }


# ──────────────────────────────────────────────────────────────
# Prompts
# ──────────────────────────────────────────────────────────────


PROMPT_STEP = {
    "prompts": [{"promptText": "Summarize", "includeEssay": True, "promptRole": "SYSTEM"}],
    "outputDataType": "JSON",
}


@pytest.mark.asyncio
async def test_store_prompt_creates_then_updates(graphql_context, db_session) -> None:
    created = await run(
        STORE_PROMPT,
        graphql_context,
        prompt={"title": "Summary", "aiPromptSteps": [PROMPT_STEP]},
    )
    prompt_id = created["prompt"]["id"]

    updated = await run(
        STORE_PROMPT, graphql_context, prompt={"id": prompt_id, "title": "Summary v2"}
    )

    assert created["prompt"]["aiPromptSteps"] == [
        {"outputDataType": "JSON", "prompts": [{"promptText": "Summarize", "includeEssay": True}]}
    ]
    assert updated["prompt"]["id"] == prompt_id
    assert updated["prompt"]["title"] == "Summary v2"
    assert len(updated["prompt"]["aiPromptSteps"]) == 1

    stored = await db_session.get(Prompt, UUID(prompt_id))
    assert stored.ai_prompt_steps[0]["prompts"][0]["prompt_role"] == "system"


@pytest.mark.asyncio
async def test_store_prompt_with_malformed_id_creates_new(graphql_context) -> None:
    payload = await run(
        STORE_PROMPT, graphql_context, prompt={"id": "not-a-uuid", "title": "Fresh"}
    )

    assert payload["__typename"] == "PromptSuccess"
    assert UUID(payload["prompt"]["id"])


@pytest.mark.asyncio
async def test_store_prompt_run(graphql_context, user_id) -> None:
    payload = await run(
        STORE_PROMPT_RUN,
        graphql_context,
        googleDocId="g-1",
        user=str(user_id),
        aiPromptSteps=[PROMPT_STEP],
        aiSteps=[{"aiServiceRequestParams": "{}", "aiServiceResponse": "Done"}],
    )

    assert payload["promptRun"]["googleDocId"] == "g-1"
    assert payload["promptRun"]["aiSteps"] == [{"aiServiceResponse": "Done"}]


@pytest.mark.asyncio
async def test_store_prompts_upserts_and_returns_every_prompt(graphql_context, db_session) -> None:
    existing = Prompt(title="Old", created_at=datetime(2024, 1, 1, tzinfo=UTC))
    db_session.add(existing)
    await db_session.commit()

    payload = await run(
        STORE_PROMPTS,
        graphql_context,
        prompts=[{"id": str(existing.id), "title": "Renamed"}, {"title": "New"}],
    )

    prompts = payload["prompts"]
    assert [prompt["title"] for prompt in prompts] == ["Renamed", "New"]
    assert prompts[0]["id"] == str(existing.id)


@pytest.mark.asyncio
async def test_store_prompts_writes_nothing_when_one_is_invalid(graphql_context, db_session) -> None:
    payload = await run(
        STORE_PROMPTS,
        graphql_context,
        prompts=[{"title": "Fine"}, {"title": ""}],
    )

    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["field"] == "prompts.1.title"
    assert (await db_session.execute(select(Prompt))).scalars().all() == []


# ──────────────────────────────────────────────────────────────
# Built activities
# ──────────────────────────────────────────────────────────────


FLOW = {
    "name": "Intro",
    "steps": [
        {"stepId": "a", "stepType": "SYSTEM_MESSAGE", "message": "Welcome"},
        {
            "stepId": "b",
            "stepType": "REQUEST_USER_INPUT",
            "message": "Ready?",
            "predefinedResponses": [{"message": "Yes", "jumpToStepId": "c"}],
        },
        {"stepId": "c", "stepType": "PROMPT", "promptText": "Review the essay"},
    ],
}


@pytest.mark.asyncio
async def test_create_activity_defaults_author_to_caller(graphql_context, user_id) -> None:
    payload = await run(
        ADD_OR_UPDATE_ACTIVITY,
        graphql_context,
        activity={"title": "Warmup", "flowsList": [FLOW]},
    )

    activity = payload["builtActivity"]
    assert activity["user"] == str(user_id)
    assert activity["visibility"] == "PRIVATE"
    steps = activity["flowsList"][0]["steps"]
    assert [step["__typename"] for step in steps] == [
        "SystemMessageStep",
        "RequestUserInputStep",
        "PromptStep",
    ]
    assert steps[0]["stepType"] == "SYSTEM_MESSAGE"
    assert steps[1]["predefinedResponses"] == [{"message": "Yes", "jumpToStepId": "c"}]
    assert steps[2]["promptText"] == "Review the essay"


@pytest.mark.asyncio
async def test_unknown_step_type_is_validation_error(graphql_context) -> None:
    payload = await run(
        ADD_OR_UPDATE_ACTIVITY,
        graphql_context,
        activity={"flowsList": [{"steps": [{"stepId": "a", "stepType": "DANCE"}]}]},
    )

    assert payload["code"] == "VALIDATION_ERROR"


@pytest.fixture
async def owned_activity(db_session, user_id) -> BuiltActivity:
    activity = BuiltActivity(title="Owned", user=user_id, visibility="PRIVATE")
    db_session.add(activity)
    await db_session.commit()
    return activity


@pytest.mark.asyncio
async def test_author_updates_activity(graphql_context, owned_activity) -> None:
    payload = await run(
        ADD_OR_UPDATE_ACTIVITY,
        graphql_context,
        activity={"id": str(owned_activity.id), "title": "Renamed"},
    )

    assert payload["builtActivity"]["id"] == str(owned_activity.id)
    assert payload["builtActivity"]["title"] == "Renamed"
    assert payload["builtActivity"]["flowsList"] == []


@pytest.mark.asyncio
async def test_stranger_cannot_update_private_activity(make_context, owned_activity) -> None:
    ctx = make_context(user_id=uuid4(), user_role=UserRole.USER)

    payload = await run(
        ADD_OR_UPDATE_ACTIVITY,
        ctx,
        activity={"id": str(owned_activity.id), "title": "Hijacked"},
    )

    assert payload["code"] == "UNAUTHORIZED"
    assert owned_activity.title == "Owned"


@pytest.mark.asyncio
async def test_stranger_updates_editable_activity(make_context, db_session, owned_activity) -> None:
    owned_activity.visibility = "EDITABLE"
    await db_session.commit()
    ctx = make_context(user_id=uuid4(), user_role=UserRole.USER)

    payload = await run(
        ADD_OR_UPDATE_ACTIVITY,
        ctx,
        activity={"id": str(owned_activity.id), "title": "Improved"},
    )

    assert payload["builtActivity"]["title"] == "Improved"


@pytest.mark.asyncio
async def test_admin_updates_any_activity(make_context, owned_activity) -> None:
    ctx = make_context(user_id=uuid4(), user_role=UserRole.ADMIN)

    payload = await run(
        ADD_OR_UPDATE_ACTIVITY,
        ctx,
        activity={"id": str(owned_activity.id), "visibility": "READ_ONLY"},
    )

    assert payload["builtActivity"]["visibility"] == "READ_ONLY"


@pytest.mark.asyncio
async def test_plain_user_cannot_delete_activity(graphql_context, owned_activity) -> None:
    payload = await run(DELETE_ACTIVITY, graphql_context, id=str(owned_activity.id))

    assert payload["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_content_manager_deletes_own_activity(make_context, user_id, owned_activity) -> None:
    ctx = make_context(user_id=user_id, user_role=UserRole.CONTENT_MANAGER)

    payload = await run(DELETE_ACTIVITY, ctx, id=str(owned_activity.id))
    again = await run(DELETE_ACTIVITY, ctx, id=str(owned_activity.id))

    assert payload == {"__typename": "DeleteBuiltActivitySuccess", "activityId": str(owned_activity.id)}
    assert owned_activity.deleted is True
    assert again["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_content_manager_cannot_delete_others_activity(make_context, owned_activity) -> None:
    ctx = make_context(user_id=uuid4(), user_role=UserRole.CONTENT_MANAGER)

    payload = await run(DELETE_ACTIVITY, ctx, id=str(owned_activity.id))

    assert payload["code"] == "UNAUTHORIZED"
    assert not owned_activity.deleted


@pytest.mark.asyncio
async def test_admin_deletes_any_activity(make_context, owned_activity) -> None:
    ctx = make_context(user_id=uuid4(), user_role=UserRole.ADMIN)

    payload = await run(DELETE_ACTIVITY, ctx, id=str(owned_activity.id))

    assert payload["__typename"] == "DeleteBuiltActivitySuccess"


@pytest.mark.asyncio
@pytest.mark.parametrize(("activity_id", "code"), [("bogus", "VALIDATION_ERROR"), (None, "NOT_FOUND")])
async def test_delete_activity_bad_ids(make_context, activity_id, code) -> None:
    ctx = make_context(user_id=uuid4(), user_role=UserRole.ADMIN)

    payload = await run(DELETE_ACTIVITY, ctx, id=activity_id or str(uuid4()))

    assert payload["code"] == code
    assert payload["field"] == "activityIdToDelete"


@pytest.mark.asyncio
async def test_copy_shared_activity(make_context, db_session, owned_activity) -> None:
    owned_activity.visibility = "READ_ONLY"
    await db_session.commit()
    copier = uuid4()

    payload = await run(
        COPY_ACTIVITY,
        make_context(user_id=copier, user_role=UserRole.USER),
        id=str(owned_activity.id),
    )

    copied = payload["builtActivity"]
    assert copied["id"] != str(owned_activity.id)
    assert copied["user"] == str(copier)
    assert copied["title"] == "Owned"
    assert copied["visibility"] == "READ_ONLY"


@pytest.mark.asyncio
async def test_copy_requires_a_role(make_context, owned_activity) -> None:
    payload = await run(COPY_ACTIVITY, make_context(user_id=uuid4()), id=str(owned_activity.id))

    assert payload["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_copy_of_hidden_activity_is_not_found(make_context, owned_activity) -> None:
    ctx = make_context(user_id=uuid4(), user_role=UserRole.USER)

    payload = await run(COPY_ACTIVITY, ctx, id=str(owned_activity.id))

    assert payload["code"] == "NOT_FOUND"
    assert payload["field"] == "activityIdToCopy"


@pytest.mark.asyncio
async def test_copy_rejects_malformed_id(graphql_context) -> None:
    payload = await run(COPY_ACTIVITY, graphql_context, id="not-a-uuid")

    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["field"] == "activityIdToCopy"


@pytest.mark.asyncio
async def test_store_and_fetch_activity_versions(graphql_context, owned_activity) -> None:
    payload = await run(
        STORE_ACTIVITY_VERSION,
        graphql_context,
        activity={"id": str(owned_activity.id), "title": "Draft 2", "flowsList": [FLOW]},
    )
    await run(STORE_ACTIVITY_VERSION, graphql_context, activity={"title": "Other"})

    version = payload["builtActivityVersion"]
    assert version["activity"]["id"] == str(owned_activity.id)
    assert version["activity"]["title"] == "Draft 2"
    assert [step["__typename"] for step in version["activity"]["flowsList"][0]["steps"]] == [
        "SystemMessageStep",
        "RequestUserInputStep",
        "PromptStep",
    ]
    assert version["versionTime"]

    result = await schema.execute(
        ACTIVITY_VERSIONS_QUERY,
        variable_values={"filter": quote(json.dumps({"activity.title": "Draft 2"}))},
        context_value=graphql_context,
    )

    assert result.errors is None
    assert result.data["fetchBuiltActivityVersions"]["edges"] == [
        {"node": {"activity": {"title": "Draft 2"}}}
    ]


@pytest.mark.asyncio
async def test_activity_version_with_unknown_step(graphql_context, db_session) -> None:
    payload = await run(
        STORE_ACTIVITY_VERSION,
        graphql_context,
        activity={"flowsList": [{"steps": [{"stepId": "a", "stepType": "DANCE"}]}]},
    )

    assert payload["code"] == "VALIDATION_ERROR"
    assert (await db_session.execute(select(BuiltActivityVersion))).scalars().all() == []


# ──────────────────────────────────────────────────────────────
# Activity state
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_update_user_activity_state_upserts(graphql_context, db_session, user_id) -> None:
    activity_id = str(uuid4())
    variables = {"userId": str(user_id), "activityId": activity_id, "googleDocId": "g-1"}

    first = await run(UPDATE_STATE, graphql_context, metadata="step-1", **variables)
    second = await run(UPDATE_STATE, graphql_context, metadata="step-2", **variables)

    assert first["userActivityState"]["id"] == second["userActivityState"]["id"]
    assert second["userActivityState"]["metadata"] == "step-2"
    rows = (await db_session.execute(select(UserActivityState))).scalars().all()
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_update_user_activity_state_rejects_bad_ids(graphql_context) -> None:
    payload = await run(
        UPDATE_STATE,
        graphql_context,
        userId="nobody",
        activityId=str(uuid4()),
        googleDocId="g-1",
        metadata="{}",
    )

    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["field"] == "user_id"


# ──────────────────────────────────────────────────────────────
# Storage failures
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_storage_failure_rolls_back(user_id) -> None:
    session = MagicMock()
    session.add = MagicMock()
    session.flush = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk full")))
    session.rollback = AsyncMock()
    ctx = GraphQLContext(session=session, user_id=user_id)

    payload = await run(SUBMIT_VERSION, ctx, data={"docId": "doc-1", "plainText": "Hello"})

    assert payload["code"] == "INTERNAL_ERROR"
    assert payload["message"] == "Failed to write to storage"
    session.rollback.assert_awaited_once()
