"""HTTP level tests: health, GraphQL endpoint, middleware and error handling."""
from __future__ import annotations

from unittest.mock import AsyncMock
from uuid import uuid4

from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from writing_service.app.main import create_app
from writing_service.core.settings import clear_all_caches
from writing_service.features.graphql.schema import create_schema

CREATE_ACTIVITY = """
    mutation {
        addOrUpdateBuiltActivity(activity: {title: "From HTTP"}) {
            ... on BuiltActivitySuccess { builtActivity { title user } }
            ... on MutationError { code }
        }
    }
"""


class TestHealth:
    async def test_healthy(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "ok"
        assert body["environment"] == "test"

    async def test_database_down_is_503(self, client, monkeypatch):
        monkeypatch.setattr(
            "writing_service.features.health.router.check_database",
            AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("refused"))),
        )

        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "unavailable"


class TestRequestId:
    async def test_generated_when_missing(self, client):
        response = await client.get("/health")

        assert response.headers["x-request-id"]

    async def test_propagated_when_present(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "req-42"})

        assert response.headers["x-request-id"] == "req-42"


class TestGraphQLEndpoint:
    async def test_identity_headers_reach_resolvers(self, client):
        user_id = str(uuid4())

        response = await client.post(
            "/graphql",
            json={"query": CREATE_ACTIVITY},
            headers={"X-User-Id": user_id, "X-User-Role": "user"},
        )

        assert response.status_code == 200
        payload = response.json()["data"]["addOrUpdateBuiltActivity"]
        assert payload["builtActivity"] == {"title": "From HTTP", "user": user_id}

    async def test_anonymous_activity_has_no_author(self, client):
        response = await client.post(
            "/graphql",
            json={"query": CREATE_ACTIVITY},
            headers={"X-User-Id": "not-a-uuid"},
        )

        assert response.json()["data"]["addOrUpdateBuiltActivity"]["builtActivity"]["user"] is None

    async def test_validation_errors_are_returned(self, client):
        response = await client.post(
            "/graphql",
            json={"query": "{ docVersions(limit: 0) { edges { cursor } } }"},
        )

        error = response.json()["errors"][0]
        assert error["extensions"] == {"code": "VALIDATION_ERROR", "field": "limit"}

    async def test_depth_limit(self, monkeypatch):
        query = "{ docVersions { edges { node { chatLog { sender } } } } }"
        monkeypatch.setenv("GRAPHQL_MAX_QUERY_DEPTH", "3")
        clear_all_caches()

        result = await create_schema().execute(query)

        assert result.errors
        assert "exceeds maximum operation depth" in result.errors[0].message


class TestUnexpectedErrors:
    async def test_problem_details(self, app):
        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/boom", headers={"X-Request-ID": "req-500"})

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/problem+json")
        body = response.json()
        assert body["title"] == "Internal Server Error"
        assert body["request_id"] == "req-500"
        assert "kaboom" not in response.text


async def test_graphql_can_be_disabled(monkeypatch):
    monkeypatch.setenv("GRAPHQL_ENABLED", "false")
    clear_all_caches()
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        graphql = await ac.post("/graphql", json={"query": "{ __typename }"})
        health = await ac.get("/health")

    assert graphql.status_code == 404
    assert health.status_code == 200
