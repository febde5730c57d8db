"""Integration tests for keyset pagination through BaseRepository.

Runs against in-memory SQLite with the real models.
"""
from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from urllib.parse import quote
from uuid import uuid4

import pytest

from writing_service.core.database.exceptions import InvalidFilterError
from writing_service.core.pagination import (
    InvalidCursorError,
    InvalidLimitError,
    PaginateOptions,
    parse_cursor,
    setup_filter,
)
from writing_service.features.documents.models import DocVersion
from writing_service.features.documents.repository import get_doc_version_repository
from writing_service.features.prompts.models import PromptRun
from writing_service.features.prompts.repository import get_prompt_run_repository

# Matches the doc_versions fixture
BASE_TIME = datetime(2025, 1, 15, 10, 0, tzinfo=UTC)


def texts(page) -> list[str]:
    return [node.plain_text for node in page.nodes]


def options(**kwargs) -> PaginateOptions:
    kwargs.setdefault("query", setup_filter(None))
    return PaginateOptions(**kwargs)


def follow(cursor: str, **kwargs) -> PaginateOptions:
    """Options continuing from a startCursor or endCursor."""
    direction, token = parse_cursor(cursor)
    if direction.value == "previous":
        return options(previous=token, **kwargs)
    return options(next=token, **kwargs)


@pytest.fixture
def repo():
    return get_doc_version_repository()


class TestFirstPage:
    async def test_limit_one_descending_returns_most_recent(self, db_session, doc_versions, repo):
        page = await repo.paginate(
            db_session, options(limit=1, paginated_field="createdAt", sort_ascending=False)
        )

        assert texts(page) == ["version 5"]
        assert page.page_info.has_next_page is True
        assert page.page_info.has_previous_page is False

    async def test_limit_one_ascending_returns_oldest(self, db_session, doc_versions, repo):
        page = await repo.paginate(
            db_session, options(limit=1, paginated_field="createdAt", sort_ascending=True)
        )

        assert texts(page) == ["version 0"]

    async def test_page_covering_everything_has_no_next(self, db_session, doc_versions, repo):
        page = await repo.paginate(
            db_session, options(limit=6, paginated_field="createdAt", sort_ascending=True)
        )

        assert len(page.edges) == 6
        assert page.page_info.has_next_page is False
        assert page.page_info.start_cursor.startswith("prev__")
        assert page.page_info.end_cursor.startswith("next__")

    async def test_default_limit_applies(self, db_session, doc_versions, repo, monkeypatch):
        from writing_service.core.settings import clear_all_caches

        monkeypatch.setenv("PAGINATION_DEFAULT_LIMIT", "2")
        clear_all_caches()

        page = await repo.paginate(db_session, options(paginated_field="createdAt"))

        assert len(page.edges) == 2

    async def test_empty_collection(self, db_session, repo):
        page = await repo.paginate(db_session, options(limit=10))

        assert page.edges == []
        assert page.page_info.has_next_page is False
        assert page.page_info.start_cursor is None
        assert page.page_info.end_cursor is None


class TestCursorPaging:
    async def test_forward_pages_partition_the_collection(self, db_session, doc_versions, repo):
        seen: list[str] = []
        page = await repo.paginate(
            db_session, options(limit=2, paginated_field="createdAt", sort_ascending=True)
        )
        seen += texts(page)
        while page.page_info.has_next_page:
            page = await repo.paginate(
                db_session,
                follow(
                    page.page_info.end_cursor,
                    limit=2,
                    paginated_field="createdAt",
                    sort_ascending=True,
                ),
            )
            seen += texts(page)

        assert seen == [f"version {index}" for index in range(6)]

    async def test_forward_then_back_returns_previous_page(self, db_session, doc_versions, repo):
        kwargs = {"limit": 2, "paginated_field": "createdAt", "sort_ascending": False}
        first = await repo.paginate(db_session, options(**kwargs))
        second = await repo.paginate(db_session, follow(first.page_info.end_cursor, **kwargs))

        back = await repo.paginate(db_session, follow(second.page_info.start_cursor, **kwargs))

        assert texts(second) == ["version 3", "version 2"]
        assert second.page_info.has_previous_page is True
        assert texts(back) == texts(first)
        assert back.page_info.has_previous_page is False
        assert back.page_info.has_next_page is True

    async def test_cursor_survives_deletion_of_its_record(self, db_session, doc_versions, repo):
        kwargs = {"limit": 2, "paginated_field": "createdAt", "sort_ascending": True}
        first = await repo.paginate(db_session, options(**kwargs))

        await db_session.delete(doc_versions[1])
        await db_session.commit()

        second = await repo.paginate(db_session, follow(first.page_info.end_cursor, **kwargs))

        assert texts(second) == ["version 2", "version 3"]

    async def test_ties_on_sort_field_are_broken_by_id(self, db_session, repo):
        versions = [
            DocVersion(doc_id="tie", plain_text=str(index), created_at=BASE_TIME)
            for index in range(5)
        ]
        db_session.add_all(versions)
        await db_session.commit()

        kwargs = {"limit": 2, "paginated_field": "createdAt", "sort_ascending": True}
        seen: list[str] = []
        page = await repo.paginate(db_session, options(**kwargs))
        seen += texts(page)
        while page.page_info.has_next_page:
            page = await repo.paginate(db_session, follow(page.page_info.end_cursor, **kwargs))
            seen += texts(page)

        assert sorted(seen) == ["0", "1", "2", "3", "4"]
        assert len(seen) == 5

    async def test_nulls_sort_first_ascending(self, db_session, repo):
        db_session.add_all(
            [
                DocVersion(doc_id="n", plain_text="titled", title="B", created_at=BASE_TIME),
                DocVersion(doc_id="n", plain_text="untitled", title=None, created_at=BASE_TIME),
                DocVersion(doc_id="n", plain_text="first", title="A", created_at=BASE_TIME),
            ]
        )
        await db_session.commit()

        kwargs = {"limit": 1, "paginated_field": "title", "sort_ascending": True}
        seen: list[str] = []
        page = await repo.paginate(db_session, options(**kwargs))
        seen += texts(page)
        while page.page_info.has_next_page:
            page = await repo.paginate(db_session, follow(page.page_info.end_cursor, **kwargs))
            seen += texts(page)

        assert seen == ["untitled", "first", "titled"]

    async def test_cursor_from_other_sort_is_rejected(self, db_session, doc_versions, repo):
        first = await repo.paginate(db_session, options(limit=2, paginated_field="createdAt"))

        with pytest.raises(InvalidCursorError):
            await repo.paginate(
                db_session, follow(first.page_info.end_cursor, limit=2, paginated_field="_id")
            )


class TestFiltering:
    async def test_predicate_narrows_results(self, db_session, doc_versions, repo):
        db_session.add(DocVersion(doc_id="doc-2", plain_text="other"))
        await db_session.commit()

        page = await repo.paginate(
            db_session, options(query=setup_filter({"docId": "doc-2"}), limit=10)
        )

        assert texts(page) == ["other"]

    async def test_soft_deleted_rows_are_excluded(self, db_session, doc_versions, repo):
        doc_versions[0].deleted = True
        doc_versions[1].deleted = None
        await db_session.commit()

        page = await repo.paginate(
            db_session, options(limit=10, paginated_field="createdAt", sort_ascending=True)
        )

        assert "version 0" not in texts(page)
        assert "version 1" in texts(page)
        assert len(page.edges) == 5

    async def test_datetime_range(self, db_session, doc_versions, repo):
        since = (BASE_TIME + timedelta(minutes=4)).isoformat()

        page = await repo.paginate(
            db_session,
            options(
                query=setup_filter({"createdAt": {"$gte": since}}),
                limit=10,
                paginated_field="createdAt",
                sort_ascending=True,
            ),
        )

        assert texts(page) == ["version 4", "version 5"]

    async def test_unknown_identifier_matches_nothing(self, db_session, doc_versions, repo):
        page = await repo.paginate(
            db_session, options(query=setup_filter({"_id": str(uuid4())}), limit=10)
        )

        assert page.edges == []

    async def test_nor_matches_rows_where_field_is_null(self, db_session, repo):
        db_session.add_all(
            [
                DocVersion(doc_id="n", plain_text="titled", title="A", created_at=BASE_TIME),
                DocVersion(doc_id="n", plain_text="untitled", title=None, created_at=BASE_TIME),
                DocVersion(doc_id="n", plain_text="other", title="B", created_at=BASE_TIME),
            ]
        )
        await db_session.commit()

        page = await repo.paginate(
            db_session,
            options(
                query=setup_filter({"$nor": [{"title": "A"}]}),
                limit=10,
                paginated_field="plainText",
                sort_ascending=True,
            ),
        )

        assert texts(page) == ["other", "untitled"]

    async def test_nor_with_several_operands(self, db_session, repo):
        db_session.add_all(
            [
                DocVersion(doc_id="n", plain_text="a", title="A", created_at=BASE_TIME),
                DocVersion(doc_id="n", plain_text="b", title="B", created_at=BASE_TIME),
                DocVersion(doc_id="n", plain_text="none", title=None, created_at=BASE_TIME),
            ]
        )
        await db_session.commit()

        page = await repo.paginate(
            db_session,
            options(
                query=setup_filter({"$nor": [{"title": "A"}, {"title": {"$in": ["B"]}}]}),
                limit=10,
            ),
        )

        assert texts(page) == ["none"]


class TestIdentifierCoercion:
    async def test_uuid_string_in_encoded_filter_matches_uuid_column(self, db_session):
        user = uuid4()
        db_session.add_all(
            [
                PromptRun(google_doc_id="mine", user=user, created_at=BASE_TIME),
                PromptRun(google_doc_id="theirs", user=uuid4(), created_at=BASE_TIME),
            ]
        )
        await db_session.commit()
        raw = quote(json.dumps({"user": str(user)}))

        page = await get_prompt_run_repository().paginate(
            db_session, options(query=setup_filter(raw), limit=10)
        )

        assert [node.google_doc_id for node in page.nodes] == ["mine"]

    async def test_non_identifier_string_matches_json_path_as_text(self, db_session, repo):
        db_session.add_all(
            [
                DocVersion(
                    doc_id="j",
                    plain_text="match",
                    session_intention={"description": "abc123"},
                    created_at=BASE_TIME,
                ),
                DocVersion(
                    doc_id="j",
                    plain_text="miss",
                    session_intention={"description": "xyz"},
                    created_at=BASE_TIME,
                ),
                DocVersion(doc_id="j", plain_text="empty", created_at=BASE_TIME),
            ]
        )
        await db_session.commit()
        raw = quote(json.dumps({"sessionIntention.description": "abc123"}))

        page = await repo.paginate(db_session, options(query=setup_filter(raw), limit=10))

        assert texts(page) == ["match"]


class TestRejectedRequests:
    async def test_zero_limit(self, db_session, repo):
        with pytest.raises(InvalidLimitError):
            await repo.paginate(db_session, options(limit=0))

    async def test_unknown_sort_field(self, db_session, repo):
        with pytest.raises(InvalidFilterError):
            await repo.paginate(db_session, options(limit=1, paginated_field="nope"))

    async def test_nested_sort_field(self, db_session, repo):
        with pytest.raises(InvalidFilterError):
            await repo.paginate(
                db_session, options(limit=1, paginated_field="sessionIntention.description")
            )
