"""Unit tests for page size policy and keyset filter construction."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import pytest
from sqlalchemy import select

from writing_service.core.pagination.cursor import CursorData, CursorDirection
from writing_service.core.pagination.exceptions import InvalidCursorError, InvalidLimitError
from writing_service.core.pagination.keyset import KeysetFilter, resolve_limit
from writing_service.features.documents.models import DocVersion


class TestResolveLimit:
    def test_none_selects_default(self):
        assert resolve_limit(None, default_limit=100, max_limit=1000) == 100

    def test_valid_limit_is_kept(self):
        assert resolve_limit(25, default_limit=100, max_limit=1000) == 25

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_is_rejected(self, limit):
        with pytest.raises(InvalidLimitError) as exc_info:
            resolve_limit(limit, default_limit=100, max_limit=1000)

        assert exc_info.value.argument == "limit"

    def test_above_max_is_rejected_not_clamped(self):
        with pytest.raises(InvalidLimitError):
            resolve_limit(1001, default_limit=100, max_limit=1000)


class TestKeysetFilter:
    def _filter(self, **kwargs):
        defaults = {"ascending": True, "limit": 10}
        return KeysetFilter(DocVersion.created_at, DocVersion.id, **{**defaults, **kwargs})

    def test_sort_fields_include_pk_tie_breaker(self):
        assert self._filter().sort_fields == ["created_at", "id"]

    def test_sorting_by_pk_needs_only_pk(self):
        keyset = KeysetFilter(DocVersion.id, DocVersion.id, ascending=False, limit=10)

        assert keyset.sort_fields == ["id"]

    def test_previous_page_flips_fetch_direction(self):
        cursor = CursorData(values={"created_at": "2025-01-15T10:00:00", "id": str(uuid4())})

        keyset = self._filter(direction=CursorDirection.PREVIOUS, cursor=cursor)

        assert keyset.effective_ascending is False

    def test_direction_without_cursor_is_first_page(self):
        keyset = self._filter(direction=CursorDirection.NEXT)

        assert keyset.direction == CursorDirection.NONE

    def test_fetches_one_extra_row(self):
        stmt = self._filter(limit=5).apply(select(DocVersion))

        assert stmt._limit == 6

    def test_cursor_values_are_converted(self):
        pk = uuid4()
        cursor = CursorData(values={"created_at": "2025-01-15T10:00:00", "id": str(pk)})

        keyset = self._filter(direction=CursorDirection.NEXT, cursor=cursor)

        value, pk_value = keyset._position
        assert value == datetime(2025, 1, 15, 10, 0)
        assert pk_value == pk
        assert isinstance(pk_value, UUID)

    def test_cursor_for_other_sort_field_is_rejected(self):
        cursor = CursorData(values={"title": "a", "id": str(uuid4())})

        with pytest.raises(InvalidCursorError, match="does not match"):
            self._filter(direction=CursorDirection.NEXT, cursor=cursor)

    def test_malformed_cursor_value_is_rejected(self):
        cursor = CursorData(values={"created_at": "yesterday", "id": str(uuid4())})

        with pytest.raises(InvalidCursorError):
            self._filter(direction=CursorDirection.NEXT, cursor=cursor)

    def test_cursor_without_pk_value_is_rejected(self):
        cursor = CursorData(values={"created_at": "2025-01-15T10:00:00", "id": None})

        with pytest.raises(InvalidCursorError):
            self._filter(direction=CursorDirection.NEXT, cursor=cursor)
