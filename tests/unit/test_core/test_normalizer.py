"""Unit tests for filter normalization."""
from __future__ import annotations

from urllib.parse import quote
from uuid import UUID

import pytest

from writing_service.core.pagination.exceptions import MalformedFilterError
from writing_service.core.pagination.normalizer import (
    NOT_DELETED,
    coerce_identifiers,
    parse_filter,
    setup_filter,
)

USER_ID = "550e8400-e29b-41d4-a716-446655440000"


class TestParseFilter:
    def test_none_is_empty(self):
        assert parse_filter(None) == {}

    def test_uri_encoded_json(self):
        raw = quote('{"docId": "abc", "title": "a b"}')

        assert parse_filter(raw) == {"docId": "abc", "title": "a b"}

    def test_plain_json_string(self):
        assert parse_filter('{"docId": "abc"}') == {"docId": "abc"}

    def test_mapping_is_deep_copied(self):
        raw = {"$or": [{"user": USER_ID}]}

        parsed = parse_filter(raw)
        parsed["$or"][0]["user"] = "changed"

        assert raw == {"$or": [{"user": USER_ID}]}

    @pytest.mark.parametrize("raw", ["{not json", quote("[1, 2]"), "42"])
    def test_rejects_non_object_strings(self, raw):
        with pytest.raises(MalformedFilterError) as exc_info:
            parse_filter(raw)

        assert exc_info.value.argument == "filter"

    def test_rejects_unsupported_types(self):
        with pytest.raises(MalformedFilterError):
            parse_filter(42)  # type: ignore[arg-type]


class TestCoerceIdentifiers:
    def test_converts_canonical_uuids_at_any_depth(self):
        value = {"$and": [{"user": USER_ID}, {"ids": {"$in": [USER_ID, "x"]}}]}

        result = coerce_identifiers(value)

        assert result["$and"][0]["user"] == UUID(USER_ID)
        assert result["$and"][1]["ids"]["$in"] == [UUID(USER_ID), "x"]

    def test_leaves_other_strings_alone(self):
        object_id = "507f1f77bcf86cd799439011"

        assert coerce_identifiers({"docId": object_id}) == {"docId": object_id}

    def test_does_not_mutate_input(self):
        value = {"user": USER_ID}

        coerce_identifiers(value)

        assert value == {"user": USER_ID}

    def test_scalars_pass_through(self):
        assert coerce_identifiers(3) == 3
        assert coerce_identifiers(None) is None


class TestSetupFilter:
    @pytest.mark.parametrize("raw", [None, {}, "%7B%7D"])
    def test_empty_predicate_is_not_deleted_only(self, raw):
        assert setup_filter(raw) == NOT_DELETED

    def test_conjoins_with_not_deleted(self):
        result = setup_filter({"user": USER_ID})

        assert result == {
            "$and": [
                {"user": UUID(USER_ID)},
                {"$or": [{"deleted": False}, {"deleted": None}]},
            ]
        }

    def test_string_and_mapping_forms_agree(self):
        raw = {"docId": "abc", "user": USER_ID}

        assert setup_filter(quote('{"docId": "abc", "user": "%s"}' % USER_ID)) == setup_filter(raw)

    def test_result_does_not_alias_module_constant(self):
        result = setup_filter(None)
        result["$or"].append({"deleted": True})

        assert NOT_DELETED == {"$or": [{"deleted": False}, {"deleted": None}]}
