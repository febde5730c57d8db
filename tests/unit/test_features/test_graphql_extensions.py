"""Tests for GraphQL schema extensions."""
from __future__ import annotations

import warnings

from strawberry.extensions import MaskErrors, QueryDepthLimiter, SchemaExtension

from writing_service.core.settings import clear_all_caches
from writing_service.features.graphql.extensions import get_extensions
from writing_service.features.graphql.schema import create_schema


def test_factories_build_fresh_instances():
    factories = get_extensions()

    assert not any(isinstance(factory, SchemaExtension) for factory in factories)
    first, second = factories[0](), factories[0]()
    assert isinstance(first, QueryDepthLimiter)
    assert first is not second


def test_masking_only_in_production(monkeypatch):
    assert len(get_extensions()) == 1

    monkeypatch.setenv("APP_ENVIRONMENT", "production")
    clear_all_caches()
    factories = get_extensions()

    assert len(factories) == 2
    assert isinstance(factories[1](), MaskErrors)


def test_schema_creation_does_not_warn_about_extension_instances():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        create_schema()

    assert not [w for w in caught if "extension instance" in str(w.message)]
