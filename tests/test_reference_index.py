"""Tests for the reference index and its builder."""

import pytest

from conftest import FakeExtractor, InMemoryLoader
from posmigrate.services.reference_index import (
    ReferenceIndex,
    ReferenceIndexBuilder,
    ReferenceIndexError,
    derive_profile_email,
)
from posmigrate.models.record import SourceDocument


def build(loader, extractor):
    return ReferenceIndexBuilder(loader, extractor, "pos.placeholder").build()


def test_builds_lookups_from_target_state():
    loader = InMemoryLoader()
    loader.seed("stores", {"id": "store-b"}, {"id": "store-a"})
    loader.seed("profiles", {"id": "prof-1", "email": "kasir@toko.id"})
    loader.seed("categories", {"id": "cat-1", "name": "Drinks", "store_id": "store-a"})
    extractor = FakeExtractor({"users": [{"id": "u1", "email": "kasir@toko.id"}, {"id": "u2", "email": "new@toko.id"}]})

    index = build(loader, extractor)

    assert index.profile_id("kasir@toko.id") == "prof-1"
    assert index.actor_id("u1") == "prof-1"
    assert index.actor_id("u2") is None
    assert index.category_id("store-a", "Drinks") == "cat-1"
    assert index.category_id("store-b", "Drinks") is None
    assert index.valid_scopes == {"store-a", "store-b"}


def test_fallback_scope_is_first_store_in_id_order():
    loader = InMemoryLoader()
    loader.seed("stores", {"id": "store-b"}, {"id": "store-a"})

    index = build(loader, FakeExtractor())

    assert index.fallback_scope == "store-a"


def test_empty_target_has_no_fallback():
    index = build(InMemoryLoader(), FakeExtractor())
    assert index.fallback_scope is None
    assert not index.is_valid_scope(None)


def test_unreadable_target_table_is_fatal():
    loader = InMemoryLoader()
    loader.unreadable.add("categories")

    with pytest.raises(ReferenceIndexError):
        build(loader, FakeExtractor())


def test_unreadable_source_users_is_fatal():
    extractor = FakeExtractor()
    extractor.unreadable.add("users")

    with pytest.raises(ReferenceIndexError):
        build(InMemoryLoader(), extractor)


def test_profiles_keep_first_registration():
    index = ReferenceIndex()
    index.add_profile("a@b.c", "p-1", uid="u1")
    index.add_profile("a@b.c", "p-2", uid="u1")

    assert index.profile_id("a@b.c") == "p-1"
    assert index.actor_id("u1") == "p-1"


def test_placeholder_email_uses_uid_field_first():
    user = SourceDocument(id="doc-1", collection="users", data={"uid": "auth-1"})
    assert derive_profile_email(user, "pos.placeholder") == "auth-1@pos.placeholder"


def test_fallback_scope_is_smallest_id_regardless_of_insertion_order():
    index = ReferenceIndex()
    index.add_scope("s-2")
    assert index.fallback_scope == "s-2"

    index.add_scope("s-1")
    index.add_scope("s-3")
    assert index.fallback_scope == "s-1"


def test_duplicate_category_names_resolve_to_smallest_id():
    forward, backward = ReferenceIndex(), ReferenceIndex()
    for category_id in ("cat-b", "cat-a"):
        forward.add_category("s-1", "Drinks", category_id)
    for category_id in ("cat-a", "cat-b"):
        backward.add_category("s-1", "Drinks", category_id)

    assert forward.category_id("s-1", "Drinks") == "cat-a"
    assert backward.category_id("s-1", "Drinks") == "cat-a"
