"""Tests for the migration orchestrator."""

import copy

import pytest

from conftest import FakeExtractor, InMemoryLoader, translate
from posmigrate.models.migration import MigrationConfig, MigrationStatus
from posmigrate.orchestrator import MigrationOrchestrator
from posmigrate.services.reference_index import ReferenceIndexError

SOURCE = {
    "stores": [{"id": "s1", "name": "Toko Satu"}],
    "users": [{"id": "u1", "email": "kasir@toko.id", "storeId": "s1", "role": "cashier"}],
    "customers": [{"id": "cust-9", "storeId": "s1", "name": "Budi"}],
    "categories": [{"id": "cat1", "storeId": "s1", "name": "Drinks"}],
    "products": [
        {"id": "p1", "storeId": "s1", "name": "Cola", "sellPrice": 8000, "category": "Drinks"},
        {"id": "p2", "storeId": "gone", "name": "Orphan"},
    ],
    "pets": [{"id": "pet1", "storeId": "s1", "customerId": "missing-customer", "name": "Milo"}],
    "transactions": [
        {"id": "tx-1", "storeId": "s1", "customerId": "cust-9", "cashierId": "u1", "total": 8000,
         "date": 1767776937113},
    ],
}


@pytest.fixture
def source():
    return FakeExtractor(copy.deepcopy(SOURCE))


def make_orchestrator(extractor, loader, **config):
    config = MigrationConfig(target_url="https://example.supabase.co", target_service_key="k", **config)
    return MigrationOrchestrator(config, extractor, loader)


def test_full_run_resolves_relationships(source, loader):
    report = make_orchestrator(source, loader).run()

    assert report.status == MigrationStatus.COMPLETED
    product = loader.row("products", translate("p1"))
    assert product["category_id"] == translate("cat1")
    assert product["store_id"] == translate("s1")

    sale = loader.row("transactions", "tx-1")
    assert sale["customer_id"] == "cust-9"
    assert sale["cashier_id"] == translate("u1")
    assert sale["date"] == "2026-01-07T09:08:57.113Z"


def test_unresolvable_store_is_skipped(source, loader):
    report = make_orchestrator(source, loader).run()

    products = report.get_tally("products")
    assert products.succeeded == 1
    assert products.skipped == 1
    assert loader.row("products", translate("p2")) is None


def test_foreign_key_violation_counts_as_skipped(source, loader):
    report = make_orchestrator(source, loader).run()

    pets = report.get_tally("pets")
    assert pets.skipped == 1
    assert pets.errored == 0
    assert "orphan" in pets.problems[0].reason


def test_other_write_failures_are_errored_and_run_continues(source, loader):
    loader.write_errors["customers"] = "permission denied for table customers"

    report = make_orchestrator(source, loader).run()

    customers = report.get_tally("customers")
    assert customers.errored == 1
    assert customers.problems[0].source_id == "cust-9"
    assert report.get_tally("products").succeeded == 1
    assert report.status == MigrationStatus.COMPLETED


def test_mapper_exception_is_errored(source, loader):
    source.collections["products"].append({"id": "p3", "storeId": "s1", "sellPrice": "gratis"})

    report = make_orchestrator(source, loader).run()

    products = report.get_tally("products")
    assert products.errored == 1
    assert products.succeeded == 1


def test_unreadable_collection_marks_tally_failed(source, loader):
    source.unreadable.add("customers")

    report = make_orchestrator(source, loader).run()

    assert report.failed_entities == ["customers"]
    assert report.get_tally("categories").succeeded == 1
    assert report.status == MigrationStatus.COMPLETED


def test_second_run_converges_to_the_same_state(source, loader):
    first = make_orchestrator(source, loader).run()
    snapshot = copy.deepcopy(loader.tables)

    second = make_orchestrator(source, loader).run()

    assert loader.tables == snapshot
    assert second.total_succeeded == first.total_succeeded
    assert second.total_skipped == first.total_skipped


def test_subset_run_uses_dependency_order(source, loader):
    report = make_orchestrator(source, loader).run(["products", "categories", "stores"])
    assert [t.entity for t in report.tallies] == ["stores", "categories", "products"]


def test_unknown_entity_type_fails_before_any_work(source, loader):
    with pytest.raises(ValueError):
        make_orchestrator(source, loader).run(["widgets"])
    assert loader.upsert_calls == 0


def test_scope_filter_limits_documents(source, loader):
    source.collections["stores"].append({"id": "s2", "name": "Toko Dua"})
    source.collections["customers"].append({"id": "cust-10", "storeId": "s2"})

    report = make_orchestrator(source, loader, scope_filter="s1").run()

    assert report.get_tally("stores").attempted == 1
    assert report.get_tally("customers").fetched == 2
    assert report.get_tally("customers").attempted == 1
    assert loader.row("stores", translate("s2")) is None


def test_dry_run_writes_nothing_but_still_resolves(source):
    loader = InMemoryLoader(dry_run=True)

    report = make_orchestrator(source, loader).run()

    assert report.dry_run
    assert loader.upsert_calls == 0
    assert loader.tables == {}
    # Stores "loaded" during the dry run make their products resolvable
    assert report.get_tally("products").succeeded == 1


def test_orphan_profiles_are_rehomed(source, loader):
    source.collections["users"].append({"id": "u2", "email": "lost@toko.id", "storeId": "closed"})

    report = make_orchestrator(source, loader).run()

    assert loader.row("profiles", translate("u2"))["store_id"] == translate("s1")
    users = report.get_tally("users")
    assert users.succeeded == 2
    assert users.skipped == 0


def test_index_failure_aborts_run(source, loader):
    loader.unreadable.add("profiles")
    orchestrator = make_orchestrator(source, loader)

    with pytest.raises(ReferenceIndexError):
        orchestrator.run()

    assert orchestrator.report.status == MigrationStatus.FAILED
    assert orchestrator.report.errors
    assert loader.upsert_calls == 0


def test_unreachable_target_aborts_run(source):
    with pytest.raises(ConnectionError):
        make_orchestrator(source, InMemoryLoader(connected=False)).run()


def test_rerun_keeps_fallback_store_and_duplicate_category_choice(loader):
    # Source order differs from target id order for both the stores and the categories
    source = FakeExtractor({
        "stores": [{"id": "s2", "name": "Toko Dua"}, {"id": "s1", "name": "Toko Satu"}],
        "users": [{"id": "u9", "email": "lost@toko.id", "storeId": "closed"}],
        "categories": [
            {"id": "drinks-1", "storeId": "s1", "name": "Drinks"},
            {"id": "drinks-2", "storeId": "s1", "name": "Drinks"},
        ],
        "products": [{"id": "p1", "storeId": "s1", "name": "Cola", "category": "Drinks"}],
    })

    make_orchestrator(source, loader).run()
    first = copy.deepcopy(loader.tables)
    make_orchestrator(source, loader).run()

    assert loader.tables == first
    profile = loader.row("profiles", translate("u9"))
    assert profile["store_id"] == min(translate("s1"), translate("s2"))
    product = loader.row("products", translate("p1"))
    assert product["category_id"] == min(translate("drinks-1"), translate("drinks-2"))


def test_whitespace_in_raw_customer_ids_is_preserved(loader):
    source = FakeExtractor({
        "stores": [{"id": "s1"}],
        "customers": [{"id": "cust 7 ", "storeId": "s1"}],
        "transactions": [{"id": "tx-7", "storeId": "s1", "customerId": "cust 7 "}],
        "pets": [{"id": "pet7", "storeId": "s1", "customerId": "cust 7 "}],
    })

    report = make_orchestrator(source, loader).run()

    assert report.get_tally("transactions").succeeded == 1
    assert report.get_tally("pets").succeeded == 1
    assert loader.row("transactions", "tx-7")["customer_id"] == "cust 7 "
