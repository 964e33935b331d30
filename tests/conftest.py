"""Shared fixtures: an in-memory target store and a scripted source store."""

from typing import Any, Dict, List, Optional

import pytest

from posmigrate.extractors.base import BaseExtractor, IDENTITY_COLLECTION
from posmigrate.loaders.base import BaseLoader
from posmigrate.models.migration import MigrationConfig
from posmigrate.models.record import FOREIGN_KEY_VIOLATION_CODE, SourceDocument, UpsertResult
from posmigrate.services.context import MigrationContext
from posmigrate.services.identifiers import IdentifierTranslator
from posmigrate.services.reference_index import ReferenceIndex

# child table -> {column: parent table}
FOREIGN_KEYS = {
    "profiles": {"store_id": "stores"},
    "customers": {"store_id": "stores"},
    "suppliers": {"store_id": "stores"},
    "categories": {"store_id": "stores"},
    "products": {"store_id": "stores", "category_id": "categories"},
    "rooms": {"store_id": "stores"},
    "rental_units": {"store_id": "stores", "linked_product_id": "products"},
    "pets": {"store_id": "stores", "customer_id": "customers"},
    "shifts": {"store_id": "stores", "cashier_id": "profiles"},
    "transactions": {
        "store_id": "stores",
        "customer_id": "customers",
        "cashier_id": "profiles",
        "shift_id": "shifts",
    },
    "cash_flow": {"store_id": "stores"},
    "purchase_orders": {"store_id": "stores", "supplier_id": "suppliers"},
    "bookings": {"store_id": "stores", "room_id": "rooms", "customer_id": "customers"},
    "rental_sessions": {"store_id": "stores", "unit_id": "rental_units", "customer_id": "customers"},
    "medical_records": {"store_id": "stores", "pet_id": "pets"},
    "stock_movements": {"store_id": "stores", "product_id": "products"},
}


class InMemoryLoader(BaseLoader):
    """Target store double with primary key upserts and foreign key checks."""

    def __init__(self, dry_run: bool = False, connected: bool = True):
        super().__init__(dry_run=dry_run)
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.identities: Dict[str, Dict[str, Any]] = {}
        self.write_errors: Dict[str, str] = {}  # table -> error message for every write
        self.unreadable: set = set()
        self.upsert_calls = 0
        self.connected = connected

    def seed(self, table: str, *rows: Dict[str, Any]) -> None:
        for row in rows:
            self.tables.setdefault(table, {})[row["id"]] = dict(row)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return list(self.tables.get(table, {}).values())

    def row(self, table: str, key: str) -> Optional[Dict[str, Any]]:
        return self.tables.get(table, {}).get(key)

    def _upsert(self, table: str, record: Dict[str, Any], primary_key: str) -> UpsertResult:
        self.upsert_calls += 1
        key = record[primary_key]

        if table in self.write_errors:
            return UpsertResult(table=table, primary_key=key, success=False,
                                error=self.write_errors[table], status_code=400)

        for column, parent in FOREIGN_KEYS.get(table, {}).items():
            value = record.get(column)
            if value is not None and value not in self.tables.get(parent, {}):
                return UpsertResult(
                    table=table,
                    primary_key=key,
                    success=False,
                    error=f'insert or update on table "{table}" violates foreign key constraint "{table}_{column}_fkey"',
                    error_code=FOREIGN_KEY_VIOLATION_CODE,
                    status_code=409,
                )

        self.tables.setdefault(table, {})[key] = dict(record)
        return UpsertResult(table=table, primary_key=key, success=True, status_code=201)

    def fetch_all(self, table: str, columns: str) -> List[Dict[str, Any]]:
        if table in self.unreadable:
            raise ConnectionError(f"cannot read {table}")
        wanted = columns.split(",")
        return [
            {c: row.get(c) for c in wanted}
            for _, row in sorted(self.tables.get(table, {}).items())
        ]

    def _create_identity(self, payload: Dict[str, Any]) -> UpsertResult:
        if any(u["email"] == payload["email"] for u in self.identities.values()):
            return UpsertResult(table="auth.users", primary_key=payload["id"], success=False,
                                error="A user with this email address has already been registered",
                                status_code=422)
        self.identities[payload["id"]] = dict(payload)
        return UpsertResult(table="auth.users", primary_key=payload["id"], success=True, status_code=200)

    def validate_connection(self) -> bool:
        return self.connected


class FakeExtractor(BaseExtractor):
    """Source store double serving collections from dictionaries."""

    def __init__(self, collections: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        super().__init__()
        self.collections = collections or {}
        self.unreadable: set = set()

    def fetch(self, collection: str) -> List[SourceDocument]:
        if collection in self.unreadable:
            raise RuntimeError(f"permission denied on {collection}")
        return [
            self.create_document(item["id"], collection, {k: v for k, v in item.items() if k != "id"})
            for item in self.collections.get(collection, [])
        ]

    def fetch_identities(self) -> List[SourceDocument]:
        return self.fetch(IDENTITY_COLLECTION)


def translate(source_id: str) -> str:
    return IdentifierTranslator().translate(source_id)


def make_doc(collection: str, id: str, **data: Any) -> SourceDocument:
    return SourceDocument(id=id, collection=collection, data=data)


@pytest.fixture
def config():
    return MigrationConfig(target_url="https://example.supabase.co", target_service_key="service-key")


@pytest.fixture
def index():
    """Index with one known store (source id "s1")."""
    idx = ReferenceIndex()
    idx.add_scope(translate("s1"))
    return idx


@pytest.fixture
def ctx(config, index):
    return MigrationContext(config=config, index=index)


@pytest.fixture
def loader():
    return InMemoryLoader()


@pytest.fixture
def extractor():
    return FakeExtractor()
