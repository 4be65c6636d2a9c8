# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - app_config       → AppConfig with defaults, metadata under tmp_path
# - metadata_store   → empty MetadataStore under tmp_path
# - catalog          → MetadataStore seeded with one "fake" database
#                      holding two tables
# - fake_rows        → {table name: [row dicts]} read by FakeClient
# - registry         → SourceRegistry with the "fake" engine registered
#
# HELPERS:
# --------
# - FakeClient   → in-memory data-source client
# - FakeSampler  → canned outcomes, records every call
# - make_field() → Field with test defaults
#
# NOTES:
# ------
# - No live MySQL / MongoDB; those clients are tested with unittest.mock
# - Use tmp_path for temporary files
# ==============================================

from typing import Dict, List

import pytest

from fingerprint_sync.catalog.fingerprint import Fingerprint
from fingerprint_sync.catalog.models import Database, Field, Table
from fingerprint_sync.config import AppConfig, FingerprintConfig, MongoConfig, MySQLConfig, reset_config
from fingerprint_sync.errors import SamplingError
from fingerprint_sync.analysis.outcome import Failed, NoData, Updated
from fingerprint_sync.persistence.metadata_store import MetadataStore
from fingerprint_sync.storage.source_registry import SourceRegistry


def make_field(field_id, table_id=10, name=None, base_type="type/Integer", **kwargs) -> Field:
    return Field(
        id=field_id,
        table_id=table_id,
        name=name or f"col_{field_id}",
        base_type=base_type,
        **kwargs,
    )


def make_fingerprint(distinct_count=3) -> Fingerprint:
    return Fingerprint(global_stats={"distinct_count": distinct_count, "nil_percent": 0.0})


class FakeClient:
    """Serves rows from {table name: [row dicts]}, projected onto the requested fields."""

    def __init__(self, rows_by_table: Dict[str, List[dict]], fail_on_connect=False, fail_after=None):
        self.rows_by_table = rows_by_table
        self.fail_on_connect = fail_on_connect
        self.fail_after = fail_after
        self.connected = False
        self.calls = []

    def connect(self):
        if self.fail_on_connect:
            raise SamplingError("connection refused")
        self.connected = True

    def disconnect(self):
        self.connected = False

    def table_rows_sample(self, table, fields, truncation_size, limit):
        self.calls.append((table.name, [f.name for f in fields], truncation_size, limit))
        for i, row in enumerate(self.rows_by_table.get(table.name, [])[:limit]):
            if self.fail_after is not None and i >= self.fail_after:
                raise SamplingError("stream broken")
            yield tuple(row.get(field.name) for field in fields)

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


class FakeSampler:
    """
    Returns a fixed outcome per field id; unknown ids get Updated.

    Every call is recorded as (table id, [field ids], truncation_size).
    """

    def __init__(self, outcomes=None):
        self.outcomes = outcomes or {}
        self.calls = []

    def sample_and_fingerprint(self, table, fields, truncation_size):
        self.calls.append((table.id, [f.id for f in fields], truncation_size))
        return {
            f.id: self.outcomes.get(f.id, Updated(make_fingerprint()))
            for f in fields
        }


@pytest.fixture(autouse=True)
def _reset_config_singleton():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(
        mysql=MySQLConfig(),
        mongo=MongoConfig(),
        fingerprint=FingerprintConfig(),
        metadata_dir=str(tmp_path / "metadata"),
        log_level="WARNING",
    )


@pytest.fixture
def metadata_store(tmp_path) -> MetadataStore:
    """Provide a temporary metadata store."""
    return MetadataStore(str(tmp_path / "metadata"))


@pytest.fixture
def database() -> Database:
    return Database(id=1, name="shop", engine="fake")


@pytest.fixture
def tables() -> List[Table]:
    return [
        Table(id=10, db_id=1, name="orders"),
        Table(id=20, db_id=1, name="users"),
    ]


@pytest.fixture
def catalog(metadata_store, database, tables) -> MetadataStore:
    """
    orders(10): amount Integer, note Text, id (PK), payload Structured
    users(20):  email Text, signup DateTime
    """
    metadata_store.save_database(database)
    for table in tables:
        metadata_store.save_table(table)

    for f in [
        make_field(100, 10, "amount", "type/Integer"),
        make_field(101, 10, "note", "type/Text"),
        make_field(102, 10, "id", "type/BigInteger", semantic_type="type/PK"),
        make_field(103, 10, "payload", "type/Structured"),
        make_field(200, 20, "email", "type/Text", semantic_type="type/Email"),
        make_field(201, 20, "signup", "type/DateTime"),
    ]:
        metadata_store.save_field(f)

    return metadata_store


@pytest.fixture
def fake_rows() -> Dict[str, List[dict]]:
    return {
        "orders": [
            {"amount": 10, "note": "first", "id": 1},
            {"amount": 25, "note": "second", "id": 2},
            {"amount": None, "note": "third", "id": 3},
        ],
        "users": [
            {"email": "ann@example.com", "signup": "2024-01-02T03:04:05"},
            {"email": "bob@example.com", "signup": "2024-03-01"},
        ],
    }


@pytest.fixture
def registry(app_config, fake_rows) -> SourceRegistry:
    registry = SourceRegistry(app_config)
    registry.register("fake", lambda db: FakeClient(fake_rows))
    return registry


@pytest.fixture
def mixed_outcomes():
    """3 Updated, 1 NoData, 1 Failed keyed by field ids 1..5."""
    return {
        1: Updated(make_fingerprint()),
        2: Updated(make_fingerprint()),
        3: Updated(make_fingerprint()),
        4: NoData(),
        5: Failed(ValueError("bad value")),
    }
