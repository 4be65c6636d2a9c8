# ==============================================
# Tests for FingerprintSync (table / database driver)
# ==============================================

import logging
import random

import pytest

from conftest import FakeSampler, make_field, make_fingerprint
from fingerprint_sync import FingerprintStats, FingerprintSync
from fingerprint_sync.analysis.outcome import Failed, NoData
from fingerprint_sync.analysis.versions import DEFAULT_VERSION_SCHEDULE
from fingerprint_sync.catalog.models import Database, Table
from fingerprint_sync.errors import CatalogError


@pytest.fixture
def sync(catalog, app_config, registry):
    """Driver over the seeded catalog, sampling through FakeClient."""
    return FingerprintSync(catalog, config=app_config, registry=registry)


class TestFingerprintFields:
    def test_fingerprints_eligible_fields(self, sync, catalog, tables):
        stats = sync.fingerprint_fields(tables[0])

        assert stats == FingerprintStats(attempted=2, updated=2)
        assert catalog.get_field(100).fingerprint_version == 5
        assert catalog.get_field(101).fingerprint.has_data
        assert catalog.get_field(102).fingerprint is None

    def test_is_idempotent(self, sync, tables):
        sync.fingerprint_fields(tables[0])
        assert sync.fingerprint_fields(tables[0]) == FingerprintStats()

    def test_new_version_makes_fields_due_again(self, catalog, app_config, registry, tables):
        FingerprintSync(catalog, config=app_config, registry=registry).fingerprint_fields(tables[0])

        schedule = DEFAULT_VERSION_SCHEDULE.with_version(6, {"type/Integer"})
        sync = FingerprintSync(catalog, config=app_config, registry=registry, schedule=schedule)
        assert sync.latest_version == 6

        stats = sync.fingerprint_fields(tables[0])

        assert stats == FingerprintStats(attempted=1, updated=1)
        assert catalog.get_field(100).fingerprint_version == 6
        assert catalog.get_field(101).fingerprint_version == 5

    def test_no_candidates_skips_sampler(self, catalog, app_config, registry, tables):
        sampler = FakeSampler()
        for field_id in (100, 101):
            catalog.persist_fingerprint(field_id, make_fingerprint(), 5)

        stats = FingerprintSync(
            catalog, config=app_config, registry=registry, sampler=sampler,
        ).fingerprint_fields(tables[0])

        assert stats == FingerprintStats()
        assert sampler.calls == []

    def test_truncation_size_is_passed_to_sampler(self, catalog, app_config, registry, tables):
        sampler = FakeSampler()
        FingerprintSync(catalog, config=app_config, registry=registry, sampler=sampler).fingerprint_fields(tables[0])
        assert sampler.calls == [(10, [100, 101], 1234)]

    def test_no_data_leaves_field_due(self, catalog, app_config, registry, tables):
        sampler = FakeSampler({100: NoData(), 101: Failed(ValueError("bad"))})
        sync = FingerprintSync(catalog, config=app_config, registry=registry, sampler=sampler)

        stats = sync.fingerprint_fields(tables[0])

        assert stats == FingerprintStats(attempted=2, no_data=1, failed=1)
        assert catalog.get_field(100).fingerprint_version == 0
        assert sync.fingerprint_fields(tables[0]).attempted == 2

    def test_construction_leaves_logging_alone(self, catalog, app_config, registry):
        package_logger = logging.getLogger("fingerprint_sync")
        handlers = list(package_logger.handlers)
        level = package_logger.level

        FingerprintSync(catalog, config=app_config, registry=registry)

        assert package_logger.handlers == handlers
        assert package_logger.level == level

    def test_catalog_error_propagates(self, app_config, registry, tables):
        class BrokenCatalog:
            def list_fields(self, table):
                raise CatalogError("catalog down")

        sync = FingerprintSync(BrokenCatalog(), config=app_config, registry=registry, sampler=FakeSampler())
        with pytest.raises(CatalogError):
            sync.fingerprint_fields(tables[0])


class TestFingerprintDatabase:
    def test_all_tables(self, sync, database, catalog):
        stats = sync.fingerprint_database(database)

        # orders: amount, note; users: email, signup
        assert stats == FingerprintStats(attempted=4, updated=4)
        assert catalog.get_field(201).fingerprint.type_stats["type/Temporal"]["earliest"] == "2024-01-02T03:04:05"

    def test_stats_balanced_after_every_table(self, catalog, app_config, registry, database):
        sampler = FakeSampler({100: NoData(), 200: Failed(ValueError("bad"))})
        sync = FingerprintSync(catalog, config=app_config, registry=registry, sampler=sampler)
        seen = []

        def continue_fn(stats):
            seen.append(stats)
            assert stats.is_balanced
            return True

        total = sync.fingerprint_database(database, continue_fn=continue_fn)

        assert len(seen) == 2
        assert total == FingerprintStats(attempted=4, updated=2, no_data=1, failed=1)

    def test_continue_fn_stops_early(self, catalog, app_config, registry, database):
        sampler = FakeSampler()
        sync = FingerprintSync(catalog, config=app_config, registry=registry, sampler=sampler)

        stats = sync.fingerprint_database(database, continue_fn=lambda s: False)

        assert stats.attempted == 2
        assert [call[0] for call in sampler.calls] == [10]

    def test_progress_fn(self, sync, database):
        steps = []
        sync.fingerprint_database(database, progress_fn=lambda step, table: steps.append((step, table.name)))
        assert steps == [("fingerprint-fields", "orders"), ("fingerprint-fields", "users")]

    def test_unsupported_engine_short_circuits(self, metadata_store, app_config, registry):
        ga = Database(id=2, name="ga", engine="googleanalytics")
        metadata_store.save_database(ga)
        metadata_store.save_table(Table(id=30, db_id=2, name="events"))
        metadata_store.save_field(make_field(300, 30))
        sampler = FakeSampler()

        stats = FingerprintSync(
            metadata_store, config=app_config, registry=registry, sampler=sampler,
        ).fingerprint_database(ga)

        assert stats == FingerprintStats()
        assert sampler.calls == []

    def test_catalog_error_on_one_table_continues(self, catalog, app_config, registry, database):
        class FlakyCatalog:
            def __init__(self, inner):
                self.inner = inner

            def list_fields(self, table):
                if table.name == "orders":
                    raise CatalogError("orders unreadable")
                return self.inner.list_fields(table)

            def __getattr__(self, name):
                return getattr(self.inner, name)

        sync = FingerprintSync(FlakyCatalog(catalog), config=app_config, registry=registry)

        stats = sync.fingerprint_database(database)

        assert stats == FingerprintStats(attempted=2, updated=2)
        assert catalog.get_field(200).fingerprint_version == 5


class TestRefingerprint:
    def test_refingerprint_database_ignores_versions(self, sync, database):
        sync.fingerprint_database(database)
        assert sync.fingerprint_database(database) == FingerprintStats()

        stats = sync.refingerprint_database(database)

        assert stats == FingerprintStats(attempted=4, updated=4)

    def test_refingerprint_steps(self, sync, database):
        steps = []
        sync.refingerprint_database(database, progress_fn=lambda step, table: steps.append(step))
        assert steps == ["refingerprint-fields", "refingerprint-fields"]

    def test_budget_stops_between_tables(self, catalog, app_config, registry, database):
        sampler = FakeSampler()
        sync = FingerprintSync(
            catalog, config=app_config, registry=registry, sampler=sampler, rng=random.Random(0),
        )

        stats = sync.refingerprint_database(database, budget=1)

        # One table is always processed; the budget is checked afterwards
        assert stats.attempted == 2
        assert len(sampler.calls) == 1

    def test_budget_overshoot_is_bounded(self, metadata_store, app_config, registry, database):
        metadata_store.save_database(database)
        for table_id in range(1, 11):
            metadata_store.save_table(Table(id=table_id, db_id=1, name=f"t{table_id}"))
            for n in range(3):
                metadata_store.save_field(make_field(table_id * 10 + n, table_id))
        sync = FingerprintSync(
            metadata_store, config=app_config, registry=registry,
            sampler=FakeSampler(), rng=random.Random(7),
        )

        stats = sync.refingerprint_database(database, budget=10)

        assert 10 <= stats.attempted < 10 + 3

    def test_default_budget_from_config(self, catalog, app_config, registry, database):
        app_config.fingerprint.max_refingerprint_field_count = 1
        sampler = FakeSampler()
        sync = FingerprintSync(catalog, config=app_config, registry=registry, sampler=sampler)

        sync.refingerprint_database(database)

        assert len(sampler.calls) == 1

    def test_tables_are_shuffled_with_injected_rng(self, catalog, app_config, registry, database, tables):
        order = [t.id for t in tables]
        random.Random(3).shuffle(order)
        sampler = FakeSampler()
        sync = FingerprintSync(
            catalog, config=app_config, registry=registry, sampler=sampler, rng=random.Random(3),
        )

        sync.refingerprint_database(database)

        assert [call[0] for call in sampler.calls] == order

    def test_refingerprint_field(self, sync, catalog):
        catalog.persist_fingerprint(201, make_fingerprint(), 5)

        stats = sync.refingerprint_field(catalog.get_field(201))

        assert stats == FingerprintStats(attempted=1, updated=1)
        assert catalog.get_field(201).fingerprint.type_stats["type/Temporal"]["latest"] == "2024-03-01T00:00:00"

    def test_refingerprint_field_skips_eligibility(self, catalog, app_config, registry):
        sampler = FakeSampler()
        sync = FingerprintSync(catalog, config=app_config, registry=registry, sampler=sampler)

        stats = sync.refingerprint_field(catalog.get_field(102))

        assert stats == FingerprintStats(attempted=1, updated=1)
        assert sampler.calls == [(10, [102], 1234)]
