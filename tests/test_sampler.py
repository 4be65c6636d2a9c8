# ==============================================
# Tests for RowSampleFingerprinter
# ==============================================

import pytest

from conftest import FakeClient, make_field
from fingerprint_sync.analysis.outcome import Failed, NoData, Updated
from fingerprint_sync.analysis.sampler import RowSampleFingerprinter
from fingerprint_sync.catalog.models import Database, Table
from fingerprint_sync.errors import CatalogError, SamplingError, UnsupportedEngineError
from fingerprint_sync.storage.source_registry import SourceRegistry


def sampler_for(catalog, registry, **kwargs):
    return RowSampleFingerprinter(catalog, registry, **kwargs)


class TestSampleAndFingerprint:
    def test_one_outcome_per_field(self, catalog, registry, tables):
        orders = tables[0]
        fields = [make_field(100, 10, "amount"), make_field(101, 10, "note", "type/Text")]

        outcomes = sampler_for(catalog, registry).sample_and_fingerprint(orders, fields, 1234)

        assert set(outcomes) == {100, 101}
        assert isinstance(outcomes[100], Updated)
        amount = outcomes[100].fingerprint
        assert amount.global_stats["distinct_count"] == 2
        assert amount.type_stats["type/Number"]["max"] == 25
        assert outcomes[101].fingerprint.type_stats["type/Text"]["average_length"] == pytest.approx(16 / 3)

    def test_values_are_truncated(self, catalog, registry, tables):
        fields = [make_field(100, 10, "amount"), make_field(101, 10, "note", "type/Text")]

        outcomes = sampler_for(catalog, registry).sample_and_fingerprint(tables[0], fields, 2)

        # "first", "second", "third" → "fi", "se", "th"
        assert outcomes[101].fingerprint.type_stats["type/Text"]["average_length"] == 2

    def test_empty_table_is_no_data(self, catalog, app_config, tables):
        registry = SourceRegistry(app_config)
        registry.register("fake", lambda db: FakeClient({}))

        outcomes = sampler_for(catalog, registry).sample_and_fingerprint(
            tables[0], [make_field(100, 10, "amount")], 1234
        )

        assert outcomes == {100: NoData()}

    def test_bad_value_fails_only_that_field(self, catalog, app_config, tables):
        registry = SourceRegistry(app_config)
        registry.register("fake", lambda db: FakeClient({"orders": [{"amount": 1, "note": "a"}, {"amount": "oops", "note": "b"}]}))
        fields = [make_field(100, 10, "amount"), make_field(101, 10, "note", "type/Text")]

        outcomes = sampler_for(catalog, registry).sample_and_fingerprint(tables[0], fields, 1234)

        assert isinstance(outcomes[100], Failed)
        assert isinstance(outcomes[100].cause, ValueError)
        assert isinstance(outcomes[101], Updated)

    def test_broken_stream_fails_every_field(self, catalog, app_config, fake_rows, tables):
        registry = SourceRegistry(app_config)
        registry.register("fake", lambda db: FakeClient(fake_rows, fail_after=1))
        fields = [make_field(100, 10, "amount"), make_field(101, 10, "note", "type/Text")]

        outcomes = sampler_for(catalog, registry).sample_and_fingerprint(tables[0], fields, 1234)

        assert all(isinstance(o, Failed) for o in outcomes.values())
        assert isinstance(outcomes[100].cause, SamplingError)

    def test_connection_failure_fails_every_field(self, catalog, app_config, tables):
        registry = SourceRegistry(app_config)
        registry.register("fake", lambda db: FakeClient({}, fail_on_connect=True))

        outcomes = sampler_for(catalog, registry).sample_and_fingerprint(
            tables[0], [make_field(100, 10, "amount")], 1234
        )

        assert isinstance(outcomes[100], Failed)
        assert "connection refused" in outcomes[100].message

    def test_unsupported_engine_fails_fields(self, metadata_store, registry):
        metadata_store.save_database(Database(id=2, name="ga", engine="googleanalytics"))
        table = Table(id=30, db_id=2, name="events")

        outcomes = sampler_for(metadata_store, registry).sample_and_fingerprint(
            table, [make_field(300, 30)], 1234
        )

        assert isinstance(outcomes[300].cause, UnsupportedEngineError)

    def test_row_limit_is_passed_to_client(self, catalog, app_config, fake_rows, tables):
        client = FakeClient(fake_rows)
        registry = SourceRegistry(app_config)
        registry.register("fake", lambda db: client)

        outcomes = sampler_for(catalog, registry, max_sample_rows=1).sample_and_fingerprint(
            tables[0], [make_field(100, 10, "amount")], 1234
        )

        assert client.calls == [("orders", ["amount"], 1234, 1)]
        assert outcomes[100].fingerprint.global_stats["distinct_count"] == 1

    def test_unknown_database_raises_catalog_error(self, metadata_store, registry):
        table = Table(id=99, db_id=42, name="ghost")
        with pytest.raises(CatalogError):
            sampler_for(metadata_store, registry).sample_and_fingerprint(table, [make_field(1, 99)], 1234)
