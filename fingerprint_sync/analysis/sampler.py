# ==============================================
# RowSampleFingerprinter
# ==============================================
#
# PURPOSE:
#   The sampling boundary. For one table and its candidate fields:
#     1. Open a data-source client for the table's database
#     2. Stream at most `max_sample_rows` rows, every value already
#        cut to `truncation_size` characters
#     3. Feed column i of each row to the FieldStats of field i
#     4. Return exactly one Outcome per field id
#
# FAILURE HANDLING:
#   - A FieldStats that raises on a value → that field is Failed,
#     the rest of the table carries on. Its later values are skipped.
#   - The client cannot connect, or the stream breaks → every field
#     that has not already failed is Failed with that cause.
#   - Nothing here raises for a field problem. Failures are logged
#     once, where they happen, and returned as outcomes.
#   - No retries within a pass.
#
# CLASS: RowSampleFingerprinter
# -----------------------------
#   Constructor:
#   ------------
#   - __init__(catalog, registry, max_sample_rows=10000,
#              max_unique_tracked=10000, hierarchy=DEFAULT_HIERARCHY)
#
#   Methods:
#   --------
#   - sample_and_fingerprint(table, fields, truncation_size)
#         -> dict[field_id, Outcome]
#
# ==============================================

import logging
from typing import Dict, List, Sequence

from fingerprint_sync.catalog.models import Field, Table
from fingerprint_sync.catalog.type_hierarchy import DEFAULT_HIERARCHY, TypeHierarchy
from fingerprint_sync.normalization import ValueNormalizer
from .field_stats import FieldStats
from .outcome import Failed, Outcome, outcome_for

logger = logging.getLogger(__name__)


class RowSampleFingerprinter:
    """Streams row samples from a data source and fingerprints each requested field."""

    def __init__(
        self,
        catalog,
        registry,
        max_sample_rows: int = 10000,
        max_unique_tracked: int = 10000,
        hierarchy: TypeHierarchy = DEFAULT_HIERARCHY,
    ):
        self.catalog = catalog
        self.registry = registry
        self.max_sample_rows = max_sample_rows
        self.max_unique_tracked = max_unique_tracked
        self.hierarchy = hierarchy

    def sample_and_fingerprint(
        self,
        table: Table,
        fields: Sequence[Field],
        truncation_size: int,
    ) -> Dict[int, Outcome]:
        """
        Fingerprint `fields` of `table` from one bounded sample.

        Args:
            table: Table to sample
            fields: Candidate fields, in column order of the sample
            truncation_size: Max characters kept from any single value

        Returns:
            field id → Updated | NoData | Failed, one entry per field

        Raises:
            CatalogError: If the table's database cannot be read from the catalog
        """
        database = self.catalog.get_database(table.db_id)
        normalizer = ValueNormalizer(truncation_size)
        accumulators: List[FieldStats] = [
            FieldStats(
                name=field.name,
                base_type=field.base_type,
                hierarchy=self.hierarchy,
                max_unique_tracked=self.max_unique_tracked,
            )
            for field in fields
        ]
        failures: Dict[int, BaseException] = {}

        try:
            with self.registry.client_for(database) as client:
                rows = client.table_rows_sample(table, fields, truncation_size, self.max_sample_rows)
                for row in rows:
                    for field, stats, value in zip(fields, accumulators, row):
                        if field.id in failures:
                            continue
                        try:
                            stats.update(normalizer.normalize(value))
                        except Exception as e:
                            logger.warning(
                                "Error fingerprinting field '%s' of %s: %s",
                                field.name, table.qualified_name, e,
                            )
                            failures[field.id] = e
        except Exception as e:
            logger.warning("Error sampling %s: %s", table.qualified_name, e)
            for field in fields:
                failures.setdefault(field.id, e)

        outcomes: Dict[int, Outcome] = {}
        for field, stats in zip(fields, accumulators):
            if field.id in failures:
                outcomes[field.id] = Failed(failures[field.id])
            else:
                outcomes[field.id] = outcome_for(stats.fingerprint())
        return outcomes
