# ==============================================
# FingerprintSync — Table / Database Driver
# ==============================================
#
# PURPOSE:
#   This is the MAIN CLASS that ties the topics together. Callers
#   (a scheduler, a sync job, a test) interact with this class only.
#
# HOW IT CONNECTS THE TOPICS (per table):
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                     FingerprintSync                      │
#   │                                                          │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ SELECTION                                    │        │
#   │  │  MetadataStore.list_fields → FieldSelector   │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ candidate fields                       │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ SAMPLING                                     │        │
#   │  │  RowSampleFingerprinter → MySQL / Mongo      │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ {field_id: Outcome}                    │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ REDUCTION                                    │        │
#   │  │  ResultReducer → persist_fingerprint         │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ FingerprintStats                       │
#   │                 ▼                                        │
#   │        running total + continue_fn(total)?               │
#   └──────────────────────────────────────────────────────────┘
#
# CLASS: FingerprintSync
# ----------------------
#
#   Constructor:
#   ------------
#   - __init__(catalog, config=None, sampler=None, registry=None,
#              schedule=DEFAULT_VERSION_SCHEDULE,
#              hierarchy=DEFAULT_HIERARCHY, rng=None)
#
#   Public Methods:
#   ---------------
#   - fingerprint_fields(table, refingerprint=False) -> FingerprintStats
#       Select, sample and save one table.
#
#   - fingerprint_database(database, continue_fn=None, progress_fn=None)
#       Every table in catalog order, stopping when continue_fn(total)
#       returns False.
#
#   - refingerprint_database(database, budget=None, progress_fn=None)
#       Shuffled tables, every eligible field regardless of version,
#       stopping once `budget` fields have been attempted.
#
#   - refingerprint_field(field) -> FingerprintStats
#       Fingerprint exactly one field, skipping selection.
#
# ==============================================

import logging
import random
from typing import Callable, Iterable, List, Optional

from fingerprint_sync.analysis.reducer import FingerprintStats, ResultReducer
from fingerprint_sync.analysis.sampler import RowSampleFingerprinter
from fingerprint_sync.analysis.selector import FieldSelector
from fingerprint_sync.analysis.versions import (
    DEFAULT_VERSION_SCHEDULE,
    VersionPredicate,
    VersionSchedule,
)
from fingerprint_sync.catalog.models import Database, Field, Table
from fingerprint_sync.catalog.type_hierarchy import DEFAULT_HIERARCHY, TypeHierarchy
from fingerprint_sync.config import AppConfig, get_config
from fingerprint_sync.errors import CatalogError, SamplingError
from fingerprint_sync.storage.source_registry import SourceRegistry

logger = logging.getLogger(__name__)

ContinueFn = Callable[[FingerprintStats], bool]
ProgressFn = Callable[[str, Table], None]


def always_continue(_stats: FingerprintStats) -> bool:
    return True


class FingerprintSync:
    """
    Incremental fingerprinting of catalog fields, one table at a time.

    Holds only immutable collaborators; the refingerprint flag and the
    continuation predicate are per-call, so one instance can serve
    several databases concurrently.
    """

    def __init__(
        self,
        catalog,
        config: Optional[AppConfig] = None,
        sampler=None,
        registry: Optional[SourceRegistry] = None,
        schedule: VersionSchedule = DEFAULT_VERSION_SCHEDULE,
        hierarchy: TypeHierarchy = DEFAULT_HIERARCHY,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            catalog: list_tables / list_fields / get_table / get_database /
                     engine_of / persist_fingerprint provider (e.g. MetadataStore)
            config: Application configuration. If None, loads from environment.
            sampler: Object with sample_and_fingerprint(table, fields, truncation_size).
                     Defaults to a RowSampleFingerprinter over `registry`.
            registry: Engine → data-source client mapping
            schedule: Fingerprint version schedule
            hierarchy: Type hierarchy used for selection and statistics
            rng: Random source for table shuffling in refingerprint_database
        """
        self._config = config or get_config()
        self._catalog = catalog
        self._registry = registry or SourceRegistry(self._config)
        self._sampler = sampler or RowSampleFingerprinter(
            catalog,
            self._registry,
            max_sample_rows=self._config.fingerprint.max_sample_rows,
            max_unique_tracked=self._config.fingerprint.max_unique_tracked,
            hierarchy=hierarchy,
        )
        self._schedule = schedule
        self._selector = FieldSelector(VersionPredicate.from_schedule(schedule, hierarchy), hierarchy)
        self._reducer = ResultReducer(catalog, schedule.latest_version)
        self._rng = rng or random.Random()

    @property
    def latest_version(self) -> int:
        return self._schedule.latest_version

    def fingerprint_fields(self, table: Table, refingerprint: bool = False) -> FingerprintStats:
        """
        Fingerprint the fields of one table that need it.

        Args:
            table: Table to process
            refingerprint: Take every eligible field, ignoring stored versions

        Returns:
            Stats for this table (all zero when no field qualifies)

        Raises:
            CatalogError: If the table's fields cannot be read
        """
        fields = self._selector.fields_to_fingerprint(self._catalog, table, refingerprint)
        if not fields:
            return FingerprintStats()
        return self._fingerprint_table(table, fields)

    def fingerprint_database(
        self,
        database: Database,
        continue_fn: Optional[ContinueFn] = None,
        progress_fn: Optional[ProgressFn] = None,
    ) -> FingerprintStats:
        """
        Fingerprint every table of a database, in catalog order.

        Args:
            database: Database to process
            continue_fn: Called with the running total after each table;
                         returning False stops before the next table
            progress_fn: Called as progress_fn(step_name, table) before each table

        Returns:
            Totals over the tables processed
        """
        tables = self._catalog.list_tables(database)
        return self._fingerprint_tables(
            database,
            tables,
            refingerprint=False,
            continue_fn=continue_fn or always_continue,
            progress_fn=progress_fn,
        )

    def refingerprint_database(
        self,
        database: Database,
        budget: Optional[int] = None,
        progress_fn: Optional[ProgressFn] = None,
    ) -> FingerprintStats:
        """
        Re-fingerprint already analysed fields, a bounded amount per call.

        Tables are shuffled so repeated calls spread work across the
        whole database rather than always starting at the first table.
        The budget is checked between tables, so the total may overshoot
        it by at most one table's worth of fields.

        Args:
            database: Database to process
            budget: Stop once this many fields were attempted
                    (default: config max_refingerprint_field_count)
            progress_fn: Called as progress_fn(step_name, table) before each table
        """
        if budget is None:
            budget = self._config.fingerprint.max_refingerprint_field_count

        tables = list(self._catalog.list_tables(database))
        self._rng.shuffle(tables)

        return self._fingerprint_tables(
            database,
            tables,
            refingerprint=True,
            continue_fn=lambda stats: stats.attempted < budget,
            progress_fn=progress_fn,
        )

    def refingerprint_field(self, field: Field) -> FingerprintStats:
        """Fingerprint a single field now, whatever its version or eligibility."""
        table = self._catalog.get_table(field.table_id)
        return self._fingerprint_table(table, [field])

    # ======================================
    # Internal helpers
    # ======================================
    def _fingerprint_table(self, table: Table, fields: List[Field]) -> FingerprintStats:
        outcomes = self._sampler.sample_and_fingerprint(
            table,
            fields,
            self._config.fingerprint.truncation_size,
        )
        return self._reducer.reduce(fields, outcomes)

    def _fingerprint_tables(
        self,
        database: Database,
        tables: Iterable[Table],
        refingerprint: bool,
        continue_fn: ContinueFn,
        progress_fn: Optional[ProgressFn],
    ) -> FingerprintStats:
        step_name = "refingerprint-fields" if refingerprint else "fingerprint-fields"
        engine = self._catalog.engine_of(database)
        supported = self._registry.is_supported(engine)
        if not supported:
            logger.warning("Skipping fingerprinting of '%s': engine '%s' is not supported",
                           database.name, engine)

        total = FingerprintStats()
        for table in tables:
            if progress_fn:
                progress_fn(step_name, table)

            if supported:
                table_stats = self._fingerprint_table_safely(table, refingerprint)
            else:
                table_stats = FingerprintStats()

            total = total + table_stats
            if not continue_fn(total):
                logger.info("Stopping %s for '%s' after %s", step_name, database.name, table.qualified_name)
                break

        logger.info("Finished %s for '%s': %s", step_name, database.name, total.to_dict())
        return total

    def _fingerprint_table_safely(self, table: Table, refingerprint: bool) -> FingerprintStats:
        try:
            return self.fingerprint_fields(table, refingerprint)
        except (CatalogError, SamplingError) as e:
            logger.warning("Error fingerprinting %s: %s", table.qualified_name, e)
            return FingerprintStats()
