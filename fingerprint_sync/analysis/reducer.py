# ==============================================
# Result Reducer
# ==============================================
#
# PURPOSE:
#   Turn the sampler's per-field outcomes into saved fingerprints
#   and a running count.
#
#     Updated(fp) → persist {fingerprint: fp,
#                            fingerprint_version: latest,
#                            last_analyzed: None}
#                   updated += 1
#     NoData      → no_data += 1   (nothing saved, field stays due)
#     Failed      → failed += 1    (nothing saved)
#
#   last_analyzed is cleared so later analysis steps know the field
#   has a new fingerprint they have not looked at yet.
#
#   Every fold bumps `attempted` together with exactly one of the
#   other three counters, so attempted == updated + no_data + failed
#   holds after every single fold.
#
# CLASSES:
# --------
# - FingerprintStats (frozen dataclass)
#     attempted, updated, no_data, failed; `+` adds field-wise.
#
# - ResultReducer
#     fold(stats, field, outcome) -> FingerprintStats
#     reduce(fields, outcomes) -> FingerprintStats
#
# ==============================================

import logging
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Sequence

from fingerprint_sync.catalog.models import Field
from fingerprint_sync.errors import CatalogError
from .outcome import Failed, NoData, Outcome, Updated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FingerprintStats:
    """Counts for one fingerprinting run (a field, a table, or a whole database)."""

    attempted: int = 0
    updated: int = 0
    no_data: int = 0
    failed: int = 0

    def __add__(self, other: "FingerprintStats") -> "FingerprintStats":
        if not isinstance(other, FingerprintStats):
            return NotImplemented
        return FingerprintStats(
            attempted=self.attempted + other.attempted,
            updated=self.updated + other.updated,
            no_data=self.no_data + other.no_data,
            failed=self.failed + other.failed,
        )

    @property
    def is_balanced(self) -> bool:
        return self.attempted == self.updated + self.no_data + self.failed

    def to_dict(self) -> Dict[str, int]:
        return {
            "attempted": self.attempted,
            "updated": self.updated,
            "no_data": self.no_data,
            "failed": self.failed,
        }


class ResultReducer:
    """Persists Updated outcomes and folds every outcome into FingerprintStats."""

    def __init__(self, catalog, latest_version: int):
        """
        Args:
            catalog: Anything with persist_fingerprint(field_id, fingerprint, version, last_analyzed=None)
            latest_version: Version stamped on every fingerprint saved
        """
        self.catalog = catalog
        self.latest_version = latest_version

    def fold(self, stats: FingerprintStats, field: Field, outcome: Outcome) -> FingerprintStats:
        stats = replace(stats, attempted=stats.attempted + 1)

        if isinstance(outcome, Updated):
            try:
                self._save_fingerprint(field, outcome)
            except CatalogError as e:
                logger.warning("Could not save fingerprint for field '%s': %s", field.name, e)
                return replace(stats, failed=stats.failed + 1)
            return replace(stats, updated=stats.updated + 1)

        if isinstance(outcome, NoData):
            return replace(stats, no_data=stats.no_data + 1)

        if isinstance(outcome, Failed):
            return replace(stats, failed=stats.failed + 1)

        raise TypeError(f"Unknown fingerprint outcome: {outcome!r}")

    def reduce(self, fields: Sequence[Field], outcomes: Mapping[int, Outcome]) -> FingerprintStats:
        """
        Fold the outcome of every field, matched by field id.

        A field with no outcome in `outcomes` counts as Failed.

        Returns:
            Stats with attempted == len(fields)
        """
        stats = FingerprintStats()
        for field in fields:
            outcome = outcomes.get(field.id)
            if outcome is None:
                outcome = Failed(LookupError(f"Sampler returned no outcome for field {field.id}"))
                logger.warning("No fingerprint outcome for field '%s'", field.name)
            stats = self.fold(stats, field, outcome)
        return stats

    def _save_fingerprint(self, field: Field, outcome: Updated) -> None:
        logger.debug("Saving fingerprint for field '%s' (id=%s)", field.name, field.id)
        self.catalog.persist_fingerprint(
            field.id,
            outcome.fingerprint,
            self.latest_version,
            last_analyzed=None,
        )
