# ==============================================
# FieldStats
# ==============================================
#
# PURPOSE:
#   Accumulator that watches the sampled values of ONE field and
#   turns them into a Fingerprint. This is the default fingerprint
#   algorithm; the engine treats its output as opaque.
#
# WHAT IS TRACKED:
#   Global (every field):
#   - presence_count    → values seen, nulls included
#   - null_count        → how many of them were None
#   - unique_values     → distinct non-null values (capped for memory)
#
#   By base type family (picked with the TypeHierarchy):
#   - type/Number   → min, max, avg, sd   (running, Welford)
#   - type/Text     → percent_json, percent_url, percent_email,
#                     percent_state, average_length
#   - type/Temporal → earliest, latest
#
# FAILURE:
#   A value that cannot be coerced to the field's family (e.g. "abc"
#   in a type/Integer column) raises ValueError. The sampler catches
#   it and reports the field as Failed.
#
# CLASS: FieldStats (dataclass)
# -----------------------------
#   Methods:
#   --------
#   - update(value) -> None
#   - fingerprint() -> Fingerprint
#
#   Computed Properties:
#   --------------------
#   - distinct_count -> int
#   - nil_percent -> float
#
# ==============================================

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Set

from fingerprint_sync.catalog.fingerprint import Fingerprint
from fingerprint_sync.catalog.type_hierarchy import (
    DEFAULT_HIERARCHY,
    NUMBER_TYPE,
    TEMPORAL_TYPE,
    TEXT_TYPE,
    TypeHierarchy,
)
from fingerprint_sync.normalization import TypeDetector


@dataclass
class FieldStats:
    """
    Observed statistics for a single field across the sampled rows.
    """

    # --- Core identity ---
    name: str
    base_type: str
    hierarchy: TypeHierarchy = field(default=DEFAULT_HIERARCHY, repr=False)

    # --- Counters ---
    presence_count: int = 0
    null_count: int = 0

    # --- Uniqueness tracking ---
    unique_values: Set[Any] = field(default_factory=set, repr=False)
    max_unique_tracked: int = 10000

    # --- Number family (Welford running mean / variance) ---
    number_count: int = 0
    number_min: Optional[float] = None
    number_max: Optional[float] = None
    _number_mean: float = 0.0
    _number_m2: float = 0.0

    # --- Text family ---
    text_count: int = 0
    total_length: int = 0
    json_count: int = 0
    url_count: int = 0
    email_count: int = 0
    state_count: int = 0

    # --- Temporal family ---
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None

    def __post_init__(self):
        """Work out which family of type statistics applies."""
        if self.hierarchy.isa(self.base_type, NUMBER_TYPE):
            self.family = NUMBER_TYPE
        elif self.hierarchy.isa(self.base_type, TEXT_TYPE):
            self.family = TEXT_TYPE
        elif self.hierarchy.isa(self.base_type, TEMPORAL_TYPE):
            self.family = TEMPORAL_TYPE
        else:
            self.family = None

    # ======================================
    # Update logic
    # ======================================
    def update(self, value: Any) -> None:
        """
        Fold one sampled value into the statistics.

        Args:
            value: A normalized value (see ValueNormalizer)

        Raises:
            ValueError: If the value does not fit the field's type family
        """
        self.presence_count += 1

        if value is None:
            self.null_count += 1
            return

        if len(self.unique_values) < self.max_unique_tracked:
            try:
                self.unique_values.add(value)
            except TypeError:
                self.unique_values.add(repr(value))

        if self.family == NUMBER_TYPE:
            self._update_number(value)
        elif self.family == TEXT_TYPE:
            self._update_text(value)
        elif self.family == TEMPORAL_TYPE:
            self._update_temporal(value)

    def _update_number(self, value: Any) -> None:
        number = TypeDetector.to_number(value)
        if number is None or math.isnan(number):
            raise ValueError(f"Cannot read {value!r} as a number in field '{self.name}'")

        self.number_count += 1
        delta = number - self._number_mean
        self._number_mean += delta / self.number_count
        self._number_m2 += delta * (number - self._number_mean)

        if self.number_min is None or number < self.number_min:
            self.number_min = number
        if self.number_max is None or number > self.number_max:
            self.number_max = number

    def _update_text(self, value: Any) -> None:
        text = value if isinstance(value, str) else str(value)
        self.text_count += 1
        self.total_length += len(text)
        if TypeDetector.is_json(text):
            self.json_count += 1
        if TypeDetector.is_url(text):
            self.url_count += 1
        if TypeDetector.is_email(text):
            self.email_count += 1
        if TypeDetector.is_state(text):
            self.state_count += 1

    def _update_temporal(self, value: Any) -> None:
        moment = TypeDetector.parse_datetime(value)
        if moment is None:
            raise ValueError(f"Cannot read {value!r} as a date/time in field '{self.name}'")

        if self.earliest is None or moment < self.earliest:
            self.earliest = moment
        if self.latest is None or moment > self.latest:
            self.latest = moment

    # ======================================
    # Computed properties
    # ======================================
    @property
    def distinct_count(self) -> int:
        return len(self.unique_values)

    @property
    def nil_percent(self) -> float:
        if self.presence_count == 0:
            return 0.0
        return self.null_count / self.presence_count

    # ======================================
    # Output
    # ======================================
    def fingerprint(self) -> Fingerprint:
        """
        Build the Fingerprint for everything observed so far.

        Returns:
            Fingerprint with a "global" part and, when the field's type
            family is known and values were seen, one type-specific part
        """
        global_stats = {
            "distinct_count": self.distinct_count,
            "nil_percent": round(self.nil_percent, 6),
        }

        type_stats: Dict[str, Dict[str, Any]] = {}
        if self.family == NUMBER_TYPE and self.number_count:
            type_stats[NUMBER_TYPE] = {
                "min": self.number_min,
                "max": self.number_max,
                "avg": self._number_mean,
                "sd": math.sqrt(self._number_m2 / self.number_count),
            }
        elif self.family == TEXT_TYPE and self.text_count:
            type_stats[TEXT_TYPE] = {
                "percent_json": self.json_count / self.text_count,
                "percent_url": self.url_count / self.text_count,
                "percent_email": self.email_count / self.text_count,
                "percent_state": self.state_count / self.text_count,
                "average_length": self.total_length / self.text_count,
            }
        elif self.family == TEMPORAL_TYPE and self.earliest is not None:
            type_stats[TEMPORAL_TYPE] = {
                "earliest": self.earliest.isoformat(),
                "latest": self.latest.isoformat(),
            }

        return Fingerprint(global_stats=global_stats, type_stats=type_stats)
