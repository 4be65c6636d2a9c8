# ==============================================
# Fingerprint
# ==============================================
#
# PURPOSE:
#   The stored, non-identifying summary of a field's sampled values.
#   Downstream classification reads it; the engine only cares about
#   one thing inside it: whether any distinct value was seen.
#
# SHAPE (to_dict):
#   {
#     "global": {"distinct_count": 42, "nil_percent": 0.1},
#     "type":   {"type/Number": {"min": 1, "max": 9, "avg": 4.2, "sd": 2.0}}
#   }
#
# ==============================================

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class Fingerprint:
    """Summary statistics for one field, split into global and type-specific parts."""

    global_stats: Dict[str, Any] = field(default_factory=dict)
    type_stats: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @property
    def distinct_count(self) -> int:
        return int(self.global_stats.get("distinct_count", 0) or 0)

    @property
    def has_data(self) -> bool:
        """False when sampling saw no distinct values at all."""
        return self.distinct_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "global": dict(self.global_stats),
            "type": {tag: dict(stats) for tag, stats in self.type_stats.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Fingerprint":
        return cls(
            global_stats=dict(data.get("global", {})),
            type_stats={tag: dict(stats) for tag, stats in data.get("type", {}).items()},
        )
