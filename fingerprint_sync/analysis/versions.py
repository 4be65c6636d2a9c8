# ==============================================
# Version Schedule & Predicate
# ==============================================
#
# PURPOSE:
#   Decide which stored fingerprints are out of date.
#
#   Every revision of the fingerprint algorithm gets a version number.
#   The VersionSchedule says, for each version N, which base types
#   changed in that revision: a field of one of those types whose
#   stored fingerprint_version is below N must be fingerprinted again.
#
# ECLIPSING:
#   Naively the check is an OR of one clause per version. Walking the
#   versions from newest to oldest and dropping types already covered
#   by a newer clause gives the same answer with fewer clauses:
#
#     {1: {Boolean, Integer}, 2: {Integer, Text}}
#       naive   → (v < 2 AND t IN {Integer, Text}) OR (v < 1 AND t IN {Boolean, Integer})
#       reduced → (v < 2 AND t IN {Integer, Text}) OR (v < 1 AND t IN {Boolean})
#
#   Anything that is an Integer and below version 1 is also below
#   version 2, so the older Integer test can never add a match.
#   A version whose types are all covered emits no clause at all,
#   which keeps the predicate from growing with every release.
#
# CLASSES / FUNCTIONS:
# --------------------
# - VersionSchedule     → immutable {version: frozenset(types)}
# - VersionClause       → (version, types) — "v < version AND t in types"
# - build_version_clauses(schedule, hierarchy) -> tuple[VersionClause, ...]
# - VersionPredicate    → OR of clauses; matches() and to_sql()
#
# ==============================================

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Mapping, Tuple

from fingerprint_sync.catalog.type_hierarchy import DEFAULT_HIERARCHY, ROOT_TYPE, TypeHierarchy


class VersionSchedule:
    """Append-only mapping of fingerprint version → types to re-fingerprint."""

    def __init__(self, versions: Mapping[int, Iterable[str]]):
        entries = {}
        for version, types in versions.items():
            if isinstance(version, bool) or not isinstance(version, int) or version < 1:
                raise ValueError(f"Fingerprint versions must be positive integers, got {version!r}")
            entries[version] = frozenset(types)
        self._versions = entries

    @property
    def latest_version(self) -> int:
        """Highest known version; fields are stamped with this when saved."""
        return max(self._versions, default=0)

    def items_descending(self) -> List[Tuple[int, FrozenSet[str]]]:
        return sorted(self._versions.items(), key=lambda item: item[0], reverse=True)

    def with_version(self, version: int, types: Iterable[str]) -> "VersionSchedule":
        """Return a new schedule with one more version appended."""
        if version <= self.latest_version:
            raise ValueError(
                f"New version {version} must be greater than latest version {self.latest_version}"
            )
        merged = dict(self._versions)
        merged[version] = frozenset(types)
        return VersionSchedule(merged)

    def __len__(self) -> int:
        return len(self._versions)

    def __getitem__(self, version: int) -> FrozenSet[str]:
        return self._versions[version]

    def __repr__(self) -> str:
        inner = ", ".join(f"{v}: {sorted(t)}" for v, t in sorted(self._versions.items()))
        return f"VersionSchedule({{{inner}}})"


@dataclass(frozen=True)
class VersionClause:
    """Flags a field when its stored version < `version` and its base type is in `types`."""

    version: int
    types: FrozenSet[str]

    def matches(self, base_type: str, fingerprint_version: int) -> bool:
        return fingerprint_version < self.version and base_type in self.types


def build_version_clauses(
    schedule: VersionSchedule,
    hierarchy: TypeHierarchy = DEFAULT_HIERARCHY,
) -> Tuple[VersionClause, ...]:
    """
    Reduce a schedule to its minimal list of clauses, newest version first.

    Args:
        schedule: The version schedule to reduce
        hierarchy: Type hierarchy used to expand each version's types

    Returns:
        Clauses to be OR-ed together; eclipsed versions are omitted
    """
    clauses = []
    covered: FrozenSet[str] = frozenset()

    for version, declared in schedule.items_descending():
        not_yet_covered = hierarchy.with_descendants(declared) - covered
        if not not_yet_covered:
            continue
        clauses.append(VersionClause(version, not_yet_covered))
        covered = covered | not_yet_covered

    return tuple(clauses)


class VersionPredicate:
    """OR of VersionClauses, evaluated in Python or rendered as SQL."""

    def __init__(self, clauses: Iterable[VersionClause]):
        self.clauses: Tuple[VersionClause, ...] = tuple(clauses)

    @classmethod
    def from_schedule(
        cls,
        schedule: VersionSchedule,
        hierarchy: TypeHierarchy = DEFAULT_HIERARCHY,
    ) -> "VersionPredicate":
        return cls(build_version_clauses(schedule, hierarchy))

    def matches(self, base_type: str, fingerprint_version: int) -> bool:
        """True if a field with this type and stored version needs a new fingerprint."""
        return any(clause.matches(base_type, fingerprint_version) for clause in self.clauses)

    def to_sql(
        self,
        version_column: str = "fingerprint_version",
        type_column: str = "base_type",
    ) -> Tuple[str, list]:
        """
        Render the predicate as a parameterised WHERE fragment (pymysql %s style).

        Example:
            ((fingerprint_version < %s AND base_type IN (%s, %s)) OR (...))

        Returns:
            (sql, params). With no clauses the fragment matches nothing.
        """
        if not self.clauses:
            return "1 = 0", []

        parts = []
        params: list = []
        for clause in self.clauses:
            types = sorted(clause.types)
            placeholders = ", ".join(["%s"] * len(types))
            parts.append(f"({version_column} < %s AND {type_column} IN ({placeholders}))")
            params.append(clause.version)
            params.extend(types)

        return "(" + " OR ".join(parts) + ")", params

    def __iter__(self):
        return iter(self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)


# Revisions of the bundled fingerprint algorithm. Append new versions, never edit old ones.
DEFAULT_VERSION_SCHEDULE = VersionSchedule({
    1: {ROOT_TYPE},
    2: {"type/Number"},
    3: {"type/DateTime"},
    4: {ROOT_TYPE},
    5: {"type/Text"},
})
