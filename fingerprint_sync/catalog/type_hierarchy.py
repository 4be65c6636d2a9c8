# ==============================================
# TypeHierarchy
# ==============================================
#
# PURPOSE:
#   Immutable DAG of type tags ("type/Integer", "type/Text", ...).
#   A tag is more specific than each of its parents; descendants
#   are the transitive closure of that relation.
#
# WHERE IT IS USED:
#   - versions.py   → expand a version's declared types to every
#                     concrete tag a stored field may carry
#   - selector.py   → "semantic type isa type/PK" eligibility check
#   - field_stats.py → pick number / text / temporal statistics
#
# CLASS: TypeHierarchy
# --------------------
#   Constructor:
#   ------------
#   - __init__(edges: Mapping[str, Iterable[str]])
#       child tag → parent tags. Parents never listed as a child
#       become roots. Cycles raise TypeHierarchyError.
#
#   Methods:
#   --------
#   - descendants(tag) -> frozenset[str]   (excludes tag itself)
#   - ancestors(tag) -> frozenset[str]     (excludes tag itself)
#   - isa(tag, parent) -> bool             (reflexive)
#   - tags -> frozenset[str]
#
# ==============================================

from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set

from fingerprint_sync.errors import TypeHierarchyError

ROOT_TYPE = "type/*"
NUMBER_TYPE = "type/Number"
TEXT_TYPE = "type/Text"
TEMPORAL_TYPE = "type/Temporal"
STRUCTURED_TYPE = "type/Structured"
PK_TYPE = "type/PK"


class TypeHierarchy:
    """Immutable type DAG with precomputed ancestor/descendant closures."""

    def __init__(self, edges: Mapping[str, Iterable[str]]):
        self._parents: Dict[str, FrozenSet[str]] = {
            child: frozenset(parents) for child, parents in edges.items()
        }
        for parents in list(self._parents.values()):
            for parent in parents:
                self._parents.setdefault(parent, frozenset())

        self._check_acyclic()

        children: Dict[str, Set[str]] = {tag: set() for tag in self._parents}
        for child, parents in self._parents.items():
            for parent in parents:
                children[parent].add(child)

        self._ancestors = {tag: self._closure(tag, self._parents) for tag in self._parents}
        self._descendants = {tag: self._closure(tag, children) for tag in self._parents}

    @property
    def tags(self) -> FrozenSet[str]:
        return frozenset(self._parents)

    def __contains__(self, tag: str) -> bool:
        return tag in self._parents

    def parents(self, tag: str) -> FrozenSet[str]:
        return self._parents.get(tag, frozenset())

    def descendants(self, tag: str) -> FrozenSet[str]:
        """
        Every tag that specialises `tag`, transitively.

        Unknown tags behave as leaves and return an empty set.
        """
        return self._descendants.get(tag, frozenset())

    def ancestors(self, tag: str) -> FrozenSet[str]:
        return self._ancestors.get(tag, frozenset())

    def isa(self, tag: Optional[str], parent: str) -> bool:
        """
        True if `tag` is `parent` or one of its descendants.

        Args:
            tag: Tag to test (None is never a match)
            parent: The more general tag

        Returns:
            Whether tag specialises parent
        """
        if tag is None:
            return False
        return tag == parent or parent in self.ancestors(tag)

    def with_descendants(self, tags: Iterable[str]) -> FrozenSet[str]:
        """Union of each tag and its descendants."""
        expanded: Set[str] = set()
        for tag in tags:
            expanded.add(tag)
            expanded.update(self.descendants(tag))
        return frozenset(expanded)

    # ======================================
    # Internal helpers
    # ======================================
    @staticmethod
    def _closure(start: str, graph: Mapping[str, Iterable[str]]) -> FrozenSet[str]:
        seen: Set[str] = set()
        stack = list(graph.get(start, ()))
        while stack:
            tag = stack.pop()
            if tag in seen:
                continue
            seen.add(tag)
            stack.extend(graph.get(tag, ()))
        return frozenset(seen)

    def _check_acyclic(self) -> None:
        # 0 = unvisited, 1 = on the current path, 2 = done
        state: Dict[str, int] = {}

        for root in self._parents:
            if state.get(root):
                continue
            stack = [(root, iter(self._parents[root]))]
            state[root] = 1
            while stack:
                tag, parents = stack[-1]
                parent = next(parents, None)
                if parent is None:
                    state[tag] = 2
                    stack.pop()
                    continue
                if state.get(parent) == 1:
                    raise TypeHierarchyError(f"Cycle in type hierarchy through '{parent}'")
                if not state.get(parent):
                    state[parent] = 1
                    stack.append((parent, iter(self._parents[parent])))


# Base and semantic types of the catalog. Semantic types hang off
# their own root so a schedule entry for type/* never reaches them.
DEFAULT_TYPE_EDGES: Dict[str, tuple] = {
    # --- base types ---
    "type/Number": (ROOT_TYPE,),
    "type/Integer": ("type/Number",),
    "type/BigInteger": ("type/Integer",),
    "type/Float": ("type/Number",),
    "type/Decimal": ("type/Float",),
    "type/Text": (ROOT_TYPE,),
    "type/UUID": ("type/Text",),
    "type/PostgresEnum": ("type/Text",),
    "type/TextLike": (ROOT_TYPE,),
    "type/IPAddress": ("type/TextLike",),
    "type/MongoBSONID": ("type/TextLike",),
    "type/Boolean": (ROOT_TYPE,),
    "type/Temporal": (ROOT_TYPE,),
    "type/Date": ("type/Temporal",),
    "type/Time": ("type/Temporal",),
    "type/DateTime": ("type/Temporal",),
    "type/DateTimeWithTZ": ("type/DateTime",),
    "type/DateTimeWithLocalTZ": ("type/DateTimeWithTZ",),
    "type/Instant": ("type/DateTime",),
    "type/Collection": (ROOT_TYPE,),
    "type/Dictionary": ("type/Collection",),
    "type/Array": ("type/Collection",),
    "type/Structured": (ROOT_TYPE,),
    "type/SerializedJSON": ("type/Structured", "type/Collection"),
    "type/XML": ("type/Structured", "type/Collection"),
    # --- semantic types ---
    "type/PK": ("type/Special",),
    "type/FK": ("type/Special",),
    "type/Category": ("type/Special",),
    "type/Name": ("type/Category",),
    "type/Coordinate": ("type/Special",),
    "type/Latitude": ("type/Coordinate",),
    "type/Longitude": ("type/Coordinate",),
    "type/URL": ("type/Special",),
    "type/Email": ("type/Special",),
}

DEFAULT_HIERARCHY = TypeHierarchy(DEFAULT_TYPE_EDGES)
