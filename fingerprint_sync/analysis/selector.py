# ==============================================
# FieldSelector
# ==============================================
#
# PURPOSE:
#   Pick the fields of one table that should be fingerprinted now.
#
# RULES (all must hold):
#   1. field.active
#   2. visibility_type not in {"retired", "sensitive"}
#   3. base_type != "type/Structured"
#   4. semantic_type is None, or not a kind of "type/PK"
#   5. refingerprint=True → always
#      otherwise          → VersionPredicate.matches(base_type, fingerprint_version)
#
# CLASS: FieldSelector
# --------------------
#   Stateless apart from the immutable predicate and hierarchy.
#   `refingerprint` is a per-call argument, never stored.
#
#   Methods:
#   --------
#   - is_eligible(field) -> bool
#   - needs_fingerprint(field, refingerprint=False) -> bool
#   - select(fields, refingerprint=False) -> list[Field]
#   - fields_to_fingerprint(catalog, table, refingerprint=False) -> list[Field]
#
# ==============================================

from typing import Iterable, List

from fingerprint_sync.catalog.models import Field, Table, HIDDEN_VISIBILITY_TYPES
from fingerprint_sync.catalog.type_hierarchy import (
    DEFAULT_HIERARCHY,
    PK_TYPE,
    STRUCTURED_TYPE,
    TypeHierarchy,
)
from .versions import VersionPredicate


class FieldSelector:
    """Applies eligibility rules and the version predicate to catalog fields."""

    def __init__(
        self,
        predicate: VersionPredicate,
        hierarchy: TypeHierarchy = DEFAULT_HIERARCHY,
    ):
        self.predicate = predicate
        self.hierarchy = hierarchy

    def is_eligible(self, field: Field) -> bool:
        """Rules 1-4: fields that may ever be fingerprinted."""
        if not field.active:
            return False
        if field.visibility_type in HIDDEN_VISIBILITY_TYPES:
            return False
        if field.base_type == STRUCTURED_TYPE:
            return False
        if field.semantic_type is not None and self.hierarchy.isa(field.semantic_type, PK_TYPE):
            return False
        return True

    def needs_fingerprint(self, field: Field, refingerprint: bool = False) -> bool:
        if not self.is_eligible(field):
            return False
        if refingerprint:
            return True
        return self.predicate.matches(field.base_type, field.fingerprint_version)

    def select(self, fields: Iterable[Field], refingerprint: bool = False) -> List[Field]:
        """
        Filter fields down to the ones that need fingerprinting, keeping catalog order.

        Args:
            fields: Fields of a single table
            refingerprint: Skip the version check and take every eligible field

        Returns:
            Candidate fields (possibly empty)
        """
        return [field for field in fields if self.needs_fingerprint(field, refingerprint)]

    def fields_to_fingerprint(self, catalog, table: Table, refingerprint: bool = False) -> List[Field]:
        """Read the table's fields from the catalog and select. Catalog errors propagate."""
        return self.select(catalog.list_fields(table), refingerprint)
