# ==============================================
# TOPIC 1: CATALOG
# ==============================================
#
# This package holds the catalog's view of the world: databases,
# tables, fields, the fingerprints stored on fields, and the type
# hierarchy that field types are drawn from.
#
# Modules:
# --------
# - models.py          → Database, Table, Field data classes
# - fingerprint.py     → Fingerprint value stored on a Field
# - type_hierarchy.py  → TypeHierarchy DAG + the default type tree
#
# ==============================================

from .fingerprint import Fingerprint
from .models import Database, Table, Field, HIDDEN_VISIBILITY_TYPES
from .type_hierarchy import TypeHierarchy, DEFAULT_HIERARCHY

__all__ = [
    "Fingerprint",
    "Database",
    "Table",
    "Field",
    "HIDDEN_VISIBILITY_TYPES",
    "TypeHierarchy",
    "DEFAULT_HIERARCHY",
]
