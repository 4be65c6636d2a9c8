# ==============================================
# Catalog Models (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes for the externally-owned catalog: databases,
#   their tables, and the fields inside those tables.
#
# WHY THIS FILE EXISTS:
#   The engine reads a handful of attributes from these (engine,
#   base_type, visibility_type, fingerprint_version, ...) and writes
#   only three: fingerprint, fingerprint_version, last_analyzed.
#   MetadataStore serialises them with to_dict / from_dict.
#
# CLASSES:
# --------
# - Database (dataclass)
#     id, name, engine, details (connection settings for the source)
#
# - Table (dataclass)
#     id, db_id, name, schema
#
# - Field (dataclass)
#     id, table_id, name, base_type, semantic_type, active,
#     visibility_type, fingerprint, fingerprint_version, last_analyzed
#
# ==============================================

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from .fingerprint import Fingerprint

# Visibility types that are never fingerprinted
HIDDEN_VISIBILITY_TYPES = frozenset({"retired", "sensitive"})


@dataclass(frozen=True)
class Database:
    """A data source registered in the catalog."""

    id: int
    name: str
    engine: str  # e.g. "mysql", "mongo", "googleanalytics"
    details: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "engine": self.engine,
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Database":
        return cls(
            id=data["id"],
            name=data["name"],
            engine=data["engine"],
            details=dict(data.get("details", {})),
        )


@dataclass(frozen=True)
class Table:
    """A table (or collection) inside a Database."""

    id: int
    db_id: int
    name: str
    schema: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}" if self.schema else self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "db_id": self.db_id,
            "name": self.name,
            "schema": self.schema,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Table":
        return cls(
            id=data["id"],
            db_id=data["db_id"],
            name=data["name"],
            schema=data.get("schema"),
        )


@dataclass
class Field:
    """
    A column of a Table as the catalog knows it.

    Names use dot notation for nested document paths
    (e.g. "metadata.sensor.version" in a MongoDB collection).
    """

    # --- Core identity ---
    id: int
    table_id: int
    name: str

    # --- Typing ---
    base_type: str  # e.g. "type/Integer"
    semantic_type: Optional[str] = None  # e.g. "type/PK", "type/Email"

    # --- Selection attributes ---
    active: bool = True
    visibility_type: str = "normal"

    # --- Written by the engine ---
    fingerprint: Optional[Fingerprint] = None
    fingerprint_version: int = 0
    last_analyzed: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the field for persistence.

        Returns:
            A JSON-serializable dictionary representation
        """
        return {
            "id": self.id,
            "table_id": self.table_id,
            "name": self.name,
            "base_type": self.base_type,
            "semantic_type": self.semantic_type,
            "active": self.active,
            "visibility_type": self.visibility_type,
            "fingerprint": self.fingerprint.to_dict() if self.fingerprint else None,
            "fingerprint_version": self.fingerprint_version,
            "last_analyzed": self.last_analyzed.isoformat() if self.last_analyzed else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Field":
        """
        Reconstruct a Field from stored metadata.

        Args:
            data: Dictionary produced by to_dict()

        Returns:
            A Field instance
        """
        fingerprint = data.get("fingerprint")
        last_analyzed = data.get("last_analyzed")
        return cls(
            id=data["id"],
            table_id=data["table_id"],
            name=data["name"],
            base_type=data["base_type"],
            semantic_type=data.get("semantic_type"),
            active=data.get("active", True),
            visibility_type=data.get("visibility_type", "normal"),
            fingerprint=Fingerprint.from_dict(fingerprint) if fingerprint else None,
            fingerprint_version=data.get("fingerprint_version", 0),
            last_analyzed=datetime.fromisoformat(last_analyzed) if last_analyzed else None,
        )
