import json
import logging
import os
import threading
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, List, Optional

from fingerprint_sync.catalog.fingerprint import Fingerprint
from fingerprint_sync.catalog.models import Database, Field, Table
from fingerprint_sync.errors import CatalogError

logger = logging.getLogger(__name__)


# ==============================================
# MetadataStore
# ==============================================
#
# PURPOSE:
#   File-backed catalog: the databases, tables and fields the engine
#   reads, and the place fingerprints are written back to.
#
# WHY THIS CLASS EXISTS:
#   The engine needs somewhere to remember, across runs, which
#   fingerprint version each field was last computed with. Without
#   that, every sync would re-sample every field.
#
# WHAT IS PERSISTED:
#   1. Databases  → id, name, engine, connection details
#   2. Tables     → id, db_id, name, schema
#   3. Fields     → selection attributes + fingerprint, fingerprint_version,
#                   last_analyzed
#
# Records keep insertion order; that order is the "catalog order"
# tables and fields are listed in.
#
# CLASS: MetadataStore
# --------------------
#   Stateful — holds a reference to the storage directory.
#   Writes are serialised with a lock and replace files atomically.
#
#   Constructor:
#   ------------
#   - __init__(storage_dir: str = "metadata/")
#       Create storage directory if it doesn't exist.
#
class MetadataStore:
    """
    Handles persistence of the catalog to disk.

    Files created:
    - metadata/databases.json  → {id: Database}
    - metadata/tables.json     → {id: Table}
    - metadata/fields.json     → {id: Field}
    """

    def __init__(self, storage_dir: str = "metadata/"):
        """
        Initialize the metadata store.

        Args:
            storage_dir: Directory to store metadata files
        """
        self.storage_dir = Path(storage_dir)

        # Create directory if it doesn't exist
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        # Define file paths
        self.databases_file = self.storage_dir / "databases.json"
        self.tables_file = self.storage_dir / "tables.json"
        self.fields_file = self.storage_dir / "fields.json"

        self._lock = threading.RLock()
#   Methods:
#   --------
#   SAVING:
#   - save_database(database) / save_table(table) / save_field(field)
#       Insert or replace one record by id.
#
#   - persist_fingerprint(field_id, fingerprint, version, last_analyzed=None)
#       The only write the engine makes.
#
    def save_database(self, database: Database) -> None:
        self._upsert(self.databases_file, database.id, database.to_dict())

    def save_table(self, table: Table) -> None:
        self._upsert(self.tables_file, table.id, table.to_dict())

    def save_field(self, field: Field) -> None:
        self._upsert(self.fields_file, field.id, field.to_dict())

    def persist_fingerprint(
        self,
        field_id: int,
        fingerprint: Fingerprint,
        version: int,
        last_analyzed: Optional[datetime] = None,
    ) -> None:
        """
        Save a new fingerprint on a field.

        Args:
            field_id: Field to update
            fingerprint: The new fingerprint
            version: Fingerprint version it was computed with
            last_analyzed: Usually None, marking the field as not yet
                           analysed with this fingerprint

        Raises:
            CatalogError: If the field does not exist or the store is unreadable
        """
        with self._lock:
            fields = self._load(self.fields_file)
            key = str(field_id)
            if key not in fields:
                raise CatalogError(f"Field {field_id} not found in {self.fields_file}")

            record = fields[key]
            record["fingerprint"] = fingerprint.to_dict()
            record["fingerprint_version"] = version
            record["last_analyzed"] = last_analyzed.isoformat() if last_analyzed else None
            self._write(self.fields_file, fields)

        logger.debug("Saved fingerprint v%s for field %s", version, field_id)
#   LOADING:
#   - get_database(id) / get_table(id) / get_field(id)
#       Raise CatalogError when the id is unknown.
#
#   - list_tables(database) -> list[Table]
#   - list_fields(table) -> list[Field]
#   - engine_of(database) -> str
#
    def get_database(self, database_id: int) -> Database:
        return Database.from_dict(self._get(self.databases_file, database_id, "Database"))

    def get_table(self, table_id: int) -> Table:
        return Table.from_dict(self._get(self.tables_file, table_id, "Table"))

    def get_field(self, field_id: int) -> Field:
        return Field.from_dict(self._get(self.fields_file, field_id, "Field"))

    def list_tables(self, database: Database) -> List[Table]:
        """
        Return every table of a database, in catalog order.

        Args:
            database: The database whose tables to list

        Returns:
            List of Table objects (empty if the database has none)
        """
        tables = self._load(self.tables_file)
        return [
            Table.from_dict(data)
            for data in tables.values()
            if data["db_id"] == database.id
        ]

    def list_fields(self, table: Table) -> List[Field]:
        """
        Return every field of a table, in catalog order.

        Raises:
            CatalogError: If the fields file cannot be read
        """
        fields = self._load(self.fields_file)
        return [
            Field.from_dict(data)
            for data in fields.values()
            if data["table_id"] == table.id
        ]

    def engine_of(self, database: Database) -> str:
        return self.get_database(database.id).engine
#   UTILITY:
#   - exists() -> bool
#       Check if any metadata files exist.
#
#   - clear() -> None
#       Delete all metadata files (for testing or reset).
#
    def exists(self) -> bool:
        return (
            self.databases_file.exists() or
            self.tables_file.exists() or
            self.fields_file.exists()
        )

    def clear(self) -> None:
        with self._lock:
            for file in (self.databases_file, self.tables_file, self.fields_file):
                if file.exists():
                    file.unlink()
                    logger.debug("Deleted %s", file)

    # ======================================
    # Internal helpers
    # ======================================
    def _load(self, path: Path) -> Dict[str, Dict[str, Any]]:
        if not path.exists():
            return {}
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CatalogError(f"Could not read {path}: {e}") from e
        if not isinstance(data, dict):
            raise CatalogError(f"Unexpected content in {path}: expected an object")
        return data

    def _write(self, path: Path, data: Dict[str, Dict[str, Any]]) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp_path, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            raise CatalogError(f"Could not write {path}: {e}") from e

    def _get(self, path: Path, record_id: int, kind: str) -> Dict[str, Any]:
        data = self._load(path).get(str(record_id))
        if data is None:
            raise CatalogError(f"{kind} {record_id} not found in {path}")
        return data

    def _upsert(self, path: Path, record_id: int, record: Dict[str, Any]) -> None:
        with self._lock:
            data = self._load(path)
            data[str(record_id)] = record
            self._write(path, data)
# FILE STRUCTURE:
# ---------------
#   metadata/
#   ├── databases.json  → {"1": {id, name, engine, details}}
#   ├── tables.json     → {"10": {id, db_id, name, schema}}
#   └── fields.json     → {"100": {id, table_id, name, base_type, ...,
#                                  fingerprint, fingerprint_version, last_analyzed}}
#
# =============================================
