# ==============================================
# MongoClient
# ==============================================
#
# PURPOSE:
#   Streams a bounded sample of documents from a MongoDB collection
#   and flattens each one into a row, one value per requested field.
#
# WHY THIS CLASS EXISTS:
#   Catalog tables backed by MongoDB are collections, and their
#   fields are dot-notation paths into nested documents
#   (e.g. "metadata.sensor_data.version"). The sampler wants plain
#   rows, so this client projects only the requested paths, limits
#   the cursor, and walks each path.
#
#   Long values are cut by the sampler's ValueNormalizer; MongoDB has
#   no cheap server-side substring on arbitrary projections.
#
# CLASS: MongoClient
# ------------------
#   Stateful — holds connection to MongoDB.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, user=None, password=None)
#   - from_database(database: Database, defaults: MongoConfig)  (classmethod)
#
#   Methods:
#   --------
#   - connect() -> None
#   - disconnect() -> None
#   - table_rows_sample(table, fields, truncation_size, limit) -> Iterator[tuple]
#
#   Errors:
#   -------
#   All pymongo errors are re-raised as SamplingError.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoClient(...) as db:` usage.
#
# ==============================================

import logging
from typing import Any, Iterator, Sequence

from pymongo import MongoClient as PyMongoClient
from pymongo.errors import PyMongoError

from fingerprint_sync.catalog.models import Database, Field, Table
from fingerprint_sync.config import MongoConfig
from fingerprint_sync.errors import SamplingError

logger = logging.getLogger(__name__)


def get_path(document: Any, path: str) -> Any:
    """
    Follow a dot-notation path into a document.

    Examples:
        get_path({"a": {"b": 1}}, "a.b") → 1
        get_path({"a": [{"b": 1}]}, "a.b") → 1   (first element of an array)
        get_path({"a": 1}, "a.b") → None
    """
    value = document
    for part in path.split("."):
        if isinstance(value, list):
            value = value[0] if value else None
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


class MongoClient:
    def __init__(self, host, port, database, user=None, password=None):
        # Store connection params. Don't connect yet.
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.client = None  # Will hold the actual MongoDB client connection

    @classmethod
    def from_database(cls, database: Database, defaults: MongoConfig) -> "MongoClient":
        details = database.details
        return cls(
            host=details.get("host", defaults.host),
            port=int(details.get("port", defaults.port)),
            database=details.get("dbname", database.name),
            user=details.get("user", defaults.user),
            password=details.get("password", defaults.password),
        )

    def connect(self):
        try:
            if self.user and self.password:
                uri = f"mongodb://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
            else:
                uri = f"mongodb://{self.host}:{self.port}/{self.database}"
            self.client = PyMongoClient(uri)
            # Test connection
            self.client.admin.command('ping')
        except PyMongoError as e:
            self.disconnect()
            raise SamplingError(f"Could not connect to MongoDB {self.host}:{self.port}: {e}") from e

    def disconnect(self):
        if self.client:
            self.client.close()
            self.client = None

    def table_rows_sample(
        self,
        table: Table,
        fields: Sequence[Field],
        truncation_size: int,
        limit: int,
    ) -> Iterator[tuple]:
        if not self.client:
            raise SamplingError("Not connected to MongoDB")

        collection = self.client[self.database][table.name]
        projection = {field.name: 1 for field in fields}
        projection.setdefault("_id", 0)

        try:
            cursor = collection.find({}, projection=projection).limit(limit)
            for document in cursor:
                yield tuple(get_path(document, field.name) for field in fields)
        except PyMongoError as e:
            raise SamplingError(f"Sampling {table.qualified_name} failed: {e}") from e

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
