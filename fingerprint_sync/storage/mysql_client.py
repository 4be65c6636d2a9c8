# ==============================================
# MySQLClient
# ==============================================
#
# PURPOSE:
#   Streams a bounded sample of rows from a MySQL table so the
#   sampler can fingerprint its columns.
#
# WHY THIS CLASS EXISTS:
#   Fingerprinting reads customer tables that may hold millions of
#   rows and unbounded TEXT/BLOB columns. This client keeps memory
#   flat in two ways:
#     - LIMIT on the query, and an unbuffered (server-side) cursor
#       so rows arrive one at a time
#     - SUBSTRING(col, 1, truncation_size) on text columns so large
#       values are cut on the server before crossing the wire
#
# CLASS: MySQLClient
# ------------------
#   Stateful — holds connection to MySQL.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database)
#       Store connection params. Don't connect yet.
#
#   - from_database(database: Database, defaults: MySQLConfig)  (classmethod)
#       Build from Database.details, falling back to config defaults.
#
#   Methods:
#   --------
#   - connect() -> None
#   - disconnect() -> None
#   - build_sample_query(table, fields, truncation_size, limit) -> (sql, params)
#   - table_rows_sample(table, fields, truncation_size, limit) -> Iterator[tuple]
#       One tuple per row, values in the same order as `fields`.
#
#   Errors:
#   -------
#   All pymysql errors are re-raised as SamplingError.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MySQLClient(...) as db:` usage.
#
# ==============================================

import logging
from typing import Any, Iterator, List, Sequence, Tuple

import pymysql
import pymysql.cursors

from fingerprint_sync.catalog.models import Database, Field, Table
from fingerprint_sync.catalog.type_hierarchy import DEFAULT_HIERARCHY, TEXT_TYPE, TypeHierarchy
from fingerprint_sync.config import MySQLConfig
from fingerprint_sync.errors import SamplingError

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


class MySQLClient:
    def __init__(self, host, port, user, password, database, hierarchy: TypeHierarchy = DEFAULT_HIERARCHY):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.hierarchy = hierarchy
        self.connection = None

    @classmethod
    def from_database(cls, database: Database, defaults: MySQLConfig) -> "MySQLClient":
        details = database.details
        return cls(
            host=details.get("host", defaults.host),
            port=int(details.get("port", defaults.port)),
            user=details.get("user", defaults.user),
            password=details.get("password", defaults.password),
            database=details.get("dbname", database.name),
        )

    def connect(self) -> None:
        # Unbuffered cursor: rows stream from the server instead of loading at once
        try:
            self.connection = pymysql.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.database,
                cursorclass=pymysql.cursors.SSCursor,
            )
        except pymysql.MySQLError as e:
            raise SamplingError(f"Could not connect to MySQL {self.host}:{self.port}/{self.database}: {e}") from e

    def disconnect(self) -> None:
        # Close connection cleanly
        if self.connection:
            self.connection.close()
            self.connection = None

    def build_sample_query(
        self,
        table: Table,
        fields: Sequence[Field],
        truncation_size: int,
        limit: int,
    ) -> Tuple[str, List[Any]]:
        """
        Build the SELECT used to sample `fields` from `table`.

        Args:
            table: Table to read
            fields: Columns to select, in output order
            truncation_size: Max characters read from text columns
            limit: Max rows returned

        Returns:
            (sql, params) ready for cursor.execute
        """
        columns = []
        params: List[Any] = []
        for field in fields:
            column = quote_identifier(field.name)
            if self.hierarchy.isa(field.base_type, TEXT_TYPE):
                columns.append(f"SUBSTRING({column}, 1, %s) AS {column}")
                params.append(truncation_size)
            else:
                columns.append(column)

        source = quote_identifier(table.name)
        if table.schema:
            source = f"{quote_identifier(table.schema)}.{source}"

        sql = f"SELECT {', '.join(columns)} FROM {source} LIMIT %s"
        params.append(limit)
        return sql, params

    def table_rows_sample(
        self,
        table: Table,
        fields: Sequence[Field],
        truncation_size: int,
        limit: int,
    ) -> Iterator[tuple]:
        if self.connection is None:
            raise SamplingError("Not connected to MySQL")

        sql, params = self.build_sample_query(table, fields, truncation_size, limit)
        logger.debug("Sampling %s with: %s", table.qualified_name, sql)

        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, params)
            for row in cursor:
                yield tuple(row)
        except pymysql.MySQLError as e:
            raise SamplingError(f"Sampling {table.qualified_name} failed: {e}") from e
        finally:
            cursor.close()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
