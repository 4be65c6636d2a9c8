# ==============================================
# SourceRegistry
# ==============================================
#
# PURPOSE:
#   Map a Database's engine identifier to a data-source client
#   that can stream row samples from it.
#
# CLASS: SourceRegistry
# ---------------------
#   Constructor:
#   ------------
#   - __init__(config: AppConfig | None = None)
#       Registers "mysql" and "mongo". Engines listed in
#       config.fingerprint.unsupported_engines are never supported,
#       even if a factory is registered for them.
#
#   Methods:
#   --------
#   - register(engine, factory) -> None
#       factory(database) → client with connect / disconnect /
#       table_rows_sample and context-manager support.
#   - is_supported(engine) -> bool
#   - client_for(database) -> client   (not yet connected)
#       Raises UnsupportedEngineError.
#
# ==============================================

from typing import Any, Callable, Dict, Optional

from fingerprint_sync.catalog.models import Database
from fingerprint_sync.config import AppConfig, get_config
from fingerprint_sync.errors import UnsupportedEngineError
from .mongo_client import MongoClient
from .mysql_client import MySQLClient

ClientFactory = Callable[[Database], Any]


class SourceRegistry:
    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or get_config()
        self._factories: Dict[str, ClientFactory] = {}
        self.register("mysql", lambda db: MySQLClient.from_database(db, self._config.mysql))
        self.register("mongo", lambda db: MongoClient.from_database(db, self._config.mongo))

    def register(self, engine: str, factory: ClientFactory) -> None:
        self._factories[engine.lower()] = factory

    def is_supported(self, engine: str) -> bool:
        engine = engine.lower()
        if engine in self._config.fingerprint.unsupported_engines:
            return False
        return engine in self._factories

    def client_for(self, database: Database):
        if not self.is_supported(database.engine):
            raise UnsupportedEngineError(database.engine)
        return self._factories[database.engine.lower()](database)
