# ==============================================
# TOPIC 3: STORAGE (data sources)
# ==============================================
#
# This package reads the customer's data: it connects to the
# database behind a catalog Database and streams bounded row
# samples for the sampler to fingerprint.
#
# Modules:
# --------
# - mysql_client.py     → MySQL row samples (PyMySQL, server-side cursor)
# - mongo_client.py     → MongoDB document samples flattened to rows (pymongo)
# - source_registry.py  → engine identifier → client factory
#
# ==============================================

from .mysql_client import MySQLClient
from .mongo_client import MongoClient
from .source_registry import SourceRegistry

__all__ = [
    "MySQLClient",
    "MongoClient",
    "SourceRegistry",
]
