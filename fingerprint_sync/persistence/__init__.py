# ==============================================
# TOPIC 4: PERSISTENCE (Catalog metadata across runs)
# ==============================================
#
# This package stores the catalog the engine reads from and
# writes fingerprints back to, so a later run knows which
# fields are already up to date.
#
# Modules:
# --------
# - metadata_store.py  → JSON-file catalog of databases, tables and fields
#
# ==============================================

from .metadata_store import MetadataStore

__all__ = ["MetadataStore"]
