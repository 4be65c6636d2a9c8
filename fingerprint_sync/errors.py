# ==============================================
# Errors
# ==============================================
#
# Exception hierarchy for the fingerprinting engine.
#
#   FingerprintSyncError
#   ├── ConfigError             → bad environment / .env values
#   ├── TypeHierarchyError      → cycles in a hierarchy (unknown tags are leaves)
#   ├── CatalogError            → catalog read/write failures
#   ├── SamplingError           → data source could not produce rows
#   └── UnsupportedEngineError  → no data-source client for an engine
#
# ConfigError and TypeHierarchyError propagate to the caller.
# fingerprint_fields raises CatalogError; the database driver catches
# CatalogError and SamplingError per table and counts that table as
# zero. Inside RowSampleFingerprinter, SamplingError and
# UnsupportedEngineError become per-field Failed outcomes.
#
# ==============================================


class FingerprintSyncError(Exception):
    """Base class for every error raised by fingerprint_sync."""


class ConfigError(FingerprintSyncError):
    pass


class TypeHierarchyError(FingerprintSyncError):
    pass


class CatalogError(FingerprintSyncError):
    pass


class SamplingError(FingerprintSyncError):
    pass


class UnsupportedEngineError(FingerprintSyncError):
    """Raised when no data-source client is registered for an engine."""

    def __init__(self, engine: str):
        super().__init__(f"No data source registered for engine '{engine}'")
        self.engine = engine
