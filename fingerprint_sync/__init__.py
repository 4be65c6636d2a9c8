# ==============================================
# Fingerprint Sync — Incremental Field Fingerprinting
# ==============================================
#
# Package Structure (4 Topics + Orchestrator):
#
# fingerprint_sync/
# ├── catalog/          # Topic 1: Catalog model (fields, tables, type hierarchy)
# ├── analysis/         # Topic 2: Select fields, sample, fingerprint, reduce
# ├── storage/          # Topic 3: Data-source clients that stream row samples
# ├── normalization/    # Topic 1b: Value truncation and shape detection
# ├── persistence/      # Topic 4: Catalog metadata persisted across runs
# ├── util/             # Logging setup
# ├── config.py         # Configuration management
# ├── errors.py         # Exception hierarchy
# └── sync_fingerprints.py  # Table / database driver
#
# ==============================================

__version__ = "0.1.0"

from fingerprint_sync.sync_fingerprints import FingerprintSync
from fingerprint_sync.analysis.reducer import FingerprintStats

__all__ = ["FingerprintSync", "FingerprintStats", "__version__"]
