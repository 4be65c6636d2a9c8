# ==============================================
# TOPIC 1b: NORMALIZATION
# ==============================================
#
# This package turns raw values coming back from a data source
# into something the fingerprint accumulators can digest, and
# recognises the value shapes text fingerprints count.
#
# Modules:
# --------
# - type_detector.py    → JSON / URL / email / state / number / datetime checks
# - value_normalizer.py → Truncate long values, decode bytes, stringify driver types
#
# ==============================================

from .type_detector import TypeDetector
from .value_normalizer import ValueNormalizer

__all__ = ["TypeDetector", "ValueNormalizer"]
