# ==============================================
# TOPIC 2: ANALYSIS (selection, sampling, fingerprinting)
# ==============================================
#
# This package decides which fields need a fresh fingerprint,
# computes fingerprints from row samples, and folds the results
# into run statistics.
#
# Steps per table:
#   Step 1 (Selection):  VersionPredicate + FieldSelector → candidate fields
#   Step 2 (Sampling):   RowSampleFingerprinter → Outcome per field
#   Step 3 (Reduction):  ResultReducer → saved fingerprints + FingerprintStats
#
# Modules:
# --------
# - versions.py     → VersionSchedule, eclipsing clause builder, VersionPredicate
# - selector.py     → FieldSelector (eligibility + version check)
# - field_stats.py  → FieldStats accumulator, the default fingerprint algorithm
# - outcome.py      → Updated / NoData / Failed
# - sampler.py      → RowSampleFingerprinter (the sampling boundary)
# - reducer.py      → FingerprintStats, ResultReducer
#
# ==============================================
