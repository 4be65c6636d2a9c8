# ==============================================
# Outcome
# ==============================================
#
# PURPOSE:
#   What happened to one field during a sampling pass. A closed set
#   of three cases:
#
#     Updated(fingerprint) → new fingerprint, to be saved
#     NoData()             → no distinct values seen; nothing saved
#     Failed(cause)        → computing this field raised; nothing saved
#
#   `Outcome` is the union of the three; callers branch with
#   isinstance() over exactly these classes.
#
# FUNCTION:
# ---------
# - outcome_for(result: Fingerprint | BaseException) -> Outcome
#
# ==============================================

from dataclasses import dataclass
from typing import Union

from fingerprint_sync.catalog.fingerprint import Fingerprint


@dataclass(frozen=True)
class Updated:
    fingerprint: Fingerprint


@dataclass(frozen=True)
class NoData:
    pass


@dataclass(frozen=True)
class Failed:
    cause: BaseException

    @property
    def message(self) -> str:
        return f"{type(self.cause).__name__}: {self.cause}"


Outcome = Union[Updated, NoData, Failed]


def outcome_for(result: Union[Fingerprint, BaseException]) -> Outcome:
    """
    Classify a computed fingerprint (or the exception raised computing it).

    Args:
        result: A Fingerprint, or the exception that replaced it

    Returns:
        Failed for exceptions, NoData for fingerprints with zero distinct
        values, Updated otherwise
    """
    if isinstance(result, BaseException):
        return Failed(result)
    if not result.has_data:
        return NoData()
    return Updated(result)
