from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any


class ValueNormalizer:
    def __init__(self, truncation_size: int):
        if truncation_size <= 0:
            raise ValueError("truncation_size must be positive")
        self.truncation_size = truncation_size

    def normalize(self, value: Any) -> Any:
        if value is None:
            return None

        if isinstance(value, (bool, int, float, Decimal, datetime, date, time, timedelta)):
            return value

        if isinstance(value, (bytes, bytearray, memoryview)):
            value = bytes(value[: self.truncation_size * 4]).decode("utf-8", errors="replace")

        if isinstance(value, (dict, list, tuple)):
            # Nested documents are summarised as text, like a serialized JSON column
            value = repr(value)

        if not isinstance(value, str):
            # ObjectId, UUID and other driver types
            value = str(value)

        return self._truncate(value)

    def _truncate(self, value: str) -> str:
        if len(value) > self.truncation_size:
            return value[: self.truncation_size]
        return value
