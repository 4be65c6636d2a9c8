import json
import re
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional


class TypeDetector:
    URL_PATTERN = re.compile(r'^(https?|ftp)://[^\s/$.?#][^\s]*$', re.IGNORECASE)

    EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[a-z]{2,}$', re.IGNORECASE)

    US_STATES = {
        "al", "ak", "az", "ar", "ca", "co", "ct", "de", "fl", "ga", "hi", "id", "il",
        "in", "ia", "ks", "ky", "la", "me", "md", "ma", "mi", "mn", "ms", "mo", "mt",
        "ne", "nv", "nh", "nj", "nm", "ny", "nc", "nd", "oh", "ok", "or", "pa", "ri",
        "sc", "sd", "tn", "tx", "ut", "vt", "va", "wa", "wv", "wi", "wy", "dc",
        "alabama", "alaska", "arizona", "arkansas", "california", "colorado",
        "connecticut", "delaware", "florida", "georgia", "hawaii", "idaho", "illinois",
        "indiana", "iowa", "kansas", "kentucky", "louisiana", "maine", "maryland",
        "massachusetts", "michigan", "minnesota", "mississippi", "missouri", "montana",
        "nebraska", "nevada", "new hampshire", "new jersey", "new mexico", "new york",
        "north carolina", "north dakota", "ohio", "oklahoma", "oregon", "pennsylvania",
        "rhode island", "south carolina", "south dakota", "tennessee", "texas", "utah",
        "vermont", "virginia", "washington", "west virginia", "wisconsin", "wyoming",
        "district of columbia",
    }

    DATETIME_FORMATS = [
        "%Y-%m-%dT%H:%M:%SZ",
        "%Y-%m-%dT%H:%M:%S.%fZ",
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d",
        "%d/%m/%Y",
        "%m/%d/%Y",
        "%Y/%m/%d",
        "%d-%m-%Y",
        "%m-%d-%Y",
    ]

    @classmethod
    def is_json(cls, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        stripped = value.strip()
        if not stripped or stripped[0] not in "{[":
            return False
        try:
            json.loads(stripped)
            return True
        except ValueError:
            return False

    @classmethod
    def is_url(cls, value: Any) -> bool:
        return isinstance(value, str) and bool(cls.URL_PATTERN.match(value.strip()))

    @classmethod
    def is_email(cls, value: Any) -> bool:
        return isinstance(value, str) and bool(cls.EMAIL_PATTERN.match(value.strip()))

    @classmethod
    def is_state(cls, value: Any) -> bool:
        return isinstance(value, str) and value.strip().lower() in cls.US_STATES

    @classmethod
    def to_number(cls, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, (int, float, Decimal)):
            return float(value)

        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return None

        return None

    @classmethod
    def parse_datetime(cls, value: Any) -> Optional[datetime]:
        if value is None:
            return None

        if isinstance(value, datetime):
            return cls._as_naive_utc(value)

        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)

        if isinstance(value, time):
            return cls._as_naive_utc(datetime.combine(date(1970, 1, 1), value))

        # PyMySQL returns TIME columns as timedelta since midnight
        if isinstance(value, timedelta):
            return datetime(1970, 1, 1) + value

        if isinstance(value, str):
            value_stripped = value.strip()
            try:
                return cls._as_naive_utc(datetime.fromisoformat(value_stripped))
            except ValueError:
                pass
            for fmt in cls.DATETIME_FORMATS:
                try:
                    return datetime.strptime(value_stripped, fmt)
                except ValueError:
                    continue

        return None

    @staticmethod
    def _as_naive_utc(value: datetime) -> datetime:
        # Offset-aware values are compared with naive ones in the same column
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)
