"""
Live Reviews API - Timestamp Helpers

Canonical timestamps are ISO-8601 UTC with millisecond precision and a "Z"
suffix, e.g. 2024-05-01T10:20:30.000Z.
"""

from datetime import datetime, timezone
from typing import Any, Optional


def to_timestamp(value: datetime) -> str:
    """Format a datetime as a canonical timestamp. Naive values are taken as local time."""
    # astimezone() reads a naive value as host local time, which is what
    # datetime.fromtimestamp() produces
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now() -> str:
    """Current time as a canonical timestamp."""
    return to_timestamp(datetime.now(timezone.utc))


def normalize_timestamp(value: Any) -> Optional[str]:
    """
    Normalize a provider date (datetime or ISO string) to a canonical timestamp.

    Returns None for missing or unparseable values.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return to_timestamp(value)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    return to_timestamp(parsed)
