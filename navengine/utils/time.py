"""Time utilities (UTC day numbers)."""

from datetime import datetime, timezone
from typing import Optional

SECONDS_IN_DAY = 86_400


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def day_number(dt: Optional[datetime] = None) -> int:
    """
    Whole days elapsed since the Unix epoch.

    Naive datetimes are interpreted as UTC.
    """
    if dt is None:
        dt = utc_now()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() // SECONDS_IN_DAY)
