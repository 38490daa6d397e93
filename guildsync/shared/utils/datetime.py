"""UTC datetime helpers. All stored datetimes are timezone-aware UTC."""

import math
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a datetime to aware UTC.

    Naive values are assumed to already be UTC (SQLite and some drivers drop
    tzinfo on the way back from the database).

    Args:
        dt: Datetime that may be naive, aware, or None.

    Returns:
        UTC-aware datetime, or None when dt is None.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def minutes_until(target: datetime, now: datetime | None = None) -> int:
    """Whole minutes from now until target, rounded up; 0 when target has passed."""
    reference = now or utc_now()
    seconds = (ensure_utc(target) - reference).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / 60)
