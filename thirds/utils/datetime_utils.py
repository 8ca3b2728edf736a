"""
Timezone-aware datetime utilities.

Timestamps are stored as naive UTC in SQLite; comparisons go through
to_naive_utc so aware and naive values never mix.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Replaces datetime.utcnow() which is deprecated in Python 3.12+.
    """
    return datetime.now(UTC)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to naive UTC for storage and comparisons."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def window_start(now: datetime, days: int) -> datetime:
    """Naive UTC instant `days` before now."""
    return to_naive_utc(now) - timedelta(days=days)
