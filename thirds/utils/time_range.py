"""
Minute-precision time-of-day arithmetic.

Ranges are minutes since local midnight. Ring (day-wrap) semantics are only
available where a caller opts in with allow_wrap; day schedules never do.
"""

from __future__ import annotations

import re

from thirds.core.exceptions import InvalidRangeError, ParseError
from thirds.models.energy import MINUTES_PER_DAY, TimeRange

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def duration_minutes(time_range: TimeRange, allow_wrap: bool = False) -> int:
    """
    Length of a range in minutes.

    With allow_wrap the range is measured around the ring, so 22:00-02:00 is
    240 minutes and an end equal to its start is an empty range. Without it,
    end must be strictly after start.

    Raises:
        InvalidRangeError: end <= start and wrap is not allowed
    """
    if allow_wrap:
        return (time_range.end - time_range.start + MINUTES_PER_DAY) % MINUTES_PER_DAY
    if time_range.is_wrapping:
        raise InvalidRangeError(
            f"End time {to_clock(time_range.end)} must be after start time {to_clock(time_range.start)}",
            details={"start": to_clock(time_range.start), "end": to_clock(time_range.end)},
        )
    return time_range.end - time_range.start


def segments(time_range: TimeRange) -> list[tuple[int, int]]:
    """Split a range into non-wrapping half-open [start, end) pieces."""
    if time_range.end == time_range.start:
        return []
    if time_range.end > time_range.start:
        return [(time_range.start, time_range.end)]
    pieces = [(time_range.start, MINUTES_PER_DAY)]
    if time_range.end > 0:
        pieces.append((0, time_range.end))
    return pieces


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    """True when the two ranges share at least one minute."""
    for a_start, a_end in segments(a):
        for b_start, b_end in segments(b):
            if a_start < b_end and b_start < a_end:
                return True
    return False


def to_clock(minutes: int) -> str:
    """Format minutes since midnight as zero-padded HH:MM."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ParseError(f"Minute value out of range: {minutes}", value=str(minutes))
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def from_clock(text: str) -> int:
    """
    Parse HH:MM or HH:MM:SS into minutes since midnight.

    Seconds are validated and then discarded.

    Raises:
        ParseError: bad separator, non-digit parts, or out-of-range fields
    """
    if text is None:
        raise ParseError("Time is required", value=None)
    match = _CLOCK_RE.match(text.strip())
    if not match:
        raise ParseError(f"Invalid time '{text}', expected HH:MM", value=text)
    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3)) if match.group(3) is not None else 0
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ParseError(f"Invalid time '{text}', out of range", value=text)
    return hours * 60 + minutes


def parse_range(start_text: str, end_text: str) -> TimeRange:
    """Parse a pair of clock strings into a TimeRange (no ordering check)."""
    return TimeRange(start=from_clock(start_text), end=from_clock(end_text))


def format_range(time_range: TimeRange) -> str:
    """Human-readable HH:MM-HH:MM."""
    return f"{to_clock(time_range.start)}-{to_clock(time_range.end)}"


def hour_of(minutes: int) -> int:
    """Hour-of-day a minute value falls in."""
    return (minutes // 60) % 24


def contains(time_range: TimeRange, minute: int) -> bool:
    """True when minute falls inside the range (half-open, ring-aware)."""
    return any(start <= minute < end for start, end in segments(time_range))
