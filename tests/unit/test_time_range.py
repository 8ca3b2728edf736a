"""
Unit tests for time-of-day arithmetic.
"""

import pytest

from thirds.core.exceptions import InvalidRangeError, ParseError
from thirds.models.energy import TimeRange
from thirds.utils.time_range import (
    contains,
    duration_minutes,
    from_clock,
    overlaps,
    parse_range,
    segments,
    to_clock,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("00:00", 0),
        ("06:00", 360),
        ("6:05", 365),
        ("23:59", 1439),
        ("12:30:45", 750),
    ],
)
def test_from_clock(text, expected):
    assert from_clock(text) == expected


@pytest.mark.parametrize("text", ["24:00", "12:60", "12-00", "ab:cd", "12:00:60", "", "7"])
def test_from_clock_rejects_malformed(text):
    with pytest.raises(ParseError) as exc_info:
        from_clock(text)
    assert exc_info.value.details == {"value": text}


def test_to_clock_pads_and_bounds():
    assert to_clock(0) == "00:00"
    assert to_clock(545) == "09:05"
    assert to_clock(1439) == "23:59"
    with pytest.raises(ParseError):
        to_clock(1440)


def test_duration_non_wrapping():
    assert duration_minutes(TimeRange(start=360, end=720)) == 360


def test_duration_wrapping_requires_opt_in():
    late = TimeRange(start=22 * 60, end=2 * 60)

    assert duration_minutes(late, allow_wrap=True) == 240
    with pytest.raises(InvalidRangeError):
        duration_minutes(late)


def test_equal_endpoints_is_empty_range():
    empty = TimeRange(start=600, end=600)

    assert duration_minutes(empty, allow_wrap=True) == 0
    assert segments(empty) == []
    assert not overlaps(empty, TimeRange(start=0, end=1439))


def test_wrapping_range_splits_at_midnight():
    assert segments(TimeRange(start=1320, end=120)) == [(1320, 1440), (0, 120)]
    assert segments(TimeRange(start=1320, end=0)) == [(1320, 1440)]


def test_touching_ranges_do_not_overlap():
    assert not overlaps(TimeRange(start=360, end=720), TimeRange(start=720, end=1080))
    assert overlaps(TimeRange(start=360, end=780), TimeRange(start=720, end=1080))


def test_overlap_across_midnight():
    late = TimeRange(start=1320, end=120)

    assert overlaps(late, TimeRange(start=60, end=180))
    assert not overlaps(late, TimeRange(start=120, end=300))
    assert contains(late, 30)
    assert not contains(late, 120)


@pytest.mark.parametrize(
    "start,end",
    [(0, 1), (360, 720), (545, 1439), (1200, 1380)],
)
def test_duration_survives_clock_round_trip(start, end):
    original = TimeRange(start=start, end=end)

    parsed = parse_range(to_clock(original.start), to_clock(original.end))

    assert duration_minutes(parsed) == duration_minutes(original)
