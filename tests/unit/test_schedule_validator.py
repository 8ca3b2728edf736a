"""
Unit tests for schedule validation and capacity checks.
"""

import pytest

from thirds.core.exceptions import (
    CapacityExceededError,
    IncompleteScheduleError,
    InvalidRangeError,
    UnresolvableOverlapError,
)
from thirds.models.energy import DaySchedule, EnergyBlock, TimeRange
from thirds.models.enums import DayOfWeek, EnergyLabel
from thirds.services.schedule_validator import check_capacity, validate_blocks, validate_day_schedule


def block(label: EnergyLabel, start: int, end: int) -> EnergyBlock:
    return EnergyBlock(label=label, range=TimeRange(start=start, end=end))


def test_validate_blocks_returns_canonical_order():
    blocks = [
        block(EnergyLabel.LOW, 1080, 1320),
        block(EnergyLabel.HIGH, 360, 720),
        block(EnergyLabel.MEDIUM, 720, 1080),
    ]

    ordered = validate_blocks(blocks)

    assert [b.label for b in ordered] == [EnergyLabel.HIGH, EnergyLabel.MEDIUM, EnergyLabel.LOW]


def test_validate_blocks_rejects_duplicate_label():
    blocks = [
        block(EnergyLabel.HIGH, 360, 720),
        block(EnergyLabel.HIGH, 720, 1080),
        block(EnergyLabel.LOW, 1080, 1320),
    ]

    with pytest.raises(IncompleteScheduleError):
        validate_blocks(blocks)


def test_validate_blocks_rejects_end_before_start():
    blocks = [
        block(EnergyLabel.HIGH, 720, 360),
        block(EnergyLabel.MEDIUM, 720, 1080),
        block(EnergyLabel.LOW, 1080, 1320),
    ]

    with pytest.raises(InvalidRangeError):
        validate_blocks(blocks)


def test_validate_day_schedule_rejects_overlap():
    schedule = DaySchedule(
        day_of_week=DayOfWeek.MONDAY,
        blocks=[
            block(EnergyLabel.HIGH, 360, 780),
            block(EnergyLabel.MEDIUM, 720, 1080),
            block(EnergyLabel.LOW, 1080, 1320),
        ],
    )

    with pytest.raises(UnresolvableOverlapError) as exc_info:
        validate_day_schedule(schedule)

    assert exc_info.value.details == {"pairs": [["High", "Medium"]]}


def test_check_capacity_returns_remaining_minutes():
    assert check_capacity(EnergyLabel.HIGH, TimeRange(start=540, end=600), [30, 20]) == 10


def test_check_capacity_reports_exact_excess():
    with pytest.raises(CapacityExceededError) as exc_info:
        check_capacity(EnergyLabel.HIGH, TimeRange(start=540, end=600), [40, 30])

    error = exc_info.value
    assert error.excess_minutes == 10
    assert error.block == "High"
    assert error.message == "Total task duration (70min) exceeds High block duration (60min)"


def test_check_capacity_allows_exact_fit():
    assert check_capacity(EnergyLabel.LOW, TimeRange(start=0, end=30), [30]) == 0
