"""
Schedule validation.

Checks run before anything is persisted; any violation means the caller
writes nothing.
"""

from __future__ import annotations

from typing import Iterable

from thirds.core.exceptions import CapacityExceededError, UnresolvableOverlapError
from thirds.models.energy import DaySchedule, EnergyBlock, TimeRange
from thirds.models.enums import CANONICAL_ORDER, EnergyLabel
from thirds.services.overlap_resolver import detect_overlaps, index_blocks
from thirds.utils.time_range import duration_minutes

MIN_BLOCK_MINUTES = 1


def validate_blocks(blocks: Iterable[EnergyBlock]) -> list[EnergyBlock]:
    """
    Check the block-level invariants.

    All three labels present exactly once, each block non-wrapping with end
    strictly after start and at least one minute long.

    Returns:
        Blocks in canonical order

    Raises:
        IncompleteScheduleError: missing or duplicated label
        InvalidRangeError: end <= start
    """
    by_label = index_blocks(blocks)
    ordered = [by_label[label] for label in CANONICAL_ORDER]
    for block in ordered:
        # duration_minutes rejects end <= start, which also enforces the 1-minute floor
        duration_minutes(block.range)
    return ordered


def validate_persistable(blocks: Iterable[EnergyBlock]) -> list[EnergyBlock]:
    """
    Block invariants plus pairwise exclusion.

    Raises:
        IncompleteScheduleError, InvalidRangeError: see validate_blocks
        UnresolvableOverlapError: blocks still overlap at persistence time
    """
    ordered = validate_blocks(blocks)
    pairs = detect_overlaps(ordered)
    if pairs:
        names = ", ".join(f"{a.value}/{b.value}" for a, b in pairs)
        raise UnresolvableOverlapError(
            f"Energy block times cannot overlap ({names})",
            details={"pairs": [[a.value, b.value] for a, b in pairs]},
        )
    return ordered


def validate_day_schedule(schedule: DaySchedule) -> DaySchedule:
    """Validate a full day before it is persisted."""
    return schedule.with_blocks(validate_persistable(schedule.blocks))


def check_capacity(label: EnergyLabel, block_range: TimeRange, durations: Iterable[int]) -> int:
    """
    Ensure task durations fit inside a block.

    Returns:
        Remaining free minutes in the block

    Raises:
        CapacityExceededError: total exceeds the block, carrying the exact overage
    """
    capacity = duration_minutes(block_range)
    total = sum(durations)
    if total > capacity:
        raise CapacityExceededError(
            block=label.value,
            excess_minutes=total - capacity,
            message=(
                f"Total task duration ({total}min) exceeds {label.value} block duration ({capacity}min)"
            ),
        )
    return capacity - total
