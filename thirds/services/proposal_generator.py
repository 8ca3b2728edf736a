"""
Schedule-change proposals derived from completion velocity.
"""

from __future__ import annotations

from thirds.core.logger import setup_logger
from thirds.models.energy import TimeRange
from thirds.models.enums import ProposalKind
from thirds.models.insights import ClockRange, Proposal, VelocityReport
from thirds.utils.time_range import from_clock, to_clock

logger = setup_logger(__name__)


def high_block_window(hour: int) -> TimeRange:
    """Two-hour window centred on an hour, clamped to the day."""
    start_hour = max(hour - 1, 0)
    end_hour = min(hour + 1, 23)
    return TimeRange(start=start_hour * 60, end=end_hour * 60)


def generate_proposals(report: VelocityReport) -> list[Proposal]:
    """
    Zero or one shift_high_block proposal.

    Emitted only when a fastest hour exists.
    """
    hour = report.fastest_hour
    if hour is None:
        return []

    window = high_block_window(hour)
    start, end = to_clock(window.start), to_clock(window.end)
    proposal = Proposal(
        kind=ProposalKind.SHIFT_HIGH_BLOCK,
        target=ClockRange(start=start, end=end),
        rationale=(
            f"You finish tasks fastest around {hour:02d}:00. "
            f"Consider moving your High energy block to {start}-{end}."
        ),
    )
    logger.info(f"Proposed High block {start}-{end} from fastest hour {hour}")
    return [proposal]


def target_range(target: ClockRange) -> TimeRange:
    """Parse a proposal target into minutes."""
    return TimeRange(start=from_clock(target.start), end=from_clock(target.end))
