"""
Energy block models.

Times are minutes since local midnight; conversion to and from HH:MM text
happens at the API boundary (see thirds.utils.time_range).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from thirds.models.enums import CANONICAL_ORDER, DayOfWeek, EnergyLabel

MINUTES_PER_DAY = 24 * 60


class TimeRange(BaseModel):
    """A time-of-day range. Wrapping (crossing midnight) when end <= start."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0, lt=MINUTES_PER_DAY)
    end: int = Field(..., ge=0, lt=MINUTES_PER_DAY)

    @property
    def is_wrapping(self) -> bool:
        return self.end <= self.start

    def shifted_to(self, start: int) -> "TimeRange":
        """
        Same length, new start.

        The result may fall outside the day; callers check with fits_in_day().
        """
        return TimeRange.model_construct(start=start, end=start + (self.end - self.start))

    def fits_in_day(self) -> bool:
        return 0 <= self.start < self.end < MINUTES_PER_DAY


class EnergyBlock(BaseModel):
    """One of the three daily energy windows."""

    model_config = ConfigDict(frozen=True)

    label: EnergyLabel
    range: TimeRange

    def with_range(self, new_range: TimeRange) -> "EnergyBlock":
        return EnergyBlock(label=self.label, range=new_range)


class DaySchedule(BaseModel):
    """Snapshot of one day: wake/sleep plus exactly one block per label."""

    day_of_week: DayOfWeek
    wake_time: Optional[int] = Field(None, ge=0, lt=MINUTES_PER_DAY)
    sleep_time: Optional[int] = Field(None, ge=0, lt=MINUTES_PER_DAY)
    blocks: list[EnergyBlock] = Field(default_factory=list)

    def block(self, label: EnergyLabel) -> Optional[EnergyBlock]:
        for block in self.blocks:
            if block.label == label:
                return block
        return None

    def with_blocks(self, blocks: list[EnergyBlock]) -> "DaySchedule":
        return self.model_copy(update={"blocks": sort_canonical(blocks)})


def sort_canonical(blocks: list[EnergyBlock]) -> list[EnergyBlock]:
    """Order blocks High, Medium, Low."""
    return sorted(blocks, key=lambda block: CANONICAL_ORDER.index(block.label))
