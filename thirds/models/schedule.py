"""
Schedule models: request payloads, stored rows and views.

Clock strings are only accepted and produced here; everything past the API
boundary works in minutes (see thirds.models.energy).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from thirds.models.energy import DaySchedule, EnergyBlock
from thirds.models.enums import DayOfWeek, EnergyLabel, RepeatFrequency
from thirds.utils.time_range import duration_minutes, from_clock, parse_range, to_clock


class BlockTimes(BaseModel):
    """One energy block as exchanged on the wire."""

    energy_type: EnergyLabel
    start_time: str = Field(..., description="HH:MM or HH:MM:SS")
    end_time: str = Field(..., description="HH:MM or HH:MM:SS")

    def to_block(self) -> EnergyBlock:
        return EnergyBlock(label=self.energy_type, range=parse_range(self.start_time, self.end_time))

    @classmethod
    def from_block(cls, block: EnergyBlock) -> "BlockTimes":
        return cls(
            energy_type=block.label,
            start_time=to_clock(block.range.start),
            end_time=to_clock(block.range.end),
        )


class RepeatSettings(BaseModel):
    """Which days a saved schedule applies to."""

    frequency: RepeatFrequency = RepeatFrequency.SINGLE
    days: list[DayOfWeek] = Field(default_factory=list, description="Days for CUSTOM frequency")


class ScheduleCreate(BaseModel):
    """Create/replace a day's three blocks plus wake/sleep times."""

    user_id: str = Field(..., min_length=1)
    day_of_week: DayOfWeek
    sleep_time: Optional[str] = None
    wake_time: Optional[str] = None
    sessions: list[BlockTimes] = Field(..., min_length=3, max_length=3)
    repeat: Optional[RepeatSettings] = None

    def to_day_schedule(self, day_of_week: Optional[DayOfWeek] = None) -> DaySchedule:
        return DaySchedule(
            day_of_week=day_of_week or self.day_of_week,
            wake_time=from_clock(self.wake_time) if self.wake_time else None,
            sleep_time=from_clock(self.sleep_time) if self.sleep_time else None,
            blocks=[item.to_block() for item in self.sessions],
        )


class SavedDay(BaseModel):
    """Ids written for one day of a save."""

    day_of_week: DayOfWeek
    schedule_id: UUID
    session_ids: list[UUID]


class ScheduleSaveResult(BaseModel):
    """Response of a schedule save; the first day mirrors the top-level ids."""

    schedule_id: UUID
    session_ids: list[UUID]
    schedules: list[SavedDay] = Field(default_factory=list)


class Schedule(BaseModel):
    """Stored schedule row."""

    id: UUID
    user_id: str
    day_of_week: DayOfWeek
    wake_time: Optional[str] = None
    sleep_time: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SessionTemplate(BaseModel):
    """Stored block boundaries, one per (user, energy type)."""

    id: UUID
    user_id: str
    energy_type: EnergyLabel
    start_time: str
    end_time: str
    created_at: datetime
    updated_at: datetime

    def to_block(self) -> EnergyBlock:
        return EnergyBlock(label=self.energy_type, range=parse_range(self.start_time, self.end_time))


class Session(BaseModel):
    """A block instance linking a schedule to a template."""

    id: UUID
    schedule_id: UUID
    template_id: UUID
    energy_type: EnergyLabel
    start_time: str
    end_time: str
    created_at: datetime

    def to_block(self) -> EnergyBlock:
        return EnergyBlock(label=self.energy_type, range=parse_range(self.start_time, self.end_time))


class BlockEdit(BaseModel):
    """Inline edit of one block's boundaries."""

    start_time: str
    end_time: str


class BlockView(BaseModel):
    energy_type: EnergyLabel
    start_time: str
    end_time: str
    duration_minutes: int

    @classmethod
    def from_block(cls, block: EnergyBlock) -> "BlockView":
        return cls(
            energy_type=block.label,
            start_time=to_clock(block.range.start),
            end_time=to_clock(block.range.end),
            duration_minutes=duration_minutes(block.range, allow_wrap=True),
        )


class DayScheduleView(BaseModel):
    """A day's schedule as returned to clients."""

    schedule_id: Optional[UUID] = None
    day_of_week: DayOfWeek
    wake_time: Optional[str] = None
    sleep_time: Optional[str] = None
    blocks: list[BlockView]


class BlocksPreviewRequest(BaseModel):
    sessions: list[BlockTimes] = Field(..., min_length=3, max_length=3)


class BlocksPreview(BaseModel):
    """Overlap check for a candidate triple, with the re-chained result."""

    overlaps: list[list[EnergyLabel]]
    changed: bool
    resolved: list[BlockView]


class BlocksUpdateResult(BaseModel):
    """Outcome of a block edit or an applied proposal."""

    ok: bool = True
    blocks: list[BlockView]
