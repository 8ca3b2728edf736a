"""
Insights models: per-hour statistics, usage summary, proposals.

All of these are derived per request and never persisted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from thirds.models.enums import EnergyLabel, ProposalKind, TaskStatus


class HistoryTask(BaseModel):
    duration_minutes: Optional[int] = None
    status: TaskStatus


class SessionHistory(BaseModel):
    """One past session joined with its block template and tasks."""

    session_id: UUID
    energy_type: EnergyLabel
    block_start: int = Field(..., ge=0, lt=24 * 60, description="Owning block start, minutes")
    created_at: datetime
    tasks: list[HistoryTask] = Field(default_factory=list)


class HourlyStat(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    completed_count: int = 0
    total_duration_minutes: int = 0

    @property
    def average_minutes(self) -> Optional[float]:
        if self.completed_count == 0:
            return None
        return self.total_duration_minutes / self.completed_count


class VelocityReport(BaseModel):
    """Hour-of-day completion statistics over a lookback window."""

    lookback_days: int
    hourly: list[HourlyStat]
    fastest_hour: Optional[int] = None
    highest_throughput_hour: Optional[int] = None


class EnergyPattern(BaseModel):
    count: int = 0
    avg_minutes: float = 0.0


class TimeOfDayPattern(BaseModel):
    sessions: int = 0
    avg_minutes: float = 0.0


class RecentTrends(BaseModel):
    sessions: int = 0
    focus_minutes: int = 0
    consistency_score: float = 0.0


class ScheduleFacts(BaseModel):
    wake_time: Optional[str] = None
    sleep_time: Optional[str] = None
    has_schedule: bool = False


class UsageSummary(BaseModel):
    """Aggregate usage figures that feed the narrative suggestions."""

    total_sessions: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    total_focus_minutes: int = 0
    average_session_minutes: float = 0.0
    completion_rate: float = 0.0
    energy_patterns: dict[EnergyLabel, EnergyPattern] = Field(default_factory=dict)
    time_of_day_patterns: dict[str, TimeOfDayPattern] = Field(default_factory=dict)
    recent: RecentTrends = Field(default_factory=RecentTrends)
    schedule: ScheduleFacts = Field(default_factory=ScheduleFacts)


class ClockRange(BaseModel):
    start: str
    end: str


class Proposal(BaseModel):
    """A not-yet-applied suggestion to move a block."""

    model_config = ConfigDict(populate_by_name=True)

    kind: ProposalKind = Field(ProposalKind.SHIFT_HIGH_BLOCK, alias="type")
    target: ClockRange
    rationale: str


class ApplyProposalRequest(BaseModel):
    """Body for applying a proposal."""

    model_config = ConfigDict(populate_by_name=True)

    kind: ProposalKind = Field(..., alias="type")
    target: ClockRange


class InsightsResponse(BaseModel):
    suggestions: list[str]
    proposals: list[Proposal] = Field(default_factory=list)
    motivation: str
