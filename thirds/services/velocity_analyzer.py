"""
Completion velocity analysis.

Aggregates past sessions into per-hour completion statistics (the input of
proposal generation) and a usage summary (the input of narrative suggestions).
The aggregation functions are pure; CompletionVelocityAnalyzer only adds the
repository reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from thirds.core.logger import setup_logger
from thirds.interfaces.schedule_repository import IScheduleRepository
from thirds.models.enums import CANONICAL_ORDER, TaskStatus
from thirds.models.insights import (
    EnergyPattern,
    HourlyStat,
    RecentTrends,
    ScheduleFacts,
    SessionHistory,
    TimeOfDayPattern,
    UsageSummary,
    VelocityReport,
)
from thirds.models.schedule import Schedule
from thirds.utils.datetime_utils import now_utc, to_naive_utc, window_start
from thirds.utils.time_range import hour_of

logger = setup_logger(__name__)

DEFAULT_MIN_SAMPLES = 3

TIME_OF_DAY_BUCKETS = ("morning", "afternoon", "night")


def time_of_day_bucket(hour: int) -> str:
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 18:
        return "afternoon"
    return "night"


def aggregate_hourly(history: Iterable[SessionHistory]) -> list[HourlyStat]:
    """
    Per-hour completion counts and durations, all 24 hours present.

    Only completed tasks with a duration count; the hour is the start hour of
    the block the task was done in.
    """
    counts = [0] * 24
    totals = [0] * 24
    for record in history:
        hour = hour_of(record.block_start)
        for task in record.tasks:
            if task.status != TaskStatus.COMPLETED or task.duration_minutes is None:
                continue
            counts[hour] += 1
            totals[hour] += task.duration_minutes
    return [
        HourlyStat(hour=hour, completed_count=counts[hour], total_duration_minutes=totals[hour])
        for hour in range(24)
    ]


def fastest_hour(hourly: list[HourlyStat], min_samples: int = DEFAULT_MIN_SAMPLES) -> Optional[int]:
    """Hour with the lowest average duration among hours with enough samples."""
    best: Optional[HourlyStat] = None
    for stat in hourly:
        if stat.completed_count < min_samples:
            continue
        if best is None or stat.average_minutes < best.average_minutes:
            best = stat
    return best.hour if best else None


def highest_throughput_hour(hourly: list[HourlyStat]) -> Optional[int]:
    """Hour with the most completions; None when nothing was completed."""
    best: Optional[HourlyStat] = None
    for stat in hourly:
        if stat.completed_count == 0:
            continue
        if best is None or stat.completed_count > best.completed_count:
            best = stat
    return best.hour if best else None


def build_velocity_report(
    history: Iterable[SessionHistory],
    lookback_days: int,
    min_samples: int = DEFAULT_MIN_SAMPLES,
) -> VelocityReport:
    hourly = aggregate_hourly(history)
    return VelocityReport(
        lookback_days=lookback_days,
        hourly=hourly,
        fastest_hour=fastest_hour(hourly, min_samples),
        highest_throughput_hour=highest_throughput_hour(hourly),
    )


def _planned_minutes(record: SessionHistory) -> int:
    return sum(task.duration_minutes or 0 for task in record.tasks)


def summarize_usage(
    history: list[SessionHistory],
    recent_since: datetime,
    schedule: Optional[Schedule] = None,
) -> UsageSummary:
    """
    Usage figures over the lookback window.

    Focus minutes are the planned durations of all tasks in the window's
    sessions. Recent trends cover sessions created at or after recent_since.
    """
    recent_since = to_naive_utc(recent_since)
    total_tasks = sum(len(record.tasks) for record in history)
    completed_tasks = sum(
        1 for record in history for task in record.tasks if task.status == TaskStatus.COMPLETED
    )
    total_focus = sum(_planned_minutes(record) for record in history)

    energy_totals = {label: [0, 0] for label in CANONICAL_ORDER}
    time_totals = {bucket: [0, 0] for bucket in TIME_OF_DAY_BUCKETS}
    for record in history:
        minutes = _planned_minutes(record)
        energy_totals[record.energy_type][0] += 1
        energy_totals[record.energy_type][1] += minutes
        bucket = time_of_day_bucket(hour_of(record.block_start))
        time_totals[bucket][0] += 1
        time_totals[bucket][1] += minutes

    recent = [record for record in history if to_naive_utc(record.created_at) >= recent_since]
    completion_rate = (completed_tasks / total_tasks) * 100 if total_tasks else 0.0

    return UsageSummary(
        total_sessions=len(history),
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        total_focus_minutes=total_focus,
        average_session_minutes=total_focus / len(history) if history else 0.0,
        completion_rate=completion_rate,
        energy_patterns={
            label: EnergyPattern(count=count, avg_minutes=minutes / count if count else 0.0)
            for label, (count, minutes) in energy_totals.items()
        },
        time_of_day_patterns={
            bucket: TimeOfDayPattern(sessions=count, avg_minutes=minutes / count if count else 0.0)
            for bucket, (count, minutes) in time_totals.items()
        },
        recent=RecentTrends(
            sessions=len(recent),
            focus_minutes=sum(_planned_minutes(record) for record in recent),
            consistency_score=min(100.0, completion_rate) if history else 0.0,
        ),
        schedule=ScheduleFacts(
            wake_time=schedule.wake_time if schedule else None,
            sleep_time=schedule.sleep_time if schedule else None,
            has_schedule=schedule is not None,
        ),
    )


@dataclass(frozen=True)
class VelocityAnalysis:
    report: VelocityReport
    summary: UsageSummary


class CompletionVelocityAnalyzer:
    """Loads a user's session history and runs the aggregations over it."""

    def __init__(
        self,
        schedule_repo: IScheduleRepository,
        lookback_days: int = 30,
        recent_days: int = 7,
        min_samples: int = DEFAULT_MIN_SAMPLES,
    ):
        self._schedule_repo = schedule_repo
        self._lookback_days = lookback_days
        self._recent_days = recent_days
        self._min_samples = min_samples

    async def analyze(self, user_id: str, now: Optional[datetime] = None) -> VelocityAnalysis:
        now = now or now_utc()
        history = await self._schedule_repo.list_session_history(
            user_id, window_start(now, self._lookback_days)
        )
        schedule = await self._schedule_repo.get_latest_schedule(user_id)

        report = build_velocity_report(history, self._lookback_days, self._min_samples)
        summary = summarize_usage(history, window_start(now, self._recent_days), schedule)
        logger.debug(
            f"Velocity for {user_id}: {len(history)} sessions, "
            f"fastest={report.fastest_hour}, throughput={report.highest_throughput_hour}"
        )
        return VelocityAnalysis(report=report, summary=summary)
