"""Pydantic models (schemas) for the application."""

from thirds.models.energy import DaySchedule, EnergyBlock, TimeRange
from thirds.models.enums import (
    DayOfWeek,
    EnergyLabel,
    InsightsState,
    ProposalKind,
    RepeatFrequency,
    TaskStatus,
)
from thirds.models.insights import HourlyStat, InsightsResponse, Proposal, VelocityReport
from thirds.models.task import Task, TaskCreate, TaskUpdate

__all__ = [
    # Enums
    "DayOfWeek",
    "EnergyLabel",
    "InsightsState",
    "ProposalKind",
    "RepeatFrequency",
    "TaskStatus",
    # Energy blocks
    "DaySchedule",
    "EnergyBlock",
    "TimeRange",
    # Tasks
    "Task",
    "TaskCreate",
    "TaskUpdate",
    # Insights
    "HourlyStat",
    "InsightsResponse",
    "Proposal",
    "VelocityReport",
]
