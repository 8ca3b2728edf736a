"""
Enum definitions for the application.

These enums are used across models and provide type-safe status/label values.
"""

from enum import Enum


class EnergyLabel(str, Enum):
    """
    Energy block label.

    Declaration order is the canonical chronological precedence of the chain
    (HIGH before MEDIUM before LOW) and the tie-breaking order.
    """

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return CANONICAL_ORDER.index(self)


CANONICAL_ORDER: tuple[EnergyLabel, ...] = (
    EnergyLabel.HIGH,
    EnergyLabel.MEDIUM,
    EnergyLabel.LOW,
)


class TaskStatus(str, Enum):
    """Task status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class DayOfWeek(str, Enum):
    """Day of week, as stored on schedules."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class RepeatFrequency(str, Enum):
    """Which days a saved schedule is written to."""

    SINGLE = "single"  # only the day in the request
    DAILY = "daily"
    WEEKEND = "weekend"
    CUSTOM = "custom"


class ProposalKind(str, Enum):
    """Kinds of schedule-change proposals."""

    SHIFT_HIGH_BLOCK = "shift_high_block"


class InsightsState(str, Enum):
    """Lifecycle of one insights request."""

    IDLE = "idle"
    FETCHING = "fetching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
