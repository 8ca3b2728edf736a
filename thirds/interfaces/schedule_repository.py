"""
Schedule repository interface.

Covers the day-schedule aggregate: schedules, block templates and the
sessions linking them. Writes of the three blocks are all-or-nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from thirds.models.energy import EnergyBlock
from thirds.models.enums import DayOfWeek
from thirds.models.insights import SessionHistory
from thirds.models.schedule import SavedDay, Schedule, Session, SessionTemplate


class IScheduleRepository(ABC):
    """Abstract interface for schedule persistence."""

    @abstractmethod
    async def get_schedule(self, user_id: str, day_of_week: DayOfWeek) -> Optional[Schedule]:
        pass

    @abstractmethod
    async def get_schedule_by_id(self, user_id: str, schedule_id: UUID) -> Optional[Schedule]:
        pass

    @abstractmethod
    async def get_latest_schedule(self, user_id: str) -> Optional[Schedule]:
        """Most recently updated schedule of the user, any day."""
        pass

    @abstractmethod
    async def list_templates(self, user_id: str) -> list[SessionTemplate]:
        pass

    @abstractmethod
    async def save_schedule(
        self,
        user_id: str,
        days: list[DayOfWeek],
        wake_time: Optional[str],
        sleep_time: Optional[str],
        blocks: list[EnergyBlock],
    ) -> list[SavedDay]:
        """
        Upsert schedules for the given days, upsert the three block templates
        and create one session per block per day, in one transaction.

        Args:
            user_id: Owner user ID
            days: Days to write (at least one)
            wake_time: HH:MM or None
            sleep_time: HH:MM or None
            blocks: Validated, non-overlapping triple

        Returns:
            Ids written per day, in the order of `days`
        """
        pass

    @abstractmethod
    async def replace_blocks(self, user_id: str, blocks: list[EnergyBlock]) -> list[SessionTemplate]:
        """Upsert the three block templates in one transaction."""
        pass

    @abstractmethod
    async def list_sessions(self, user_id: str, schedule_id: UUID) -> list[Session]:
        pass

    @abstractmethod
    async def get_session(self, user_id: str, session_id: UUID) -> Optional[Session]:
        pass

    @abstractmethod
    async def list_session_history(self, user_id: str, since: datetime) -> list[SessionHistory]:
        """Sessions created at or after `since`, with block start and tasks."""
        pass
