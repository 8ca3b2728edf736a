"""
Task repository interface.

Defines the contract for task persistence operations.
Implementations: SQLite
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from thirds.models.enums import EnergyLabel
from thirds.models.task import Task, TaskCreate, TaskUpdate


class ITaskRepository(ABC):
    """Abstract interface for task persistence."""

    @abstractmethod
    async def create(self, user_id: str, session_id: UUID, task: TaskCreate) -> Task:
        """
        Create a new task inside a session.

        Args:
            user_id: Owner user ID
            session_id: Owning session
            task: Task creation data

        Returns:
            Created task with generated ID and timestamps

        Raises:
            NotFoundError: session does not exist for this user
        """
        pass

    @abstractmethod
    async def get(self, user_id: str, task_id: UUID) -> Optional[Task]:
        """
        Get a task by ID.

        Returns:
            Task if found and owned by the user, None otherwise
        """
        pass

    @abstractmethod
    async def list_for_session(self, user_id: str, session_id: UUID) -> list[Task]:
        """List a session's tasks in creation order."""
        pass

    @abstractmethod
    async def update(self, user_id: str, task_id: UUID, update: TaskUpdate) -> Task:
        """
        Update an existing task.

        Raises:
            NotFoundError: If task not found
        """
        pass

    @abstractmethod
    async def delete(self, user_id: str, task_id: UUID) -> bool:
        """
        Delete a task.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def max_session_load(self, user_id: str) -> dict[EnergyLabel, int]:
        """
        Heaviest task load per energy label.

        For every label, the largest sum of task durations found in a single
        session of that label, counting only sessions of each day's latest
        save. Labels without tasks are omitted.
        """
        pass
