"""
Task model definitions.

Tasks belong to one session (a block instance) and consume its capacity.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from thirds.models.enums import TaskStatus


class TaskBase(BaseModel):
    """Base task fields shared across create/read."""

    name: str = Field(..., min_length=1, max_length=500, description="Task name")
    description: Optional[str] = Field(None, max_length=2000)
    duration_minutes: int = Field(..., ge=1, description="Planned duration in minutes")
    status: TaskStatus = TaskStatus.ACTIVE


class TaskCreate(TaskBase):
    """Create a task inside a session."""

    pass


class TaskUpdate(BaseModel):
    """Partial task update."""

    name: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    duration_minutes: Optional[int] = Field(None, ge=1)
    status: Optional[TaskStatus] = None

    @model_validator(mode="after")
    def validate_required_fields(self):
        """Only description may be cleared; the other fields are omitted, never null."""
        cleared = [
            name
            for name in ("name", "duration_minutes", "status")
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


class Task(TaskBase):
    """Stored task."""

    id: UUID
    session_id: UUID
    created_at: datetime
    updated_at: datetime
