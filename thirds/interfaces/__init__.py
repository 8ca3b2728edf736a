"""Abstract interfaces for infrastructure abstraction."""

from thirds.interfaces.auth_provider import IAuthProvider, User
from thirds.interfaces.llm_provider import ILLMProvider
from thirds.interfaces.schedule_repository import IScheduleRepository
from thirds.interfaces.task_repository import ITaskRepository

__all__ = [
    "IAuthProvider",
    "ILLMProvider",
    "IScheduleRepository",
    "ITaskRepository",
    "User",
]
