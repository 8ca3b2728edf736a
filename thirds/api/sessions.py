"""
Session API endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from thirds.api.deps import CurrentUser, ScheduleRepo, TaskRepo
from thirds.api.errors import to_http_exception
from thirds.core.exceptions import ThirdsError
from thirds.models.schedule import Session
from thirds.models.task import Task, TaskCreate
from thirds.services.schedule_service import ScheduleService

router = APIRouter()


@router.get("", response_model=list[Session])
async def list_sessions(
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
    schedule_id: UUID = Query(..., description="Schedule ID"),
) -> list[Session]:
    service = ScheduleService(schedule_repo, task_repo)
    try:
        return await service.list_schedule_sessions(user.id, schedule_id)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{session_id}/tasks", response_model=list[Task])
async def list_session_tasks(
    session_id: UUID,
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
) -> list[Task]:
    service = ScheduleService(schedule_repo, task_repo)
    try:
        return await service.list_tasks(user.id, session_id)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{session_id}/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_session_task(
    session_id: UUID,
    payload: TaskCreate,
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
) -> Task:
    """Add a task to a session if it still fits the block."""
    service = ScheduleService(schedule_repo, task_repo)
    try:
        return await service.create_task(user.id, session_id, payload)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc
