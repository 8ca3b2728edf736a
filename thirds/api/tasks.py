"""
Task API endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, status

from thirds.api.deps import CurrentUser, ScheduleRepo, TaskRepo
from thirds.api.errors import to_http_exception
from thirds.core.exceptions import ThirdsError
from thirds.models.task import Task, TaskUpdate
from thirds.services.schedule_service import ScheduleService

router = APIRouter()


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: UUID,
    update: TaskUpdate,
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
) -> Task:
    """Update a task; a new duration is re-checked against the block."""
    service = ScheduleService(schedule_repo, task_repo)
    try:
        return await service.update_task(user.id, task_id, update)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
) -> None:
    service = ScheduleService(schedule_repo, task_repo)
    try:
        await service.delete_task(user.id, task_id)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc
