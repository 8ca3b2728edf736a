"""
Schedule and energy block API endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from thirds.api.deps import CurrentUser, ScheduleRepo, TaskRepo
from thirds.api.errors import to_http_exception
from thirds.core.exceptions import ThirdsError
from thirds.models.enums import DayOfWeek, EnergyLabel
from thirds.models.schedule import (
    BlockEdit,
    BlocksPreview,
    BlocksPreviewRequest,
    BlocksUpdateResult,
    DayScheduleView,
    ScheduleCreate,
    ScheduleSaveResult,
    Session,
)
from thirds.services.schedule_service import ScheduleService

router = APIRouter()


@router.post("", response_model=ScheduleSaveResult, status_code=status.HTTP_201_CREATED)
async def save_schedule(
    payload: ScheduleCreate,
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
) -> ScheduleSaveResult:
    """Save a day's wake/sleep times and three energy blocks."""
    service = ScheduleService(schedule_repo, task_repo)
    try:
        return await service.save_schedule(user.id, payload)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc


@router.get("", response_model=list[Session])
async def get_schedule_sessions(
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
    schedule_id: UUID = Query(..., description="Schedule ID"),
) -> list[Session]:
    """List the sessions of a schedule."""
    service = ScheduleService(schedule_repo, task_repo)
    try:
        return await service.list_schedule_sessions(user.id, schedule_id)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc


@router.get("/days/{day_of_week}", response_model=DayScheduleView)
async def get_day_schedule(
    day_of_week: DayOfWeek,
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
) -> DayScheduleView:
    """Current schedule of one day."""
    service = ScheduleService(schedule_repo, task_repo)
    try:
        return await service.get_day(user.id, day_of_week)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc


@router.post("/blocks/preview", response_model=BlocksPreview)
async def preview_blocks(
    payload: BlocksPreviewRequest,
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
) -> BlocksPreview:
    """Report overlaps in a candidate triple and how re-chaining would fix them."""
    service = ScheduleService(schedule_repo, task_repo)
    try:
        return service.preview_blocks(payload.sessions)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc


@router.put("/blocks/{energy_type}", response_model=BlocksUpdateResult)
async def edit_block(
    energy_type: EnergyLabel,
    edit: BlockEdit,
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
) -> BlocksUpdateResult:
    """Edit one block; neighbouring blocks move to keep the day consistent."""
    service = ScheduleService(schedule_repo, task_repo)
    try:
        blocks = await service.edit_block(user.id, energy_type, edit)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc
    return BlocksUpdateResult(blocks=blocks)
