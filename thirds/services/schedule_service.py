"""
Schedule service.

Each public method is one read-resolve-validate-write cycle: load the current
state, apply the pure resolver/validator functions, then persist in a single
repository call. Nothing is written when a check fails.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from thirds.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from thirds.core.logger import setup_logger
from thirds.interfaces.schedule_repository import IScheduleRepository
from thirds.interfaces.task_repository import ITaskRepository
from thirds.models.energy import EnergyBlock
from thirds.models.enums import DayOfWeek, EnergyLabel, ProposalKind, RepeatFrequency
from thirds.models.insights import ApplyProposalRequest
from thirds.models.schedule import (
    BlockEdit,
    BlocksPreview,
    BlockTimes,
    BlockView,
    DayScheduleView,
    RepeatSettings,
    ScheduleCreate,
    ScheduleSaveResult,
    Session,
)
from thirds.models.task import Task, TaskCreate, TaskUpdate
from thirds.services.overlap_resolver import detect_overlaps, rechain, resolve_edit, substitute
from thirds.services.proposal_generator import target_range
from thirds.services.schedule_validator import (
    check_capacity,
    validate_blocks,
    validate_day_schedule,
    validate_persistable,
)
from thirds.utils.time_range import format_range, parse_range, to_clock

logger = setup_logger(__name__)

WEEKEND_DAYS = [DayOfWeek.SATURDAY, DayOfWeek.SUNDAY]


def expand_repeat(day_of_week: DayOfWeek, repeat: Optional[RepeatSettings]) -> list[DayOfWeek]:
    """
    Days a save writes to.

    Raises:
        ValidationError: custom frequency without any day
    """
    if repeat is None or repeat.frequency == RepeatFrequency.SINGLE:
        return [day_of_week]
    if repeat.frequency == RepeatFrequency.DAILY:
        return list(DayOfWeek)
    if repeat.frequency == RepeatFrequency.WEEKEND:
        return list(WEEKEND_DAYS)
    if not repeat.days:
        raise ValidationError("Select at least one day for a custom repeat", details={"days": []})
    # dedupe, week order
    return [day for day in DayOfWeek if day in set(repeat.days)]


class ScheduleService:
    """Schedule, block and task operations for one user at a time."""

    def __init__(self, schedule_repo: IScheduleRepository, task_repo: ITaskRepository):
        self._schedule_repo = schedule_repo
        self._task_repo = task_repo

    # ===========================================
    # Schedules
    # ===========================================

    async def save_schedule(self, user_id: str, payload: ScheduleCreate) -> ScheduleSaveResult:
        """
        Validate and persist a day (or a repeat set of days).

        Raises:
            ForbiddenError: payload names another user
            ValidationError, UnresolvableOverlapError: see validate_day_schedule
            CapacityExceededError: a block would shrink below its current task load
        """
        if payload.user_id != user_id:
            raise ForbiddenError("Cannot save a schedule for another user")

        days = expand_repeat(payload.day_of_week, payload.repeat)
        schedule = validate_day_schedule(payload.to_day_schedule())

        wake = to_clock(schedule.wake_time) if schedule.wake_time is not None else None
        sleep = to_clock(schedule.sleep_time) if schedule.sleep_time is not None else None
        await self._check_block_capacity(user_id, schedule.blocks)
        saved = await self._schedule_repo.save_schedule(user_id, days, wake, sleep, schedule.blocks)

        first = saved[0]
        return ScheduleSaveResult(
            schedule_id=first.schedule_id,
            session_ids=first.session_ids,
            schedules=saved,
        )

    async def get_day(self, user_id: str, day_of_week: DayOfWeek) -> DayScheduleView:
        """
        Raises:
            NotFoundError: neither a schedule for the day nor blocks exist
        """
        schedule = await self._schedule_repo.get_schedule(user_id, day_of_week)
        templates = await self._schedule_repo.list_templates(user_id)
        if schedule is None and not templates:
            raise NotFoundError(f"No schedule for {day_of_week.value}")
        return DayScheduleView(
            schedule_id=schedule.id if schedule else None,
            day_of_week=day_of_week,
            wake_time=schedule.wake_time if schedule else None,
            sleep_time=schedule.sleep_time if schedule else None,
            blocks=[BlockView.from_block(template.to_block()) for template in templates],
        )

    async def list_schedule_sessions(self, user_id: str, schedule_id: UUID) -> list[Session]:
        schedule = await self._schedule_repo.get_schedule_by_id(user_id, schedule_id)
        if schedule is None:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        return await self._schedule_repo.list_sessions(user_id, schedule_id)

    # ===========================================
    # Blocks
    # ===========================================

    def preview_blocks(self, sessions: list[BlockTimes]) -> BlocksPreview:
        """
        Overlap check for a candidate triple and its re-chained form.

        Raises:
            ValidationError: malformed triple
            UnresolvableOverlapError: re-chain would run past midnight
        """
        blocks = validate_blocks([item.to_block() for item in sessions])
        pairs = detect_overlaps(blocks)
        resolved = rechain(blocks)
        return BlocksPreview(
            overlaps=[[a, b] for a, b in pairs],
            changed=resolved != blocks,
            resolved=[BlockView.from_block(block) for block in resolved],
        )

    async def _current_blocks(self, user_id: str) -> list[EnergyBlock]:
        templates = await self._schedule_repo.list_templates(user_id)
        if not templates:
            raise NotFoundError("No energy blocks saved yet")
        return [template.to_block() for template in templates]

    async def _check_block_capacity(self, user_id: str, blocks: list[EnergyBlock]) -> None:
        loads = await self._task_repo.max_session_load(user_id)
        for block in blocks:
            load = loads.get(block.label)
            if load:
                check_capacity(block.label, block.range, [load])

    async def _persist_blocks(self, user_id: str, blocks: list[EnergyBlock]) -> list[BlockView]:
        ordered = validate_persistable(blocks)
        await self._check_block_capacity(user_id, ordered)
        await self._schedule_repo.replace_blocks(user_id, ordered)
        return [BlockView.from_block(block) for block in ordered]

    async def edit_block(self, user_id: str, label: EnergyLabel, edit: BlockEdit) -> list[BlockView]:
        """
        Edit one block inline; neighbours are re-seated and any residue re-chained.

        Raises:
            NotFoundError: no blocks saved yet
            ParseError, InvalidRangeError: bad edit times
            UnresolvableOverlapError: neighbours cannot be re-seated
            CapacityExceededError: a block would shrink below its task load
        """
        blocks = await self._current_blocks(user_id)
        new_range = parse_range(edit.start_time, edit.end_time)
        resolved = resolve_edit(blocks, label, new_range)
        logger.info(f"Edited {label.value} block for {user_id} to {format_range(new_range)}")
        return await self._persist_blocks(user_id, resolved)

    async def apply_proposal(self, user_id: str, request: ApplyProposalRequest) -> list[BlockView]:
        """
        Move the High block to the proposal target and re-chain.

        Raises:
            ValidationError: unknown proposal kind or bad target
            UnresolvableOverlapError, CapacityExceededError: as edit_block
        """
        if request.kind != ProposalKind.SHIFT_HIGH_BLOCK:
            raise ValidationError(f"Unsupported proposal type: {request.kind}")
        blocks = await self._current_blocks(user_id)
        new_range = target_range(request.target)
        resolved = substitute(blocks, EnergyLabel.HIGH, new_range)
        logger.info(f"Applied High block proposal for {user_id}: {format_range(new_range)}")
        return await self._persist_blocks(user_id, resolved)

    # ===========================================
    # Tasks
    # ===========================================

    async def _get_session(self, user_id: str, session_id: UUID) -> Session:
        session = await self._schedule_repo.get_session(user_id, session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    async def list_tasks(self, user_id: str, session_id: UUID) -> list[Task]:
        await self._get_session(user_id, session_id)
        return await self._task_repo.list_for_session(user_id, session_id)

    async def create_task(self, user_id: str, session_id: UUID, data: TaskCreate) -> Task:
        """
        Raises:
            NotFoundError: session not found
            CapacityExceededError: tasks would no longer fit the block
        """
        session = await self._get_session(user_id, session_id)
        siblings = await self._task_repo.list_for_session(user_id, session_id)
        block = session.to_block()
        check_capacity(
            block.label,
            block.range,
            [task.duration_minutes for task in siblings] + [data.duration_minutes],
        )
        return await self._task_repo.create(user_id, session_id, data)

    async def update_task(self, user_id: str, task_id: UUID, update: TaskUpdate) -> Task:
        """
        Raises:
            NotFoundError: task or its session not found
            CapacityExceededError: new duration no longer fits the block
        """
        task = await self._task_repo.get(user_id, task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")

        if update.duration_minutes is not None:
            session = await self._get_session(user_id, task.session_id)
            siblings = await self._task_repo.list_for_session(user_id, task.session_id)
            block = session.to_block()
            check_capacity(
                block.label,
                block.range,
                [t.duration_minutes for t in siblings if t.id != task.id] + [update.duration_minutes],
            )
        return await self._task_repo.update(user_id, task_id, update)

    async def delete_task(self, user_id: str, task_id: UUID) -> None:
        deleted = await self._task_repo.delete(user_id, task_id)
        if not deleted:
            raise NotFoundError(f"Task {task_id} not found")
