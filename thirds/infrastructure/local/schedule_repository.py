"""
SQLite implementation of schedule repository.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError

from thirds.core.exceptions import InfrastructureError
from thirds.core.logger import setup_logger
from thirds.infrastructure.local.database import (
    ScheduleORM,
    SessionORM,
    SessionTemplateORM,
    TaskORM,
    get_session_factory,
)
from thirds.interfaces.schedule_repository import IScheduleRepository
from thirds.models.energy import EnergyBlock
from thirds.models.enums import DayOfWeek, EnergyLabel, TaskStatus
from thirds.models.insights import HistoryTask, SessionHistory
from thirds.models.schedule import SavedDay, Schedule, Session, SessionTemplate
from thirds.utils.datetime_utils import now_utc, to_naive_utc
from thirds.utils.time_range import from_clock, to_clock

logger = setup_logger(__name__)


class SqliteScheduleRepository(IScheduleRepository):
    """SQLite implementation of schedule repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _schedule_to_model(self, orm: ScheduleORM) -> Schedule:
        return Schedule(
            id=UUID(orm.id),
            user_id=orm.user_id,
            day_of_week=DayOfWeek(orm.day_of_week),
            wake_time=orm.wake_time,
            sleep_time=orm.sleep_time,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    def _template_to_model(self, orm: SessionTemplateORM) -> SessionTemplate:
        return SessionTemplate(
            id=UUID(orm.id),
            user_id=orm.user_id,
            energy_type=EnergyLabel(orm.energy_type),
            start_time=orm.start_time,
            end_time=orm.end_time,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    def _session_to_model(self, orm: SessionORM, template: SessionTemplateORM) -> Session:
        return Session(
            id=UUID(orm.id),
            schedule_id=UUID(orm.schedule_id),
            template_id=UUID(orm.template_id),
            energy_type=EnergyLabel(orm.energy_type),
            start_time=template.start_time,
            end_time=template.end_time,
            created_at=orm.created_at,
        )

    async def get_schedule(self, user_id: str, day_of_week: DayOfWeek) -> Optional[Schedule]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ScheduleORM).where(
                    and_(
                        ScheduleORM.user_id == user_id,
                        ScheduleORM.day_of_week == day_of_week.value,
                    )
                )
            )
            orm = result.scalar_one_or_none()
            return self._schedule_to_model(orm) if orm else None

    async def get_schedule_by_id(self, user_id: str, schedule_id: UUID) -> Optional[Schedule]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ScheduleORM).where(
                    and_(
                        ScheduleORM.id == str(schedule_id),
                        ScheduleORM.user_id == user_id,
                    )
                )
            )
            orm = result.scalar_one_or_none()
            return self._schedule_to_model(orm) if orm else None

    async def get_latest_schedule(self, user_id: str) -> Optional[Schedule]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ScheduleORM)
                .where(ScheduleORM.user_id == user_id)
                .order_by(ScheduleORM.updated_at.desc())
                .limit(1)
            )
            orm = result.scalar_one_or_none()
            return self._schedule_to_model(orm) if orm else None

    async def list_templates(self, user_id: str) -> list[SessionTemplate]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SessionTemplateORM).where(SessionTemplateORM.user_id == user_id)
            )
            templates = [self._template_to_model(orm) for orm in result.scalars().all()]
            return sorted(templates, key=lambda t: t.energy_type.rank)

    async def _upsert_templates(
        self, session, user_id: str, blocks: list[EnergyBlock], now: datetime
    ) -> dict[EnergyLabel, SessionTemplateORM]:
        result = await session.execute(
            select(SessionTemplateORM).where(SessionTemplateORM.user_id == user_id)
        )
        existing = {EnergyLabel(orm.energy_type): orm for orm in result.scalars().all()}
        templates: dict[EnergyLabel, SessionTemplateORM] = {}
        for block in blocks:
            orm = existing.get(block.label)
            if orm:
                orm.start_time = to_clock(block.range.start)
                orm.end_time = to_clock(block.range.end)
                orm.updated_at = now
            else:
                orm = SessionTemplateORM(
                    id=str(uuid4()),
                    user_id=user_id,
                    energy_type=block.label.value,
                    start_time=to_clock(block.range.start),
                    end_time=to_clock(block.range.end),
                    created_at=now,
                    updated_at=now,
                )
                session.add(orm)
            templates[block.label] = orm
        return templates

    async def save_schedule(
        self,
        user_id: str,
        days: list[DayOfWeek],
        wake_time: Optional[str],
        sleep_time: Optional[str],
        blocks: list[EnergyBlock],
    ) -> list[SavedDay]:
        now = to_naive_utc(now_utc())
        saved: list[SavedDay] = []
        try:
            async with self._session_factory() as session:
                templates = await self._upsert_templates(session, user_id, blocks, now)
                for day in days:
                    result = await session.execute(
                        select(ScheduleORM).where(
                            and_(
                                ScheduleORM.user_id == user_id,
                                ScheduleORM.day_of_week == day.value,
                            )
                        )
                    )
                    schedule = result.scalar_one_or_none()
                    if schedule:
                        schedule.wake_time = wake_time
                        schedule.sleep_time = sleep_time
                        schedule.updated_at = now
                    else:
                        schedule = ScheduleORM(
                            id=str(uuid4()),
                            user_id=user_id,
                            day_of_week=day.value,
                            wake_time=wake_time,
                            sleep_time=sleep_time,
                            created_at=now,
                            updated_at=now,
                        )
                        session.add(schedule)

                    session_ids = []
                    for block in blocks:
                        orm = SessionORM(
                            id=str(uuid4()),
                            user_id=user_id,
                            schedule_id=schedule.id,
                            template_id=templates[block.label].id,
                            energy_type=block.label.value,
                            created_at=now,
                        )
                        session.add(orm)
                        session_ids.append(UUID(orm.id))
                    saved.append(
                        SavedDay(day_of_week=day, schedule_id=UUID(schedule.id), session_ids=session_ids)
                    )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save schedule for user {user_id}: {e}")
            raise InfrastructureError("Failed to save schedule", details={"error": str(e)}) from e

        logger.info(f"Saved schedule for {user_id} on {', '.join(day.value for day in days)}")
        return saved

    async def replace_blocks(self, user_id: str, blocks: list[EnergyBlock]) -> list[SessionTemplate]:
        now = to_naive_utc(now_utc())
        try:
            async with self._session_factory() as session:
                templates = await self._upsert_templates(session, user_id, blocks, now)
                await session.commit()
                return [self._template_to_model(templates[block.label]) for block in blocks]
        except SQLAlchemyError as e:
            logger.error(f"Failed to update blocks for user {user_id}: {e}")
            raise InfrastructureError("Failed to update energy blocks", details={"error": str(e)}) from e

    async def list_sessions(self, user_id: str, schedule_id: UUID) -> list[Session]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SessionORM, SessionTemplateORM)
                .join(SessionTemplateORM, SessionORM.template_id == SessionTemplateORM.id)
                .where(
                    and_(
                        SessionORM.schedule_id == str(schedule_id),
                        SessionORM.user_id == user_id,
                    )
                )
                .order_by(SessionORM.created_at)
            )
            return [self._session_to_model(orm, template) for orm, template in result.all()]

    async def get_session(self, user_id: str, session_id: UUID) -> Optional[Session]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SessionORM, SessionTemplateORM)
                .join(SessionTemplateORM, SessionORM.template_id == SessionTemplateORM.id)
                .where(
                    and_(
                        SessionORM.id == str(session_id),
                        SessionORM.user_id == user_id,
                    )
                )
            )
            row = result.one_or_none()
            if not row:
                return None
            return self._session_to_model(row[0], row[1])

    async def list_session_history(self, user_id: str, since: datetime) -> list[SessionHistory]:
        since = to_naive_utc(since)
        async with self._session_factory() as session:
            result = await session.execute(
                select(SessionORM, SessionTemplateORM)
                .join(SessionTemplateORM, SessionORM.template_id == SessionTemplateORM.id)
                .where(
                    and_(
                        SessionORM.user_id == user_id,
                        SessionORM.created_at >= since,
                    )
                )
                .order_by(SessionORM.created_at)
            )
            rows = result.all()
            if not rows:
                return []

            task_result = await session.execute(
                select(TaskORM).where(
                    and_(
                        TaskORM.user_id == user_id,
                        TaskORM.session_id.in_([orm.id for orm, _ in rows]),
                    )
                )
            )
            tasks_by_session: dict[str, list[HistoryTask]] = defaultdict(list)
            for task in task_result.scalars().all():
                tasks_by_session[task.session_id].append(
                    HistoryTask(duration_minutes=task.duration_minutes, status=TaskStatus(task.status))
                )

            return [
                SessionHistory(
                    session_id=UUID(orm.id),
                    energy_type=EnergyLabel(orm.energy_type),
                    block_start=from_clock(template.start_time),
                    created_at=orm.created_at,
                    tasks=tasks_by_session.get(orm.id, []),
                )
                for orm, template in rows
            ]
