"""
SQLite implementation of task repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError

from thirds.core.exceptions import InfrastructureError, NotFoundError
from thirds.core.logger import setup_logger
from thirds.infrastructure.local.database import ScheduleORM, SessionORM, TaskORM, get_session_factory
from thirds.interfaces.task_repository import ITaskRepository
from thirds.models.enums import EnergyLabel, TaskStatus
from thirds.models.task import Task, TaskCreate, TaskUpdate
from thirds.utils.datetime_utils import now_utc, to_naive_utc

logger = setup_logger(__name__)


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: TaskORM) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task(
            id=UUID(orm.id),
            session_id=UUID(orm.session_id),
            name=orm.name,
            description=orm.description,
            duration_minutes=orm.duration_minutes,
            status=TaskStatus(orm.status),
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, user_id: str, session_id: UUID, task: TaskCreate) -> Task:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(SessionORM.id).where(
                        and_(SessionORM.id == str(session_id), SessionORM.user_id == user_id)
                    )
                )
                if result.scalar_one_or_none() is None:
                    raise NotFoundError(f"Session {session_id} not found")

                now = to_naive_utc(now_utc())
                orm = TaskORM(
                    id=str(uuid4()),
                    user_id=user_id,
                    session_id=str(session_id),
                    name=task.name,
                    description=task.description,
                    duration_minutes=task.duration_minutes,
                    status=task.status.value,
                    created_at=now,
                    updated_at=now,
                )
                session.add(orm)
                await session.commit()
                await session.refresh(orm)
                return self._orm_to_model(orm)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create task for user {user_id}: {e}")
            raise InfrastructureError("Failed to create task", details={"error": str(e)}) from e

    async def get(self, user_id: str, task_id: UUID) -> Optional[Task]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM).where(and_(TaskORM.id == str(task_id), TaskORM.user_id == user_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list_for_session(self, user_id: str, session_id: UUID) -> list[Task]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM)
                .where(and_(TaskORM.session_id == str(session_id), TaskORM.user_id == user_id))
                .order_by(TaskORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, user_id: str, task_id: UUID, update: TaskUpdate) -> Task:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(TaskORM).where(and_(TaskORM.id == str(task_id), TaskORM.user_id == user_id))
                )
                orm = result.scalar_one_or_none()
                if not orm:
                    raise NotFoundError(f"Task {task_id} not found")

                update_data = update.model_dump(exclude_unset=True)
                for field, value in update_data.items():
                    if field == "status" and value is not None:
                        value = value.value if hasattr(value, "value") else value
                    setattr(orm, field, value)
                orm.updated_at = to_naive_utc(now_utc())

                await session.commit()
                await session.refresh(orm)
                return self._orm_to_model(orm)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update task {task_id}: {e}")
            raise InfrastructureError("Failed to update task", details={"error": str(e)}) from e

    async def delete(self, user_id: str, task_id: UUID) -> bool:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(TaskORM).where(and_(TaskORM.id == str(task_id), TaskORM.user_id == user_id))
                )
                orm = result.scalar_one_or_none()
                if not orm:
                    return False
                await session.delete(orm)
                await session.commit()
                return True
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete task {task_id}: {e}")
            raise InfrastructureError("Failed to delete task", details={"error": str(e)}) from e

    async def max_session_load(self, user_id: str) -> dict[EnergyLabel, int]:
        async with self._session_factory() as session:
            # A save stamps its sessions with the schedule's updated_at, so only
            # sessions of each day's latest save are counted.
            result = await session.execute(
                select(
                    SessionORM.energy_type,
                    func.coalesce(func.sum(TaskORM.duration_minutes), 0),
                )
                .join(TaskORM, TaskORM.session_id == SessionORM.id)
                .join(ScheduleORM, ScheduleORM.id == SessionORM.schedule_id)
                .where(
                    and_(
                        SessionORM.user_id == user_id,
                        SessionORM.created_at >= ScheduleORM.updated_at,
                    )
                )
                .group_by(SessionORM.id, SessionORM.energy_type)
            )
            loads: dict[EnergyLabel, int] = {}
            for energy_type, total in result.all():
                label = EnergyLabel(energy_type)
                loads[label] = max(loads.get(label, 0), int(total))
            return loads
