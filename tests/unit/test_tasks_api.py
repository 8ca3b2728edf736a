from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import HTTPException

from thirds.api.sessions import create_session_task, list_session_tasks, list_sessions
from thirds.api.tasks import delete_task, update_task
from thirds.models.enums import EnergyLabel, TaskStatus
from thirds.models.schedule import Session
from thirds.models.task import Task, TaskCreate, TaskUpdate

NOW = datetime(2026, 3, 10, 12, 0)


def _make_session(start: str = "09:00", end: str = "10:00") -> Session:
    return Session(
        id=uuid4(),
        schedule_id=uuid4(),
        template_id=uuid4(),
        energy_type=EnergyLabel.HIGH,
        start_time=start,
        end_time=end,
        created_at=NOW,
    )


def _make_task(session_id, duration: int, name: str = "Task") -> Task:
    return Task(
        id=uuid4(),
        session_id=session_id,
        name=name,
        duration_minutes=duration,
        status=TaskStatus.ACTIVE,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.mark.asyncio
async def test_list_sessions_of_unknown_schedule_is_not_found() -> None:
    user = SimpleNamespace(id="owner-user")
    schedule_repo = AsyncMock()
    schedule_repo.get_schedule_by_id.return_value = None

    with pytest.raises(HTTPException) as exc_info:
        await list_sessions(user=user, schedule_repo=schedule_repo, task_repo=AsyncMock(), schedule_id=uuid4())

    assert exc_info.value.status_code == 404
    schedule_repo.list_sessions.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_session_tasks_scopes_to_owner() -> None:
    user = SimpleNamespace(id="owner-user")
    session = _make_session()
    schedule_repo = AsyncMock()
    schedule_repo.get_session.return_value = session
    task_repo = AsyncMock()
    task_repo.list_for_session.return_value = [_make_task(session.id, 20)]

    result = await list_session_tasks(
        session_id=session.id, user=user, schedule_repo=schedule_repo, task_repo=task_repo
    )

    assert len(result) == 1
    schedule_repo.get_session.assert_awaited_once_with("owner-user", session.id)


@pytest.mark.asyncio
async def test_create_task_that_overflows_block_is_rejected() -> None:
    user = SimpleNamespace(id="owner-user")
    session = _make_session()
    schedule_repo = AsyncMock()
    schedule_repo.get_session.return_value = session
    task_repo = AsyncMock()
    task_repo.list_for_session.return_value = [_make_task(session.id, 45)]

    with pytest.raises(HTTPException) as exc_info:
        await create_session_task(
            session_id=session.id,
            payload=TaskCreate(name="Report", duration_minutes=30),
            user=user,
            schedule_repo=schedule_repo,
            task_repo=task_repo,
        )

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["excess_minutes"] == 15
    assert exc_info.value.detail["block"] == "High"
    task_repo.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_task_in_foreign_session_is_not_found() -> None:
    user = SimpleNamespace(id="owner-user")
    schedule_repo = AsyncMock()
    schedule_repo.get_session.return_value = None

    with pytest.raises(HTTPException) as exc_info:
        await create_session_task(
            session_id=uuid4(),
            payload=TaskCreate(name="Report", duration_minutes=30),
            user=user,
            schedule_repo=schedule_repo,
            task_repo=AsyncMock(),
        )

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_update_task_status_skips_capacity_check() -> None:
    user = SimpleNamespace(id="owner-user")
    session = _make_session()
    task = _make_task(session.id, 60)
    schedule_repo = AsyncMock()
    task_repo = AsyncMock()
    task_repo.get.return_value = task
    task_repo.update.return_value = task.model_copy(update={"status": TaskStatus.COMPLETED})

    result = await update_task(
        task_id=task.id,
        update=TaskUpdate(status=TaskStatus.COMPLETED),
        user=user,
        schedule_repo=schedule_repo,
        task_repo=task_repo,
    )

    assert result.status == TaskStatus.COMPLETED
    schedule_repo.get_session.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_missing_task_is_not_found() -> None:
    user = SimpleNamespace(id="owner-user")
    task_repo = AsyncMock()
    task_repo.delete.return_value = False

    with pytest.raises(HTTPException) as exc_info:
        await delete_task(task_id=uuid4(), user=user, schedule_repo=AsyncMock(), task_repo=task_repo)

    assert exc_info.value.status_code == 404
