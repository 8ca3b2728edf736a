from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from thirds.api.insights import apply_proposal, get_insights
from thirds.models.enums import EnergyLabel
from thirds.models.insights import ApplyProposalRequest, ClockRange
from thirds.models.schedule import SessionTemplate

NOW = datetime(2026, 3, 10, 12, 0)


def _settings() -> SimpleNamespace:
    return SimpleNamespace(
        INSIGHTS_LOOKBACK_DAYS=30,
        INSIGHTS_RECENT_DAYS=7,
        INSIGHTS_MIN_SAMPLES=3,
        INSIGHTS_LLM_TIMEOUT_SECONDS=1.0,
    )


def _template(label: EnergyLabel, start: str, end: str) -> SessionTemplate:
    return SessionTemplate(
        id=uuid4(),
        user_id="owner-user",
        energy_type=label,
        start_time=start,
        end_time=end,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.mark.asyncio
async def test_get_insights_without_history_returns_defaults() -> None:
    user = SimpleNamespace(id="owner-user")
    schedule_repo = AsyncMock()
    schedule_repo.list_session_history.return_value = []
    schedule_repo.get_latest_schedule.return_value = None
    schedule_repo.list_templates.return_value = []

    result = await get_insights(user=user, schedule_repo=schedule_repo, llm_provider=None, settings=_settings())

    assert result.proposals == []
    assert result.suggestions
    assert result.motivation


@pytest.mark.asyncio
async def test_get_insights_storage_failure_is_server_error() -> None:
    user = SimpleNamespace(id="owner-user")
    schedule_repo = AsyncMock()
    schedule_repo.list_session_history.side_effect = OperationalError("select", {}, Exception("db gone"))

    with pytest.raises(HTTPException) as exc_info:
        await get_insights(user=user, schedule_repo=schedule_repo, llm_provider=None, settings=_settings())

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Failed to generate insights"


@pytest.mark.asyncio
async def test_apply_proposal_rechains_following_blocks() -> None:
    user = SimpleNamespace(id="owner-user")
    schedule_repo = AsyncMock()
    schedule_repo.list_templates.return_value = [
        _template(EnergyLabel.HIGH, "06:00", "12:00"),
        _template(EnergyLabel.MEDIUM, "12:00", "18:00"),
        _template(EnergyLabel.LOW, "18:00", "22:00"),
    ]
    task_repo = AsyncMock()
    task_repo.max_session_load.return_value = {}
    payload = ApplyProposalRequest(type="shift_high_block", target=ClockRange(start="11:00", end="13:00"))

    result = await apply_proposal(payload=payload, user=user, schedule_repo=schedule_repo, task_repo=task_repo)

    assert [(b.start_time, b.end_time) for b in result.blocks] == [
        ("11:00", "13:00"),
        ("13:00", "19:00"),
        ("19:00", "23:00"),
    ]


@pytest.mark.asyncio
async def test_apply_proposal_past_midnight_is_rejected() -> None:
    user = SimpleNamespace(id="owner-user")
    schedule_repo = AsyncMock()
    schedule_repo.list_templates.return_value = [
        _template(EnergyLabel.HIGH, "06:00", "12:00"),
        _template(EnergyLabel.MEDIUM, "12:00", "20:00"),
        _template(EnergyLabel.LOW, "20:00", "23:00"),
    ]
    payload = ApplyProposalRequest(type="shift_high_block", target=ClockRange(start="13:00", end="15:00"))

    with pytest.raises(HTTPException) as exc_info:
        await apply_proposal(payload=payload, user=user, schedule_repo=schedule_repo, task_repo=AsyncMock())

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["error"] == "UnresolvableOverlapError"
    schedule_repo.replace_blocks.assert_not_awaited()
