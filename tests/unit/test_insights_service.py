"""
Unit tests for the insights facade.
"""

import json
import time
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from thirds.core.exceptions import InfrastructureError, InvalidStateTransitionError
from thirds.models.enums import EnergyLabel, InsightsState, TaskStatus
from thirds.models.insights import HistoryTask, SessionHistory, UsageSummary
from thirds.models.schedule import SessionTemplate
from thirds.services import insights_service
from thirds.services.insights_service import (
    DEFAULT_SUGGESTIONS,
    ENERGY_MESSAGES,
    NEUTRAL_MESSAGE,
    InsightsRun,
    InsightsService,
    parse_suggestions,
    rule_based_suggestions,
)
from thirds.services.velocity_analyzer import summarize_usage
from thirds.utils.datetime_utils import now_utc, to_naive_utc

NOW = datetime(2026, 3, 10, 12, 0)


def template(label: EnergyLabel, start: str, end: str) -> SessionTemplate:
    return SessionTemplate(
        id=uuid4(),
        user_id="u",
        energy_type=label,
        start_time=start,
        end_time=end,
        created_at=NOW,
        updated_at=NOW,
    )


def history_at_nine() -> list[SessionHistory]:
    return [
        SessionHistory(
            session_id=uuid4(),
            energy_type=EnergyLabel.HIGH,
            block_start=9 * 60,
            created_at=to_naive_utc(now_utc()) - timedelta(days=1),
            tasks=[HistoryTask(duration_minutes=10, status=TaskStatus.COMPLETED) for _ in range(3)],
        )
    ]


@pytest.fixture
def schedule_repo():
    repo = AsyncMock()
    repo.list_session_history.return_value = history_at_nine()
    repo.get_latest_schedule.return_value = None
    repo.list_templates.return_value = [
        template(EnergyLabel.HIGH, "06:00", "12:00"),
        template(EnergyLabel.MEDIUM, "12:00", "18:00"),
        template(EnergyLabel.LOW, "18:00", "22:00"),
    ]
    return repo


def service_at(repo, hour: int, minute: int = 0, **kwargs) -> InsightsService:
    return InsightsService(repo, clock=lambda: datetime(2026, 3, 10, hour, minute), **kwargs)


def test_run_state_machine():
    run = InsightsRun()
    assert run.state == InsightsState.IDLE

    run.start()
    assert run.state == InsightsState.FETCHING

    run.fail("boom")
    assert run.state == InsightsState.FAILED
    assert run.error == "boom"


def test_run_rejects_invalid_transition():
    run = InsightsRun()

    with pytest.raises(InvalidStateTransitionError):
        run.fail("not started")

    run.start()
    run.fail("boom")
    with pytest.raises(InvalidStateTransitionError):
        run.start()


def test_parse_suggestions_json_array():
    assert parse_suggestions(json.dumps(["Do A", " ", "Do B"])) == ["Do A", "Do B"]


def test_parse_suggestions_falls_back_to_lines():
    text = "1. Sleep earlier\n- Batch email\n\n* Walk at noon"

    assert parse_suggestions(text) == ["Sleep earlier", "Batch email", "Walk at noon"]


def test_parse_suggestions_caps_at_six():
    assert len(parse_suggestions(json.dumps([f"tip {i}" for i in range(10)]))) == 6


def test_parse_suggestions_empty():
    assert parse_suggestions(None) == []
    assert parse_suggestions("") == []


def test_rule_based_defaults_when_nothing_applies():
    summary = UsageSummary()
    summary.schedule.has_schedule = True

    assert rule_based_suggestions(summary, []) == DEFAULT_SUGGESTIONS


def test_rule_based_includes_proposal_rationale_and_caps():
    summary = summarize_usage(history_at_nine(), recent_since=to_naive_utc(now_utc()) - timedelta(days=7))
    proposal = MagicMock(rationale="Move High to 08:00-10:00")

    suggestions = rule_based_suggestions(summary, [proposal])

    assert suggestions[0] == "Move High to 08:00-10:00"
    assert 0 < len(suggestions) <= 6
    assert any("High energy sessions are most productive" in s for s in suggestions)
    assert any("sleep and wake schedule" in s for s in suggestions)


@pytest.mark.asyncio
async def test_insights_without_llm_use_rules(schedule_repo):
    service = service_at(schedule_repo, 7, 30)

    response = await service.get_insights("u")

    assert len(response.proposals) == 1
    assert response.proposals[0].target.start == "08:00"
    assert response.suggestions[0] == response.proposals[0].rationale
    assert response.motivation == ENERGY_MESSAGES[EnergyLabel.HIGH]


@pytest.mark.asyncio
async def test_insights_use_llm_output(schedule_repo, monkeypatch):
    monkeypatch.setattr(insights_service, "generate_text", lambda *a, **kw: '["Tip one", "Tip two"]')
    service = service_at(schedule_repo, 13, llm_provider=MagicMock())

    response = await service.get_insights("u")

    assert response.suggestions == ["Tip one", "Tip two"]
    assert response.motivation == ENERGY_MESSAGES[EnergyLabel.MEDIUM]


@pytest.mark.asyncio
async def test_llm_error_falls_back_to_rules(schedule_repo, monkeypatch):
    def fail(*args, **kwargs):
        raise RuntimeError("provider down")

    monkeypatch.setattr(insights_service, "generate_text", fail)
    service = service_at(schedule_repo, 19, llm_provider=MagicMock())

    response = await service.get_insights("u")

    assert response.suggestions
    assert response.suggestions[0] == response.proposals[0].rationale
    assert response.motivation == ENERGY_MESSAGES[EnergyLabel.LOW]


@pytest.mark.asyncio
async def test_llm_timeout_falls_back_to_rules(schedule_repo, monkeypatch):
    def slow(*args, **kwargs):
        time.sleep(0.5)
        return '["late"]'

    monkeypatch.setattr(insights_service, "generate_text", slow)
    service = service_at(schedule_repo, 9, llm_provider=MagicMock(), llm_timeout_seconds=0.05)

    response = await service.get_insights("u")

    assert "late" not in response.suggestions
    assert response.suggestions


@pytest.mark.asyncio
async def test_empty_llm_output_falls_back_to_rules(schedule_repo, monkeypatch):
    monkeypatch.setattr(insights_service, "generate_text", lambda *a, **kw: None)
    service = service_at(schedule_repo, 9, llm_provider=MagicMock())

    response = await service.get_insights("u")

    assert response.suggestions[0] == response.proposals[0].rationale


@pytest.mark.asyncio
async def test_motivation_outside_blocks_is_neutral(schedule_repo):
    service = service_at(schedule_repo, 23, 15)

    assert await service.motivation("u") == NEUTRAL_MESSAGE


@pytest.mark.asyncio
async def test_storage_error_fails_run(schedule_repo):
    schedule_repo.list_session_history.side_effect = OperationalError("select", {}, Exception("db gone"))
    service = service_at(schedule_repo, 9)

    run = await service.run("u")
    assert run.state == InsightsState.FAILED

    with pytest.raises(InfrastructureError) as exc_info:
        await service.get_insights("u")
    assert exc_info.value.message == "Failed to generate insights"
