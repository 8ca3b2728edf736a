"""
Insights API endpoints.
"""

from fastapi import APIRouter

from thirds.api.deps import AppSettings, CurrentUser, LLMProvider, ScheduleRepo, TaskRepo
from thirds.api.errors import to_http_exception
from thirds.core.exceptions import ThirdsError
from thirds.models.insights import ApplyProposalRequest, InsightsResponse
from thirds.models.schedule import BlocksUpdateResult
from thirds.services.insights_service import InsightsService
from thirds.services.schedule_service import ScheduleService

router = APIRouter()


@router.get("", response_model=InsightsResponse)
async def get_insights(
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    llm_provider: LLMProvider,
    settings: AppSettings,
) -> InsightsResponse:
    """Suggestions, block proposals and a motivation line for the caller."""
    service = InsightsService(
        schedule_repo,
        llm_provider=llm_provider,
        lookback_days=settings.INSIGHTS_LOOKBACK_DAYS,
        recent_days=settings.INSIGHTS_RECENT_DAYS,
        min_samples=settings.INSIGHTS_MIN_SAMPLES,
        llm_timeout_seconds=settings.INSIGHTS_LLM_TIMEOUT_SECONDS,
    )
    try:
        return await service.get_insights(user.id)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc


@router.post("", response_model=BlocksUpdateResult)
async def apply_proposal(
    payload: ApplyProposalRequest,
    user: CurrentUser,
    schedule_repo: ScheduleRepo,
    task_repo: TaskRepo,
) -> BlocksUpdateResult:
    """Apply an accepted proposal to the caller's blocks."""
    service = ScheduleService(schedule_repo, task_repo)
    try:
        blocks = await service.apply_proposal(user.id, payload)
    except ThirdsError as exc:
        raise to_http_exception(exc) from exc
    return BlocksUpdateResult(blocks=blocks)
