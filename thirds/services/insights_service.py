"""
Insights facade.

Runs the velocity analysis, derives proposals and produces narrative
suggestions. The LLM narrative is optional; any failure falls back to the
rule-based suggestions, so a run only fails when the history cannot be read.
"""

from __future__ import annotations

import asyncio
import json
import re
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from thirds.core.exceptions import InfrastructureError, InvalidStateTransitionError, ThirdsError
from thirds.core.logger import setup_logger
from thirds.interfaces.llm_provider import ILLMProvider
from thirds.interfaces.schedule_repository import IScheduleRepository
from thirds.models.enums import CANONICAL_ORDER, EnergyLabel, InsightsState
from thirds.models.insights import InsightsResponse, Proposal, UsageSummary
from thirds.services.llm_utils import generate_text
from thirds.services.proposal_generator import generate_proposals
from thirds.services.velocity_analyzer import TIME_OF_DAY_BUCKETS, CompletionVelocityAnalyzer
from thirds.utils.time_range import contains

logger = setup_logger(__name__)

MAX_SUGGESTIONS = 6

ENERGY_MESSAGES = {
    EnergyLabel.HIGH: "You're in your High Energy period — get cracking!",
    EnergyLabel.MEDIUM: "Steady energy flow — maintain your momentum!",
    EnergyLabel.LOW: "Time for gentle focus — every step counts!",
}
NEUTRAL_MESSAGE = "Outside your energy blocks. Rest up and recharge."

DEFAULT_SUGGESTIONS = [
    "Start tracking your energy levels throughout the day to identify your most productive times.",
    "Try the Pomodoro technique: 25 minutes of focused work followed by a 5-minute break.",
    "Schedule your most challenging tasks during your highest energy periods.",
]

SYSTEM_INSTRUCTION = "You are a helpful productivity coach. Always respond with valid JSON arrays of strings."

_LIST_PREFIX_RE = re.compile(r"^(\d+\.\s*|[-*]\s*)")

_TRANSITIONS = {
    InsightsState.IDLE: {InsightsState.FETCHING},
    InsightsState.FETCHING: {InsightsState.SUCCEEDED, InsightsState.FAILED},
    InsightsState.SUCCEEDED: set(),
    InsightsState.FAILED: set(),
}


class InsightsRun:
    """State of one insights request: idle, fetching, then succeeded or failed."""

    def __init__(self):
        self.state = InsightsState.IDLE
        self.response: Optional[InsightsResponse] = None
        self.error: Optional[str] = None

    def _move(self, target: InsightsState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransitionError(
                f"Cannot move insights run from {self.state.value} to {target.value}",
                details={"from": self.state.value, "to": target.value},
            )
        self.state = target

    def start(self) -> None:
        self._move(InsightsState.FETCHING)

    def succeed(self, response: InsightsResponse) -> None:
        self._move(InsightsState.SUCCEEDED)
        self.response = response

    def fail(self, error: str) -> None:
        self._move(InsightsState.FAILED)
        self.error = error


def parse_suggestions(text: Optional[str]) -> list[str]:
    """
    Read LLM output as a JSON array of strings.

    Output that is not JSON is split into lines with list markers stripped.
    """
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        lines = (_LIST_PREFIX_RE.sub("", line.strip()).strip() for line in text.splitlines())
        return [line for line in lines if line][:MAX_SUGGESTIONS]
    if isinstance(parsed, list):
        items = [str(item).strip() for item in parsed if str(item).strip()]
        return items[:MAX_SUGGESTIONS]
    return [text.strip()]


def rule_based_suggestions(summary: UsageSummary, proposals: list[Proposal]) -> list[str]:
    """Deterministic suggestions; never empty."""
    suggestions = [proposal.rationale for proposal in proposals]

    if summary.total_focus_minutes > 4 * 60:
        suggestions.append(
            "You've completed 4+ hours of deep work. Consider taking a longer break to recharge."
        )
    elif summary.total_focus_minutes < 2 * 60 and summary.total_sessions > 0:
        suggestions.append("Try extending your focus sessions to build deeper concentration habits.")

    best_energy = None
    for label in CANONICAL_ORDER:
        pattern = summary.energy_patterns.get(label)
        if pattern and pattern.count > 0:
            if best_energy is None or pattern.avg_minutes > summary.energy_patterns[best_energy].avg_minutes:
                best_energy = label
    if best_energy is not None:
        suggestions.append(
            f"Your {best_energy.value} energy sessions are most productive. "
            "Schedule important tasks during these times."
        )

    best_time = None
    for bucket in TIME_OF_DAY_BUCKETS:
        pattern = summary.time_of_day_patterns.get(bucket)
        if pattern and pattern.sessions > 0:
            if best_time is None or pattern.avg_minutes > summary.time_of_day_patterns[best_time].avg_minutes:
                best_time = bucket
    if best_time is not None:
        suggestions.append(
            f"Your {best_time} sessions show the best focus. Consider making this your primary work time."
        )

    if summary.total_tasks > 0:
        if summary.completion_rate > 80:
            suggestions.append(
                "Excellent task completion rate! Your consistency is building strong productivity habits."
            )
        elif summary.completion_rate < 50:
            suggestions.append(
                "Try breaking tasks into smaller chunks to improve completion rates and build momentum."
            )

    if not summary.schedule.has_schedule:
        suggestions.append(
            "Set up a consistent sleep and wake schedule to optimize your energy levels throughout the day."
        )

    if summary.total_sessions > 0 and summary.recent.sessions < 3:
        suggestions.append(
            "Increase session frequency to build stronger focus habits. Aim for at least 3 sessions per week."
        )

    if not suggestions:
        suggestions.extend(DEFAULT_SUGGESTIONS)
    return suggestions[:MAX_SUGGESTIONS]


def build_prompt(summary: UsageSummary, proposals: list[Proposal]) -> str:
    energy = ", ".join(
        f"{label.value} ({summary.energy_patterns[label].count} sessions, "
        f"{round(summary.energy_patterns[label].avg_minutes)} min avg)"
        for label in CANONICAL_ORDER
        if label in summary.energy_patterns
    )
    times = ", ".join(
        f"{bucket.capitalize()} ({summary.time_of_day_patterns[bucket].sessions} sessions, "
        f"{round(summary.time_of_day_patterns[bucket].avg_minutes)} min avg)"
        for bucket in TIME_OF_DAY_BUCKETS
        if bucket in summary.time_of_day_patterns
    )
    if summary.schedule.has_schedule:
        schedule = f"Wake at {summary.schedule.wake_time}, Sleep at {summary.schedule.sleep_time}"
    else:
        schedule = "No schedule set"

    lines = [
        "You are a productivity coach analyzing a user's focus session data. Based on the following "
        "data summary, provide 3-6 short, actionable recommendations for schedule and energy optimization.",
        "",
        "User Data Summary:",
        f"- Total sessions: {summary.total_sessions}",
        f"- Total focus time: {round(summary.total_focus_minutes / 60, 1)} hours",
        f"- Average session duration: {round(summary.average_session_minutes)} minutes",
        f"- Task completion rate: {round(summary.completion_rate)}%",
        f"- Energy level patterns: {energy}",
        f"- Time patterns: {times}",
        f"- Recent activity: {summary.recent.sessions} sessions this week, "
        f"{round(summary.recent.focus_minutes / 60, 1)} hours focus time",
        f"- Consistency score: {round(summary.recent.consistency_score)}%",
        f"- Schedule: {schedule}",
    ]
    for proposal in proposals:
        lines.append(f"- Data-driven proposal: {proposal.rationale}")
    lines += [
        "",
        "Format as a JSON array of strings, each recommendation should be 1-2 sentences and actionable.",
    ]
    return "\n".join(lines)


class InsightsService:
    """Builds insights for a user."""

    def __init__(
        self,
        schedule_repo: IScheduleRepository,
        llm_provider: Optional[ILLMProvider] = None,
        lookback_days: int = 30,
        recent_days: int = 7,
        min_samples: int = 3,
        llm_timeout_seconds: float = 8.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._schedule_repo = schedule_repo
        self._llm_provider = llm_provider
        self._analyzer = CompletionVelocityAnalyzer(
            schedule_repo,
            lookback_days=lookback_days,
            recent_days=recent_days,
            min_samples=min_samples,
        )
        self._llm_timeout_seconds = llm_timeout_seconds
        self._clock = clock

    async def run(self, user_id: str) -> InsightsRun:
        """Execute one insights run and return it in its terminal state."""
        run = InsightsRun()
        run.start()
        try:
            analysis = await self._analyzer.analyze(user_id)
            proposals = generate_proposals(analysis.report)
            suggestions = await self._narrative(analysis.summary, proposals)
            motivation = await self.motivation(user_id)
        except (ThirdsError, SQLAlchemyError) as e:
            logger.error(f"Insights failed for {user_id}: {e}")
            run.fail(str(e))
            return run

        run.succeed(
            InsightsResponse(suggestions=suggestions, proposals=proposals, motivation=motivation)
        )
        return run

    async def get_insights(self, user_id: str) -> InsightsResponse:
        """
        Raises:
            InfrastructureError: the run failed
        """
        run = await self.run(user_id)
        if run.state != InsightsState.SUCCEEDED:
            raise InfrastructureError("Failed to generate insights", details={"error": run.error})
        return run.response

    async def _narrative(self, summary: UsageSummary, proposals: list[Proposal]) -> list[str]:
        suggestions = await self._ai_suggestions(summary, proposals)
        if suggestions:
            return suggestions
        return rule_based_suggestions(summary, proposals)

    async def _ai_suggestions(self, summary: UsageSummary, proposals: list[Proposal]) -> list[str]:
        if self._llm_provider is None:
            return []
        prompt = build_prompt(summary, proposals)
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(
                    generate_text,
                    self._llm_provider,
                    prompt,
                    temperature=0.7,
                    max_output_tokens=500,
                    system_instruction=SYSTEM_INSTRUCTION,
                ),
                timeout=self._llm_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"LLM narrative timed out after {self._llm_timeout_seconds}s, using rules")
            return []
        except Exception as e:
            logger.warning(f"LLM narrative failed, using rules: {e}")
            return []

        suggestions = parse_suggestions(text)
        if not suggestions:
            logger.warning("LLM narrative was empty, using rules")
        return suggestions

    async def motivation(self, user_id: str) -> str:
        """Message for the energy block covering the current local time."""
        now = self._clock()
        minute = now.hour * 60 + now.minute
        for template in await self._schedule_repo.list_templates(user_id):
            if contains(template.to_block().range, minute):
                return ENERGY_MESSAGES[template.energy_type]
        return NEUTRAL_MESSAGE
