"""
Unit tests for proposal generation.
"""

import pytest

from thirds.models.enums import ProposalKind
from thirds.models.insights import ClockRange, HourlyStat, VelocityReport
from thirds.services.proposal_generator import generate_proposals, target_range


def report(fastest: int | None) -> VelocityReport:
    return VelocityReport(
        lookback_days=30,
        hourly=[HourlyStat(hour=h) for h in range(24)],
        fastest_hour=fastest,
    )


def test_fastest_hour_nine_proposes_eight_to_ten():
    proposals = generate_proposals(report(9))

    assert len(proposals) == 1
    proposal = proposals[0]
    assert proposal.kind == ProposalKind.SHIFT_HIGH_BLOCK
    assert proposal.target == ClockRange(start="08:00", end="10:00")
    assert "09:00" in proposal.rationale
    assert "08:00-10:00" in proposal.rationale


def test_no_proposal_without_fastest_hour():
    assert generate_proposals(report(None)) == []


@pytest.mark.parametrize(
    "hour,start,end",
    [(0, "00:00", "01:00"), (23, "22:00", "23:00")],
)
def test_window_is_clamped_to_day(hour, start, end):
    proposal = generate_proposals(report(hour))[0]

    assert proposal.target == ClockRange(start=start, end=end)


def test_proposal_serializes_kind_as_type():
    payload = generate_proposals(report(9))[0].model_dump(by_alias=True)

    assert payload["type"] == "shift_high_block"


def test_target_range_parses_clock():
    parsed = target_range(ClockRange(start="08:00", end="10:00"))

    assert (parsed.start, parsed.end) == (480, 600)
