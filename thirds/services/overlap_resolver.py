"""
Overlap resolution for the three daily energy blocks.

Detection and resolution are separate pure functions so callers decide when
to prompt before auto-fixing. Two deterministic modes:

- rechain: the whole "times" step was edited; blocks are daisy-chained in
  canonical order (High, Medium, Low), shifting, never shrinking.
- propagate_edit: one block was edited inline; only its two chronological
  neighbours are re-seated.
"""

from __future__ import annotations

from typing import Iterable

from thirds.core.exceptions import IncompleteScheduleError, UnresolvableOverlapError
from thirds.core.logger import setup_logger
from thirds.models.energy import EnergyBlock, TimeRange, sort_canonical
from thirds.models.enums import CANONICAL_ORDER, EnergyLabel
from thirds.utils.time_range import duration_minutes, format_range, overlaps

logger = setup_logger(__name__)


def index_blocks(blocks: Iterable[EnergyBlock]) -> dict[EnergyLabel, EnergyBlock]:
    """
    Map blocks by label, requiring exactly one per label.

    Raises:
        IncompleteScheduleError: a label is missing or repeated
    """
    by_label: dict[EnergyLabel, EnergyBlock] = {}
    for block in blocks:
        if block.label in by_label:
            raise IncompleteScheduleError(
                f"Duplicate {block.label.value} block",
                details={"block": block.label.value},
            )
        by_label[block.label] = block
    missing = [label.value for label in CANONICAL_ORDER if label not in by_label]
    if missing:
        raise IncompleteScheduleError(
            f"Missing energy blocks: {', '.join(missing)}",
            details={"missing": missing},
        )
    return by_label


def detect_overlaps(blocks: Iterable[EnergyBlock]) -> list[tuple[EnergyLabel, EnergyLabel]]:
    """Every overlapping pair of labels, in canonical order."""
    ordered = sort_canonical(list(blocks))
    pairs: list[tuple[EnergyLabel, EnergyLabel]] = []
    for i, first in enumerate(ordered):
        for second in ordered[i + 1 :]:
            if overlaps(first.range, second.range):
                pairs.append((first.label, second.label))
    return pairs


def has_overlap(blocks: Iterable[EnergyBlock]) -> bool:
    return bool(detect_overlaps(blocks))


def rechain(blocks: Iterable[EnergyBlock]) -> list[EnergyBlock]:
    """
    Full re-chain resolution.

    Pairwise non-overlapping input is returned unchanged. Otherwise each block
    after High that starts before its predecessor's end is moved to start at
    that end, keeping its own duration.

    Raises:
        InvalidRangeError: a block wraps past midnight or is empty
        UnresolvableOverlapError: a shifted block would run past the end of the day
    """
    by_label = index_blocks(blocks)
    ordered = [by_label[label] for label in CANONICAL_ORDER]
    for block in ordered:
        duration_minutes(block.range)

    if not has_overlap(ordered):
        return ordered

    resolved = [ordered[0]]
    previous_end = ordered[0].range.end
    for block in ordered[1:]:
        if block.range.start < previous_end:
            moved = block.range.shifted_to(previous_end)
            if not moved.fits_in_day():
                raise UnresolvableOverlapError(
                    f"{block.label.value} block cannot follow the previous block without running past midnight",
                    details={"block": block.label.value},
                )
            new_range = TimeRange(start=moved.start, end=moved.end)
            logger.info(
                f"Re-chained {block.label.value} block {format_range(block.range)} -> {format_range(new_range)}"
            )
            block = block.with_range(new_range)
        resolved.append(block)
        previous_end = block.range.end
    return resolved


def propagate_edit(
    blocks: Iterable[EnergyBlock],
    label: EnergyLabel,
    new_range: TimeRange,
) -> list[EnergyBlock]:
    """
    Single-block edit propagation.

    An edit that overlaps nothing is returned as is. Otherwise the neighbours
    are the untouched blocks directly before and after the edited range; equal
    starts order by canonical rank, so the later block in canonical order is
    the one treated as "next" and adjusted. The non-adjacent block is never
    touched, so the result can still overlap; callers wanting a clean triple
    run rechain afterwards (see resolve_edit).

    Raises:
        InvalidRangeError: the new range wraps or is empty
        UnresolvableOverlapError: a neighbour cannot be re-seated within the day
            or without dropping under one minute
    """
    by_label = index_blocks(blocks)
    duration_minutes(new_range)

    updated = dict(by_label)
    updated[label] = by_label[label].with_range(new_range)
    if not has_overlap(updated.values()):
        return [updated[item] for item in CANONICAL_ORDER]

    edited_key = (new_range.start, label.rank)
    others = sorted(
        (block for block in by_label.values() if block.label != label),
        key=lambda b: (b.range.start, b.label.rank),
    )
    before = [block for block in others if (block.range.start, block.label.rank) < edited_key]
    after = [block for block in others if (block.range.start, block.label.rank) > edited_key]
    previous = before[-1] if before else None
    following = after[0] if after else None

    edited = new_range

    if previous is not None and edited.start < previous.range.end:
        if previous.range.end < edited.end:
            # Trim the edited block's leading edge; it keeps at least one minute.
            edited = TimeRange(start=previous.range.end, end=edited.end)
        elif previous.range.start < edited.start:
            updated[previous.label] = previous.with_range(
                TimeRange(start=previous.range.start, end=edited.start)
            )
        else:
            raise UnresolvableOverlapError(
                f"{label.value} block cannot be placed inside the {previous.label.value} block",
                details={"block": label.value, "neighbor": previous.label.value},
            )

    if following is not None and edited.end > following.range.start:
        moved = following.range.shifted_to(edited.end)
        if not moved.fits_in_day():
            raise UnresolvableOverlapError(
                f"{following.label.value} block cannot be pushed past midnight",
                details={"block": following.label.value},
            )
        updated[following.label] = following.with_range(TimeRange(start=moved.start, end=moved.end))

    updated[label] = by_label[label].with_range(edited)
    result = [updated[item] for item in CANONICAL_ORDER]
    logger.debug(
        f"Propagated edit of {label.value}: "
        + ", ".join(f"{block.label.value} {format_range(block.range)}" for block in result)
    )
    return result


def resolve_edit(
    blocks: Iterable[EnergyBlock],
    label: EnergyLabel,
    new_range: TimeRange,
) -> list[EnergyBlock]:
    """Propagate a single-block edit, then re-chain whatever still overlaps."""
    propagated = propagate_edit(blocks, label, new_range)
    if has_overlap(propagated):
        return rechain(propagated)
    return propagated


def substitute(blocks: Iterable[EnergyBlock], label: EnergyLabel, new_range: TimeRange) -> list[EnergyBlock]:
    """Replace one block's range and re-chain the triple."""
    by_label = index_blocks(blocks)
    by_label[label] = by_label[label].with_range(new_range)
    return rechain(by_label.values())
