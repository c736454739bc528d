from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ...core.actions import BLACK, ExpectedHandAction, actions_equal
from ...data.hands import ALL_HANDS
from .grader import grade_range_submission
from .models import SubmissionSummary

__all__ = ["delta_reference_range", "get_diff_hands", "grade_delta_range"]

logger = logging.getLogger(__name__)


def get_diff_hands(
    start_range: Mapping[str, ExpectedHandAction],
    target_range: Mapping[str, ExpectedHandAction],
    *,
    universe: Iterable[str] = ALL_HANDS,
) -> frozenset[str]:
    """Hands whose reference action changes between the two ranges.

    Hands that are ``black`` in either range never count as changed, and
    neither do hands the target range does not define.
    """

    diff: set[str] = set()
    for hand in universe:
        start = start_range.get(hand)
        target = target_range.get(hand)
        if target is None or start == BLACK or target == BLACK:
            continue
        if not actions_equal(start, target):
            diff.add(hand)
    return frozenset(diff)


def delta_reference_range(
    start_range: Mapping[str, ExpectedHandAction],
    target_range: Mapping[str, ExpectedHandAction],
) -> dict[str, ExpectedHandAction]:
    """Target actions for changed hands, ``black`` everywhere else."""

    diff = get_diff_hands(start_range, target_range)
    filtered: dict[str, ExpectedHandAction] = {}
    for hand in ALL_HANDS:
        filtered[hand] = target_range[hand] if hand in diff else BLACK
    return filtered


def grade_delta_range(
    start_range: Mapping[str, ExpectedHandAction],
    target_range: Mapping[str, ExpectedHandAction],
    user_results: Mapping[str, Any],
    **kwargs: Any,
) -> SubmissionSummary:
    """Grade only the hands that changed from ``start_range`` to ``target_range``.

    Answers for unchanged hands are ignored.  Extra keyword arguments are passed
    through to :func:`grade_range_submission`.
    """

    filtered = delta_reference_range(start_range, target_range)
    logger.debug(
        "delta grading",
        extra={"changed": sum(1 for action in filtered.values() if action != BLACK)},
    )
    return grade_range_submission(filtered, user_results, **kwargs)
