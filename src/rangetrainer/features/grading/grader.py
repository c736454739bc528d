from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ...core.actions import (
    ALL_ACTIONS,
    BLACK,
    ExpectedHandAction,
    get_blend_signature,
    get_primary_action,
    to_distribution,
    to_user_choice,
)
from ...core.scoring import GRADE_BUCKETS, GradeBucket, ScoreConfig, score_choice
from .feedback import (
    build_leak_groups,
    classify_mistake,
    explain_diff,
    merge_tags,
    pick_priority_fixes,
    pick_strengths,
    severity_label,
    severity_score,
)
from .models import ActionBreakdown, HandDiff, SubmissionSummary
from .notes import HandNotes, parse_notes

__all__ = ["grade_range_submission"]

logger = logging.getLogger(__name__)


def _answer(user_results: Mapping[str, Any], hand: str) -> str | None:
    raw = user_results.get(hand)
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def grade_range_submission(
    expected_range: Mapping[str, ExpectedHandAction],
    user_results: Mapping[str, Any],
    *,
    notes: Mapping[str, HandNotes | Mapping[str, Any]] | None = None,
    position: str | None = None,
    config: ScoreConfig | Mapping[str, Any] | None = None,
    max_leaks: int = 5,
    max_examples_per_leak: int = 6,
) -> SubmissionSummary:
    """Grade a painted range against its reference.

    Hands marked ``black`` are skipped entirely.  A hand missing from
    ``user_results`` (or mapped to ``None``/``""``) counts as unanswered and is
    left out of the accuracy denominator.  Blend-signature answers grade as
    ``mixed``.  Expected values that are neither an action nor a blend mapping
    are skipped like hands missing from the range.
    """

    hand_notes = parse_notes(notes)
    by_action = {action: ActionBreakdown() for action in ALL_ACTIONS}
    buckets: dict[GradeBucket, int] = {bucket: 0 for bucket in GRADE_BUCKETS}

    attempted = correct = half_credit = wrong = unanswered = 0
    total_score = 0.0
    diffs: list[HandDiff] = []
    answered: list[str] = []
    graded: set[str] = set()
    primaries: dict[str, str] = {}

    for hand, expected in expected_range.items():
        if expected == BLACK:
            by_action[BLACK].expected += 1
            continue
        if not isinstance(expected, (str, Mapping)):
            logger.debug("Skipping %s: unusable expected action %r", hand, expected)
            continue

        primary = get_primary_action(expected)
        breakdown = by_action.setdefault(primary, ActionBreakdown())
        breakdown.expected += 1
        primaries[hand] = primary
        graded.add(hand)

        got = _answer(user_results, hand)
        if got is None:
            unanswered += 1
            continue

        attempted += 1
        answered.append(hand)
        choice = to_user_choice(got)
        result = score_choice(to_distribution(expected), choice, config)
        total_score += result.score
        buckets[result.grade_bucket] += 1

        if result.grade_bucket == "perfect":
            correct += 1
            breakdown.correct += 1
            continue

        is_half = result.grade_bucket in ("good", "partial")
        if is_half:
            half_credit += 1
            breakdown.half_credit += 1
        else:
            wrong += 1

        meta = hand_notes.get(hand)
        tags = merge_tags(hand, meta)
        signature = get_blend_signature(expected)
        sev = severity_score(expected_primary=primary, got=got, tags=tags, notes=meta, is_half_credit=is_half)
        why, ev_source = explain_diff(
            expected_primary=primary,
            got=got,
            tags=tags,
            notes=meta,
            expected_signature=signature,
        )
        diffs.append(
            HandDiff(
                hand=hand,
                expected_action=expected,
                expected_primary=primary,
                expected_signature=signature,
                got=got,
                choice=choice,
                score=result.score,
                grade_bucket=result.grade_bucket,
                is_half_credit=is_half,
                mistake_type=classify_mistake(primary, got, choice),
                severity=severity_label(sev),
                severity_score=sev,
                why=why,
                explain=result.explain,
                tags=tags,
                ev_source=ev_source,
            )
        )

    for action, breakdown in by_action.items():
        if action != BLACK:
            breakdown.finalize()

    accuracy = total_score / attempted if attempted > 0 else 0.0
    diffs.sort(key=lambda diff: diff.severity_score, reverse=True)
    leaks = build_leak_groups(diffs, position=position, max_leaks=max_leaks, max_examples=max_examples_per_leak)

    logger.debug(
        "graded range submission",
        extra={"attempted": attempted, "unanswered": unanswered, "accuracy": accuracy, "diffs": len(diffs)},
    )

    return SubmissionSummary(
        attempted=attempted,
        correct=correct,
        half_credit=half_credit,
        wrong=wrong,
        unanswered=unanswered,
        total_score=total_score,
        accuracy=accuracy,
        buckets=buckets,
        by_action=by_action,
        diffs=tuple(diffs),
        top_leaks=leaks,
        strengths=pick_strengths(diffs, expected_primaries=primaries, answered=answered),
        priority_fixes=pick_priority_fixes(leaks),
        graded_hands=frozenset(graded),
    )
