from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from ...core.actions import ExpectedHandAction
from ...core.scoring import GradeBucket

MistakeType = Literal[
    "too_tight",
    "too_loose",
    "over_aggressive",
    "under_aggressive",
    "wrong_blend",
    "missed_mix",
]
Severity = Literal["high", "medium", "low"]


@dataclass
class ActionBreakdown:
    """Per-action tally keyed by the expected primary action.

    ``accuracy`` stays at the vacuous 1.0 until :meth:`finalize` runs; the
    ``black`` tally is never finalized and only counts hands.
    """

    expected: int = 0
    correct: int = 0
    half_credit: int = 0
    accuracy: float = 1.0

    def finalize(self) -> None:
        effective = self.correct + 0.5 * self.half_credit
        self.accuracy = effective / self.expected if self.expected > 0 else 1.0


@dataclass(frozen=True)
class HandDiff:
    hand: str
    expected_action: ExpectedHandAction
    expected_primary: str
    expected_signature: str | None
    got: str
    choice: str
    score: float
    grade_bucket: GradeBucket
    is_half_credit: bool
    mistake_type: MistakeType
    severity: Severity
    severity_score: float
    why: str
    explain: str
    tags: tuple[str, ...] = ()
    ev_source: str | None = None


@dataclass(frozen=True)
class LeakGroup:
    id: str
    title: str
    diagnosis: str
    what_to_do: str
    drill: str
    weight: float
    examples: tuple[HandDiff, ...] = ()


@dataclass(frozen=True)
class SubmissionSummary:
    attempted: int
    correct: int
    half_credit: int
    wrong: int
    unanswered: int
    total_score: float
    accuracy: float
    buckets: Mapping[GradeBucket, int]
    by_action: Mapping[str, ActionBreakdown]
    diffs: tuple[HandDiff, ...] = ()
    top_leaks: tuple[LeakGroup, ...] = ()
    strengths: tuple[str, ...] = ()
    priority_fixes: tuple[str, ...] = ()
    graded_hands: frozenset[str] = field(default_factory=frozenset)

    @property
    def graded(self) -> int:
        return self.attempted + self.unanswered


__all__ = ["ActionBreakdown", "HandDiff", "LeakGroup", "MistakeType", "Severity", "SubmissionSummary"]
