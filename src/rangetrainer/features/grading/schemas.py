from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...core.scoring import ScoreResult
from .models import HandDiff, LeakGroup, SubmissionSummary

__all__ = [
    "ActionBreakdownPayload",
    "AnswersFile",
    "HandDiffPayload",
    "LeakGroupPayload",
    "RangeFile",
    "ScoreResultPayload",
    "SubmissionSummaryPayload",
    "score_payload",
    "summary_payload",
]


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ScoreResultPayload(_APIModel):
    score: float
    grade_bucket: str
    explain: str


class ActionBreakdownPayload(_APIModel):
    expected: int
    correct: int
    half_credit: int
    accuracy: float


class HandDiffPayload(_APIModel):
    hand: str
    expected_action: str | dict[str, float]
    expected_primary: str
    expected_signature: str | None = None
    got: str
    score: float
    grade_bucket: str
    is_half_credit: bool
    mistake_type: str
    severity: str
    severity_score: float
    why: str
    explain: str
    tags: list[str] = Field(default_factory=list)
    ev_source: str | None = None


class LeakGroupPayload(_APIModel):
    id: str
    title: str
    diagnosis: str
    what_to_do: str
    drill: str
    weight: float
    examples: list[HandDiffPayload] = Field(default_factory=list)


class SubmissionSummaryPayload(_APIModel):
    accuracy: float
    attempted: int
    correct: int
    half_credit: int
    wrong: int
    unanswered: int
    total_score: float
    buckets: dict[str, int]
    by_action: dict[str, ActionBreakdownPayload]
    strengths: list[str] = Field(default_factory=list)
    priority_fixes: list[str] = Field(default_factory=list)
    top_leaks: list[LeakGroupPayload] = Field(default_factory=list)
    diffs: list[HandDiffPayload] = Field(default_factory=list)


class RangeFile(BaseModel):
    """A reference range as handed over by the range source.

    Accepts either a bare ``{hand: action}`` object or one wrapped as
    ``{"data": ..., "notes": ..., "meta": ...}``.
    """

    data: dict[str, str | dict[str, float]]
    notes: dict[str, dict[str, Any]] | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare(cls, raw: Any) -> Any:
        if isinstance(raw, dict) and "data" not in raw:
            return {"data": raw}
        return raw

    @field_validator("data")
    @classmethod
    def _normalise_actions(cls, data: dict[str, str | dict[str, float]]) -> dict[str, str | dict[str, float]]:
        cleaned: dict[str, str | dict[str, float]] = {}
        for hand, action in data.items():
            if isinstance(action, str):
                cleaned[hand.strip()] = action.strip().lower()
            else:
                cleaned[hand.strip()] = {key.strip().lower(): value for key, value in action.items()}
        return cleaned

    @property
    def position(self) -> str | None:
        value = (self.meta or {}).get("position")
        return str(value) if value else None


class AnswersFile(BaseModel):
    answers: dict[str, str]

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, raw: Any) -> Any:
        if not isinstance(raw, dict):
            return raw
        source = raw["answers"] if isinstance(raw.get("answers"), dict) else raw
        answers: dict[str, str] = {}
        for hand, value in source.items():
            if value in (None, ""):
                continue
            answers[str(hand).strip()] = str(value).strip().lower()
        return {"answers": answers}


def score_payload(result: ScoreResult) -> ScoreResultPayload:
    return ScoreResultPayload(score=result.score, grade_bucket=result.grade_bucket, explain=result.explain)


def _diff_payload(diff: HandDiff) -> HandDiffPayload:
    expected = diff.expected_action if isinstance(diff.expected_action, str) else dict(diff.expected_action)
    return HandDiffPayload(
        hand=diff.hand,
        expected_action=expected,
        expected_primary=diff.expected_primary,
        expected_signature=diff.expected_signature,
        got=diff.got,
        score=diff.score,
        grade_bucket=diff.grade_bucket,
        is_half_credit=diff.is_half_credit,
        mistake_type=diff.mistake_type,
        severity=diff.severity,
        severity_score=diff.severity_score,
        why=diff.why,
        explain=diff.explain,
        tags=list(diff.tags),
        ev_source=diff.ev_source,
    )


def _leak_payload(leak: LeakGroup) -> LeakGroupPayload:
    return LeakGroupPayload(
        id=leak.id,
        title=leak.title,
        diagnosis=leak.diagnosis,
        what_to_do=leak.what_to_do,
        drill=leak.drill,
        weight=leak.weight,
        examples=[_diff_payload(diff) for diff in leak.examples],
    )


def summary_payload(summary: SubmissionSummary, *, include_diffs: bool = True) -> SubmissionSummaryPayload:
    return SubmissionSummaryPayload(
        accuracy=summary.accuracy,
        attempted=summary.attempted,
        correct=summary.correct,
        half_credit=summary.half_credit,
        wrong=summary.wrong,
        unanswered=summary.unanswered,
        total_score=summary.total_score,
        buckets=dict(summary.buckets),
        by_action={
            action: ActionBreakdownPayload(
                expected=stats.expected,
                correct=stats.correct,
                half_credit=stats.half_credit,
                accuracy=stats.accuracy,
            )
            for action, stats in summary.by_action.items()
        },
        strengths=list(summary.strengths),
        priority_fixes=list(summary.priority_fixes),
        top_leaks=[_leak_payload(leak) for leak in summary.top_leaks],
        diffs=[_diff_payload(diff) for diff in summary.diffs] if include_diffs else [],
    )
