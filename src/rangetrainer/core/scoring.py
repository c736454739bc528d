from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any, Literal

from .actions import BLACK, MIXED, usable_weight

logger = logging.getLogger(__name__)

GradeBucket = Literal["perfect", "good", "partial", "miss"]
Band = Literal["STRONG", "MODERATE", "CLOSE"]

GRADE_BUCKETS: tuple[GradeBucket, ...] = ("perfect", "good", "partial", "miss")

# Credit awarded per band: (dominant pick, minority pick).
TOP_STRONG_SCORE = 1.0
TOP_MODERATE_SCORE = 0.9
TOP_CLOSE_SCORE = 0.75
MINORITY_STRONG_SCORE = 0.25
MINORITY_MODERATE_SCORE = 0.5
MINORITY_CLOSE_SCORE = 0.75
TINY_MINORITY_CAP = 0.25


@dataclass(frozen=True)
class ScoreConfig:
    """Thresholds for grading a single hand.

    ``mix_min`` is the minimum mass on the second action for a spot to count as
    genuinely mixed.  ``strong``/``moderate`` split the top action's probability
    into STRONG, MODERATE and CLOSE bands.  Minority picks carrying less than
    ``tiny_min`` are capped at 0.25.
    """

    mix_min: float = 0.15
    strong: float = 0.75
    moderate: float = 0.60
    tiny_min: float = 0.10
    mixed_penalty_score: float = 0.0

    @classmethod
    def from_mapping(
        cls,
        values: Mapping[str, Any],
        *,
        base: ScoreConfig | None = None,
        strict: bool = False,
    ) -> ScoreConfig:
        """Apply a partial override; accepts ``MIX_MIN`` style or field names.

        Unknown keys and values that are not finite numbers are skipped (logged
        at DEBUG) so the base thresholds stay in force.  With ``strict=True``
        they raise ``KeyError`` and ``ValueError`` instead.
        """

        updates: dict[str, float] = {}
        for key, value in values.items():
            name = CONFIG_ALIASES.get(key, key)
            if name not in _FIELD_NAMES:
                if strict:
                    raise KeyError(f"unknown score config key '{key}'")
                logger.debug("Ignoring unknown score config key %r", key)
                continue
            number = _config_number(value)
            if number is None:
                if strict:
                    raise ValueError(f"score config '{key}' must be a finite number, got {value!r}")
                logger.debug("Ignoring score config %s=%r; expected a number", key, value)
                continue
            updates[name] = number
        return replace(base or DEFAULT_CONFIG, **updates)


def _config_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


_FIELD_NAMES = frozenset(f.name for f in fields(ScoreConfig))

CONFIG_ALIASES: dict[str, str] = {
    "MIX_MIN": "mix_min",
    "STRONG": "strong",
    "MODERATE": "moderate",
    "TINY_MIN": "tiny_min",
    "mixedPenaltyScore": "mixed_penalty_score",
}

DEFAULT_CONFIG = ScoreConfig()


@dataclass(frozen=True)
class ScoreResult:
    score: float
    grade_bucket: GradeBucket
    explain: str


def _resolve_config(config: ScoreConfig | Mapping[str, Any] | None) -> ScoreConfig:
    if config is None:
        return DEFAULT_CONFIG
    if isinstance(config, ScoreConfig):
        return config
    if not isinstance(config, Mapping):
        logger.debug("Ignoring score config of type %s", type(config).__name__)
        return DEFAULT_CONFIG
    return ScoreConfig.from_mapping(config)


def normalize_distribution(distribution: Mapping[str, Any]) -> dict[str, float]:
    """Drop ``black``, non-positive and unusable weights, then rescale the rest to sum to 1."""

    kept: dict[str, float] = {}
    for action, raw in distribution.items():
        weight = 0.0 if action == BLACK else usable_weight(raw)
        if weight > 0.0:
            kept[str(action)] = weight
        elif raw:
            logger.debug("Dropping weight %r for %s before normalizing", raw, action)
    total = sum(kept.values())
    if total <= 0.0:
        return {}
    return {action: weight / total for action, weight in kept.items()}


def classify_band(p_top: float, config: ScoreConfig = DEFAULT_CONFIG) -> Band:
    if p_top >= config.strong:
        return "STRONG"
    if p_top >= config.moderate:
        return "MODERATE"
    return "CLOSE"


def _pct(p: float) -> str:
    return f"{round(p * 100)}%"


def score_choice(
    distribution: Mapping[str, Any],
    user_choice: str,
    config: ScoreConfig | Mapping[str, Any] | None = None,
) -> ScoreResult:
    """Score one declared action against a reference distribution.

    ``distribution`` need not be normalized.  ``user_choice`` is a concrete
    action or ``"mixed"``.  Never raises on odd input: an empty distribution or
    an action the reference never takes scores 0.0 in the ``miss`` bucket.
    """

    cfg = _resolve_config(config)
    normalized = normalize_distribution(distribution)
    ranked = sorted(normalized.items(), key=lambda item: item[1], reverse=True)
    top_action, p_top = ranked[0] if ranked else ("", 0.0)
    second_action, p_second = ranked[1] if len(ranked) > 1 else ("", 0.0)

    top_pct = _pct(p_top)
    second_pct = _pct(p_second)

    if user_choice == MIXED:
        if p_second >= cfg.mix_min:
            return ScoreResult(
                score=1.0,
                grade_bucket="perfect",
                explain=(
                    f"Correct: this hand is meaningfully mixed "
                    f"(top {top_action} {top_pct}, second {second_action} {second_pct})."
                ),
            )
        return ScoreResult(
            score=cfg.mixed_penalty_score,
            grade_bucket="miss",
            explain=(
                f"Solver: {top_action} {top_pct}. This is effectively pure "
                f"(second action {second_pct}); avoid marking mixed."
            ),
        )

    base_explain = f"Solver: {top_action} {top_pct}, next {second_action} {second_pct}. You chose {user_choice}"
    p_user = normalized.get(user_choice, 0.0)
    if p_user == 0.0:
        return ScoreResult(score=0.0, grade_bucket="miss", explain=f"{base_explain} (not in solver range).")

    band = classify_band(p_top, cfg)
    if user_choice == top_action:
        if band == "STRONG":
            score, bucket = TOP_STRONG_SCORE, "perfect"
        elif band == "MODERATE":
            score, bucket = TOP_MODERATE_SCORE, "good"
        else:
            score, bucket = TOP_CLOSE_SCORE, "partial"
        detail = "Dominant action chosen."
    else:
        if band == "STRONG":
            score = MINORITY_STRONG_SCORE
        elif band == "MODERATE":
            score = MINORITY_MODERATE_SCORE
        else:
            score = MINORITY_CLOSE_SCORE
        bucket = "partial"
        if p_user < cfg.tiny_min:
            score = min(score, TINY_MINORITY_CAP)
        detail = f"Minority action chosen ({_pct(p_user)})."

    return ScoreResult(score=score, grade_bucket=bucket, explain=f"{base_explain}. {detail}")


__all__ = [
    "CONFIG_ALIASES",
    "DEFAULT_CONFIG",
    "GRADE_BUCKETS",
    "GradeBucket",
    "ScoreConfig",
    "ScoreResult",
    "classify_band",
    "normalize_distribution",
    "score_choice",
]
