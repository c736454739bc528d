"""Per-hand expected actions: pure actions, percentage blends and user choices.

A reference range maps every hand to either a bare action string (``"raise"``)
or a blend mapping such as ``{"raise": 70, "fold": 30}`` on the 0-100
convention.  Users answer with a concrete action, ``"mixed"`` or a blend
signature like ``"raise-fold"``; the latter two grade identically.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from itertools import combinations
from typing import Any, Final, Union

RAISE: Final = "raise"
CALL: Final = "call"
FOLD: Final = "fold"
SHOVE: Final = "shove"
BLACK: Final = "black"
MIXED: Final = "mixed"

# Priority order used for tie-breaks and signature ordering.
CONCRETE_ACTIONS: Final[tuple[str, ...]] = (RAISE, CALL, FOLD, SHOVE)
ALL_ACTIONS: Final[tuple[str, ...]] = (*CONCRETE_ACTIONS, BLACK)

BLEND_SIGNATURES: Final[frozenset[str]] = frozenset(
    "-".join(combo) for size in range(2, len(CONCRETE_ACTIONS) + 1) for combo in combinations(CONCRETE_ACTIONS, size)
)

Blend = Mapping[str, float]
ExpectedHandAction = Union[str, Blend]


def is_pure_action(action: ExpectedHandAction) -> bool:
    return isinstance(action, str)


def usable_weight(value: Any) -> float:
    """Weight as a float; non-numeric, non-finite and negative values count as 0."""

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(weight) or weight < 0.0:
        return 0.0
    return weight


def _weight(action: object, name: str) -> float:
    # Anything that is neither a pure action nor a mapping is an empty blend.
    if not isinstance(action, Mapping):
        return 0.0
    return usable_weight(action.get(name))


def get_primary_action(action: ExpectedHandAction) -> str:
    """Return the dominant action; exact ties go to raise, call, fold, shove in that order."""

    if is_pure_action(action):
        return action
    best = CONCRETE_ACTIONS[0]
    best_weight = _weight(action, best)
    for candidate in CONCRETE_ACTIONS[1:]:
        weight = _weight(action, candidate)
        if weight > best_weight:
            best, best_weight = candidate, weight
    return best


def present_components(action: ExpectedHandAction) -> tuple[str, ...]:
    if is_pure_action(action):
        return (action,) if action in CONCRETE_ACTIONS else ()
    return tuple(name for name in CONCRETE_ACTIONS if _weight(action, name) > 0.0)


def get_blend_signature(action: ExpectedHandAction) -> str | None:
    if is_pure_action(action):
        return None
    return signature_for_actions(present_components(action))


def signature_for_actions(actions: Iterable[str]) -> str | None:
    """Build a signature such as ``raise-fold`` from a set of selected actions."""

    selected = {str(name).strip().lower() for name in actions}
    ordered = [name for name in CONCRETE_ACTIONS if name in selected]
    if len(ordered) < 2:
        return None
    return "-".join(ordered)


def is_blend_signature(value: object) -> bool:
    return isinstance(value, str) and value.strip().lower() in BLEND_SIGNATURES


def blend_components(signature: str) -> tuple[str, ...]:
    if not is_blend_signature(signature):
        raise ValueError(f"unknown blend signature '{signature}'")
    return tuple(signature.strip().lower().split("-"))


def to_distribution(action: ExpectedHandAction) -> dict[str, float]:
    if is_pure_action(action):
        return {} if action == BLACK else {action: 1.0}
    return {name: _weight(action, name) / 100.0 for name in present_components(action)}


def to_user_choice(value: str) -> str:
    """Coerce a submitted answer: ``mixed`` and blend signatures collapse to ``mixed``."""

    choice = str(value).strip().lower()
    if choice == MIXED or choice in BLEND_SIGNATURES:
        return MIXED
    return choice


def actions_equal(first: ExpectedHandAction | None, second: ExpectedHandAction | None) -> bool:
    """Deep value equality: strings compare by value, blends key by key; pure never equals blend."""

    if first is None or second is None:
        return first is second
    if is_pure_action(first) or is_pure_action(second):
        return is_pure_action(first) and is_pure_action(second) and first == second
    if isinstance(first, Mapping) and isinstance(second, Mapping):
        return dict(first) == dict(second)
    return first == second


__all__ = [
    "ALL_ACTIONS",
    "BLACK",
    "BLEND_SIGNATURES",
    "CALL",
    "CONCRETE_ACTIONS",
    "Blend",
    "ExpectedHandAction",
    "FOLD",
    "MIXED",
    "RAISE",
    "SHOVE",
    "actions_equal",
    "blend_components",
    "get_blend_signature",
    "get_primary_action",
    "is_blend_signature",
    "is_pure_action",
    "present_components",
    "signature_for_actions",
    "to_distribution",
    "to_user_choice",
    "usable_weight",
]
