"""Turn graded hands into coaching feedback: mistake types, severities and leaks."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Final

from ...core.actions import (
    CONCRETE_ACTIONS,
    FOLD,
    MIXED,
    RAISE,
    SHOVE,
    blend_components,
    is_blend_signature,
)
from ...data.hands import is_pocket_pair, is_suited
from .models import HandDiff, LeakGroup, MistakeType, Severity
from .notes import HandNotes

_AGGRESSION: Final[dict[str, int]] = {FOLD: 0, "call": 1, RAISE: 2, SHOVE: 3}
_OPENING_ACTIONS: Final = frozenset({RAISE, SHOVE})
_LATE_POSITIONS: Final = frozenset({"CO", "BTN"})
_LATE_POSITION_BOOST: Final = 1.15
_WHY_LIMIT: Final = 120

_HAND_RE: Final = re.compile(r"^([2-9TJQKA])([2-9TJQKA])([so])$")
_RANK_ORDER: Final = "23456789TJQKA"
_BROADWAY: Final = frozenset("TJQKA")

PREMIUM_HANDS: Final[tuple[str, ...]] = ("AA", "KK", "QQ", "JJ", "AKs", "AKo", "AQs")

GROUP_PRIORITY: Final[tuple[str, ...]] = (
    "premium",
    "big_pair",
    "mid_pair",
    "small_pair",
    "suited_ace",
    "offsuit_ace",
    "suited_broadway",
    "offsuit_broadway",
    "suited_connector",
    "offsuit_connector",
    "suited_one_gapper",
    "suited_king",
    "suited_queen",
    "suited_jack",
    "offsuit_king",
    "offsuit_queen",
    "offsuit_jack",
    "offsuit_ten",
    "trash",
)

GROUP_TITLES: Final[dict[str, str]] = {
    "premium": "Premium value hands",
    "big_pair": "Big pairs",
    "mid_pair": "Mid pairs",
    "small_pair": "Small pairs",
    "suited_ace": "Suited aces",
    "offsuit_ace": "Offsuit aces",
    "suited_broadway": "Suited broadways",
    "offsuit_broadway": "Offsuit broadways",
    "suited_connector": "Suited connectors",
    "offsuit_connector": "Offsuit connectors",
    "suited_one_gapper": "Suited one-gappers",
    "suited_king": "Suited kings",
    "suited_queen": "Suited queens",
    "suited_jack": "Suited jacks",
    "offsuit_king": "Offsuit kings",
    "offsuit_queen": "Offsuit queens",
    "offsuit_jack": "Offsuit jacks",
    "offsuit_ten": "Offsuit tens",
    "trash": "Trash hands",
    "missed_opens": "Missed opens",
    "bad_defends": "Bad continues",
}

EV_ENGINE_LABELS: Final[dict[str, str]] = {
    "called_value": "Called value:",
    "realization": "Realization:",
    "domination_avoidance": "Domination avoidance:",
    "mixed": "Mixed EV:",
    "no_ev": "No EV:",
}


def infer_tags(hand: str) -> tuple[str, ...]:
    """Infer hand-shape tags so feedback stays useful when notes are sparse."""

    if is_pocket_pair(hand) and hand[0] in _RANK_ORDER:
        rank = hand[0]
        if rank in "AKQJ":
            return ("big_pair",)
        if rank in "T9876":
            return ("mid_pair",)
        return ("small_pair",)

    match = _HAND_RE.match(hand)
    if not match:
        return ()
    r1, r2, _ = match.groups()
    suited = is_suited(hand)
    ranks = {r1, r2}
    tags: list[str] = []

    if "A" in ranks:
        tags.append("suited_ace" if suited else "offsuit_ace")
    if r1 in _BROADWAY and r2 in _BROADWAY:
        tags.append("suited_broadway" if suited else "offsuit_broadway")
    if suited:
        for rank, tag in (("K", "suited_king"), ("Q", "suited_queen"), ("J", "suited_jack")):
            if rank in ranks:
                tags.append(tag)
    else:
        for rank, tag in (("K", "offsuit_king"), ("Q", "offsuit_queen"), ("J", "offsuit_jack"), ("T", "offsuit_ten")):
            if rank in ranks:
                tags.append(tag)

    gap = abs(_RANK_ORDER.index(r1) - _RANK_ORDER.index(r2))
    if gap == 1:
        tags.append("suited_connector" if suited else "offsuit_connector")
    if gap == 2 and suited:
        tags.append("suited_one_gapper")
    return tuple(dict.fromkeys(tags))


def merge_tags(hand: str, notes: HandNotes | None) -> tuple[str, ...]:
    explicit = notes.tags if notes else ()
    return tuple(dict.fromkeys((*explicit, *infer_tags(hand))))


def answer_action(got: str) -> str | None:
    """Concrete action implied by an answer; blend signatures map to their first component."""

    choice = got.strip().lower()
    if choice in CONCRETE_ACTIONS:
        return choice
    if is_blend_signature(choice):
        return blend_components(choice)[0]
    return None


def classify_mistake(expected_primary: str, got: str, choice: str) -> MistakeType:
    if choice == MIXED:
        return "wrong_blend"
    action = answer_action(got)
    if action is None or action == expected_primary:
        return "missed_mix"
    if action == FOLD:
        return "too_tight"
    if expected_primary == FOLD:
        return "too_loose"
    if _AGGRESSION.get(action, 0) > _AGGRESSION.get(expected_primary, 0):
        return "over_aggressive"
    return "under_aggressive"


def severity_score(
    *,
    expected_primary: str,
    got: str,
    tags: Sequence[str],
    notes: HandNotes | None = None,
    is_half_credit: bool = False,
) -> float:
    if is_half_credit:
        return 0.5

    score = 1.0
    action = answer_action(got)
    if expected_primary in _OPENING_ACTIONS:
        if "core_open" in tags:
            score += 1.0
        if notes is not None and notes.robustness == "robust":
            score += 1.0
        if action == FOLD:
            score += 0.5
    if expected_primary == FOLD and action is not None and action != FOLD:
        score += 0.5
    if "edge_open" in tags:
        score -= 0.5
    return max(0.5, min(3.5, score))


def severity_label(score: float) -> Severity:
    if score >= 2.5:
        return "high"
    if score >= 1.5:
        return "medium"
    return "low"


def explain_diff(
    *,
    expected_primary: str,
    got: str,
    tags: Sequence[str],
    notes: HandNotes | None = None,
    expected_signature: str | None = None,
) -> tuple[str, str | None]:
    """Return a short "why" line and the EV source it leans on."""

    if notes is not None and notes.one_liner:
        text = notes.one_liner
        if len(text) > _WHY_LIMIT:
            text = f"{text[: _WHY_LIMIT - 3]}..."
        return text, notes.ev_source

    if expected_signature:
        spelled = " or ".join(blend_components(expected_signature))
        return (
            f"This is a mixed strategy spot where you should {spelled}. Dominant action is {expected_primary}.",
            "mixed",
        )

    tag_set = set(tags)
    if expected_primary in _OPENING_ACTIONS:
        value_tags = {"premium", "big_pair", "offsuit_broadway", "suited_broadway"}
        ev_source = "called_value" if tag_set & value_tags else "realization"
    elif tag_set & {"offsuit_ace", "offsuit_broadway"}:
        ev_source = "domination_avoidance"
    else:
        ev_source = "no_ev"
    engine = EV_ENGINE_LABELS[ev_source]
    action = answer_action(got)

    if expected_primary in _OPENING_ACTIONS and action == FOLD:
        if tag_set & {"suited_connector", "suited_one_gapper", "suited_ace"}:
            return f"{engine} Profit comes from position and playability; this is a standard open.", ev_source
        if tag_set & {"small_pair", "mid_pair"}:
            return f"{engine} Opens to realize equity with initiative and position.", ev_source
        return f"{engine} This is opened for value or realization depending on who continues.", ev_source

    if expected_primary == FOLD and action != FOLD:
        return f"{engine} Too weak when called; folding avoids dominated and low-EV spots.", ev_source

    return f"{engine} Chart prefers {expected_primary} here; your {got} shifts EV the wrong way.", ev_source


def group_key(tags: Sequence[str], expected_primary: str) -> str:
    for tag in GROUP_PRIORITY:
        if tag in tags:
            return tag
    return "missed_opens" if expected_primary in _OPENING_ACTIONS else "bad_defends"


def _seat(position: str | None) -> str:
    return position if position else "this seat"


def group_diagnosis(key: str, expected_primary: str, position: str | None) -> str:
    seat = _seat(position)
    if expected_primary in _OPENING_ACTIONS:
        if "suited" in key or "connector" in key or "one_gapper" in key:
            return f"You are skipping opens from {seat} that exist mainly because position helps you realize equity."
        if "pair" in key:
            return f"You are missing profitable opens from {seat} with pairs that benefit from initiative."
        if "ace" in key or "broadway" in key:
            return f"You are too tight from {seat} with hands that win by value or realization."
        return f"You are too tight in a cluster of standard opens from {seat}."
    if "offsuit" in key and ("ace" in key or "broadway" in key):
        return "You are continuing with hands that tend to be dominated when called; folding is the default."
    return "You are continuing with hands the chart folds; these are low-EV when called."


def group_what_to_do(key: str, expected_primary: str, position: str | None) -> str:
    seat = _seat(position)
    if expected_primary in _OPENING_ACTIONS:
        if key in ("suited_connector", "suited_one_gapper"):
            return f"Add back the suited-connectivity opens from {seat}."
        if key == "suited_ace":
            return f"Open suited aces down to the chart boundary from {seat}."
        if key in ("small_pair", "mid_pair"):
            return f"Open the pairs the chart opens from {seat}."
        return f"Widen your opens from {seat} toward the chart core and edge opens."
    return "Tighten up by folding these combos per the chart."


def group_drill(key: str, expected_primary: str) -> str:
    if expected_primary in _OPENING_ACTIONS:
        if key == "suited_ace":
            return "Drill: flash-card the lowest opened suited ace and the next one down."
        if key in ("suited_connector", "suited_one_gapper"):
            return "Drill: pick 5 connectors/one-gappers and repeat until instant."
        if "pair" in key:
            return "Drill: test yourself on the smallest opened pairs repeatedly."
        return "Drill: 20 quick reps on the missed opens list until accuracy stabilizes."
    return "Drill: 20 quick reps on the hands you over-played until they become auto-folds."


@dataclass
class _GroupAccumulator:
    key: str
    expected_primary: str
    diffs: list[HandDiff] = field(default_factory=list)
    weight: float = 0.0


def build_leak_groups(
    diffs: Iterable[HandDiff],
    *,
    position: str | None = None,
    max_leaks: int = 5,
    max_examples: int = 6,
) -> tuple[LeakGroup, ...]:
    """Cluster diffs by expected action, mistake type and hand family, heaviest first."""

    groups: dict[str, _GroupAccumulator] = {}
    for diff in diffs:
        key = group_key(diff.tags, diff.expected_primary)
        group_id = f"{diff.expected_primary}_{diff.mistake_type}_{key}"
        entry = groups.get(group_id)
        if entry is None:
            entry = groups[group_id] = _GroupAccumulator(key=key, expected_primary=diff.expected_primary)
        entry.diffs.append(diff)
        entry.weight += diff.severity_score

    late = (position or "").upper() in _LATE_POSITIONS
    leaks: list[LeakGroup] = []
    for group_id, entry in groups.items():
        boost = _LATE_POSITION_BOOST if late and entry.expected_primary == RAISE else 1.0
        examples = sorted(entry.diffs, key=lambda d: d.severity_score, reverse=True)[:max_examples]
        leaks.append(
            LeakGroup(
                id=group_id,
                title=GROUP_TITLES.get(entry.key, entry.key),
                diagnosis=group_diagnosis(entry.key, entry.expected_primary, position),
                what_to_do=group_what_to_do(entry.key, entry.expected_primary, position),
                drill=group_drill(entry.key, entry.expected_primary),
                weight=entry.weight * boost,
                examples=tuple(examples),
            )
        )
    leaks.sort(key=lambda leak: leak.weight, reverse=True)
    return tuple(leaks[:max_leaks])


def pick_strengths(
    diffs: Sequence[HandDiff],
    *,
    expected_primaries: Mapping[str, str],
    answered: Iterable[str],
) -> tuple[str, ...]:
    answered_set = set(answered)
    if not answered_set:
        return ()
    strengths: list[str] = []
    missed = {diff.hand for diff in diffs}

    premiums = [hand for hand in PREMIUM_HANDS if hand in expected_primaries]
    premiums_right = [hand for hand in premiums if hand in answered_set and hand not in missed]
    if len(premiums) >= 5 and len(premiums_right) >= 5:
        strengths.append("Premiums are handled well (your value opens are in place).")

    too_loose = sum(1 for diff in diffs if diff.mistake_type == "too_loose")
    too_tight = sum(1 for diff in diffs if diff.mistake_type == "too_tight")
    if too_loose < max(2, too_tight // 5):
        strengths.append("You avoid most of the obvious spew (not many over-continues).")

    raise_mistakes = sum(1 for diff in diffs if diff.expected_primary == RAISE)
    if raise_mistakes < 10:
        strengths.append('You are close on the high-level "raise the strong stuff" rule.')
    return tuple(strengths[:4])


def pick_priority_fixes(leaks: Sequence[LeakGroup]) -> tuple[str, ...]:
    fixes: list[str] = []
    for leak in leaks[:3]:
        if leak.examples:
            example = leak.examples[0]
            fixes.append(
                f"{leak.title}: fix {example.hand} ({example.got} -> {example.expected_primary}) and nearby hands."
            )
        else:
            fixes.append(f"{leak.title}: tighten your pattern recognition.")
    return tuple(fixes)


__all__ = [
    "GROUP_PRIORITY",
    "GROUP_TITLES",
    "PREMIUM_HANDS",
    "answer_action",
    "build_leak_groups",
    "classify_mistake",
    "explain_diff",
    "group_key",
    "infer_tags",
    "merge_tags",
    "pick_priority_fixes",
    "pick_strengths",
    "severity_label",
    "severity_score",
]
