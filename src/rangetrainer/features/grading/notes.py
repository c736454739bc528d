from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from ...core.actions import RAISE, ExpectedHandAction, get_primary_action

BANNED_PHRASES: Final[tuple[str, ...]] = (
    "surprise",
    "deception",
    "board coverage",
    "great hand but wrong position",
    "dominates all",
)

EV_SOURCE_PREFIX: Final[dict[str, str]] = {
    "called_value": "Called value:",
    "realization": "Realization:",
    "domination_avoidance": "Domination avoidance:",
    "no_ev": "No EV:",
    "mixed": "Mixed EV:",
}


@dataclass(frozen=True)
class HandNotes:
    """Optional coaching annotations attached to one hand of a reference range."""

    action: str | None = None
    tags: tuple[str, ...] = ()
    robustness: str | None = None
    one_liner: str | None = None
    ev_source: str | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> HandNotes:
        tags = raw.get("tags") or ()
        if isinstance(tags, str):
            tags = (tags,)
        one_liner = raw.get("one_liner", raw.get("oneLiner"))
        ev_source = raw.get("ev_source", raw.get("evSource"))
        return cls(
            action=_optional_str(raw.get("action")),
            tags=tuple(str(tag) for tag in tags),
            robustness=_optional_str(raw.get("robustness")),
            one_liner=_optional_str(one_liner),
            ev_source=_optional_str(ev_source),
        )


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def parse_notes(raw: Mapping[str, Any] | None) -> dict[str, HandNotes]:
    if not raw:
        return {}
    parsed: dict[str, HandNotes] = {}
    for hand, meta in raw.items():
        if isinstance(meta, HandNotes):
            parsed[hand] = meta
        elif isinstance(meta, Mapping):
            parsed[hand] = HandNotes.from_mapping(meta)
    return parsed


@dataclass
class NotesReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def validate_range_notes(
    data: Mapping[str, ExpectedHandAction],
    notes: Mapping[str, HandNotes | Mapping[str, Any]],
) -> NotesReport:
    """Check that coaching notes agree with the range they annotate."""

    report = NotesReport()
    for hand, meta in parse_notes(notes).items():
        action = data.get(hand)
        if action is None:
            report.warnings.append(f'notes has hand "{hand}" but data has no such key')
            continue
        primary = get_primary_action(action)

        if meta.action and meta.action != primary:
            report.errors.append(f"Action mismatch for {hand}: notes.action={meta.action} but data primary={primary}")

        if primary == RAISE:
            has_core = "core_open" in meta.tags
            has_edge = "edge_open" in meta.tags
            if has_core == has_edge:
                report.errors.append(
                    f"Tag rule failed for {hand}: raise must have exactly one of core_open/edge_open "
                    f"(tags={list(meta.tags)})"
                )

        if meta.one_liner:
            lower = meta.one_liner.lower()
            for phrase in BANNED_PHRASES:
                if phrase in lower:
                    report.errors.append(f'Banned phrase "{phrase}" found in {hand} one-liner: "{meta.one_liner}"')

        if meta.ev_source and meta.one_liner:
            prefix = EV_SOURCE_PREFIX.get(meta.ev_source)
            if prefix and not meta.one_liner.startswith(prefix):
                report.warnings.append(
                    f'Prefix mismatch for {hand}: ev_source={meta.ev_source} expects "{prefix}" '
                    f'but got "{meta.one_liner}"'
                )
    return report


__all__ = ["BANNED_PHRASES", "EV_SOURCE_PREFIX", "HandNotes", "NotesReport", "parse_notes", "validate_range_notes"]
