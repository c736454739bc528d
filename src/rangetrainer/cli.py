from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .core import settings
from .core.actions import ExpectedHandAction, to_distribution, to_user_choice
from .core.scoring import score_choice
from .features.grading import (
    format_grade_summary,
    grade_delta_range,
    grade_range_submission,
    summary_payload,
    validate_range_notes,
)
from .features.grading.models import SubmissionSummary
from .features.grading.schemas import AnswersFile, RangeFile, score_payload
from .ui.presenters import RichPresenter

logger = logging.getLogger(__name__)


class InputError(Exception):
    """Raised when a JSON input file cannot be read or validated."""


def _load_json(path: str) -> Any:
    try:
        with Path(path).open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except OSError as exc:
        raise InputError(f"cannot read {path}: {exc.strerror or exc}") from exc
    except json.JSONDecodeError as exc:
        raise InputError(f"{path} is not valid JSON: {exc}") from exc


def _load_range(path: str) -> RangeFile:
    try:
        return RangeFile.model_validate(_load_json(path))
    except ValidationError as exc:
        raise InputError(f"{path} is not a valid range: {exc}") from exc


def _load_answers(path: str) -> dict[str, str]:
    try:
        return AnswersFile.model_validate(_load_json(path)).answers
    except ValidationError as exc:
        raise InputError(f"{path} is not a valid answers file: {exc}") from exc


def _add_output_args(p: argparse.ArgumentParser) -> None:
    output = p.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Print the summary as JSON")
    output.add_argument("--plain", action="store_true", help="Print a plain-text summary")
    p.add_argument("--no-diffs", action="store_true", help="Omit per-hand diffs from JSON output")
    p.add_argument("--no-color", action="store_true", help="Disable colored output (default is colored)")


def _add_threshold_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--mix-min", type=float, default=None, help="Min second-action share for a mixed spot")
    p.add_argument("--strong", type=float, default=None, help="Top-action share for a strong spot")
    p.add_argument("--moderate", type=float, default=None, help="Top-action share for a moderate spot")
    p.add_argument("--tiny-min", type=float, default=None, help="Minority share below which credit is capped")
    p.add_argument("--mixed-penalty", type=float, default=None, help="Score for a wrong 'mixed' answer")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rangetrainer", description="Grade painted preflop ranges")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    grade = sub.add_parser("grade", help="Grade answers against a reference range")
    grade.add_argument("--expected", required=True, help="Reference range JSON")
    grade.add_argument("--answers", required=True, help="User answers JSON ({hand: action})")
    grade.add_argument("--notes", default=None, help="Optional notes JSON (overrides notes in --expected)")
    grade.add_argument("--position", default=None, help="Hero position used to weight leaks")
    _add_output_args(grade)
    _add_threshold_args(grade)

    delta = sub.add_parser("delta", help="Grade only hands that changed between two ranges")
    delta.add_argument("--start", required=True, help="Starting range JSON")
    delta.add_argument("--target", required=True, help="Target range JSON")
    delta.add_argument("--answers", required=True, help="User answers JSON ({hand: action})")
    delta.add_argument("--position", default=None, help="Hero position used to weight leaks")
    _add_output_args(delta)
    _add_threshold_args(delta)

    score = sub.add_parser("score", help="Score a single answer against one reference action")
    score.add_argument(
        "--expected",
        required=True,
        help='Reference action, e.g. raise or a JSON blend such as {"raise": 70, "fold": 30}',
    )
    score.add_argument("--choice", required=True, help="Answer: an action, mixed or a blend signature")
    score.add_argument("--json", action="store_true", help="Print the result as JSON")
    _add_threshold_args(score)

    notes = sub.add_parser("validate-notes", help="Check coaching notes against their range")
    notes.add_argument("range", help="Range JSON with data and notes")
    return parser


def _threshold_overrides(args: argparse.Namespace) -> dict[str, float | None]:
    return {
        "mix_min": args.mix_min,
        "strong": args.strong,
        "moderate": args.moderate,
        "tiny_min": args.tiny_min,
        "mixed_penalty_score": args.mixed_penalty,
    }


def _emit(summary: SubmissionSummary, args: argparse.Namespace, *, title: str) -> None:
    if args.json:
        payload = summary_payload(summary, include_diffs=not args.no_diffs)
        print(json.dumps(payload.to_dict(), indent=2))
    elif args.plain:
        print(format_grade_summary(summary), end="")
    else:
        RichPresenter(no_color=args.no_color).show_summary(summary, title=title)


def _run_grade(args: argparse.Namespace) -> int:
    expected = _load_range(args.expected)
    answers = _load_answers(args.answers)
    notes = expected.notes
    if args.notes:
        notes = _load_json(args.notes)
        if not isinstance(notes, dict):
            raise InputError(f"{args.notes} must contain a JSON object of hand notes")
    summary = grade_range_submission(
        expected.data,
        answers,
        notes=notes,
        position=args.position or expected.position,
        config=settings.score_config(**_threshold_overrides(args)),
    )
    _emit(summary, args, title="Range Grade")
    return 0


def _run_delta(args: argparse.Namespace) -> int:
    start = _load_range(args.start)
    target = _load_range(args.target)
    answers = _load_answers(args.answers)
    summary = grade_delta_range(
        start.data,
        target.data,
        answers,
        notes=target.notes,
        position=args.position or target.position,
        config=settings.score_config(**_threshold_overrides(args)),
    )
    _emit(summary, args, title="Delta Grade")
    return 0


def _parse_expected_action(raw: str) -> ExpectedHandAction:
    text = raw.strip()
    if not text.startswith("{"):
        return text.lower()
    try:
        blend = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputError(f"--expected is not a valid JSON blend: {exc}") from exc
    if not isinstance(blend, dict):
        raise InputError("--expected blend must be a JSON object")
    return {str(key).strip().lower(): value for key, value in blend.items()}


def _run_score(args: argparse.Namespace) -> int:
    expected = _parse_expected_action(args.expected)
    result = score_choice(
        to_distribution(expected),
        to_user_choice(args.choice),
        settings.score_config(**_threshold_overrides(args)),
    )
    if args.json:
        print(json.dumps(score_payload(result).to_dict(), indent=2))
    else:
        print(f"{result.grade_bucket} {result.score:.2f}: {result.explain}")
    return 0


def _run_validate_notes(args: argparse.Namespace) -> int:
    payload = _load_range(args.range)
    if not payload.notes:
        print("No notes found. Nothing to validate.")
        return 0
    report = validate_range_notes(payload.data, payload.notes)
    for warning in report.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    for error in report.errors:
        print(f"error: {error}", file=sys.stderr)
    if not report.ok:
        return 1
    print("Range notes validation passed.")
    return 0


_COMMANDS = {
    "grade": _run_grade,
    "delta": _run_delta,
    "score": _run_score,
    "validate-notes": _run_validate_notes,
}


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return _COMMANDS[args.command](args)
    except InputError as exc:
        logger.debug("input rejected", exc_info=True)
        parser.exit(2, f"{parser.prog}: error: {exc}\n")


if __name__ == "__main__":
    sys.exit(main())
