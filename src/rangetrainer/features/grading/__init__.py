"""Grading feature: range submission grader, delta grader, feedback and schemas."""

from ...core.scoring import DEFAULT_CONFIG, ScoreConfig, ScoreResult, score_choice
from .delta import get_diff_hands, grade_delta_range
from .formatting import format_grade_summary
from .grader import grade_range_submission
from .models import ActionBreakdown, HandDiff, LeakGroup, SubmissionSummary
from .notes import HandNotes, NotesReport, validate_range_notes
from .schemas import SubmissionSummaryPayload, summary_payload

__all__ = [
    "ActionBreakdown",
    "DEFAULT_CONFIG",
    "HandDiff",
    "HandNotes",
    "LeakGroup",
    "NotesReport",
    "ScoreConfig",
    "ScoreResult",
    "SubmissionSummary",
    "SubmissionSummaryPayload",
    "format_grade_summary",
    "get_diff_hands",
    "grade_delta_range",
    "grade_range_submission",
    "score_choice",
    "summary_payload",
    "validate_range_notes",
]
