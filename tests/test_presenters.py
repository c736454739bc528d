from __future__ import annotations

from rich.console import Console

from rangetrainer.features.grading import grade_range_submission
from rangetrainer.ui.presenters import RichPresenter


def _presenter() -> tuple[RichPresenter, Console]:
    console = Console(record=True, width=120, color_system=None)
    return RichPresenter(console=console), console


def test_summary_sections_render():
    presenter, console = _presenter()
    expected = {"AA": "raise", "KK": "raise", "98s": "raise", "72o": "black"}
    summary = grade_range_submission(expected, {"AA": "raise", "KK": "fold", "98s": "fold"}, position="CO")
    presenter.show_summary(summary, title="Range Grade")
    text = console.export_text()
    assert "Range Grade" in text
    assert "By action" in text
    assert "not graded" in text
    assert "Top leaks" in text
    assert "Priority fixes" in text
    assert "KK (fold -> raise)" in text


def test_empty_range_message():
    presenter, console = _presenter()
    presenter.show_summary(grade_range_submission({"72o": "black"}, {}))
    assert "No gradable hands" in console.export_text()
