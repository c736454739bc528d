from __future__ import annotations

from .models import SubmissionSummary


def fmt_pct(value: float) -> str:
    return f"{round(value * 100)}%"


def format_grade_summary(summary: SubmissionSummary) -> str:
    """Plain-text rendering for console logs and dev mode."""

    lines: list[str] = [
        f"Accuracy: {fmt_pct(summary.accuracy)} ({summary.correct}/{summary.attempted})",
        f"Half credit: {summary.half_credit}  Wrong: {summary.wrong}  Unanswered: {summary.unanswered}",
        "",
    ]

    if summary.strengths:
        lines.append("Strengths:")
        lines.extend(f"- {item}" for item in summary.strengths)
        lines.append("")

    if summary.priority_fixes:
        lines.append("Priority fixes:")
        lines.extend(f"- {item}" for item in summary.priority_fixes)
        lines.append("")

    if summary.top_leaks:
        lines.append("Top leaks:")
        for leak in summary.top_leaks:
            lines.append(f"- {leak.title} (weight {leak.weight:.1f})")
            lines.append(f"  {leak.diagnosis}")
            lines.append(f"  Do: {leak.what_to_do}")
            lines.append(f"  {leak.drill}")
            for ex in leak.examples:
                lines.append(f"    * {ex.hand}: {ex.got} -> {ex.expected_primary} ({ex.severity}): {ex.why}")
            lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"


__all__ = ["fmt_pct", "format_grade_summary"]
