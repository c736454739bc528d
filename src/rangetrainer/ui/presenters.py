from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.actions import ALL_ACTIONS, BLACK
from ..features.grading.formatting import fmt_pct
from ..features.grading.models import SubmissionSummary

_BUCKET_STYLE = {
    "perfect": "green",
    "good": "cyan",
    "partial": "yellow",
    "miss": "red",
}


class RichPresenter:
    def __init__(self, *, no_color: bool = False, console: Console | None = None):
        if console is not None:
            self.console = console
        elif no_color:
            self.console = Console(force_terminal=False, color_system=None)
        else:
            self.console = Console(force_terminal=True, color_system="auto")

    def show_summary(self, summary: SubmissionSummary, *, title: str = "Range Grade") -> None:
        if summary.attempted == 0 and summary.unanswered == 0:
            self.console.print("No gradable hands in this range.")
            return

        overview = Table.grid(padding=(0, 1))
        overview.add_column(style="bold cyan", justify="right")
        overview.add_column(justify="left")
        overview.add_row("Accuracy", f"{fmt_pct(summary.accuracy)} (score {summary.total_score:.2f}/{summary.attempted})")
        overview.add_row("Answered", f"{summary.attempted} of {summary.graded}")
        overview.add_row("Full credit", str(summary.correct))
        overview.add_row("Half credit", str(summary.half_credit))
        overview.add_row("Wrong", str(summary.wrong))
        buckets = " • ".join(
            f"[{_BUCKET_STYLE.get(name, 'white')}]{name} {count}[/]" for name, count in summary.buckets.items()
        )
        overview.add_row("Buckets", buckets)
        self.console.print(Panel(overview, title=title, border_style="bold cyan", expand=False))

        actions = Table(title="By action", show_header=True, header_style="bold blue", box=box.SIMPLE_HEAVY)
        actions.add_column("Action", style="bold")
        actions.add_column("Expected", justify="right")
        actions.add_column("Correct", justify="right")
        actions.add_column("Half", justify="right")
        actions.add_column("Accuracy", justify="right")
        for name in ALL_ACTIONS:
            stats = summary.by_action.get(name)
            if stats is None or stats.expected == 0:
                continue
            if name == BLACK:
                actions.add_row(name, str(stats.expected), "-", "-", "[dim]not graded[/]")
                continue
            actions.add_row(name, str(stats.expected), str(stats.correct), str(stats.half_credit), fmt_pct(stats.accuracy))
        self.console.print(actions)

        if summary.top_leaks:
            leaks = Table(title="Top leaks", show_header=True, header_style="bold blue")
            leaks.add_column("#", justify="right", style="cyan", no_wrap=True)
            leaks.add_column("Leak", style="bold")
            leaks.add_column("Examples")
            leaks.add_column("Weight", justify="right")
            for i, leak in enumerate(summary.top_leaks, 1):
                examples = ", ".join(f"{ex.hand} ({ex.got} -> {ex.expected_primary})" for ex in leak.examples[:3])
                leaks.add_row(str(i), leak.title, examples, f"{leak.weight:.1f}")
            self.console.print(leaks)

        if summary.priority_fixes:
            fixes = "\n".join(f"- {fix}" for fix in summary.priority_fixes)
            self.console.print(Panel(fixes, title="Priority fixes", border_style="yellow", expand=False))
        if summary.strengths:
            strengths = "\n".join(f"- {item}" for item in summary.strengths)
            self.console.print(Panel(strengths, title="Strengths", border_style="green", expand=False))


__all__ = ["RichPresenter"]
