"""Human-readable text report rendered with rich."""

import io

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..core.models import ProjectAnalysisResult
from .base import BaseFormatter

REPORT_WIDTH = 100


def _grade_label(grade: str) -> str:
    if grade == "A":
        return "[green]A[/green]"
    elif grade in ("B", "C"):
        return f"[yellow]{grade}[/yellow]"
    else:
        return f"[red]{grade}[/red]"


class TextFormatter(BaseFormatter):
    """Summary panel plus ranking and failure tables.

    Rendered into a fixed-width, colourless buffer so the text does not
    depend on the terminal it is produced in.
    """

    def format(self, result: ProjectAnalysisResult) -> str:
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            width=REPORT_WIDTH,
            no_color=True,
            color_system=None,
            force_terminal=False,
            highlight=False,
            emoji=False,
        )
        self._print_summary(console, result)
        self._print_recommendations(console, result)
        self._print_worst_files(console, result)
        self._print_worst_functions(console, result)
        self._print_histogram(console, result)
        self._print_rules(console, result)
        self._print_failed(console, result)
        self._print_skipped(console, result)
        return buffer.getvalue()

    def _print_summary(self, console: Console, result: ProjectAnalysisResult) -> None:
        stats = result.statistics
        lines = [
            f"Root: {escape(result.root)}",
            f"Overall score: {result.overall_score:.2f} (grade {_grade_label(result.grade)})",
            f"Files: {result.analyzed_count} analyzed, {result.failed_count} failed to parse, "
            f"{result.skipped_count} skipped by filter",
            f"Lines: {stats.total_lines} total, {stats.code_lines} code, "
            f"{stats.comment_lines} comment, {stats.blank_lines} blank",
            f"Functions: {stats.total_functions} "
            f"(avg cyclomatic {stats.average_cyclomatic:.2f}, max {stats.max_cyclomatic})",
            f"Average maintainability index: {stats.average_maintainability:.2f}",
            f"Issues: {stats.total_issues}",
        ]
        if not result.complete:
            lines.append("[red]Run cancelled: results are incomplete[/red]")
        console.print(Panel("\n".join(lines), title="codegauge report", expand=True))

    def _print_recommendations(self, console: Console, result: ProjectAnalysisResult) -> None:
        if not result.recommendations:
            return
        table = Table(title="Recommendations", expand=True)
        table.add_column("Priority")
        table.add_column("Recommendation", overflow="fold")
        table.add_column("Action", overflow="fold")
        for rec in result.recommendations:
            table.add_row(
                rec.priority, escape(f"{rec.title}: {rec.description}"), escape(rec.action)
            )
        console.print(table)

    def _print_worst_files(self, console: Console, result: ProjectAnalysisResult) -> None:
        if not result.worst_files:
            return
        table = Table(title="Lowest scoring files", expand=True)
        table.add_column("File", overflow="fold")
        table.add_column("Score", justify="right")
        table.add_column("Grade", justify="center")
        table.add_column("Issues", justify="right")
        table.add_column("Code lines", justify="right")
        for f in result.worst_files:
            table.add_row(
                escape(f.path), f"{f.score:.2f}", _grade_label(f.grade),
                str(f.issue_count), str(f.code_lines),
            )
        console.print(table)

    def _print_worst_functions(self, console: Console, result: ProjectAnalysisResult) -> None:
        if not result.worst_functions:
            return
        table = Table(title="Most complex functions", expand=True)
        table.add_column("Function", overflow="fold")
        table.add_column("Location", overflow="fold")
        table.add_column("Cyclomatic", justify="right")
        table.add_column("Cognitive", justify="right")
        table.add_column("Nesting", justify="right")
        for fn in result.worst_functions:
            table.add_row(
                escape(fn.name), escape(f"{fn.path}:{fn.line}"),
                str(fn.cyclomatic_complexity), str(fn.cognitive_complexity),
                str(fn.nesting_depth),
            )
        console.print(table)

    def _print_histogram(self, console: Console, result: ProjectAnalysisResult) -> None:
        if not result.statistics.total_functions:
            return
        table = Table(title="Cyclomatic complexity distribution")
        table.add_column("Range")
        table.add_column("Functions", justify="right")
        for label, count in result.statistics.complexity_histogram:
            table.add_row(label, str(count))
        console.print(table)

    def _print_rules(self, console: Console, result: ProjectAnalysisResult) -> None:
        if not result.statistics.issues_by_rule:
            return
        table = Table(title="Issues by rule")
        table.add_column("Rule")
        table.add_column("Count", justify="right")
        for rule, count in result.statistics.issues_by_rule:
            table.add_row(rule, str(count))
        console.print(table)

    def _print_failed(self, console: Console, result: ProjectAnalysisResult) -> None:
        if not result.failed:
            return
        table = Table(title="Failed to parse", expand=True)
        table.add_column("File", overflow="fold")
        table.add_column("Location")
        table.add_column("Reason", overflow="fold")
        for failed in result.failed:
            location = f"{failed.line}:{failed.column}" if failed.line is not None else "-"
            table.add_row(escape(failed.path), location, escape(failed.reason))
        console.print(table)

    def _print_skipped(self, console: Console, result: ProjectAnalysisResult) -> None:
        if not result.skipped:
            return
        table = Table(title="Skipped by filter", expand=True)
        table.add_column("Path", overflow="fold")
        table.add_column("Reason")
        for skipped in result.skipped:
            table.add_row(escape(skipped.path), skipped.reason)
        console.print(table)
