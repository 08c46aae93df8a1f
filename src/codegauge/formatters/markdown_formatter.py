"""Markdown formatter, suitable for PR comments and CI job summaries."""

from ..core.models import ProjectAnalysisResult
from .base import BaseFormatter


def _cell(value) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


class MarkdownFormatter(BaseFormatter):
    def format(self, result: ProjectAnalysisResult) -> str:
        stats = result.statistics
        lines = [
            "# codegauge report",
            "",
            f"**Overall score:** {result.overall_score:.2f} (grade {result.grade})",
            "",
            "| Analyzed | Failed to parse | Skipped by filter | Issues |",
            "|---:|---:|---:|---:|",
            f"| {result.analyzed_count} | {result.failed_count} | "
            f"{result.skipped_count} | {stats.total_issues} |",
            "",
        ]
        if not result.complete:
            lines += ["> **Incomplete:** the run was cancelled before every file was analyzed.", ""]

        if result.recommendations:
            lines += ["## Recommendations", ""]
            for rec in result.recommendations:
                lines.append(
                    f"- **{rec.priority}** {_cell(rec.title)}: {_cell(rec.description)}. "
                    f"{_cell(rec.action)}."
                )
            lines.append("")

        if result.worst_files:
            lines += ["## Lowest scoring files", "", "| File | Score | Grade | Issues |",
                      "|------|------:|:-----:|-------:|"]
            for f in result.worst_files:
                lines.append(f"| `{_cell(f.path)}` | {f.score:.2f} | {f.grade} | {f.issue_count} |")
            lines.append("")

        if result.worst_functions:
            lines += ["## Most complex functions", "",
                      "| Function | Location | Cyclomatic | Cognitive |",
                      "|----------|----------|-----------:|----------:|"]
            for fn in result.worst_functions:
                lines.append(
                    f"| `{_cell(fn.name)}` | `{_cell(fn.path)}:{fn.line}` | "
                    f"{fn.cyclomatic_complexity} | {fn.cognitive_complexity} |"
                )
            lines.append("")

        if stats.total_functions:
            lines += ["## Complexity distribution", "", "| Cyclomatic | Functions |",
                      "|-----------|----------:|"]
            lines += [f"| {label} | {count} |" for label, count in stats.complexity_histogram]
            lines.append("")

        if result.dependencies.cycles:
            lines += ["## Import cycles", ""]
            lines += [
                "- " + " → ".join(f"`{_cell(path)}`" for path in cycle)
                for cycle in result.dependencies.cycles
            ]
            lines.append("")

        if result.failed:
            lines += ["## Failed to parse", "", "| File | Line | Reason |", "|------|-----:|--------|"]
            for failed in result.failed:
                line = failed.line if failed.line is not None else "-"
                lines.append(f"| `{_cell(failed.path)}` | {line} | {_cell(failed.reason)} |")
            lines.append("")

        if result.skipped:
            lines += ["## Skipped by filter", "", "| Path | Reason |", "|------|--------|"]
            for skipped in result.skipped:
                lines.append(f"| `{_cell(skipped.path)}` | {skipped.reason} |")
            lines.append("")

        return "\n".join(lines)
