"""GitHub Actions formatter: one workflow annotation per issue."""

from ..analyzers.models import Severity
from ..core.models import ProjectAnalysisResult
from .base import BaseFormatter

LEVELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "notice",
}


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


class GithubFormatter(BaseFormatter):
    """Output ``::error`` / ``::warning`` / ``::notice`` annotations.

    Columns are converted to GitHub's 1-based convention.
    """

    def format(self, result: ProjectAnalysisResult) -> str:
        lines: list[str] = []
        for f in result.files:
            for issue in f.issues:
                loc = issue.location
                props = (
                    f"file={_escape_property(loc.file)},line={loc.line},col={loc.column + 1},"
                    f"endLine={loc.end_line},title={_escape_property(issue.rule_id)}"
                )
                lines.append(f"::{LEVELS[issue.severity]} {props}::{_escape_data(issue.message)}")

        for failed in result.failed:
            props = f"file={_escape_property(failed.path)}"
            if failed.line is not None:
                props += f",line={failed.line},col={(failed.column or 0) + 1}"
            lines.append(f"::error {props},title=parse-error::{_escape_data(failed.reason)}")

        for skipped in result.skipped:
            lines.append(
                f"::debug::Skipped {_escape_data(skipped.path)} ({skipped.reason})"
            )

        status = "" if result.complete else " (incomplete)"
        lines.append(
            f"::notice title=codegauge::{result.analyzed_count} analyzed, "
            f"{result.failed_count} failed, {result.skipped_count} skipped; "
            f"score {result.overall_score:.2f} ({result.grade}){status}"
        )
        return "\n".join(lines) + "\n"
