"""CSV formatter for codegauge."""

import csv
import io

from ..core.models import ProjectAnalysisResult
from .base import BaseFormatter

COLUMNS = [
    "file", "status", "language", "score", "grade", "maintainability_index",
    "total_lines", "code_lines", "comment_lines", "functions", "max_cyclomatic",
    "issues", "reason",
]


class CsvFormatter(BaseFormatter):
    """One row per file: analyzed rows first, then failed, then skipped."""

    def format(self, result: ProjectAnalysisResult) -> str:
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(COLUMNS)
        for f in result.files:
            writer.writerow([
                f.path, "analyzed", f.language, f"{f.score:.2f}", f.grade,
                f"{f.maintainability_index:.2f}",
                f.basic.total_lines, f.basic.code_lines, f.basic.comment_lines,
                len(f.complexity),
                max((m.cyclomatic_complexity for m in f.complexity), default=0),
                len(f.issues), "",
            ])
        for failed in result.failed:
            location = f" (line {failed.line}, column {failed.column})" if failed.line else ""
            writer.writerow(
                [failed.path, "failed"] + [""] * 10 + [failed.reason + location]
            )
        for skipped in result.skipped:
            writer.writerow([skipped.path, "skipped"] + [""] * 10 + [skipped.reason])
        return output.getvalue()
