"""Report formatters and the ReportGenerator entry point."""

from typing import Union

from ..core.models import ProjectAnalysisResult
from ..exceptions import UnsupportedFormatError
from .base import BaseFormatter, ReportFormat
from .csv_formatter import CsvFormatter
from .github_formatter import GithubFormatter
from .json_formatter import JsonFormatter, result_to_dict
from .markdown_formatter import MarkdownFormatter
from .text_formatter import TextFormatter

FORMATTERS = {
    ReportFormat.JSON: JsonFormatter,
    ReportFormat.TEXT: TextFormatter,
    ReportFormat.MARKDOWN: MarkdownFormatter,
    ReportFormat.CSV: CsvFormatter,
    ReportFormat.GITHUB: GithubFormatter,
}


def get_formatter(name: Union[str, ReportFormat]) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: One of "json", "text", "markdown", "csv", "github"

    Returns:
        Formatter instance

    Raises:
        UnsupportedFormatError: If name is not recognized
    """
    try:
        fmt = ReportFormat(name)
    except ValueError:
        raise UnsupportedFormatError(name, [f.value for f in ReportFormat])
    return FORMATTERS[fmt]()


class ReportGenerator:
    """Serializes a ProjectAnalysisResult in one of the report formats."""

    def generate(self, result: ProjectAnalysisResult, fmt: Union[str, ReportFormat]) -> str:
        return get_formatter(fmt).format(result)


__all__ = [
    "BaseFormatter",
    "ReportFormat",
    "ReportGenerator",
    "CsvFormatter",
    "GithubFormatter",
    "JsonFormatter",
    "MarkdownFormatter",
    "TextFormatter",
    "get_formatter",
    "result_to_dict",
]
