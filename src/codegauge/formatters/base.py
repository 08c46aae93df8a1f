"""Base formatter interface for codegauge report rendering."""

from abc import ABC, abstractmethod
from enum import Enum

from ..core.models import ProjectAnalysisResult


class ReportFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    MARKDOWN = "markdown"
    CSV = "csv"
    GITHUB = "github"


class BaseFormatter(ABC):
    """Abstract base class for output formatters.

    ``format`` must be a pure function of the result: no timestamps, no
    terminal probing, ranked lists in their stored order.
    """

    @abstractmethod
    def format(self, result: ProjectAnalysisResult) -> str:
        """Return formatted string representation of the result."""
