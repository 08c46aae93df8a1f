"""Project orchestration: per-file pipeline, aggregation and result models."""

from .models import (
    DependencySummary,
    FailedFile,
    FileAnalysisResult,
    FileState,
    ProjectAnalysisResult,
    ProjectStatistics,
    RankedFile,
    RankedFunction,
    Recommendation,
)
from .pipeline import FileAnalysisPipeline
from .progress import ProgressReporter, SilentReporter
from .project import ProjectAnalyzer

__all__ = [
    "DependencySummary",
    "FailedFile",
    "FileAnalysisResult",
    "FileState",
    "ProjectAnalysisResult",
    "ProjectStatistics",
    "RankedFile",
    "RankedFunction",
    "Recommendation",
    "FileAnalysisPipeline",
    "ProgressReporter",
    "SilentReporter",
    "ProjectAnalyzer",
]
