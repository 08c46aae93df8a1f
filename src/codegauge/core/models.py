"""Per-file and project-level result models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from ..analyzers.models import (
    AstMetrics,
    BasicMetrics,
    ComplexityMetric,
    Issue,
    QualityMetrics,
)
from ..scanning.discovery import SkippedFile


class FileState(str, Enum):
    """Lifecycle of one file within a project run."""

    PENDING = "pending"
    PARSING = "parsing"
    ANALYZING = "analyzing"
    AGGREGATED = "aggregated"
    FAILED = "failed"


@dataclass(frozen=True)
class FileAnalysisResult:
    """Everything computed for one file.

    Cached under ``fingerprint``; the ``ast`` it holds is always detached
    from its syntax tree.
    """

    path: str
    fingerprint: str
    language: str
    basic: BasicMetrics
    ast: AstMetrics
    complexity: tuple[ComplexityMetric, ...]
    maintainability_index: float
    quality: QualityMetrics

    @property
    def issues(self) -> tuple[Issue, ...]:
        return self.quality.issues

    @property
    def score(self) -> float:
        return self.quality.score

    @property
    def grade(self) -> str:
        return self.quality.grade

    def relocated(self, path: str) -> FileAnalysisResult:
        """Copy of this result reported against another path."""
        if path == self.path:
            return self
        return replace(
            self,
            path=path,
            ast=replace(self.ast, path=path),
            quality=replace(
                self.quality, issues=tuple(issue.relocated(path) for issue in self.quality.issues)
            ),
        )


@dataclass(frozen=True)
class FailedFile:
    """A file excluded from aggregates because it could not be analyzed.

    ``line`` and ``column`` are set for parse errors only.
    """

    path: str
    reason: str
    line: Optional[int] = None
    column: Optional[int] = None
    error_type: str = "ParseError"


@dataclass(frozen=True)
class RankedFile:
    path: str
    score: float
    grade: str
    issue_count: int
    code_lines: int


@dataclass(frozen=True)
class RankedFunction:
    path: str
    function_id: str
    name: str
    line: int
    cyclomatic_complexity: int
    cognitive_complexity: int
    nesting_depth: int


@dataclass(frozen=True)
class ProjectStatistics:
    """Aggregates over successfully analyzed files.

    Histograms are ``(bucket label, count)`` pairs in bucket order.
    """

    files_analyzed: int
    files_failed: int
    files_skipped: int
    total_lines: int
    code_lines: int
    comment_lines: int
    blank_lines: int
    total_functions: int
    total_classes: int
    total_issues: int
    issues_by_rule: tuple[tuple[str, int], ...]
    issues_by_severity: tuple[tuple[str, int], ...]
    average_score: float
    average_maintainability: float
    average_cyclomatic: float
    max_cyclomatic: int
    average_cognitive: float
    average_function_lines: float
    complexity_histogram: tuple[tuple[str, int], ...]
    score_histogram: tuple[tuple[str, int], ...]


@dataclass(frozen=True)
class DependencySummary:
    """Import graph over the analyzed files.

    Attributes:
        edges: (importer, imported) pairs between analyzed files
        cycles: Strongly connected components with more than one file
        orphans: Files with no internal imports in either direction
        external_packages: (package, importing file count) pairs
        unresolved: (importer, specifier) pairs for relative imports that
            match no analyzed file
    """

    edges: tuple[tuple[str, str], ...] = ()
    cycles: tuple[tuple[str, ...], ...] = ()
    orphans: tuple[str, ...] = ()
    external_packages: tuple[tuple[str, int], ...] = ()
    unresolved: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Recommendation:
    """A project-level suggestion derived from rule counts and statistics.

    ``priority`` is one of ``high``, ``medium`` or ``low``.
    """

    category: str
    priority: str
    title: str
    description: str
    action: str
    impact: str


@dataclass(frozen=True)
class ProjectAnalysisResult:
    """Outcome of one project run, built from a snapshot of per-file results.

    ``complete`` is False when the run was cancelled; the statistics then
    cover only the files finished before cancellation. Cache counters
    describe the run, not the project, so they are left out of equality
    and of every report.
    """

    root: str
    files: tuple[FileAnalysisResult, ...]
    failed: tuple[FailedFile, ...]
    skipped: tuple[SkippedFile, ...]
    statistics: ProjectStatistics
    worst_files: tuple[RankedFile, ...]
    worst_functions: tuple[RankedFunction, ...]
    dependencies: DependencySummary
    overall_score: float
    grade: str
    recommendations: tuple[Recommendation, ...] = ()
    complete: bool = True
    cache_hits: int = field(default=0, compare=False)
    cache_misses: int = field(default=0, compare=False)

    @property
    def analyzed_count(self) -> int:
        return len(self.files)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def issues(self) -> tuple[Issue, ...]:
        return tuple(issue for result in self.files for issue in result.issues)

    def file(self, path: str) -> Optional[FileAnalysisResult]:
        for result in self.files:
            if result.path == path:
                return result
        return None
