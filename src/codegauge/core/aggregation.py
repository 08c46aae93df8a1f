"""Project-level aggregation over a snapshot of per-file results.

Everything here is a pure function of its inputs, which are sorted by path
first so the result does not depend on the order files finished in.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

import numpy as np

from ..analyzers.models import Severity, grade_for
from ..graph import build_dependency_graph, summarize
from ..scanning.discovery import SkippedFile
from .models import (
    DependencySummary,
    FailedFile,
    FileAnalysisResult,
    ProjectAnalysisResult,
    ProjectStatistics,
    RankedFile,
    RankedFunction,
)
from .recommendations import build_recommendations

WORST_LIMIT = 10

# Lower bucket edges after the first; cyclomatic complexity is always >= 1
COMPLEXITY_LABELS = ("1-5", "6-10", "11-20", "21-50", "51+")
COMPLEXITY_EDGES = (6, 11, 21, 51)

SCORE_LABELS = ("0-39", "40-59", "60-74", "75-89", "90-100")
SCORE_EDGES = (40, 60, 75, 90)

SEVERITY_ORDER = (Severity.ERROR, Severity.WARNING, Severity.INFO)


def histogram(values: Sequence[float], edges: Sequence[float], labels: Sequence[str]) -> tuple:
    """Count ``values`` into buckets split at ``edges``; empty buckets are kept."""
    buckets = np.digitize(np.asarray(values, dtype=float), edges)
    counts = np.bincount(buckets, minlength=len(labels))
    return tuple((label, int(count)) for label, count in zip(labels, counts))


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return round(float(np.mean(values)), 2)


def overall_score(files: Sequence[FileAnalysisResult]) -> float:
    """Code-line weighted mean of file scores.

    A plain mean when every file is empty, 100 when there are no files.
    """
    if not files:
        return 100.0
    scores = np.array([f.score for f in files], dtype=float)
    weights = np.array([f.basic.code_lines for f in files], dtype=float)
    if weights.sum() > 0:
        return round(float(np.average(scores, weights=weights)), 2)
    return round(float(np.mean(scores)), 2)


def rank_files(files: Iterable[FileAnalysisResult], limit: int = WORST_LIMIT) -> tuple[RankedFile, ...]:
    ranked = sorted(files, key=lambda f: (f.score, f.path))[:limit]
    return tuple(
        RankedFile(
            path=f.path,
            score=f.score,
            grade=f.grade,
            issue_count=len(f.issues),
            code_lines=f.basic.code_lines,
        )
        for f in ranked
    )


def rank_functions(
    files: Iterable[FileAnalysisResult], limit: int = WORST_LIMIT
) -> tuple[RankedFunction, ...]:
    candidates = [
        RankedFunction(
            path=f.path,
            function_id=m.function_id,
            name=m.name,
            line=m.line,
            cyclomatic_complexity=m.cyclomatic_complexity,
            cognitive_complexity=m.cognitive_complexity,
            nesting_depth=m.nesting_depth,
        )
        for f in files
        for m in f.complexity
    ]
    candidates.sort(
        key=lambda r: (-r.cyclomatic_complexity, -r.cognitive_complexity, r.path, r.line)
    )
    return tuple(candidates[:limit])


def compute_statistics(
    files: Sequence[FileAnalysisResult],
    failed: Sequence[FailedFile],
    skipped: Sequence[SkippedFile],
) -> ProjectStatistics:
    metrics = [m for f in files for m in f.complexity]
    cyclomatic = [m.cyclomatic_complexity for m in metrics]
    issues = [issue for f in files for issue in f.issues]
    by_rule = Counter(issue.rule_id for issue in issues)
    by_severity = Counter(issue.severity for issue in issues)

    return ProjectStatistics(
        files_analyzed=len(files),
        files_failed=len(failed),
        files_skipped=len(skipped),
        total_lines=sum(f.basic.total_lines for f in files),
        code_lines=sum(f.basic.code_lines for f in files),
        comment_lines=sum(f.basic.comment_lines for f in files),
        blank_lines=sum(f.basic.blank_lines for f in files),
        total_functions=len(metrics),
        total_classes=sum(len(f.ast.classes) for f in files),
        total_issues=len(issues),
        issues_by_rule=tuple(sorted(by_rule.items())),
        issues_by_severity=tuple((s.value, by_severity.get(s, 0)) for s in SEVERITY_ORDER),
        average_score=_mean([f.score for f in files]),
        average_maintainability=_mean([f.maintainability_index for f in files]),
        average_cyclomatic=_mean(cyclomatic),
        max_cyclomatic=max(cyclomatic, default=0),
        average_cognitive=_mean([m.cognitive_complexity for m in metrics]),
        average_function_lines=_mean([m.body_lines for m in metrics]),
        complexity_histogram=histogram(cyclomatic, COMPLEXITY_EDGES, COMPLEXITY_LABELS),
        score_histogram=histogram([f.score for f in files], SCORE_EDGES, SCORE_LABELS),
    )


def dependency_summary(files: Sequence[FileAnalysisResult]) -> DependencySummary:
    graph = build_dependency_graph((f.path, f.ast.imports) for f in files)
    return summarize(graph)


def aggregate(
    root: str,
    files: Iterable[FileAnalysisResult],
    failed: Iterable[FailedFile],
    skipped: Iterable[SkippedFile],
    complete: bool = True,
    cache_hits: int = 0,
    cache_misses: int = 0,
) -> ProjectAnalysisResult:
    """Build the project result from a snapshot of per-file outcomes."""
    files = sorted(files, key=lambda f: f.path)
    failed = sorted(failed, key=lambda f: f.path)
    skipped = sorted(skipped, key=lambda s: (s.path, s.reason))

    score = overall_score(files)
    statistics = compute_statistics(files, failed, skipped)
    dependencies = dependency_summary(files)
    worst_functions = rank_functions(files)
    return ProjectAnalysisResult(
        root=root,
        files=tuple(files),
        failed=tuple(failed),
        skipped=tuple(skipped),
        statistics=statistics,
        worst_files=rank_files(files),
        worst_functions=worst_functions,
        dependencies=dependencies,
        overall_score=score,
        grade=grade_for(score),
        recommendations=build_recommendations(
            files, failed, statistics, dependencies, worst_functions
        ),
        complete=complete,
        cache_hits=cache_hits,
        cache_misses=cache_misses,
    )
