"""Project-level recommendations.

Each recommendation is triggered by a rule count or a project statistic
crossing a fixed limit, so the same project always yields the same list in
the same order.
"""

from __future__ import annotations

from typing import Sequence

from ..analyzers.quality import (
    DEEP_NESTING,
    DUPLICATE_STRUCTURE,
    HIGH_COMPLEXITY,
    LONG_FUNCTION,
    MAGIC_NUMBER,
)
from .models import (
    DependencySummary,
    FailedFile,
    FileAnalysisResult,
    ProjectStatistics,
    RankedFunction,
    Recommendation,
)

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

LARGE_FILE_LINES = 500
LOW_MAINTAINABILITY = 65.0
LOW_COMMENT_RATIO = 0.05
# Below this many code lines the comment ratio says little.
COMMENT_RATIO_MIN_CODE_LINES = 100
LARGE_PROJECT_FILES = 100


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _worst(functions: Sequence[RankedFunction]) -> str:
    if not functions:
        return ""
    fn = functions[0]
    return (
        f"; the most complex is {fn.name} at {fn.path}:{fn.line} "
        f"(cyclomatic {fn.cyclomatic_complexity})"
    )


def build_recommendations(
    files: Sequence[FileAnalysisResult],
    failed: Sequence[FailedFile],
    statistics: ProjectStatistics,
    dependencies: DependencySummary,
    worst_functions: Sequence[RankedFunction] = (),
) -> tuple[Recommendation, ...]:
    """Recommendations for one project, highest priority first."""
    counts = dict(statistics.issues_by_rule)
    found: list[Recommendation] = []

    if counts.get(HIGH_COMPLEXITY):
        found.append(
            Recommendation(
                category="complexity",
                priority="high",
                title="Reduce function complexity",
                description=(
                    f"{_plural(counts[HIGH_COMPLEXITY], 'function')} over the complexity limits"
                    + _worst(worst_functions)
                ),
                action=(
                    "Split branching logic into smaller functions and replace condition "
                    "chains with early returns"
                ),
                impact="Fewer paths to test and simpler reviews",
            )
        )
    if counts.get(DEEP_NESTING):
        found.append(
            Recommendation(
                category="complexity",
                priority="medium",
                title="Flatten deeply nested blocks",
                description=f"{_plural(counts[DEEP_NESTING], 'function')} over the nesting limit",
                action="Use guard clauses and move inner blocks into helper functions",
                impact="Code that reads top to bottom",
            )
        )
    if counts.get(LONG_FUNCTION):
        found.append(
            Recommendation(
                category="maintainability",
                priority="medium",
                title="Shorten long functions",
                description=f"{_plural(counts[LONG_FUNCTION], 'function')} over the line limit",
                action="Extract cohesive steps into named functions",
                impact="Smaller units that are easier to test and reuse",
            )
        )
    if counts.get(DUPLICATE_STRUCTURE):
        found.append(
            Recommendation(
                category="duplication",
                priority="medium",
                title="Remove duplicated function bodies",
                description=f"{_plural(counts[DUPLICATE_STRUCTURE], 'function')} with a duplicated body",
                action="Merge the copies into one parameterized function",
                impact="One place to fix each bug",
            )
        )
    if counts.get(MAGIC_NUMBER):
        found.append(
            Recommendation(
                category="readability",
                priority="low",
                title="Name magic numbers",
                description=f"{_plural(counts[MAGIC_NUMBER], 'unnamed numeric literal')} in expressions",
                action="Move the values into named constants",
                impact="Values whose meaning is visible at the call site",
            )
        )

    if files and statistics.average_maintainability < LOW_MAINTAINABILITY:
        found.append(
            Recommendation(
                category="maintainability",
                priority="high",
                title="Improve maintainability",
                description=f"Average maintainability index is {statistics.average_maintainability:.2f}",
                action="Start with the lowest scoring files and split their largest functions",
                impact="Cheaper changes across the codebase",
            )
        )

    large = sorted(
        (f for f in files if f.basic.total_lines > LARGE_FILE_LINES),
        key=lambda f: (-f.basic.total_lines, f.path),
    )
    if large:
        found.append(
            Recommendation(
                category="maintainability",
                priority="medium",
                title="Split large files",
                description=(
                    f"{_plural(len(large), 'file')} over {LARGE_FILE_LINES} lines; the largest is "
                    f"{large[0].path} ({large[0].basic.total_lines} lines)"
                ),
                action="Split files by responsibility",
                impact="Easier navigation and fewer merge conflicts",
            )
        )

    commented = statistics.code_lines + statistics.comment_lines
    if statistics.code_lines >= COMMENT_RATIO_MIN_CODE_LINES and commented:
        ratio = statistics.comment_lines / commented
        if ratio < LOW_COMMENT_RATIO:
            found.append(
                Recommendation(
                    category="documentation",
                    priority="low",
                    title="Document the code",
                    description=f"Comments make up {ratio:.1%} of non-blank lines",
                    action="Document public functions and non-obvious logic",
                    impact="Faster onboarding",
                )
            )

    if dependencies.cycles:
        involved = {path for cycle in dependencies.cycles for path in cycle}
        found.append(
            Recommendation(
                category="dependencies",
                priority="high",
                title="Break import cycles",
                description=(
                    f"{_plural(len(dependencies.cycles), 'import cycle')} across "
                    f"{_plural(len(involved), 'file')}"
                ),
                action="Move shared code into a module both sides import",
                impact="Predictable module initialization and looser coupling",
            )
        )

    if failed:
        found.append(
            Recommendation(
                category="quality",
                priority="high",
                title="Fix files that fail to parse",
                description=(
                    f"{_plural(len(failed), 'file')} could not be analyzed, "
                    f"starting with {failed[0].path}"
                ),
                action="Fix the syntax errors or exclude generated files",
                impact="Complete metrics for the whole project",
            )
        )

    if statistics.files_analyzed + statistics.files_failed > LARGE_PROJECT_FILES:
        found.append(
            Recommendation(
                category="structure",
                priority="medium",
                title="Split the project into packages",
                description=f"{statistics.files_analyzed + statistics.files_failed} source files in one project",
                action="Group related modules into packages with clear boundaries",
                impact="Smaller areas of ownership",
            )
        )

    found.sort(key=lambda r: (PRIORITY_ORDER[r.priority], r.category, r.title))
    return tuple(found)
