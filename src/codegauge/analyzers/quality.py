"""QualityAnalyzer: rule checks and the weighted deduction score.

A file starts at 100 and loses the rule's penalty for every issue, so two
long functions cost twice as much as one. The result is clamped to
[0, 100].

Rules:
    long-function        body spans more lines than max_function_lines
    deep-nesting         block nesting deeper than max_nesting_depth
    high-complexity      cyclomatic or cognitive complexity over its maximum
    magic-number         numeric literal outside the allow-list that is not
                         the initializer of a declaration
    duplicate-structure  function body with the same node-type sequence as
                         an earlier function in the file
"""

from __future__ import annotations

from collections import Counter
from typing import Optional

from ..config import (
    DEFAULT_PENALTIES,
    DEFAULT_THRESHOLDS,
    AnalysisConfig,
    PenaltyConfig,
    ThresholdConfig,
)
from .base import QualityInput
from .models import (
    ComplexityMetric,
    FunctionInfo,
    Issue,
    Location,
    NumericLiteral,
    QualityMetrics,
    Severity,
    grade_for,
)

LONG_FUNCTION = "long-function"
DEEP_NESTING = "deep-nesting"
HIGH_COMPLEXITY = "high-complexity"
MAGIC_NUMBER = "magic-number"
DUPLICATE_STRUCTURE = "duplicate-structure"

RULE_SEVERITY = {
    LONG_FUNCTION: Severity.WARNING,
    DEEP_NESTING: Severity.WARNING,
    HIGH_COMPLEXITY: Severity.ERROR,
    MAGIC_NUMBER: Severity.INFO,
    DUPLICATE_STRUCTURE: Severity.WARNING,
}


class QualityAnalyzer:
    """Analyzer[QualityInput, QualityMetrics].

    Thresholds, penalties and the allow-list are fixed at construction;
    ``from_config`` builds one from an AnalysisConfig.
    """

    name = "quality"

    def __init__(
        self,
        thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
        penalties: PenaltyConfig = DEFAULT_PENALTIES,
        magic_number_allow_list: tuple[float, ...] = (-1, 0, 1, 2),
    ):
        self.thresholds = thresholds
        self.penalties = penalties
        self.allowed_numbers = frozenset(float(n) for n in magic_number_allow_list)

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> QualityAnalyzer:
        return cls(config.thresholds, config.penalties, config.magic_number_allow_list)

    def analyze(self, subject: QualityInput) -> QualityMetrics:
        path = subject.ast.path
        by_id = {m.function_id: m for m in subject.complexity}

        issues: list[Issue] = []
        for fn in subject.ast.functions:
            issues.extend(self._function_issues(path, fn, by_id.get(fn.function_id)))
        issues.extend(self._duplicate_issues(path, subject.ast.functions))
        issues.extend(
            self._magic_number_issue(path, literal)
            for literal in subject.ast.numeric_literals
            if self._is_magic(literal)
        )
        issues.sort(key=lambda issue: issue.sort_key)

        penalty_total = sum(self.penalties.for_rule(issue.rule_id) for issue in issues)
        score = round(max(0.0, min(100.0, 100.0 - penalty_total)), 2)
        counts = Counter(issue.rule_id for issue in issues)

        return QualityMetrics(
            score=score,
            grade=grade_for(score),
            issues=tuple(issues),
            rule_counts=tuple(sorted(counts.items())),
            penalty_total=round(penalty_total, 2),
        )

    def _issue(self, rule_id: str, path: str, fn: FunctionInfo, message: str) -> Issue:
        return Issue(
            rule_id=rule_id,
            severity=RULE_SEVERITY[rule_id],
            location=Location(path, fn.start_line, fn.column, fn.end_line, fn.end_column),
            message=message,
            function_id=fn.function_id,
        )

    def _function_issues(
        self, path: str, fn: FunctionInfo, metric: Optional[ComplexityMetric]
    ) -> list[Issue]:
        limits = self.thresholds
        found = []
        if fn.body_lines > limits.max_function_lines:
            found.append(
                self._issue(
                    LONG_FUNCTION,
                    path,
                    fn,
                    f"Function '{fn.qualified_name}' is {fn.body_lines} lines long "
                    f"(max {limits.max_function_lines})",
                )
            )
        if fn.nesting_depth > limits.max_nesting_depth:
            found.append(
                self._issue(
                    DEEP_NESTING,
                    path,
                    fn,
                    f"Function '{fn.qualified_name}' nests blocks {fn.nesting_depth} deep "
                    f"(max {limits.max_nesting_depth})",
                )
            )
        if metric is not None:
            reasons = []
            if metric.cyclomatic_complexity > limits.max_cyclomatic_complexity:
                reasons.append(
                    f"cyclomatic {metric.cyclomatic_complexity} > {limits.max_cyclomatic_complexity}"
                )
            if metric.cognitive_complexity > limits.max_cognitive_complexity:
                reasons.append(
                    f"cognitive {metric.cognitive_complexity} > {limits.max_cognitive_complexity}"
                )
            if reasons:
                found.append(
                    self._issue(
                        HIGH_COMPLEXITY,
                        path,
                        fn,
                        f"Function '{fn.qualified_name}' is too complex ({', '.join(reasons)})",
                    )
                )
        return found

    def _duplicate_issues(self, path: str, functions: tuple[FunctionInfo, ...]) -> list[Issue]:
        first_seen: dict[str, FunctionInfo] = {}
        found = []
        for fn in functions:
            if fn.node_count < self.thresholds.min_duplicate_nodes:
                continue
            original = first_seen.get(fn.structure_hash)
            if original is None:
                first_seen[fn.structure_hash] = fn
                continue
            found.append(
                self._issue(
                    DUPLICATE_STRUCTURE,
                    path,
                    fn,
                    f"Function '{fn.qualified_name}' duplicates the structure of "
                    f"'{original.qualified_name}' (line {original.start_line})",
                )
            )
        return found

    def _is_magic(self, literal: NumericLiteral) -> bool:
        return not literal.in_declaration and literal.value not in self.allowed_numbers

    def _magic_number_issue(self, path: str, literal: NumericLiteral) -> Issue:
        return Issue(
            rule_id=MAGIC_NUMBER,
            severity=RULE_SEVERITY[MAGIC_NUMBER],
            location=Location(path, literal.line, literal.column, literal.line, literal.end_column),
            message=f"Magic number {literal.raw}; consider a named constant",
            function_id=literal.function_id,
        )
