"""Tests for quality rules and the weighted score."""

import pytest

from codegauge.analyzers import Severity, grade_for
from codegauge.analyzers.quality import (
    DEEP_NESTING,
    DUPLICATE_STRUCTURE,
    HIGH_COMPLEXITY,
    LONG_FUNCTION,
    MAGIC_NUMBER,
)
from codegauge.config import AnalysisConfig, PenaltyConfig, ThresholdConfig


def _rules(result):
    return [issue.rule_id for issue in result.issues]


class TestWorkedExample:
    def test_nested_ifs(self, analyze_source, nested_ifs):
        """Two nested ifs: cyclomatic 3, nesting 2, one deep-nesting issue, score 95."""
        result = analyze_source(nested_ifs)
        (metric,) = result.complexity
        assert metric.cyclomatic_complexity == 3
        assert metric.nesting_depth == 2
        assert _rules(result) == [DEEP_NESTING]
        assert result.issues[0].severity == Severity.WARNING
        assert result.score == 95.0
        assert result.grade == "A"

    def test_issue_location(self, analyze_source, nested_ifs):
        location = analyze_source(nested_ifs, "src/check.js").issues[0].location
        assert location.file == "src/check.js"
        assert (location.line, location.column) == (1, 0)
        assert location.end_line == 8


class TestRules:
    def test_clean_file(self, analyze_source):
        result = analyze_source("const LIMIT = 10;\nexport function f(x) { return x + LIMIT; }\n")
        assert result.issues == ()
        assert result.score == 100.0

    def test_magic_number(self, analyze_source):
        result = analyze_source("function f(x) { return x * 7 + 1; }\n")
        assert _rules(result) == [MAGIC_NUMBER]
        assert result.issues[0].severity == Severity.INFO
        assert "7" in result.issues[0].message
        assert result.score == 99.0

    def test_magic_number_allow_list(self, analyze_source):
        config = AnalysisConfig(magic_number_allow_list=(0, 1, 7))
        result = analyze_source("function f(x) { return x * 7; }\n", config=config)
        assert result.issues == ()

    def test_negative_allowed(self, analyze_source):
        assert analyze_source("f(-1);\n").issues == ()

    def test_long_function(self, analyze_source):
        code = "function f() {\n" + "  a();\n" * 51 + "}\n"
        result = analyze_source(code)
        assert _rules(result) == [LONG_FUNCTION]
        assert result.score == 95.0

    def test_high_complexity(self, analyze_source):
        code = "function f(a) {\n" + "  if (a) { g(); }\n" * 11 + "}\n"
        result = analyze_source(code)
        assert _rules(result) == [HIGH_COMPLEXITY]
        assert result.issues[0].severity == Severity.ERROR
        assert "cyclomatic 12 > 10" in result.issues[0].message

    def test_duplicate_structure(self, analyze_source):
        body = (
            "{\n"
            "  let total = 0;\n"
            "  for (const item of items) {\n"
            "    total += item.price;\n"
            "  }\n"
            "  return total;\n"
            "}\n"
        )
        code = f"function sumA(items) {body}function sumB(items) {body}"
        config = AnalysisConfig(thresholds=ThresholdConfig(min_duplicate_nodes=10))
        result = analyze_source(code, config=config)
        assert _rules(result) == [DUPLICATE_STRUCTURE]
        issue = result.issues[0]
        assert "sumB" in issue.message and "sumA" in issue.message
        assert issue.location.line == 8

    def test_small_duplicates_ignored(self, analyze_source):
        code = "function a() { return 1; }\nfunction b() { return 1; }\n"
        assert analyze_source(code).issues == ()

    def test_issues_sorted_by_position(self, analyze_source):
        code = "function f(x) { return x * 9; }\nfunction g(x) { return x * 8; }\n"
        lines = [issue.location.line for issue in analyze_source(code).issues]
        assert lines == sorted(lines)


class TestScore:
    def test_penalties_are_configurable(self, analyze_source, nested_ifs):
        config = AnalysisConfig(penalties=PenaltyConfig(deep_nesting=12.5))
        assert analyze_source(nested_ifs, config=config).score == 87.5

    def test_thresholds_are_configurable(self, analyze_source, nested_ifs):
        config = AnalysisConfig(thresholds=ThresholdConfig(max_nesting_depth=2))
        assert analyze_source(nested_ifs, config=config).score == 100.0

    def test_each_issue_costs(self, analyze_source):
        one = analyze_source("function f(x) { return x * 7; }\n")
        two = analyze_source("function f(x) { return x * 7 * 9; }\n")
        assert two.score < one.score

    def test_score_clamped_at_zero(self, analyze_source):
        code = "f(" + ", ".join(str(n) for n in range(10, 250)) + ");\n"
        result = analyze_source(code)
        assert result.score == 0.0
        assert result.grade == "F"
        assert result.quality.penalty_total == 240.0

    @pytest.mark.parametrize(
        "score,grade",
        [(100, "A"), (90, "A"), (89.99, "B"), (75, "B"), (60, "C"), (40, "D"), (39.9, "F"), (0, "F")],
    )
    def test_grade_boundaries(self, score, grade):
        assert grade_for(score) == grade
