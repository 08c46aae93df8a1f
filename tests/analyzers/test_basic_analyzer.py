"""Tests for line-level metrics."""

import pytest

from codegauge.analyzers import BasicAnalyzer
from codegauge.analyzers.basic import naming_style
from codegauge.scanning import SourceFile


def _basic(code: str):
    return BasicAnalyzer().analyze(SourceFile.from_text("sample.js", code))


class TestLineCounts:
    def test_mixed_lines(self):
        code = (
            "// header\n"
            "let a = 1; // trailing\n"
            "\n"
            "/* block\n"
            "   more */\n"
            "const s = '// not a comment';\n"
        )
        metrics = _basic(code)
        assert metrics.total_lines == 6
        assert metrics.code_lines == 2
        assert metrics.comment_lines == 3
        assert metrics.blank_lines == 1
        assert metrics.comment_ratio == pytest.approx(0.6)

    def test_counts_add_up(self):
        code = "/*\n*/\nlet a;\n\n  \n`tpl\n// inside template\n`;\n"
        metrics = _basic(code)
        assert metrics.code_lines + metrics.comment_lines + metrics.blank_lines == metrics.total_lines

    def test_template_literal_is_code(self):
        metrics = _basic("const t = `\n// still a string\n`;\n")
        assert metrics.comment_lines == 0
        assert metrics.code_lines == 3

    def test_empty_file(self):
        metrics = _basic("")
        assert metrics.total_lines == 0
        assert metrics.average_line_length == 0.0
        assert metrics.comment_ratio == 0.0

    def test_longest_line(self):
        metrics = _basic("a;\nconst longer = 1;\nb;\n")
        assert metrics.longest_line_length == len("const longer = 1;")
        assert metrics.longest_line_number == 2


class TestRegexLiterals:
    def test_slash_star_inside_regex(self):
        metrics = _basic("const lead = /^\\/*/;\nfoo();\nbar();\n")
        assert metrics.code_lines == 3
        assert metrics.comment_lines == 0

    def test_double_slash_inside_class(self):
        metrics = _basic("const sep = /[//]+/g;\nconst rest = 1;\n")
        assert metrics.code_lines == 2
        assert metrics.comment_lines == 0
        assert metrics.naming.camel_case == 2

    def test_comment_after_regex(self):
        metrics = _basic("if (/a\\/b/.test(s)) x(); // TODO tail\n")
        assert metrics.code_lines == 1
        assert metrics.todo_count == 1

    def test_regex_after_keyword(self):
        metrics = _basic("function f(s) {\n  return /\\/*x/.test(s);\n}\nlet after;\n")
        assert metrics.comment_lines == 0
        assert metrics.naming.camel_case == 2

    def test_division_is_not_a_regex(self):
        metrics = _basic("const half = total / 2; // half\nconst q = (a) / b / c;\n")
        assert metrics.code_lines == 2
        assert metrics.comment_lines == 0
        assert metrics.todo_count == 0


class TestMarkers:
    def test_todo_markers_in_comments(self):
        code = "// TODO: fix\n/* FIXME later */\nconst s = 'TODO in a string';\n"
        assert _basic(code).todo_count == 2


class TestNaming:
    @pytest.mark.parametrize(
        "name,style",
        [
            ("userName", "camel"),
            ("Widget", "pascal"),
            ("do_thing", "snake"),
            ("MAX_SIZE", "upper"),
            ("x", "camel"),
            ("_private", "other"),
        ],
    )
    def test_naming_style(self, name, style):
        assert naming_style(name) == style

    def test_declared_names(self):
        code = "const MAX_SIZE = 1;\nlet userName;\nfunction do_thing() {}\nclass Widget {}\n"
        naming = _basic(code).naming
        assert naming.upper_case == 1
        assert naming.camel_case == 1
        assert naming.snake_case == 1
        assert naming.pascal_case == 1
        assert naming.total == 4
