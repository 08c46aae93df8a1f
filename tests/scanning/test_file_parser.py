"""Tests for FileParser and the flattened SyntaxTree."""

from pathlib import Path

import pytest

from codegauge.exceptions import FileAccessError, ParseError, UnsupportedLanguageError
from codegauge.scanning import FileParser, SourceFile


class TestParseSource:
    def test_program_root(self, parse):
        tree = parse("let a = 1;\n")
        assert tree.root.type == "program"
        assert tree.root.parent is None
        assert tree.language == "javascript"
        assert tree.line_count == 1

    def test_node_ids_are_positions(self, parse):
        tree = parse("function f(a) { return a + 1; }\n")
        for index, node in enumerate(tree.nodes):
            assert node.id == index
            for child in node.children:
                assert tree.node(child).parent == index

    def test_positions(self, parse):
        tree = parse("let a;\nif (a) {\n  a = 2;\n}\n")
        if_node = next(n for n in tree.nodes if n.type == "if_statement")
        assert (if_node.start_line, if_node.start_column) == (2, 0)
        assert (if_node.end_line, if_node.end_column) == (4, 1)
        assert if_node.line_span == 3

    def test_fields_and_operators(self, parse):
        tree = parse("const x = a && b;\n")
        binary = next(n for n in tree.nodes if n.type == "binary_expression")
        assert binary.operator == "&&"
        left = tree.child_by_field(binary, "left")
        assert left is not None and left.text == "a"
        declaration = next(n for n in tree.nodes if n.type == "lexical_declaration")
        assert declaration.keyword == "const"

    def test_comments_are_dropped(self, parse):
        tree = parse("// hello\nlet a; /* there */\n")
        assert all(n.type != "comment" for n in tree.nodes)

    def test_descendants_preorder(self, parse):
        tree = parse("f(g(1));\n")
        calls = [n for n in tree.descendants(tree.root) if n.type == "call_expression"]
        assert len(calls) == 2
        assert calls[0].start_column < calls[1].start_column

    @pytest.mark.parametrize(
        "path,language",
        [("a.ts", "typescript"), ("a.tsx", "tsx"), ("a.mjs", "javascript"), ("a.cts", "typescript")],
    )
    def test_language_by_extension(self, parse, path, language):
        code = "const a: number = 1;\n" if language != "javascript" else "const a = 1;\n"
        assert parse(code, path).language == language

    def test_jsx(self, parse):
        tree = parse("const el = <div className=\"a\">hi</div>;\n", "a.jsx")
        assert any(n.type == "jsx_element" for n in tree.nodes)

    def test_deterministic(self, parse):
        code = "class A { m() { return [1, 2].map(x => x * 2); } }\n"
        assert parse(code) == parse(code)


class TestTokens:
    def test_literals_are_single_operands(self, parse):
        tree = parse("x = /a+b/g.test('s t'); // note\n")
        assert [(t.operand, t.text) for t in tree.tokens] == [
            (True, "x"),
            (False, "="),
            (True, "/a+b/g"),
            (False, "."),
            (True, "test"),
            (False, "("),
            (True, "'s t'"),
            (False, ";"),
        ]

    def test_tokens_within_node(self, parse):
        tree = parse("a(1);\nb(2);\n")
        second = [n for n in tree.nodes if n.type == "expression_statement"][1]
        assert [t.text for t in tree.tokens_within(second)] == ["b", "(", "2", ";"]
        assert tree.tokens_within(second)[0][:2] == (2, 0)


class TestParseErrors:
    def test_invalid_source(self, parse, invalid_source):
        with pytest.raises(ParseError) as exc_info:
            parse(invalid_source, "broken.js")
        err = exc_info.value
        assert err.path == "broken.js"
        assert err.line >= 1
        assert err.column >= 0
        assert err.reason

    def test_error_location_after_valid_prefix(self, parse):
        with pytest.raises(ParseError) as exc_info:
            parse("let ok = 1;\nlet ok2 = 2;\nlet = ;\n")
        assert exc_info.value.line == 3

    def test_unsupported_extension(self, parse):
        with pytest.raises(UnsupportedLanguageError):
            parse("x = 1\n", "script.py")

    def test_failed_parse_is_counted(self, file_parser, invalid_source):
        with pytest.raises(ParseError):
            file_parser.parse_source(SourceFile.from_text("b.js", invalid_source))
        assert file_parser.parse_count == 1


class TestParseCount:
    def test_counts_each_parse(self, file_parser):
        source = SourceFile.from_text("a.js", "let a;\n")
        file_parser.parse_source(source)
        file_parser.parse_source(source)
        assert file_parser.parse_count == 2


class TestParseFromDisk:
    def test_parse_path(self, tmp_path: Path):
        (tmp_path / "a.ts").write_text("export const a: number = 1;\n")
        parser = FileParser(tmp_path)
        tree = parser.parse(tmp_path / "a.ts")
        assert tree.path == "a.ts"
        assert tree.language == "typescript"

    def test_size_limit(self, tmp_path: Path):
        (tmp_path / "a.js").write_text("let a = 1;\n" * 10)
        parser = FileParser(tmp_path, max_file_size_bytes=5)
        with pytest.raises(FileAccessError):
            parser.parse(tmp_path / "a.js")
        assert parser.parse_count == 0

    def test_supports(self):
        parser = FileParser()
        assert parser.supports("a.mts")
        assert not parser.supports("a.py")
