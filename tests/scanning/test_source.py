"""Tests for reading source files."""

from pathlib import Path

import pytest

from codegauge.exceptions import FileAccessError
from codegauge.scanning.source import (
    SourceFile,
    compute_fingerprint,
    read_source,
    split_lines,
)


class TestSplitLines:
    def test_trailing_newline_is_not_a_line(self):
        assert split_lines("a\nb\n") == ["a", "b"]

    def test_no_trailing_newline(self):
        assert split_lines("a\nb") == ["a", "b"]

    def test_empty(self):
        assert split_lines("") == []

    def test_blank_lines_kept(self):
        assert split_lines("a\n\n\nb\n") == ["a", "", "", "b"]


class TestSourceFile:
    def test_from_text_normalizes(self):
        """BOM is stripped and CRLF/CR become LF."""
        source = SourceFile.from_text("a.js", "\ufefflet a;\r\nlet b;\rlet c;\n")
        assert source.text == "let a;\nlet b;\nlet c;\n"
        assert source.lines == ["let a;", "let b;", "let c;"]

    def test_line_endings_do_not_change_fingerprint(self):
        crlf = SourceFile.from_text("a.js", "let a;\r\n")
        lf = SourceFile.from_text("a.js", "let a;\n")
        assert crlf.fingerprint == lf.fingerprint

    def test_one_character_changes_fingerprint(self):
        a = SourceFile.from_text("a.js", "let a = 1;\n")
        b = SourceFile.from_text("a.js", "let a = 2;\n")
        assert a.fingerprint != b.fingerprint

    def test_fingerprint_ignores_path(self):
        assert (
            SourceFile.from_text("a.js", "x;\n").fingerprint
            == SourceFile.from_text("b/c.ts", "x;\n").fingerprint
        )

    def test_fingerprint_is_sha256(self):
        assert len(compute_fingerprint("")) == 64

    def test_extension(self):
        assert SourceFile.from_text("src/App.TSX", "").extension == ".tsx"


class TestReadSource:
    def test_relative_path(self, tmp_path: Path):
        (tmp_path / "src").mkdir()
        target = tmp_path / "src" / "app.js"
        target.write_text("let a = 1;\n")
        source = read_source(target, tmp_path)
        assert source.path == "src/app.js"
        assert source.text == "let a = 1;\n"
        assert source.size_bytes == len("let a = 1;\n")

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileAccessError):
            read_source(tmp_path / "missing.js", tmp_path)

    def test_too_large(self, tmp_path: Path):
        target = tmp_path / "big.js"
        target.write_text("x" * 100)
        with pytest.raises(FileAccessError, match="Cannot access file"):
            read_source(target, tmp_path, max_bytes=10)

    def test_invalid_utf8(self, tmp_path: Path):
        target = tmp_path / "bin.js"
        target.write_bytes(b"\xff\xfe\x00let")
        with pytest.raises(FileAccessError) as exc_info:
            read_source(target, tmp_path)
        assert "Encoding error" in exc_info.value.reason
