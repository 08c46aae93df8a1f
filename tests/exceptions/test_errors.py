"""Tests for the codegauge exception hierarchy."""

from pathlib import Path

import pytest

from codegauge.exceptions import (
    AnalysisError,
    CacheError,
    CodegaugeError,
    ConfigurationError,
    FileAccessError,
    InvalidConfigError,
    InvalidPathError,
    ParseError,
    UnsupportedFormatError,
    UnsupportedLanguageError,
)


class TestCodegaugeError:
    """Base error formatting."""

    def test_message_only(self):
        assert str(CodegaugeError("boom")) == "boom"

    def test_details_rendered(self):
        err = CodegaugeError("boom", details={"a": "1", "b": "2"})
        assert str(err) == "boom (a=1, b=2)"
        assert err.message == "boom"


class TestParseError:
    def test_location_fields(self):
        """ParseError carries path, 1-based line, 0-based column and reason."""
        err = ParseError("src/app.js", 3, 7, "unexpected '{'")
        assert err.path == "src/app.js"
        assert err.line == 3
        assert err.column == 7
        assert err.reason == "unexpected '{'"
        assert err.message == "Failed to parse src/app.js:3:7"

    def test_is_analysis_error(self):
        assert isinstance(ParseError("a.js", 1, 0, "x"), AnalysisError)
        assert not isinstance(ParseError("a.js", 1, 0, "x"), ConfigurationError)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            FileAccessError(Path("a.js"), "missing"),
            UnsupportedLanguageError(Path("a.py"), [".js"]),
        ],
    )
    def test_per_file_errors(self, error):
        """Per-file errors are AnalysisErrors, never configuration errors."""
        assert isinstance(error, AnalysisError)
        assert isinstance(error, CodegaugeError)
        assert error.details["reason" if isinstance(error, FileAccessError) else "supported"]

    @pytest.mark.parametrize(
        "error",
        [
            InvalidPathError(Path("nowhere"), "Path does not exist"),
            InvalidConfigError("workers", 0, "must be at least 1"),
            UnsupportedFormatError("yaml", ["json", "text"]),
        ],
    )
    def test_configuration_errors(self, error):
        assert isinstance(error, ConfigurationError)

    def test_unsupported_format_lists_supported(self):
        err = UnsupportedFormatError("yaml", ["text", "json"])
        assert err.supported == ["json", "text"]
        assert err.details["supported"] == "json, text"

    def test_cache_error(self):
        err = CacheError("write", "disk full")
        assert err.message == "Cache write failed"
        assert err.operation == "write"
        assert err.reason == "disk full"
        assert not isinstance(err, ConfigurationError)
