"""Analysis-related exceptions: file access, parsing, language support."""

from pathlib import Path
from typing import List

from .base import CodegaugeError


class AnalysisError(CodegaugeError):
    """Base class for per-file analysis errors.

    These are caught at the project boundary and recorded against the
    offending file; they never abort a run.
    """

    pass


class FileAccessError(AnalysisError):
    """Raised when a file cannot be read or decoded."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParseError(AnalysisError):
    """Raised when source text is not syntactically valid.

    ``line`` is 1-based, ``column`` is 0-based, matching the positions
    reported elsewhere in results.
    """

    def __init__(self, path: str, line: int, column: int, reason: str):
        super().__init__(
            f"Failed to parse {path}:{line}:{column}",
            details={"path": str(path), "line": str(line), "column": str(column), "reason": reason},
        )
        self.path = path
        self.line = line
        self.column = column
        self.reason = reason


class UnsupportedLanguageError(AnalysisError):
    """Raised when a file extension maps to no known grammar."""

    def __init__(self, filepath: Path, supported_extensions: List[str]):
        super().__init__(
            f"Unsupported source file: {filepath}",
            details={"filepath": str(filepath), "supported": ", ".join(supported_extensions)},
        )
        self.filepath = filepath
        self.supported_extensions = supported_extensions
