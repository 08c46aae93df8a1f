"""Exception hierarchy for codegauge."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    ParseError,
    UnsupportedLanguageError,
)
from .base import CodegaugeError
from .cache import CacheError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
    UnsupportedFormatError,
)

__all__ = [
    "CodegaugeError",
    "AnalysisError",
    "FileAccessError",
    "ParseError",
    "UnsupportedLanguageError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
    "UnsupportedFormatError",
    "CacheError",
]
