"""Configuration exceptions: invalid options, paths and output formats."""

from pathlib import Path
from typing import Any, Iterable

from .base import CodegaugeError


class ConfigurationError(CodegaugeError):
    """Base class for configuration errors. Always fatal to a run."""

    pass


class InvalidPathError(ConfigurationError):
    """Raised when a provided path is invalid."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid path: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class UnsupportedFormatError(ConfigurationError):
    """Raised when a report format is not one of the known formats."""

    def __init__(self, fmt: Any, supported: Iterable[str]):
        supported = sorted(supported)
        super().__init__(
            f"Unknown report format: {fmt!r}",
            details={"format": str(fmt), "supported": ", ".join(supported)},
        )
        self.format = fmt
        self.supported = supported
