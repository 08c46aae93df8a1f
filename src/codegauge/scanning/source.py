"""Reading source files into immutable SourceFile values."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import FileAccessError

BOM = "\ufeff"


@dataclass(frozen=True)
class SourceFile:
    """A source file as read from disk.

    Attributes:
        path: Path relative to the project root, with forward slashes
        absolute_path: Resolved filesystem path
        text: Decoded text, BOM removed, line endings normalized to LF
        fingerprint: SHA-256 of ``text``
        mtime: Last-modified timestamp at read time
        size_bytes: Size of the raw file
    """

    path: str
    absolute_path: str
    text: str
    fingerprint: str
    mtime: float = 0.0
    size_bytes: int = 0

    @property
    def extension(self) -> str:
        return Path(self.path).suffix.lower()

    @property
    def lines(self) -> list[str]:
        """Lines of ``text``; a trailing newline does not start a new line."""
        return split_lines(self.text)

    @classmethod
    def from_text(cls, path: str, text: str, mtime: float = 0.0) -> SourceFile:
        """Build a SourceFile from in-memory text."""
        normalized = normalize_text(text)
        return cls(
            path=path,
            absolute_path=path,
            text=normalized,
            fingerprint=compute_fingerprint(normalized),
            mtime=mtime,
            size_bytes=len(text.encode("utf-8")),
        )


def normalize_text(text: str) -> str:
    """Strip a leading BOM and convert CRLF/CR line endings to LF."""
    if text.startswith(BOM):
        text = text[1:]
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_lines(text: str) -> list[str]:
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def compute_fingerprint(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def relative_path(filepath: Path, root: Optional[Path]) -> str:
    """Project-relative POSIX path, or the path itself outside ``root``."""
    if root is not None:
        try:
            return filepath.resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            pass
    return filepath.as_posix()


def read_source(
    filepath: Path, root: Optional[Path] = None, max_bytes: Optional[int] = None
) -> SourceFile:
    """
    Read a file into a new SourceFile.

    Args:
        filepath: File to read
        root: Project root used to compute the relative path
        max_bytes: Reject files larger than this

    Returns:
        SourceFile value

    Raises:
        FileAccessError: If the file is missing, too large, or not UTF-8
    """
    filepath = Path(filepath)
    try:
        stat = filepath.stat()
        if max_bytes is not None and stat.st_size > max_bytes:
            raise FileAccessError(
                filepath, f"File size {stat.st_size} exceeds limit of {max_bytes} bytes"
            )
        raw = filepath.read_bytes()
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")

    try:
        decoded = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FileAccessError(filepath, f"Encoding error: {e}")

    text = normalize_text(decoded)
    return SourceFile(
        path=relative_path(filepath, root),
        absolute_path=str(filepath.resolve()),
        text=text,
        fingerprint=compute_fingerprint(text),
        mtime=stat.st_mtime,
        size_bytes=stat.st_size,
    )
