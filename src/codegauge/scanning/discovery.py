"""File enumeration under a project root.

Walks the tree in sorted order so the selected file list, and everything
derived from it, is the same on every run. Excluded directories are pruned
and reported once rather than file by file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath

from ..logging_config import get_logger
from .treesitter_parser import EXTENSION_LANGUAGES

logger = get_logger(__name__)

SKIP_EXCLUDED = "excluded"
SKIP_UNSUPPORTED = "unsupported"
SKIP_TOO_LARGE = "too_large"
SKIP_LIMIT = "file_limit"
SKIP_UNREADABLE = "unreadable"


@dataclass(frozen=True)
class SkippedFile:
    """A file or directory left out of the run, with the reason."""

    path: str
    reason: str


@dataclass(frozen=True)
class Discovery:
    """Result of enumerating a project root."""

    files: tuple[str, ...]
    skipped: tuple[SkippedFile, ...]


def matches_pattern(rel_path: str, pattern: str) -> bool:
    """Match a project-relative POSIX path against a glob pattern.

    ``dir/*`` and ``dir/**`` match anything below a directory called
    ``dir`` at any depth. Other patterns match either the whole relative
    path or the file name.
    """
    pure = PurePosixPath(rel_path)
    if pattern.endswith("/*") or pattern.endswith("/**"):
        dir_pattern = pattern.rstrip("*").rstrip("/")
        parents = pure.parts[:-1]
        for i in range(len(parents)):
            if fnmatchcase(parents[i], dir_pattern):
                return True
            if fnmatchcase("/".join(parents[: i + 1]), dir_pattern):
                return True
        return False
    return fnmatchcase(rel_path, pattern) or fnmatchcase(pure.name, pattern)


def is_excluded(rel_path: str, exclude_patterns: tuple[str, ...]) -> bool:
    return any(matches_pattern(rel_path, pattern) for pattern in exclude_patterns)


def _is_excluded_dir(rel_dir: str, exclude_patterns: tuple[str, ...]) -> bool:
    # A directory is pruned when any file inside it would be excluded.
    return is_excluded(rel_dir + "/_", exclude_patterns)


def discover_files(
    root: Path,
    include_patterns: tuple[str, ...],
    exclude_patterns: tuple[str, ...],
    max_file_size_bytes: int,
    max_files: int,
) -> Discovery:
    """
    Enumerate candidate source files under ``root``.

    A file is selected when it matches an include pattern, no exclude
    pattern, has a supported extension, and fits the size limit. Files
    that match no include pattern are not reported at all.

    Args:
        root: Project root directory
        include_patterns: Globs a file must match
        exclude_patterns: Globs that skip a file or directory
        max_file_size_bytes: Larger files are skipped
        max_files: Files beyond this count are skipped

    Returns:
        Discovery with selected relative paths and skipped entries
    """
    root = Path(root)
    if root.is_file():
        rel = root.name
        if root.suffix.lower() not in EXTENSION_LANGUAGES:
            return Discovery(files=(), skipped=(SkippedFile(rel, SKIP_UNSUPPORTED),))
        return Discovery(files=(rel,), skipped=())

    selected: list[str] = []
    skipped: list[SkippedFile] = []

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir

        kept_dirs = []
        for name in sorted(dirnames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if _is_excluded_dir(rel, exclude_patterns):
                skipped.append(SkippedFile(rel + "/", SKIP_EXCLUDED))
                logger.debug(f"Skipped (pattern): {rel}/")
            else:
                kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for name in sorted(filenames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if not any(matches_pattern(rel, pattern) for pattern in include_patterns):
                continue
            if is_excluded(rel, exclude_patterns):
                skipped.append(SkippedFile(rel, SKIP_EXCLUDED))
                logger.debug(f"Skipped (pattern): {rel}")
                continue
            if PurePosixPath(name).suffix.lower() not in EXTENSION_LANGUAGES:
                skipped.append(SkippedFile(rel, SKIP_UNSUPPORTED))
                logger.debug(f"Skipped (unsupported): {rel}")
                continue
            try:
                size = (Path(dirpath) / name).stat().st_size
            except OSError as e:
                skipped.append(SkippedFile(rel, SKIP_UNREADABLE))
                logger.warning(f"Cannot stat {rel}: {e}")
                continue
            if size > max_file_size_bytes:
                skipped.append(SkippedFile(rel, SKIP_TOO_LARGE))
                logger.debug(f"Skipped (size): {rel} ({size} bytes)")
                continue
            selected.append(rel)

    selected.sort()
    if len(selected) > max_files:
        logger.warning(f"Reached max files limit ({max_files})")
        skipped.extend(SkippedFile(rel, SKIP_LIMIT) for rel in selected[max_files:])
        selected = selected[:max_files]

    skipped.sort(key=lambda s: (s.path, s.reason))
    return Discovery(files=tuple(selected), skipped=tuple(skipped))
