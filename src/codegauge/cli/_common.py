"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import DEFAULT_CACHE_DIR, AnalysisConfig, load_config

# Reports go to stdout; everything else goes here.
console = Console(stderr=True)

EXIT_OK = 0
EXIT_FAILED_FILES = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def resolve_config(
    config: Optional[Path] = None,
    fmt: Optional[str] = None,
    no_cache: bool = False,
    cache_dir: Optional[Path] = None,
    workers: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> AnalysisConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if fmt is not None:
        overrides["output_format"] = fmt
    if no_cache:
        overrides["cache_enabled"] = False
    if cache_dir is not None:
        overrides["cache_path"] = str(cache_dir)
    if workers is not None:
        overrides["workers"] = workers
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def cache_directory(config: AnalysisConfig) -> str:
    """The CLI persists its cache even when no ``cache_path`` is configured."""
    return config.cache_path or DEFAULT_CACHE_DIR
