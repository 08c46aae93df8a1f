"""Programmatic entry points."""

import threading
from pathlib import Path
from typing import Any, Optional, Union

from .cache import AnalysisCache
from .config import AnalysisConfig, load_config
from .core.models import ProjectAnalysisResult
from .core.project import ProjectAnalyzer
from .formatters import ReportFormat, ReportGenerator


def analyze(
    path: Union[str, Path] = ".",
    config_file: Optional[Path] = None,
    cancel_event: Optional[threading.Event] = None,
    cache: Optional[AnalysisCache] = None,
    progress=None,
    **overrides: Any,
) -> ProjectAnalysisResult:
    """
    Analyze a JavaScript/TypeScript project.

    Args:
        path: Project root directory or a single source file
        config_file: Optional TOML configuration file
        cancel_event: Set it to stop after the files in flight
        cache: Reuse a cache across calls; by default one is built from
            the configuration and closed afterwards
        progress: Optional rich Progress
        **overrides: Configuration overrides, e.g. ``workers=1``

    Raises:
        ConfigurationError: If the configuration or path is invalid
    """
    config = load_config(config_file, **overrides)
    owned = cache is None and config.cache_enabled
    if owned:
        cache = AnalysisCache.from_config(config)
    try:
        analyzer = ProjectAnalyzer(path, config, cache=cache)
        return analyzer.analyze(cancel_event=cancel_event, progress=progress)
    finally:
        if owned:
            cache.close()


def generate_report(
    result: ProjectAnalysisResult,
    fmt: Optional[Union[str, ReportFormat]] = None,
    config: Optional[AnalysisConfig] = None,
) -> str:
    """Serialize a result; ``fmt`` defaults to the config's output format, then text."""
    if fmt is None:
        fmt = config.output_format if config is not None else ReportFormat.TEXT
    return ReportGenerator().generate(result, fmt)
