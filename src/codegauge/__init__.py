"""
codegauge - static quality and complexity analysis for JavaScript and TypeScript.
"""

__version__ = "0.1.0"

from .api import analyze, generate_report
from .cache import AnalysisCache
from .config import AnalysisConfig, load_config
from .core import FileAnalysisResult, ProjectAnalysisResult, ProjectAnalyzer
from .exceptions import (
    CacheError,
    CodegaugeError,
    ConfigurationError,
    ParseError,
)
from .formatters import ReportFormat, ReportGenerator
from .scanning import FileParser

__all__ = [
    "__version__",
    "analyze",
    "generate_report",
    "AnalysisCache",
    "AnalysisConfig",
    "load_config",
    "FileAnalysisResult",
    "ProjectAnalysisResult",
    "ProjectAnalyzer",
    "CodegaugeError",
    "ConfigurationError",
    "CacheError",
    "ParseError",
    "ReportFormat",
    "ReportGenerator",
    "FileParser",
]
