"""Per-file analyzers: basic, AST, complexity and quality."""

from .ast_analyzer import ASTAnalyzer
from .base import Analyzer, QualityInput
from .basic import BasicAnalyzer
from .complexity import ComplexityAnalyzer, maintainability_index
from .models import (
    AstMetrics,
    BasicMetrics,
    ComplexityMetric,
    FunctionInfo,
    HalsteadMetrics,
    Issue,
    Location,
    QualityMetrics,
    Severity,
    grade_for,
)
from .quality import QualityAnalyzer

__all__ = [
    "Analyzer",
    "QualityInput",
    "ASTAnalyzer",
    "BasicAnalyzer",
    "ComplexityAnalyzer",
    "QualityAnalyzer",
    "maintainability_index",
    "AstMetrics",
    "BasicMetrics",
    "ComplexityMetric",
    "FunctionInfo",
    "HalsteadMetrics",
    "Issue",
    "Location",
    "QualityMetrics",
    "Severity",
    "grade_for",
]
