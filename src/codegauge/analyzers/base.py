"""Protocol shared by the per-file analyzers.

The analyzer set is closed: ``FileAnalysisPipeline`` wires one instance of
each kind in a fixed order, and each declares its input and output types
through the ``Analyzer`` protocol rather than being looked up at runtime.
"""

from typing import NamedTuple, Protocol, TypeVar

from .models import AstMetrics, BasicMetrics, ComplexityMetric

InputT = TypeVar("InputT", contravariant=True)
OutputT = TypeVar("OutputT", covariant=True)


class Analyzer(Protocol[InputT, OutputT]):
    """Analyzers are pure functions of their input."""

    name: str

    def analyze(self, subject: InputT) -> OutputT: ...


class QualityInput(NamedTuple):
    """Everything the quality rules look at for one file."""

    basic: BasicMetrics
    ast: AstMetrics
    complexity: tuple[ComplexityMetric, ...]
