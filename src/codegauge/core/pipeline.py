"""Per-file analysis pipeline: parse, then the fixed analyzer sequence."""

from typing import Callable, Optional

from ..analyzers import (
    ASTAnalyzer,
    BasicAnalyzer,
    ComplexityAnalyzer,
    QualityAnalyzer,
    QualityInput,
    maintainability_index,
)
from ..config import AnalysisConfig
from ..logging_config import get_logger
from ..scanning.parser import FileParser
from ..scanning.source import SourceFile
from .models import FileAnalysisResult

logger = get_logger(__name__)


class FileAnalysisPipeline:
    """Runs FileParser → Basic/AST → Complexity → Quality on one file.

    Stateless between files, so one instance serves every worker.
    """

    def __init__(self, parser: FileParser, config: AnalysisConfig):
        self.parser = parser
        self.basic = BasicAnalyzer()
        self.ast = ASTAnalyzer()
        self.complexity = ComplexityAnalyzer()
        self.quality = QualityAnalyzer.from_config(config)

    def run(
        self, source: SourceFile, on_parsed: Optional[Callable[[], None]] = None
    ) -> FileAnalysisResult:
        """Analyze one file.

        Raises:
            ParseError: If the source is not syntactically valid
        """
        tree = self.parser.parse_source(source)
        if on_parsed is not None:
            on_parsed()

        basic = self.basic.analyze(source)
        ast = self.ast.analyze(tree)
        complexity = self.complexity.analyze(ast)
        quality = self.quality.analyze(QualityInput(basic, ast, complexity))

        result = FileAnalysisResult(
            path=source.path,
            fingerprint=source.fingerprint,
            language=tree.language,
            basic=basic,
            ast=ast.detached(),
            complexity=complexity,
            maintainability_index=maintainability_index(basic, ast, complexity),
            quality=quality,
        )
        logger.debug(
            f"Analyzed {source.path}: score={quality.score} issues={len(quality.issues)}"
        )
        return result
