"""Result models produced by the per-file analyzers.

Every model is a frozen dataclass over tuples so results can be cached,
pickled and shared between worker threads without copying.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional

from ..scanning.syntax import SyntaxTree, Token


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


GRADE_BOUNDARIES = ((90.0, "A"), (75.0, "B"), (60.0, "C"), (40.0, "D"))


def grade_for(score: float) -> str:
    """Letter grade for a score in [0, 100]."""
    for minimum, grade in GRADE_BOUNDARIES:
        if score >= minimum:
            return grade
    return "F"


# ── Basic (lexical) ──────────────────────────────────────────────


@dataclass(frozen=True)
class NamingStats:
    """Declared identifier counts by naming convention."""

    camel_case: int = 0
    pascal_case: int = 0
    snake_case: int = 0
    upper_case: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.camel_case + self.pascal_case + self.snake_case + self.upper_case + self.other


@dataclass(frozen=True)
class BasicMetrics:
    """Line-level facts computed from raw text.

    ``code_lines + comment_lines + blank_lines == total_lines``; a line
    holding both code and a comment counts as code.
    """

    total_lines: int
    code_lines: int
    comment_lines: int
    blank_lines: int
    longest_line_length: int
    longest_line_number: int
    average_line_length: float
    comment_ratio: float
    todo_count: int
    naming: NamingStats


# ── Halstead ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class HalsteadMetrics:
    """Halstead software-science measures over a token stream.

    Attributes:
        distinct_operators: n1
        distinct_operands: n2
        total_operators: N1
        total_operands: N2
        vocabulary: n1 + n2
        length: N1 + N2
        volume: length * log2(vocabulary)
        difficulty: (n1 / 2) * (N2 / n2)
        effort: difficulty * volume
        time: Estimated seconds to write, effort / 18
        bugs: Estimated delivered bugs, volume / 3000
    """

    distinct_operators: int = 0
    distinct_operands: int = 0
    total_operators: int = 0
    total_operands: int = 0
    vocabulary: int = 0
    length: int = 0
    volume: float = 0.0
    difficulty: float = 0.0
    effort: float = 0.0
    time: float = 0.0
    bugs: float = 0.0

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token]) -> HalsteadMetrics:
        operators: list[str] = []
        operands: list[str] = []
        for token in tokens:
            (operands if token.operand else operators).append(token.text)
        if not operators and not operands:
            return cls()

        n1, n2 = len(set(operators)), len(set(operands))
        total1, total2 = len(operators), len(operands)
        vocabulary = n1 + n2
        length = total1 + total2
        volume = length * math.log2(vocabulary) if vocabulary > 1 else 0.0
        difficulty = (n1 / 2) * (total2 / n2) if n2 else 0.0
        effort = difficulty * volume
        return cls(
            distinct_operators=n1,
            distinct_operands=n2,
            total_operators=total1,
            total_operands=total2,
            vocabulary=vocabulary,
            length=length,
            volume=round(volume, 2),
            difficulty=round(difficulty, 2),
            effort=round(effort, 2),
            time=round(effort / 18, 2),
            bugs=round(volume / 3000, 4),
        )


# ── AST ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FunctionInfo:
    """A function, method or arrow function found in the tree.

    Attributes:
        function_id: ``qualified_name:line:column``, unique within a file
        node_id: Id of the function node in the SyntaxTree
        name: Declared or inferred name, ``<anonymous>`` if none
        qualified_name: ``Class.method`` for methods, else ``name``
        kind: Node type (function_declaration, arrow_function, ...)
        class_name: Enclosing class for methods and class fields
        start_line: 1-indexed first line of the function
        end_line: 1-indexed last line of the function
        column: 0-indexed start column
        end_column: 0-indexed end column on ``end_line``
        param_count: Number of declared parameters
        body_lines: Line span of the body
        nesting_depth: Deepest block nesting inside the body
        node_count: Syntax nodes in the body
        structure_hash: Hash of the body's node-type sequence
    """

    function_id: str
    node_id: int
    name: str
    qualified_name: str
    kind: str
    class_name: Optional[str]
    start_line: int
    end_line: int
    column: int
    end_column: int
    param_count: int
    body_lines: int
    nesting_depth: int
    node_count: int
    structure_hash: str


@dataclass(frozen=True)
class ClassInfo:
    name: str
    line: int
    superclass: Optional[str]
    method_count: int


@dataclass(frozen=True)
class SymbolDecl:
    """A declared binding; ``symbol_id`` is its index in AstMetrics.declarations."""

    symbol_id: int
    name: str
    kind: str
    line: int
    scope_id: int


@dataclass(frozen=True)
class Reference:
    """An identifier use; ``symbol_id`` is None when it resolves to nothing."""

    name: str
    line: int
    column: int
    symbol_id: Optional[int]

    @property
    def resolved(self) -> bool:
        return self.symbol_id is not None


@dataclass(frozen=True)
class ImportRef:
    """A module specifier from ``import``, ``export ... from`` or ``require()``."""

    source: str
    line: int
    kind: str

    @property
    def is_relative(self) -> bool:
        return self.source.startswith(".") or self.source.startswith("/")


@dataclass(frozen=True)
class NumericLiteral:
    """A numeric literal, with unary minus folded into the value."""

    value: float
    raw: str
    line: int
    column: int
    end_column: int
    in_declaration: bool
    function_id: Optional[str]


@dataclass(frozen=True)
class AstMetrics:
    """Structural facts from a single walk over a SyntaxTree.

    ``tree`` is a non-owning reference kept only for the complexity pass;
    it is excluded from comparisons and dropped by ``detached()`` before
    results are stored.
    """

    path: str
    language: str
    node_count: int
    functions: tuple[FunctionInfo, ...]
    classes: tuple[ClassInfo, ...]
    nesting: tuple[int, ...]
    max_nesting_depth: int
    declarations: tuple[SymbolDecl, ...]
    references: tuple[Reference, ...]
    imports: tuple[ImportRef, ...]
    numeric_literals: tuple[NumericLiteral, ...]
    control_flow: tuple[tuple[str, int], ...]
    halstead: HalsteadMetrics
    tree: Optional[SyntaxTree] = field(default=None, compare=False, repr=False)

    @property
    def unresolved_references(self) -> tuple[Reference, ...]:
        return tuple(r for r in self.references if r.symbol_id is None)

    def detached(self) -> AstMetrics:
        """Copy without the syntax tree reference."""
        if self.tree is None:
            return self
        return replace(self, tree=None)


# ── Complexity ───────────────────────────────────────────────────


@dataclass(frozen=True)
class ComplexityMetric:
    """Per-function complexity. ``cyclomatic_complexity`` is always >= 1."""

    function_id: str
    name: str
    line: int
    cyclomatic_complexity: int
    cognitive_complexity: int
    nesting_depth: int
    body_lines: int
    halstead: HalsteadMetrics = field(default_factory=HalsteadMetrics)


# ── Quality ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    file: str
    line: int
    column: int
    end_line: int
    end_column: int


@dataclass(frozen=True)
class Issue:
    """A single rule violation."""

    rule_id: str
    severity: Severity
    location: Location
    message: str
    function_id: Optional[str] = None

    @property
    def sort_key(self) -> tuple:
        return (self.location.line, self.location.column, self.rule_id, self.message)

    def relocated(self, path: str) -> Issue:
        return replace(self, location=replace(self.location, file=path))


@dataclass(frozen=True)
class QualityMetrics:
    """Composite score in [0, 100] with the issues that produced it."""

    score: float
    grade: str
    issues: tuple[Issue, ...]
    rule_counts: tuple[tuple[str, int], ...]
    penalty_total: float
