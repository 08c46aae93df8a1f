"""ComplexityAnalyzer: cyclomatic and cognitive complexity per function.

Each function body is walked top-down once, with both counters starting
fresh at the function boundary. Nested function bodies are not entered;
they get their own entry.
Each entry also carries Halstead measures over the tokens of the whole
function, nested functions included.

Cyclomatic complexity (McCabe): 1 plus one per decision point, namely
``if`` (each ``else if`` too), each loop kind, each non-default ``case``,
``catch``, the ternary operator and each ``&&``, ``||`` or ``??``.

Cognitive complexity follows the SonarSource rules:
    - ``if``, ternary, ``switch``, loops and ``catch`` add 1 plus the
      current nesting level, and raise the nesting level for their bodies
    - ``else if`` and ``else`` add a flat 1
    - each run of identical logical operators adds 1
      (``a && b && c`` is 1, ``a && b || c`` is 2)
    - labelled ``break``/``continue`` add 1
    - straight-line code adds nothing
"""

from __future__ import annotations

import math
from typing import Optional

from ..scanning.syntax import SyntaxNode, SyntaxTree
from .ast_analyzer import FUNCTION_TYPES
from .models import AstMetrics, BasicMetrics, ComplexityMetric, HalsteadMetrics

LOOP_TYPES = frozenset({"for_statement", "for_in_statement", "while_statement", "do_statement"})
LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})
LOGICAL_ASSIGNMENT_OPERATORS = frozenset({"&&=", "||=", "??="})

# Maintainability index constants
MI_BASE = 171.0
MI_VOLUME_COEFFICIENT = 5.2
MI_CYCLOMATIC_COEFFICIENT = 0.23
MI_LINES_COEFFICIENT = 16.2


def _logical_parent_operator(tree: SyntaxTree, node: SyntaxNode) -> Optional[str]:
    parent = tree.parent(node)
    while parent is not None and parent.type == "parenthesized_expression":
        parent = tree.parent(parent)
    if parent is not None and parent.type == "binary_expression":
        return parent.operator
    return None


def cyclomatic_increment(node: SyntaxNode) -> int:
    kind = node.type
    if kind == "if_statement" or kind in LOOP_TYPES:
        return 1
    if kind in ("switch_case", "catch_clause", "ternary_expression"):
        return 1
    if kind == "binary_expression" and node.operator in LOGICAL_OPERATORS:
        return 1
    if kind == "augmented_assignment_expression" and node.operator in LOGICAL_ASSIGNMENT_OPERATORS:
        return 1
    return 0


def function_complexity(tree: SyntaxTree, function_node: SyntaxNode) -> tuple[int, int]:
    """Return (cyclomatic, cognitive) for one function node."""
    body = tree.child_by_field(function_node, "body")
    if body is None:
        return 1, 0

    cyclomatic = 1
    cognitive = 0
    stack: list[tuple[SyntaxNode, int]] = [(body, 0)]

    while stack:
        node, nesting = stack.pop()
        if node.type in FUNCTION_TYPES:
            continue

        cyclomatic += cyclomatic_increment(node)
        kind = node.type
        parent = tree.parent(node)
        nested_fields: tuple[str, ...] = ()
        nest_all = False

        if kind == "if_statement":
            if parent is not None and parent.type == "else_clause":
                cognitive += 1
            else:
                cognitive += 1 + nesting
            nested_fields = ("consequence",)
        elif kind == "else_clause":
            # An else-if chain continues at the same level; a plain else nests.
            branch = tree.node(node.children[0]) if node.children else None
            if branch is not None and branch.type != "if_statement":
                cognitive += 1
                nest_all = True
        elif kind == "ternary_expression":
            cognitive += 1 + nesting
            nested_fields = ("consequence", "alternative")
        elif kind == "switch_statement":
            cognitive += 1 + nesting
            nested_fields = ("body",)
        elif kind in LOOP_TYPES:
            cognitive += 1 + nesting
            nested_fields = ("body",)
        elif kind == "catch_clause":
            cognitive += 1 + nesting
            nested_fields = ("body",)
        elif kind == "binary_expression" and node.operator in LOGICAL_OPERATORS:
            if _logical_parent_operator(tree, node) != node.operator:
                cognitive += 1
        elif kind in ("break_statement", "continue_statement"):
            if tree.child_by_field(node, "label") is not None:
                cognitive += 1

        for child in reversed(node.children):
            child_node = tree.node(child)
            level = nesting + 1 if nest_all or child_node.field in nested_fields else nesting
            stack.append((child_node, level))

    return cyclomatic, cognitive


class ComplexityAnalyzer:
    """Analyzer[AstMetrics, tuple[ComplexityMetric, ...]]."""

    name = "complexity"

    def analyze(self, subject: AstMetrics) -> tuple[ComplexityMetric, ...]:
        tree = subject.tree
        if tree is None:
            raise ValueError("Complexity analysis needs AstMetrics with its syntax tree attached")

        metrics = []
        for fn in subject.functions:
            node = tree.node(fn.node_id)
            cyclomatic, cognitive = function_complexity(tree, node)
            metrics.append(
                ComplexityMetric(
                    function_id=fn.function_id,
                    name=fn.qualified_name,
                    line=fn.start_line,
                    cyclomatic_complexity=cyclomatic,
                    cognitive_complexity=cognitive,
                    nesting_depth=fn.nesting_depth,
                    body_lines=fn.body_lines,
                    halstead=HalsteadMetrics.from_tokens(tree.tokens_within(node)),
                )
            )
        return tuple(metrics)


def maintainability_index(
    basic: BasicMetrics, ast: AstMetrics, metrics: tuple[ComplexityMetric, ...]
) -> float:
    """File-level maintainability index, clamped to [0, 100].

    MI = 171 - 5.2 ln(V) - 0.23 CC - 16.2 ln(LOC), where V is the file's
    Halstead volume, CC the
    summed cyclomatic complexity and LOC the code line count.
    """
    loc = basic.code_lines
    if loc == 0:
        return 100.0
    volume = ast.halstead.volume
    cyclomatic = sum(m.cyclomatic_complexity for m in metrics) or 1
    mi = (
        MI_BASE
        - MI_VOLUME_COEFFICIENT * math.log(max(volume, 1.0))
        - MI_CYCLOMATIC_COEFFICIENT * cyclomatic
        - MI_LINES_COEFFICIENT * math.log(loc)
    )
    return round(max(0.0, min(100.0, mi)), 2)
