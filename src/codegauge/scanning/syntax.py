"""Syntax tree models.

A SyntaxTree is a flat, immutable copy of a tree-sitter parse: nodes are
addressed by integer id (their pre-order index) and refer to each other by
id only, so trees can be pickled, compared and shared between threads
without holding on to tree-sitter objects.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional


class Token(NamedTuple):
    """A leaf token, classified for Halstead counting.

    String, template and regex literals are single operands; closing
    brackets are not recorded, so a bracket pair is one operator.
    """

    line: int
    column: int
    operand: bool
    text: str


def _position(token: Token) -> tuple[int, int]:
    return token.line, token.column


@dataclass(frozen=True)
class SyntaxNode:
    """One node of a syntax tree.

    Attributes:
        id: Pre-order index, equal to the node's position in SyntaxTree.nodes
        type: Grammar node type (e.g. "if_statement")
        parent: Parent node id, None for the root
        children: Child node ids in source order (named children only)
        field: Grammar field name under the parent (e.g. "condition")
        operator: Operator token for binary, unary, update and assignment nodes
        keyword: Declaration keyword (var, let, const) for declarations and for-in/of loops
        text: Source text for leaf nodes (identifiers, literals)
        start_line: 1-indexed start line
        start_column: 0-indexed start column
        end_line: 1-indexed end line
        end_column: 0-indexed end column
    """

    id: int
    type: str
    parent: Optional[int]
    children: tuple[int, ...]
    field: Optional[str]
    operator: Optional[str]
    keyword: Optional[str]
    text: Optional[str]
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @property
    def line_span(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class SyntaxTree:
    """A parsed file.

    Attributes:
        path: Project-relative path of the source file
        language: Grammar used ("javascript", "typescript", "tsx")
        nodes: Flat node index; ``nodes[0]`` is the root ``program`` node
        line_count: Number of lines in the source text
        token_count: Number of non-comment leaf tokens
        tokens: Operator and operand tokens in document order
    """

    path: str
    language: str
    nodes: tuple[SyntaxNode, ...]
    line_count: int
    token_count: int
    tokens: tuple[Token, ...] = ()

    @property
    def root(self) -> SyntaxNode:
        return self.nodes[0]

    def node(self, node_id: int) -> SyntaxNode:
        return self.nodes[node_id]

    def children(self, node: SyntaxNode) -> Iterator[SyntaxNode]:
        for child_id in node.children:
            yield self.nodes[child_id]

    def child_by_field(self, node: SyntaxNode, field: str) -> Optional[SyntaxNode]:
        for child_id in node.children:
            child = self.nodes[child_id]
            if child.field == field:
                return child
        return None

    def parent(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        if node.parent is None:
            return None
        return self.nodes[node.parent]

    def descendants(self, node: SyntaxNode) -> Iterator[SyntaxNode]:
        """Nodes under ``node`` in pre-order, excluding ``node`` itself."""
        stack = list(reversed(node.children))
        while stack:
            current = self.nodes[stack.pop()]
            yield current
            stack.extend(reversed(current.children))

    def tokens_within(self, node: SyntaxNode) -> tuple[Token, ...]:
        """Tokens inside the source span of ``node``."""
        lo = bisect_left(self.tokens, (node.start_line, node.start_column), key=_position)
        hi = bisect_left(self.tokens, (node.end_line, node.end_column), key=_position)
        return self.tokens[lo:hi]
