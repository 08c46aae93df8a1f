"""FileParser: source files to immutable SyntaxTrees.

Parsing is all-or-nothing. tree-sitter always produces a tree, recovering
from errors with ERROR and MISSING nodes; any such node turns the whole
parse into a ParseError located at the first one in document order.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

from ..exceptions import ParseError, UnsupportedLanguageError
from ..logging_config import get_logger
from .source import SourceFile, read_source, split_lines
from .syntax import SyntaxNode, SyntaxTree, Token
from .treesitter_parser import TreeSitterParser, get_supported_extensions

logger = get_logger(__name__)

COMMENT_TYPES = frozenset({"comment", "html_comment"})
# Counted as one operand each, without their inner tokens.
LITERAL_OPERAND_TYPES = frozenset({"string", "template_string", "regex"})
CLOSING_BRACKETS = frozenset({")", "]", "}"})


class FileParser:
    """Reads and parses JavaScript/TypeScript files.

    Holds no per-file state; one instance is shared by all workers of a
    run. ``parse_count`` counts successful and failed parse attempts.
    """

    def __init__(
        self,
        root: Optional[Path] = None,
        max_file_size_bytes: Optional[int] = None,
        backend: Optional[TreeSitterParser] = None,
    ):
        self.root = Path(root) if root is not None else None
        self.max_file_size_bytes = max_file_size_bytes
        self._backend = backend or TreeSitterParser()
        self._count_lock = threading.Lock()
        self._parse_count = 0

    @property
    def parse_count(self) -> int:
        return self._parse_count

    def supports(self, path: str | Path) -> bool:
        return self._backend.language_for(path) is not None

    def read(self, path: str | Path) -> SourceFile:
        """Read a file relative to this parser's root."""
        return read_source(Path(path), self.root, self.max_file_size_bytes)

    def parse(self, path: str | Path) -> SyntaxTree:
        """
        Read and parse one file.

        Raises:
            FileAccessError: If the file cannot be read
            UnsupportedLanguageError: If the extension has no grammar
            ParseError: If the source is not syntactically valid
        """
        return self.parse_source(self.read(path))

    def parse_source(self, source: SourceFile) -> SyntaxTree:
        """Parse an already-read SourceFile."""
        language = self._backend.language_for(source.path)
        if language is None:
            raise UnsupportedLanguageError(Path(source.path), get_supported_extensions())

        with self._count_lock:
            self._parse_count += 1

        code = source.text.encode("utf-8")
        ts_tree = self._backend.parse(code, language)
        columns = _ColumnMapper(code)

        root = ts_tree.root_node
        if root.has_error:
            bad = _first_error(root)
            row, col = bad.start_point
            raise ParseError(source.path, row + 1, columns(row, col), _error_reason(bad))

        tree = build_syntax_tree(ts_tree, columns, source.path, language, len(split_lines(source.text)))
        logger.debug(f"Parsed {source.path}: {len(tree.nodes)} nodes, {tree.token_count} tokens")
        return tree


class _ColumnMapper:
    """Converts tree-sitter byte columns to character columns."""

    def __init__(self, code: bytes):
        self._lines = code.split(b"\n")
        self._ascii = [line.isascii() for line in self._lines]

    def __call__(self, row: int, byte_column: int) -> int:
        if row >= len(self._lines) or self._ascii[row]:
            return byte_column
        return len(self._lines[row][:byte_column].decode("utf-8", errors="ignore"))


def _first_error(root):
    """First ERROR or MISSING node in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            return node
        stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
    return root


def _error_reason(node) -> str:
    if node.is_missing:
        return f"missing '{node.type}'"
    snippet = (node.text or b"").decode("utf-8", errors="replace").strip().split("\n")[0]
    if not snippet:
        return "syntax error"
    if len(snippet) > 40:
        snippet = snippet[:40] + "..."
    return f"unexpected '{snippet}'"


def _token(node, columns, operand: bool) -> Token:
    row, col = node.start_point
    text = node.text.decode("utf-8", errors="replace") if operand else node.type
    return Token(row + 1, columns(row, col), operand, text)


def build_syntax_tree(ts_tree, columns, path: str, language: str, line_count: int) -> SyntaxTree:
    """Flatten a tree-sitter tree into a SyntaxTree.

    Keeps named nodes except comments; anonymous tokens only contribute
    their operator to the parent and their count to ``token_count``. Every
    leaf outside comments and literals also lands in ``tokens``.
    """
    types: list[str] = []
    parents: list[Optional[int]] = []
    fields: list[Optional[str]] = []
    operators: list[Optional[str]] = []
    keywords: list[Optional[str]] = []
    texts: list[Optional[str]] = []
    spans: list[tuple[int, int, int, int]] = []
    children: list[list[int]] = []
    token_count = 0
    tokens: list[Token] = []
    literal_depth: Optional[int] = None

    cursor = ts_tree.walk()
    # Record id of the nearest kept ancestor, one entry per cursor depth.
    parent_stack: list[Optional[int]] = []
    done = False
    while not done:
        node = cursor.node
        parent_id = parent_stack[-1] if parent_stack else None
        record_id = None

        if node.child_count == 0 and node.type not in COMMENT_TYPES:
            token_count += 1

        depth = len(parent_stack)
        if literal_depth is not None and depth <= literal_depth:
            literal_depth = None
        if literal_depth is None and node.type not in COMMENT_TYPES:
            if node.is_named and node.type in LITERAL_OPERAND_TYPES:
                literal_depth = depth
                tokens.append(_token(node, columns, operand=True))
            elif node.child_count == 0 and node.type not in CLOSING_BRACKETS:
                tokens.append(_token(node, columns, operand=node.is_named))

        if node.is_named and node.type not in COMMENT_TYPES:
            record_id = len(types)
            types.append(node.type)
            parents.append(parent_id)
            fields.append(cursor.field_name)
            operators.append(None)
            keywords.append(None)
            texts.append(node.text.decode("utf-8") if node.child_count == 0 else None)
            start_row, start_col = node.start_point
            end_row, end_col = node.end_point
            spans.append(
                (start_row + 1, columns(start_row, start_col), end_row + 1, columns(end_row, end_col))
            )
            children.append([])
            if parent_id is not None:
                children[parent_id].append(record_id)
        elif not node.is_named and cursor.field_name == "operator" and parent_id is not None:
            operators[parent_id] = node.type
        elif not node.is_named and cursor.field_name == "kind" and parent_id is not None:
            keywords[parent_id] = node.type

        if node.type not in COMMENT_TYPES and cursor.goto_first_child():
            parent_stack.append(record_id if record_id is not None else parent_id)
            continue

        while not cursor.goto_next_sibling():
            if not parent_stack:
                done = True
                break
            cursor.goto_parent()
            parent_stack.pop()

    nodes = tuple(
        SyntaxNode(
            id=i,
            type=types[i],
            parent=parents[i],
            children=tuple(children[i]),
            field=fields[i],
            operator=operators[i],
            keyword=keywords[i],
            text=texts[i],
            start_line=spans[i][0],
            start_column=spans[i][1],
            end_line=spans[i][2],
            end_column=spans[i][3],
        )
        for i in range(len(types))
    )
    return SyntaxTree(
        path=path,
        language=language,
        nodes=nodes,
        line_count=line_count,
        token_count=token_count,
        tokens=tuple(tokens),
    )
