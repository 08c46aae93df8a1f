"""ASTAnalyzer: structural facts from one walk over a SyntaxTree.

The walk is iterative with an explicit stack and carries, per node, its
block nesting depth, its lexical scope, the function that owns it and the
enclosing class. From that it builds:

    - the function and class inventory
    - the per-node nesting table (ancestors that open a block scope,
      counted from the nearest enclosing function)
    - declarations and references, resolved inner scope to outer once
      the walk is done; anything that does not resolve stays unresolved
    - module specifiers from import/export/require
    - numeric literals with their declaration context
    - Halstead measures over the whole token stream
"""

from __future__ import annotations

import hashlib
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from ..scanning.syntax import SyntaxNode, SyntaxTree
from .models import (
    AstMetrics,
    ClassInfo,
    FunctionInfo,
    HalsteadMetrics,
    ImportRef,
    NumericLiteral,
    Reference,
    SymbolDecl,
)

FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)
CLASS_TYPES = frozenset({"class_declaration", "class", "abstract_class_declaration"})
NESTING_TYPES = frozenset(
    {
        "if_statement",
        "for_statement",
        "for_in_statement",
        "while_statement",
        "do_statement",
        "switch_statement",
        "try_statement",
    }
)
SCOPE_TYPES = FUNCTION_TYPES | {
    "statement_block",
    "for_statement",
    "for_in_statement",
    "catch_clause",
    "class_body",
    "switch_body",
}
CONTROL_FLOW_TYPES = frozenset(
    NESTING_TYPES
    | {
        "switch_case",
        "catch_clause",
        "ternary_expression",
        "return_statement",
        "throw_statement",
        "break_statement",
        "continue_statement",
    }
)
DECLARATION_VALUE_PARENTS = frozenset(
    {"variable_declarator", "field_definition", "public_field_definition", "enum_assignment"}
)
BINDING_TYPES = frozenset({"identifier", "shorthand_property_identifier_pattern"})
REFERENCE_TYPES = frozenset({"identifier", "shorthand_property_identifier"})
# Pattern children that hold defaults, keys or types rather than bindings.
_NON_BINDING_FIELDS = {
    "assignment_pattern": ("right",),
    "object_assignment_pattern": ("right",),
    "pair_pattern": ("key",),
    "required_parameter": ("type", "value"),
    "optional_parameter": ("type", "value"),
}

ANONYMOUS = "<anonymous>"


def function_body(tree: SyntaxTree, node: SyntaxNode) -> Optional[SyntaxNode]:
    """Body of a function-like node; None for other nodes and overload signatures."""
    if node.type not in FUNCTION_TYPES:
        return None
    return tree.child_by_field(node, "body")


def is_else_if(tree: SyntaxTree, node: SyntaxNode) -> bool:
    if node.type != "if_statement":
        return False
    parent = tree.parent(node)
    return parent is not None and parent.type == "else_clause"


def node_text(tree: SyntaxTree, node: Optional[SyntaxNode]) -> Optional[str]:
    """Leaf text, or the concatenated leaf texts of a small subtree."""
    if node is None:
        return None
    if node.text is not None:
        return node.text
    parts = [n.text for n in tree.descendants(node) if n.text is not None]
    return "".join(parts) if parts else None


def string_value(tree: SyntaxTree, node: SyntaxNode) -> str:
    """Contents of a string literal without quotes."""
    if node.text is not None:
        return node.text.strip("'\"`")
    return "".join(c.text or "" for c in tree.children(node) if c.type == "string_fragment")


def parse_number(raw: str) -> float:
    """Numeric value of a JavaScript number literal."""
    text = raw.replace("_", "").lower()
    if text.endswith("n"):
        text = text[:-1]
    try:
        if text.startswith("0x"):
            return float(int(text[2:], 16))
        if text.startswith("0o"):
            return float(int(text[2:], 8))
        if text.startswith("0b"):
            return float(int(text[2:], 2))
        if len(text) > 1 and text.startswith("0") and text.isdigit():
            # Legacy octal unless a digit rules it out.
            return float(int(text, 8)) if all(c in "01234567" for c in text) else float(text)
        return float(text)
    except ValueError:
        return float("nan")


@dataclass
class _FunctionRecord:
    info_id: str
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
    body_id: int
    max_depth: int = 0


class _Walk:
    """Mutable state for one ASTAnalyzer run."""

    def __init__(self, tree: SyntaxTree):
        self.tree = tree
        self.nesting = [0] * len(tree.nodes)
        self.functions: list[_FunctionRecord] = []
        self.classes: list[ClassInfo] = []
        self.imports: list[ImportRef] = []
        self.numbers: list[NumericLiteral] = []
        self.control_flow: Counter[str] = Counter()

        self.scope_parent: list[Optional[int]] = []
        self.scope_is_function: list[bool] = []
        self.scope_symbols: list[dict[str, int]] = []
        self.declarations: list[SymbolDecl] = []
        self.declared_ids: set[int] = set()
        self.pending_refs: list[tuple[str, int, int, int]] = []

    # -- scopes --

    def _new_scope(self, parent: Optional[int], is_function: bool) -> int:
        self.scope_parent.append(parent)
        self.scope_is_function.append(is_function)
        self.scope_symbols.append({})
        return len(self.scope_parent) - 1

    def _function_scope(self, scope: int) -> int:
        current: Optional[int] = scope
        while current is not None:
            if self.scope_is_function[current] or self.scope_parent[current] is None:
                return current
            current = self.scope_parent[current]
        return 0

    def _declare(self, node: SyntaxNode, name: str, kind: str, scope: int) -> None:
        self.declared_ids.add(node.id)
        symbol_id = len(self.declarations)
        self.declarations.append(SymbolDecl(symbol_id, name, kind, node.start_line, scope))
        # Later declarations of the same name in one scope shadow earlier ones.
        self.scope_symbols[scope][name] = symbol_id

    def _declare_bindings(self, pattern: Optional[SyntaxNode], kind: str, scope: int) -> None:
        """Declare every identifier bound by a name or destructuring pattern."""
        if pattern is None:
            return
        tree = self.tree
        stack = [pattern]
        while stack:
            node = stack.pop()
            if node.type in BINDING_TYPES and node.text is not None:
                self._declare(node, node.text, kind, scope)
                continue
            if node.type == "type_annotation":
                continue
            skipped = _NON_BINDING_FIELDS.get(node.type, ())
            stack.extend(c for c in tree.children(node) if c.field not in skipped)

    # -- walk --

    def run(self) -> AstMetrics:
        tree = self.tree
        root_scope = self._new_scope(None, True)
        # (node id, nesting depth, scope, owning function index, class name)
        stack: list[tuple[int, int, int, Optional[int], Optional[str]]] = [
            (0, 0, root_scope, None, None)
        ]

        while stack:
            node_id, depth, scope, owner, class_name = stack.pop()
            node = tree.nodes[node_id]
            self.nesting[node_id] = depth
            if owner is not None:
                record = self.functions[owner]
                record.max_depth = max(record.max_depth, depth)

            child_depth, child_scope, child_owner, child_class = depth, scope, owner, class_name

            if node_id != 0 and node.type in SCOPE_TYPES:
                child_scope = self._new_scope(scope, node.type in FUNCTION_TYPES)

            body = function_body(tree, node)
            if body is not None:
                child_owner = self._add_function(node, body, class_name)
                child_depth = 0
                child_class = None
            elif node.type in NESTING_TYPES and not is_else_if(tree, node):
                child_depth = depth + 1

            if node.type in CLASS_TYPES:
                child_class = self._add_class(node, scope)

            if node.type in CONTROL_FLOW_TYPES:
                self.control_flow[node.type] += 1

            self._collect(node, scope, child_scope, owner)

            for child_id in reversed(node.children):
                stack.append((child_id, child_depth, child_scope, child_owner, child_class))

        return self._finish()

    def _add_function(
        self, node: SyntaxNode, body: SyntaxNode, class_name: Optional[str]
    ) -> int:
        tree = self.tree
        name = self._function_name(node)
        qualified = f"{class_name}.{name}" if class_name else name
        params = tree.child_by_field(node, "parameters")
        if params is not None:
            param_count = len(params.children)
        else:
            param_count = 1 if tree.child_by_field(node, "parameter") is not None else 0
        self.functions.append(
            _FunctionRecord(
                info_id=f"{qualified}:{node.start_line}:{node.start_column}",
                node_id=node.id,
                name=name,
                qualified_name=qualified,
                kind=node.type,
                class_name=class_name,
                start_line=node.start_line,
                end_line=node.end_line,
                column=node.start_column,
                end_column=node.end_column,
                param_count=param_count,
                body_id=body.id,
            )
        )
        return len(self.functions) - 1

    def _function_name(self, node: SyntaxNode) -> str:
        tree = self.tree
        name = node_text(tree, tree.child_by_field(node, "name"))
        if name:
            return name

        child, parent = node, tree.parent(node)
        while parent is not None and parent.type == "parenthesized_expression":
            child, parent = parent, tree.parent(parent)
        if parent is None:
            return ANONYMOUS

        if parent.type == "variable_declarator" and child.field == "value":
            target = tree.child_by_field(parent, "name")
            return (target.text if target is not None else None) or ANONYMOUS
        if parent.type == "pair" and child.field == "value":
            return node_text(tree, tree.child_by_field(parent, "key")) or ANONYMOUS
        if parent.type in ("assignment_expression", "augmented_assignment_expression") and (
            child.field == "right"
        ):
            left = tree.child_by_field(parent, "left")
            if left is not None and left.type == "member_expression":
                left = tree.child_by_field(left, "property")
            return node_text(tree, left) or ANONYMOUS
        if parent.type == "field_definition" and child.field == "value":
            return node_text(tree, tree.child_by_field(parent, "property")) or ANONYMOUS
        if parent.type == "public_field_definition" and child.field == "value":
            return node_text(tree, tree.child_by_field(parent, "name")) or ANONYMOUS
        return ANONYMOUS

    def _add_class(self, node: SyntaxNode, scope: int) -> str:
        tree = self.tree
        name_node = tree.child_by_field(node, "name")
        name = node_text(tree, name_node)
        if name_node is not None and name and node.type != "class":
            self._declare(name_node, name, "class", scope)
        if not name:
            parent = tree.parent(node)
            if parent is not None and parent.type == "variable_declarator":
                name = node_text(tree, tree.child_by_field(parent, "name"))
        name = name or ANONYMOUS

        superclass = None
        for child in tree.children(node):
            if child.type == "class_heritage":
                for candidate in tree.descendants(child):
                    if candidate.type in ("identifier", "type_identifier") and candidate.text:
                        superclass = candidate.text
                        break
                break

        body = tree.child_by_field(node, "body")
        method_count = 0
        if body is not None:
            method_count = sum(1 for c in tree.children(body) if c.type == "method_definition")

        self.classes.append(ClassInfo(name, node.start_line, superclass, method_count))
        return name

    def _collect(self, node: SyntaxNode, scope: int, child_scope: int, owner: Optional[int]) -> None:
        """Declarations, references, imports and literals for one node."""
        tree = self.tree
        kind = node.type

        if kind == "variable_declarator":
            parent = tree.parent(node)
            keyword = parent.keyword if parent is not None else None
            if parent is not None and parent.type == "variable_declaration":
                keyword = "var"
            target = self._function_scope(scope) if keyword == "var" else scope
            self._declare_bindings(tree.child_by_field(node, "name"), keyword or "variable", target)

        elif kind in ("function_declaration", "generator_function_declaration"):
            name_node = tree.child_by_field(node, "name")
            if name_node is not None and name_node.text:
                self._declare(name_node, name_node.text, "function", scope)

        elif kind in ("function_expression", "function", "generator_function"):
            name_node = tree.child_by_field(node, "name")
            if name_node is not None and name_node.text:
                self._declare(name_node, name_node.text, "function", child_scope)

        elif kind == "catch_clause":
            self._declare_bindings(tree.child_by_field(node, "parameter"), "parameter", child_scope)

        elif kind == "for_in_statement" and node.keyword:
            target = self._function_scope(child_scope) if node.keyword == "var" else child_scope
            self._declare_bindings(tree.child_by_field(node, "left"), node.keyword, target)

        elif kind == "import_statement":
            self._collect_import(node)

        elif kind == "export_statement":
            source = tree.child_by_field(node, "source")
            if source is not None:
                self.imports.append(ImportRef(string_value(tree, source), node.start_line, "export"))

        elif kind == "call_expression":
            self._collect_require(node)

        elif kind == "number":
            self._collect_number(node, owner)

        if kind in FUNCTION_TYPES:
            params = tree.child_by_field(node, "parameters")
            if params is not None:
                for param in tree.children(params):
                    self._declare_bindings(param, "parameter", child_scope)
            self._declare_bindings(tree.child_by_field(node, "parameter"), "parameter", child_scope)

        if kind in REFERENCE_TYPES and node.id not in self.declared_ids and node.text:
            self.pending_refs.append((node.text, node.start_line, node.start_column, scope))

    def _collect_import(self, node: SyntaxNode) -> None:
        tree = self.tree
        source = tree.child_by_field(node, "source")
        if source is not None:
            self.imports.append(ImportRef(string_value(tree, source), node.start_line, "import"))
        for clause in tree.children(node):
            if clause.type != "import_clause":
                continue
            for binding in tree.descendants(clause):
                if binding.type != "identifier" or not binding.text:
                    continue
                parent = tree.parent(binding)
                if parent is not None and parent.type == "import_specifier":
                    if binding.field == "name" and tree.child_by_field(parent, "alias") is not None:
                        self.declared_ids.add(binding.id)
                        continue
                self._declare(binding, binding.text, "import", 0)

    def _collect_require(self, node: SyntaxNode) -> None:
        tree = self.tree
        callee = tree.child_by_field(node, "function")
        if callee is None:
            return
        if callee.type == "identifier" and callee.text == "require":
            kind = "require"
        elif callee.type == "import":
            kind = "dynamic-import"
        else:
            return
        args = tree.child_by_field(node, "arguments")
        if args is None or not args.children:
            return
        first = tree.node(args.children[0])
        if first.type == "string":
            self.imports.append(ImportRef(string_value(tree, first), node.start_line, kind))

    def _collect_number(self, node: SyntaxNode, owner: Optional[int]) -> None:
        tree = self.tree
        raw = node.text or "0"
        value = parse_number(raw)
        outer = node
        parent = tree.parent(node)
        if parent is not None and parent.type == "unary_expression" and parent.operator in ("-", "+"):
            outer = parent
            if parent.operator == "-":
                value = -value
                raw = "-" + raw
        container = tree.parent(outer)
        in_declaration = (
            container is not None
            and container.type in DECLARATION_VALUE_PARENTS
            and outer.field == "value"
        )
        self.numbers.append(
            NumericLiteral(
                value=value,
                raw=raw,
                line=outer.start_line,
                column=outer.start_column,
                end_column=node.end_column,
                in_declaration=in_declaration,
                function_id=self.functions[owner].info_id if owner is not None else None,
            )
        )

    # -- results --

    def _resolve(self) -> tuple[Reference, ...]:
        references = []
        for name, line, column, scope in self.pending_refs:
            symbol_id = None
            current: Optional[int] = scope
            while current is not None:
                symbol_id = self.scope_symbols[current].get(name)
                if symbol_id is not None:
                    break
                current = self.scope_parent[current]
            references.append(Reference(name, line, column, symbol_id))
        return tuple(references)

    def _finish(self) -> AstMetrics:
        tree = self.tree
        functions = []
        for record in self.functions:
            body = tree.node(record.body_id)
            types = [body.type] + [n.type for n in tree.descendants(body)]
            digest = hashlib.sha1("\n".join(types).encode("utf-8")).hexdigest()[:16]
            functions.append(
                FunctionInfo(
                    function_id=record.info_id,
                    node_id=record.node_id,
                    name=record.name,
                    qualified_name=record.qualified_name,
                    kind=record.kind,
                    class_name=record.class_name,
                    start_line=record.start_line,
                    end_line=record.end_line,
                    column=record.column,
                    end_column=record.end_column,
                    param_count=record.param_count,
                    body_lines=body.line_span,
                    nesting_depth=record.max_depth,
                    node_count=len(types),
                    structure_hash=digest,
                )
            )

        return AstMetrics(
            path=tree.path,
            language=tree.language,
            node_count=len(tree.nodes),
            functions=tuple(functions),
            classes=tuple(self.classes),
            nesting=tuple(self.nesting),
            max_nesting_depth=max(self.nesting, default=0),
            declarations=tuple(self.declarations),
            references=self._resolve(),
            imports=tuple(self.imports),
            numeric_literals=tuple(self.numbers),
            control_flow=tuple(sorted(self.control_flow.items())),
            halstead=HalsteadMetrics.from_tokens(tree.tokens),
            tree=tree,
        )


class ASTAnalyzer:
    """Analyzer[SyntaxTree, AstMetrics]."""

    name = "ast"

    def analyze(self, subject: SyntaxTree) -> AstMetrics:
        return _Walk(subject).run()
