"""File dependency graph built from import and require specifiers."""

from .algorithms import find_cycles, find_orphans, summarize, tarjan_scc
from .builder import build_dependency_graph, package_name, resolve_specifier
from .models import DependencyGraph

__all__ = [
    "DependencyGraph",
    "build_dependency_graph",
    "resolve_specifier",
    "package_name",
    "tarjan_scc",
    "find_cycles",
    "find_orphans",
    "summarize",
]
