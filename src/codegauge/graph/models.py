"""Data models for the file dependency graph."""

from dataclasses import dataclass, field


@dataclass
class DependencyGraph:
    """Directed import graph over analyzed files.

    Edges are directed: adjacency[A] contains B means A imports B. Lists
    are sorted and free of duplicates.
    """

    adjacency: dict[str, list[str]] = field(default_factory=dict)
    reverse: dict[str, list[str]] = field(default_factory=dict)
    all_nodes: set[str] = field(default_factory=set)
    edge_count: int = 0

    # Relative specifiers that matched no analyzed file, per importer
    unresolved_imports: dict[str, list[str]] = field(default_factory=dict)
    # Bare specifiers (npm packages, node builtins) by package name -> importers
    external_imports: dict[str, set[str]] = field(default_factory=dict)
