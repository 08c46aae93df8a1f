"""Graph algorithms: strongly connected components and graph summaries."""

from ..core.models import DependencySummary
from .models import DependencyGraph


def tarjan_scc(adjacency: dict[str, list[str]], all_nodes: set[str]) -> list[set[str]]:
    """Tarjan's algorithm for strongly connected components (iterative).

    Uses an explicit call stack to avoid Python recursion limits on deep
    dependency chains. Roots are visited in sorted order so the output is
    stable.
    """
    counter = 0
    scc_stack: list[str] = []
    on_stack: set[str] = set()
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    result: list[set[str]] = []

    for root in sorted(all_nodes):
        if root in index:
            continue

        # Explicit call stack: each frame is (node, neighbor_iterator)
        call_stack: list[tuple] = []
        index[root] = lowlink[root] = counter
        counter += 1
        scc_stack.append(root)
        on_stack.add(root)
        neighbors = [w for w in adjacency.get(root, []) if w in all_nodes]
        call_stack.append((root, iter(neighbors)))

        while call_stack:
            v, it = call_stack[-1]
            pushed = False
            for w in it:
                if w not in index:
                    index[w] = lowlink[w] = counter
                    counter += 1
                    scc_stack.append(w)
                    on_stack.add(w)
                    w_neighbors = [n for n in adjacency.get(w, []) if n in all_nodes]
                    call_stack.append((w, iter(w_neighbors)))
                    pushed = True
                    break
                elif w in on_stack:
                    lowlink[v] = min(lowlink[v], index[w])

            if not pushed:
                call_stack.pop()
                if call_stack:
                    caller = call_stack[-1][0]
                    lowlink[caller] = min(lowlink[caller], lowlink[v])

                if lowlink[v] == index[v]:
                    component: set[str] = set()
                    while True:
                        w = scc_stack.pop()
                        on_stack.discard(w)
                        component.add(w)
                        if w == v:
                            break
                    result.append(component)

    return result


def find_cycles(graph: DependencyGraph) -> list[tuple[str, ...]]:
    """Import cycles as sorted path tuples, ordered by their first path."""
    cycles = [
        tuple(sorted(component))
        for component in tarjan_scc(graph.adjacency, graph.all_nodes)
        if len(component) > 1
    ]
    return sorted(cycles)


def find_orphans(graph: DependencyGraph) -> list[str]:
    """Files that import no analyzed file and are imported by none."""
    return sorted(
        node
        for node in graph.all_nodes
        if not graph.adjacency.get(node) and not graph.reverse.get(node)
    )


def summarize(graph: DependencyGraph) -> DependencySummary:
    edges = tuple(
        (source, target)
        for source in sorted(graph.adjacency)
        for target in graph.adjacency[source]
    )
    external = sorted(
        ((name, len(importers)) for name, importers in graph.external_imports.items()),
        key=lambda item: (-item[1], item[0]),
    )
    unresolved = tuple(
        (path, specifier)
        for path in sorted(graph.unresolved_imports)
        for specifier in sorted(graph.unresolved_imports[path])
    )
    return DependencySummary(
        edges=edges,
        cycles=tuple(find_cycles(graph)),
        orphans=tuple(find_orphans(graph)),
        external_packages=tuple(external),
        unresolved=unresolved,
    )
