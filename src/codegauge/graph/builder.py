"""Dependency graph construction from import and require specifiers."""

import posixpath
from typing import Iterable, Optional

from ..analyzers.models import ImportRef
from .models import DependencyGraph

# Tried in order when a specifier omits its extension
RESOLVE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".mts", ".cts")

# TypeScript ESM sources import compiled names: "./util.js" means util.ts
_EMITTED_SOURCES = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}


def build_dependency_graph(file_imports: Iterable[tuple[str, tuple[ImportRef, ...]]]) -> DependencyGraph:
    """Build the import graph from (path, imports) pairs.

    Relative specifiers are resolved against the set of paths given;
    anything else is counted as an external package.
    """
    file_imports = sorted(file_imports, key=lambda item: item[0])
    all_paths = {path for path, _ in file_imports}
    adjacency: dict[str, set[str]] = {p: set() for p in all_paths}
    reverse: dict[str, set[str]] = {p: set() for p in all_paths}
    unresolved: dict[str, list[str]] = {}
    external: dict[str, set[str]] = {}

    for path, imports in file_imports:
        for imp in imports:
            if imp.is_relative:
                target = resolve_specifier(imp.source, path, all_paths)
                if target is None:
                    unresolved.setdefault(path, [])
                    if imp.source not in unresolved[path]:
                        unresolved[path].append(imp.source)
                elif target != path:
                    adjacency[path].add(target)
                    reverse[target].add(path)
            else:
                external.setdefault(package_name(imp.source), set()).add(path)

    return DependencyGraph(
        adjacency={p: sorted(targets) for p, targets in adjacency.items()},
        reverse={p: sorted(sources) for p, sources in reverse.items()},
        all_nodes=all_paths,
        edge_count=sum(len(targets) for targets in adjacency.values()),
        unresolved_imports=unresolved,
        external_imports=external,
    )


def resolve_specifier(specifier: str, importer: str, all_paths: set[str]) -> Optional[str]:
    """Resolve a relative specifier to one of ``all_paths``.

    Tries the exact path, then each known extension, then a directory
    ``index`` file. Specifiers starting with ``/`` are taken relative to the
    project root.
    """
    if specifier.startswith("/"):
        base = posixpath.normpath(specifier.lstrip("/"))
    else:
        base = posixpath.normpath(posixpath.join(posixpath.dirname(importer), specifier))
    if base == ".." or base.startswith("../"):
        return None

    for candidate in _candidates(base):
        if candidate in all_paths:
            return candidate
    return None


def _candidates(base: str) -> list[str]:
    candidates = [base]
    stem, ext = posixpath.splitext(base)
    candidates.extend(stem + source_ext for source_ext in _EMITTED_SOURCES.get(ext, ()))
    candidates.extend(base + ext for ext in RESOLVE_EXTENSIONS)
    index = "index" if base == "." else posixpath.join(base, "index")
    candidates.extend(index + ext for ext in RESOLVE_EXTENSIONS)
    return candidates


def package_name(specifier: str) -> str:
    """npm package name of a bare specifier (``@scope/pkg/sub`` -> ``@scope/pkg``)."""
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) >= 2:
        return "/".join(parts[:2])
    return parts[0]
