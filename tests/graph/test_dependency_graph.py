"""Tests for import resolution and the dependency graph."""

from codegauge.analyzers.models import ImportRef
from codegauge.graph import (
    build_dependency_graph,
    find_cycles,
    find_orphans,
    package_name,
    resolve_specifier,
    summarize,
    tarjan_scc,
)


def _imports(*specifiers):
    return tuple(ImportRef(spec, 1, "import") for spec in specifiers)


class TestResolveSpecifier:
    PATHS = {"src/a.ts", "src/util/index.js", "src/b.js", "lib/c.mjs", "src/d.tsx"}

    def test_extensionless(self):
        assert resolve_specifier("./a", "src/b.js", self.PATHS) == "src/a.ts"

    def test_exact(self):
        assert resolve_specifier("./b.js", "src/a.ts", self.PATHS) == "src/b.js"

    def test_emitted_extension_maps_to_source(self):
        assert resolve_specifier("./a.js", "src/b.js", self.PATHS) == "src/a.ts"
        assert resolve_specifier("./d.js", "src/b.js", self.PATHS) == "src/d.tsx"

    def test_directory_index(self):
        assert resolve_specifier("./util", "src/a.ts", self.PATHS) == "src/util/index.js"

    def test_parent_directory(self):
        assert resolve_specifier("../lib/c", "src/a.ts", self.PATHS) == "lib/c.mjs"

    def test_root_relative(self):
        assert resolve_specifier("/lib/c.mjs", "src/a.ts", self.PATHS) == "lib/c.mjs"

    def test_escaping_root(self):
        assert resolve_specifier("../../outside", "src/a.ts", self.PATHS) is None

    def test_unknown(self):
        assert resolve_specifier("./missing", "src/a.ts", self.PATHS) is None


class TestPackageName:
    def test_bare(self):
        assert package_name("lodash/fp") == "lodash"

    def test_scoped(self):
        assert package_name("@babel/core/lib") == "@babel/core"


class TestBuildGraph:
    def test_edges_and_externals(self):
        graph = build_dependency_graph(
            [
                ("a.js", _imports("./b", "react", "./missing")),
                ("b.js", _imports("react-dom/client", "./a")),
                ("c.js", _imports("./c")),
            ]
        )
        assert graph.adjacency == {"a.js": ["b.js"], "b.js": ["a.js"], "c.js": []}
        assert graph.reverse["b.js"] == ["a.js"]
        assert graph.edge_count == 2
        assert graph.unresolved_imports == {"a.js": ["./missing"]}
        assert set(graph.external_imports) == {"react", "react-dom"}

    def test_self_import_ignored(self):
        graph = build_dependency_graph([("c.js", _imports("./c"))])
        assert graph.edge_count == 0
        assert find_cycles(graph) == []


class TestAlgorithms:
    def test_tarjan_components(self):
        adjacency = {"a": ["b"], "b": ["c"], "c": ["a"], "d": ["a"]}
        components = tarjan_scc(adjacency, {"a", "b", "c", "d"})
        assert {"a", "b", "c"} in components
        assert {"d"} in components
        assert len(components) == 2

    def test_deep_chain_does_not_recurse(self):
        nodes = {f"n{i:05d}" for i in range(5000)}
        ordered = sorted(nodes)
        adjacency = {ordered[i]: [ordered[i + 1]] for i in range(len(ordered) - 1)}
        assert len(tarjan_scc(adjacency, nodes)) == 5000

    def test_cycles_and_orphans(self):
        graph = build_dependency_graph(
            [
                ("a.js", _imports("./b")),
                ("b.js", _imports("./a")),
                ("c.js", _imports("./a")),
                ("lonely.js", ()),
            ]
        )
        assert find_cycles(graph) == [("a.js", "b.js")]
        assert find_orphans(graph) == ["lonely.js"]

    def test_summarize(self):
        graph = build_dependency_graph(
            [
                ("a.js", _imports("./b", "lodash", "@scope/pkg/x")),
                ("b.js", _imports("lodash", "./nope")),
            ]
        )
        summary = summarize(graph)
        assert summary.edges == (("a.js", "b.js"),)
        assert summary.external_packages == (("lodash", 2), ("@scope/pkg", 1))
        assert summary.unresolved == (("b.js", "./nope"),)
        assert summary.cycles == ()
        assert summary.orphans == ()

    def test_input_order_does_not_matter(self):
        items = [("b.js", _imports("./a")), ("a.js", _imports("./b")), ("c.js", _imports("x"))]
        assert summarize(build_dependency_graph(items)) == summarize(
            build_dependency_graph(list(reversed(items)))
        )
