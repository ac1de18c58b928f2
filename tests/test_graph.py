"""Tests for id allocation, graph construction, and inverse traversal."""

import json
import logging
from pathlib import Path

import pytest

from modgraph.errors import MetafileError, UnknownModuleError
from modgraph.graph import (
    GraphBuilder,
    ModuleIdAllocator,
    ancestors_of,
    dependencies_of,
    dependents_of,
)
from modgraph.models import GRAPH_IMPORT_KINDS, ImportEdge, ImportKind, OrderedIdSet

FIXTURES = Path(__file__).parent / "fixtures"


# ── Helpers ───────────────────────────────────────────────────

def _input(*imports, size=10, fmt="esm"):
    return {
        "bytes": size,
        "format": fmt,
        "imports": [
            {"path": path, "kind": kind} for path, kind in imports
        ],
    }


def _chain(*paths, kind="import-statement"):
    """Metafile where each path imports the next one."""
    inputs = {}
    for i, path in enumerate(paths):
        nxt = paths[i + 1] if i + 1 < len(paths) else None
        inputs[path] = _input((nxt, kind)) if nxt else _input()
    return {"inputs": inputs}


def _fixture():
    return json.loads((FIXTURES / "metafile.json").read_text())


def _assert_symmetric(graph):
    for a, vertex in graph.items():
        for b in vertex.dependencies:
            assert a in graph[b].inverse_dependencies
        for b in vertex.inverse_dependencies:
            assert a in graph[b].dependencies


# ── Ordered id set ────────────────────────────────────────────

class TestOrderedIdSet:
    def test_preserves_insertion_order(self):
        ids = OrderedIdSet()
        for i in (3, 1, 2):
            ids.add(i)
        assert ids.to_list() == [3, 1, 2]

    def test_ignores_duplicates(self):
        ids = OrderedIdSet([1, 2])
        ids.add(1)
        assert len(ids) == 2
        assert ids.to_list() == [1, 2]

    def test_empty_is_falsy(self):
        assert not OrderedIdSet()
        assert OrderedIdSet([0])


# ── Id allocator ──────────────────────────────────────────────

class TestModuleIdAllocator:
    def test_entry_reserved_as_zero(self):
        allocator = ModuleIdAllocator("entry.js")
        assert allocator.lookup("entry.js") == 0
        assert allocator.id_for("entry.js") == 0

    def test_ids_are_sequential_from_one(self):
        allocator = ModuleIdAllocator("entry.js")
        assert allocator.id_for("a.js") == 1
        assert allocator.id_for("b.js") == 2
        assert allocator.id_for("a.js") == 1
        assert len(allocator) == 3

    def test_lookup_does_not_mint(self):
        allocator = ModuleIdAllocator("entry.js")
        assert allocator.lookup("missing.js") is None
        assert "missing.js" not in allocator
        assert len(allocator) == 1

    def test_path_for(self):
        allocator = ModuleIdAllocator("entry.js")
        allocator.id_for("a.js")
        assert allocator.path_for(0) == "entry.js"
        assert allocator.path_for(1) == "a.js"
        assert allocator.path_for(7) is None

    def test_allocators_are_independent(self):
        first = ModuleIdAllocator("x.js")
        second = ModuleIdAllocator("y.js")
        first.id_for("a.js")
        assert second.id_for("b.js") == 1


# ── Graph builder ─────────────────────────────────────────────

class TestGraphBuilder:
    def test_build_empty(self):
        result = GraphBuilder("a.js").build({"inputs": {}})
        assert result.graph == {}
        assert result.modules == {}
        assert result.allocator.lookup("a.js") == 0

    def test_two_module_scenario(self):
        metafile = {
            "inputs": {
                "a.js": _input(("b.js", "import-statement")),
                "b.js": _input(),
            }
        }
        result = GraphBuilder("a.js").build(metafile)
        assert result.allocator.lookup("a.js") == 0
        assert result.allocator.lookup("b.js") == 1
        assert {k: v.to_dict() for k, v in result.graph.items()} == {
            0: {"dependencies": [1], "inverseDependencies": []},
            1: {"dependencies": [], "inverseDependencies": [0]},
        }
        assert ancestors_of(result.graph, 1) == [1, 0]

    def test_entry_not_first_in_inputs_keeps_id_zero(self):
        metafile = {
            "inputs": {
                "lib.js": _input(),
                "main.js": _input(("lib.js", "import-statement")),
            }
        }
        result = GraphBuilder("main.js").build(metafile)
        assert result.allocator.lookup("main.js") == 0
        assert result.allocator.lookup("lib.js") == 1
        assert result.modules[0].path == "main.js"

    def test_entry_absent_from_inputs(self):
        result = GraphBuilder("virtual-entry.js").build(_chain("a.js", "b.js"))
        assert result.allocator.lookup("virtual-entry.js") == 0
        assert 0 not in result.graph
        assert result.allocator.lookup("a.js") == 1
        assert result.allocator.lookup("b.js") == 2

    def test_targets_get_ids_on_first_visit(self):
        metafile = {
            "inputs": {
                "a.js": _input(("c.js", "import-statement"), ("b.js", "import-statement")),
                "b.js": _input(),
                "c.js": _input(),
            }
        }
        result = GraphBuilder("a.js").build(metafile)
        assert result.allocator.lookup("c.js") == 1
        assert result.allocator.lookup("b.js") == 2

    def test_all_graph_kinds_are_followed(self):
        metafile = {
            "inputs": {
                "a.js": _input(
                    ("b.js", "import-statement"),
                    ("c.js", "dynamic-import"),
                    ("d.js", "require-call"),
                ),
                "b.js": _input(), "c.js": _input(), "d.js": _input(),
            }
        }
        result = GraphBuilder("a.js").build(metafile)
        assert result.graph[0].dependencies.to_list() == [1, 2, 3]

    def test_other_kinds_are_ignored(self):
        metafile = {
            "inputs": {
                "a.js": _input(("b.js", "require-resolve"), ("style.css", "import-rule")),
                "b.js": _input(),
                "style.css": _input(),
            }
        }
        result = GraphBuilder("a.js").build(metafile)
        assert not result.graph[0].dependencies
        # Still registered as isolated vertices
        assert len(result.graph) == 3
        for vertex in result.graph.values():
            assert not vertex.dependencies
            assert not vertex.inverse_dependencies

    @pytest.mark.parametrize("kind", [
        k for k in ImportKind if k.value not in GRAPH_IMPORT_KINDS
    ], ids=lambda k: k.value)
    def test_non_graph_kind_is_ignored(self, kind):
        metafile = {"inputs": {"a.js": _input(("b.js", kind.value)), "b.js": _input()}}
        result = GraphBuilder("a.js").build(metafile)
        assert not ImportEdge(path="b.js", kind=kind.value).is_graph_edge
        assert not result.graph[0].dependencies
        assert not result.graph[1].inverse_dependencies
        assert result.skipped_edges == 0

    def test_custom_import_kinds(self):
        metafile = {"inputs": {"a.js": _input(("b.js", "require-resolve")), "b.js": _input()}}
        result = GraphBuilder("a.js", import_kinds={"require-resolve"}).build(metafile)
        assert result.graph[0].dependencies.to_list() == [1]

    def test_dangling_edge_is_skipped(self, caplog):
        metafile = {
            "inputs": {
                "a.js": _input(("missing.js", "import-statement"), ("b.js", "import-statement")),
                "b.js": _input(),
            }
        }
        with caplog.at_level(logging.WARNING, logger="modgraph"):
            result = GraphBuilder("a.js").build(metafile)
        assert result.skipped_edges == 1
        assert result.allocator.lookup("missing.js") is None
        assert result.graph[0].dependencies.to_list() == [1]
        assert "missing.js" in caplog.text

    def test_duplicate_imports_collapse(self):
        metafile = {
            "inputs": {
                "a.js": _input(("b.js", "import-statement"), ("b.js", "dynamic-import")),
                "b.js": _input(),
            }
        }
        result = GraphBuilder("a.js").build(metafile)
        assert result.graph[0].dependencies.to_list() == [1]
        assert result.graph[1].inverse_dependencies.to_list() == [0]

    def test_symmetry_on_fixture(self):
        result = GraphBuilder("src/index.ts").build(_fixture())
        _assert_symmetric(result.graph)

    def test_tables_share_keys(self):
        result = GraphBuilder("src/index.ts").build(_fixture())
        assert result.graph.keys() == result.modules.keys()
        for vertex in result.graph.values():
            for module_id in (*vertex.dependencies, *vertex.inverse_dependencies):
                assert module_id in result.modules

    def test_fixture_adjacency(self):
        result = GraphBuilder("src/index.ts").build(_fixture())
        ids = dict(result.allocator.items())
        assert ids == {
            "src/index.ts": 0,
            "src/app.ts": 1,
            "src/util.ts": 2,
            "src/lazy.ts": 3,
            "src/helpers.js": 4,
            "src/worker.js": 5,
        }
        assert result.graph[2].inverse_dependencies.to_list() == [1, 4, 3]
        assert result.graph[5].to_dict() == {"dependencies": [], "inverseDependencies": []}
        assert result.skipped_edges == 1

    def test_module_records_are_copies(self):
        metafile = _fixture()
        before = json.dumps(metafile, sort_keys=True)
        result = GraphBuilder("src/index.ts").build(metafile)
        assert json.dumps(metafile, sort_keys=True) == before
        assert "path" not in metafile["inputs"]["src/app.ts"]
        assert result.modules[1].path == "src/app.ts"
        assert result.modules[1].bytes == 1280

    def test_unknown_descriptor_fields_kept(self):
        metafile = {"inputs": {"a.js": {**_input(), "with": {"type": "json"}}}}
        result = GraphBuilder("a.js").build(metafile)
        assert result.modules[0].to_dict()["with"] == {"type": "json"}

    def test_unknown_import_fields_kept(self):
        metafile = {
            "inputs": {
                "a.js": {
                    "bytes": 10,
                    "imports": [
                        {"path": "b.json", "kind": "import-statement", "with": {"type": "json"}},
                    ],
                },
                "b.json": _input(fmt=None),
            }
        }
        result = GraphBuilder("a.js").build(metafile)
        edge = result.modules[0].imports[0]
        assert edge.extra == {"with": {"type": "json"}}
        assert result.modules[0].to_dict()["imports"][0] == {
            "path": "b.json",
            "kind": "import-statement",
            "with": {"type": "json"},
        }
        assert result.graph[0].dependencies.to_list() == [1]

    def test_malformed_metafile_fails_whole_build(self):
        metafile = {
            "inputs": {
                "a.js": _input(("b.js", "import-statement")),
                "b.js": {"imports": "not-a-list"},
            }
        }
        with pytest.raises(MetafileError):
            GraphBuilder("a.js").build(metafile)

    def test_missing_inputs_key(self):
        with pytest.raises(MetafileError):
            GraphBuilder("a.js").build({"outputs": {}})


# ── Inverse traversal ─────────────────────────────────────────

class TestAncestors:
    def test_root_returns_itself(self):
        result = GraphBuilder("a.js").build(_chain("a.js", "b.js", "c.js"))
        assert ancestors_of(result.graph, 0) == [0]

    def test_chain(self):
        result = GraphBuilder("a.js").build(_chain("a.js", "b.js", "c.js"))
        assert ancestors_of(result.graph, 2) == [2, 1, 0]

    def test_isolated_module(self):
        result = GraphBuilder("a.js").build({"inputs": {"a.js": _input(), "b.js": _input()}})
        assert ancestors_of(result.graph, 1) == [1]

    @pytest.mark.parametrize("start", [0, 1, 2])
    def test_cycle_terminates(self, start):
        metafile = {
            "inputs": {
                "a.js": _input(("b.js", "import-statement")),
                "b.js": _input(("c.js", "import-statement")),
                "c.js": _input(("a.js", "import-statement")),
            }
        }
        result = GraphBuilder("a.js").build(metafile)
        ancestors = ancestors_of(result.graph, start)
        assert ancestors[0] == start
        assert sorted(ancestors) == [0, 1, 2]

    def test_self_import(self):
        result = GraphBuilder("a.js").build({"inputs": {"a.js": _input(("a.js", "import-statement"))}})
        assert ancestors_of(result.graph, 0) == [0]

    def test_diamond_visits_shared_ancestor_once(self):
        # d imports b and c, both import a
        metafile = {
            "inputs": {
                "d.js": _input(("b.js", "import-statement"), ("c.js", "import-statement")),
                "b.js": _input(("a.js", "import-statement")),
                "c.js": _input(("a.js", "import-statement")),
                "a.js": _input(),
            }
        }
        result = GraphBuilder("d.js").build(metafile)
        a_id = result.allocator.lookup("a.js")
        assert ancestors_of(result.graph, a_id) == [a_id, 1, 0, 2]

    def test_depth_first_discovery_order(self):
        result = GraphBuilder("src/index.ts").build(_fixture())
        assert ancestors_of(result.graph, 4) == [4, 2, 1, 0, 3]
        assert ancestors_of(result.graph, 2) == [2, 1, 0, 4, 3]

    def test_deep_chain_does_not_recurse(self):
        paths = [f"m{i}.js" for i in range(5000)]
        result = GraphBuilder("m0.js").build(_chain(*paths))
        ancestors = ancestors_of(result.graph, 4999)
        assert len(ancestors) == 5000
        assert ancestors[-1] == 0

    def test_unknown_id(self):
        result = GraphBuilder("a.js").build({"inputs": {"a.js": _input()}})
        with pytest.raises(UnknownModuleError):
            ancestors_of(result.graph, 42)


class TestDirectNeighbours:
    def test_dependencies_and_dependents(self):
        result = GraphBuilder("src/index.ts").build(_fixture())
        assert dependencies_of(result.graph, 1) == [2, 3]
        assert dependents_of(result.graph, 2) == [1, 4, 3]
        assert dependents_of(result.graph, 0) == []

    def test_unknown_id(self):
        result = GraphBuilder("a.js").build({"inputs": {"a.js": _input()}})
        with pytest.raises(UnknownModuleError):
            dependencies_of(result.graph, 3)
        with pytest.raises(UnknownModuleError):
            dependents_of(result.graph, 3)
