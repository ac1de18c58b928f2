"""Read-only query facade over a built module graph."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from modgraph.errors import GraphAlreadyInitializedError, GraphNotInitializedError
from modgraph.graph import BuildResult, GraphBuilder, ancestors_of
from modgraph.metafile import Metafile, parse_metafile
from modgraph.models import GRAPH_IMPORT_KINDS, DependencyGraph, Module, ModuleId, ModuleTable

logger = logging.getLogger(__name__)


class ModuleGraphSession:
    """Owns one dependency graph for one metafile and entry path.

    The session is created uninitialized; call :meth:`initialize` once to
    build the graph. Every query raises :class:`GraphNotInitializedError`
    until then.
    """

    def __init__(
        self,
        metafile: Metafile | dict[str, Any],
        entry_path: str,
        import_kinds: Iterable[str] = GRAPH_IMPORT_KINDS,
    ):
        self.metafile = parse_metafile(metafile)
        self.entry_path = entry_path
        self._builder = GraphBuilder(entry_path, import_kinds=import_kinds)
        self._result: BuildResult | None = None

    @classmethod
    def open(
        cls,
        metafile: Metafile | dict[str, Any],
        entry_path: str,
        import_kinds: Iterable[str] = GRAPH_IMPORT_KINDS,
    ) -> ModuleGraphSession:
        """Create and initialize a session in one step."""
        return cls(metafile, entry_path, import_kinds=import_kinds).initialize()

    @property
    def is_initialized(self) -> bool:
        return self._result is not None

    def initialize(self) -> ModuleGraphSession:
        if self._result is not None:
            raise GraphAlreadyInitializedError(
                f"dependency graph for {self.entry_path} is already built; open a new session to rebuild"
            )
        self._result = self._builder.build(self.metafile)
        return self

    def _require(self, operation: str) -> BuildResult:
        if self._result is None:
            raise GraphNotInitializedError(operation)
        return self._result

    # ── Lookups ───────────────────────────────────────────────

    def get_module(self, path: str) -> Module | None:
        result = self._require("get_module")
        if path not in self.metafile.inputs:
            logger.warning("Module %s is not in the metafile", path)
            return None
        module_id = result.allocator.lookup(path)
        if module_id is None:
            return None
        return result.modules.get(module_id)

    def get_module_id(self, path: str) -> ModuleId | None:
        result = self._require("get_module_id")
        module_id = result.allocator.lookup(path)
        if module_id is None:
            logger.warning("No module id assigned to %s", path)
        return module_id

    def get_module_by_id(self, module_id: ModuleId) -> Module | None:
        result = self._require("get_module_by_id")
        module = result.modules.get(module_id)
        if module is None:
            logger.warning("No module with id %d", module_id)
        return module

    def get_dependency_graph(self) -> DependencyGraph:
        return self._require("get_dependency_graph").graph

    def get_module_table(self) -> ModuleTable:
        return self._require("get_module_table").modules

    def get_inverse_dependencies(self, module_id: ModuleId) -> list[ModuleId]:
        """Ids of ``module_id`` and all of its transitive importers."""
        return ancestors_of(self._require("get_inverse_dependencies").graph, module_id)

    def get_ancestor_paths(self, path: str) -> list[str]:
        """Path-level convenience over :meth:`get_inverse_dependencies`."""
        result = self._require("get_ancestor_paths")
        module_id = self.get_module_id(path)
        if module_id is None or module_id not in result.graph:
            return []
        return [result.modules[i].path for i in ancestors_of(result.graph, module_id)]
