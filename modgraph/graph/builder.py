"""Dependency graph builder — one pass over the metafile inputs, forward and inverse edges."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from modgraph.graph.allocator import ModuleIdAllocator
from modgraph.metafile import Metafile, parse_metafile
from modgraph.models import (
    GRAPH_IMPORT_KINDS,
    DependencyGraph,
    Module,
    ModuleId,
    ModuleTable,
    Vertex,
)

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    graph: DependencyGraph = field(default_factory=dict)
    modules: ModuleTable = field(default_factory=dict)
    allocator: ModuleIdAllocator | None = None
    skipped_edges: int = 0


class GraphBuilder:
    """Build the bidirectional module graph from bundler metadata."""

    def __init__(self, entry_path: str, import_kinds: Iterable[str] = GRAPH_IMPORT_KINDS):
        self.entry_path = entry_path
        self.import_kinds = frozenset(import_kinds)

    def build(self, metafile: Metafile | dict[str, Any]) -> BuildResult:
        # Validate everything up front so a malformed input never yields a partial graph
        metafile = parse_metafile(metafile)

        allocator = ModuleIdAllocator(self.entry_path)
        result = BuildResult(allocator=allocator)

        for path in metafile.inputs:
            current = self._register(metafile, result, path)
            if current is None:
                continue
            current_id, module = current

            for edge in module.imports:
                if edge.kind not in self.import_kinds:
                    continue
                target = self._register(metafile, result, edge.path, importer=path)
                if target is None:
                    result.skipped_edges += 1
                    continue
                target_id, _ = target
                result.graph[current_id].dependencies.add(target_id)
                result.graph[target_id].inverse_dependencies.add(current_id)

        logger.debug(
            "Built graph for entry %s: %d modules, %d dangling edges skipped",
            self.entry_path, len(result.graph), result.skipped_edges,
        )
        return result

    def _register(
        self,
        metafile: Metafile,
        result: BuildResult,
        path: str,
        importer: str | None = None,
    ) -> tuple[ModuleId, Module] | None:
        """Return the id and module for ``path``, creating its vertex on first sight."""
        descriptor = metafile.inputs.get(path)
        if descriptor is None:
            if importer is None:
                logger.warning("No metadata for module %s, skipping", path)
            else:
                logger.warning("Import of %s from %s does not resolve to a known module, skipping", path, importer)
            return None

        module_id = result.allocator.id_for(path)
        if module_id not in result.graph:
            result.graph[module_id] = Vertex()
            result.modules[module_id] = descriptor.to_module(path)
        return module_id, result.modules[module_id]
