"""Write the dependency graph and module table as JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from modgraph.models import DependencyGraph, ModuleTable


def serialize_graph(graph: DependencyGraph) -> dict[str, dict[str, list[int]]]:
    """Map each module id (as a string key) to its adjacency lists."""
    return {str(module_id): vertex.to_dict() for module_id, vertex in graph.items()}


def serialize_modules(modules: ModuleTable) -> dict[str, dict[str, Any]]:
    """Map each module id (as a string key) to its module record."""
    return {str(module_id): module.to_dict() for module_id, module in modules.items()}


def _write_json(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


def export_graph(
    graph: DependencyGraph,
    modules: ModuleTable,
    output_dir: Path,
    graph_filename: str = "graph.json",
    modules_filename: str = "modules.json",
) -> tuple[Path, Path]:
    """Write both artifacts into ``output_dir`` and return their paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    graph_path = _write_json(output_dir / graph_filename, serialize_graph(graph))
    modules_path = _write_json(output_dir / modules_filename, serialize_modules(modules))
    return graph_path, modules_path
