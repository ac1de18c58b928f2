"""3-stage pipeline orchestrator: load -> build -> export."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from modgraph.errors import MetafileError
from modgraph.exporter import export_graph
from modgraph.metafile import Metafile, load_metafile
from modgraph.models import PipelineConfig
from modgraph.session import ModuleGraphSession

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class PipelineResult:
    session: ModuleGraphSession
    graph_path: Path
    modules_path: Path


def resolve_entry_path(metafile: Metafile, entry_path: str | None) -> str:
    """Use ``entry_path`` if given, else the first entry point the outputs name."""
    if entry_path:
        return entry_path
    entry_points = metafile.entry_points()
    if not entry_points:
        raise MetafileError(
            "No entry path given and the metafile outputs name no entryPoint"
        )
    if len(entry_points) > 1:
        logger.info("Metafile has %d entry points, using %s", len(entry_points), entry_points[0])
    return entry_points[0]


def open_session(config: PipelineConfig) -> ModuleGraphSession:
    """Load the configured metafile and return an initialized session."""
    metafile = load_metafile(config.metafile_path)
    entry_path = resolve_entry_path(metafile, config.entry_path)
    return ModuleGraphSession.open(metafile, entry_path, import_kinds=config.import_kinds)


def run_pipeline(
    config: PipelineConfig,
    progress: ProgressCallback | None = None,
) -> PipelineResult:
    """Run the full pipeline and write both artifacts."""
    # Stage 1: Load
    if progress:
        progress("Loading", 0, 1)
    metafile = load_metafile(config.metafile_path)
    entry_path = resolve_entry_path(metafile, config.entry_path)
    if progress:
        progress("Loading", 1, 1)

    # Stage 2: Build
    if progress:
        progress("Building", 0, 1)
    session = ModuleGraphSession.open(metafile, entry_path, import_kinds=config.import_kinds)
    if progress:
        progress("Building", 1, 1)

    # Stage 3: Export
    if progress:
        progress("Exporting", 0, 1)
    graph_path, modules_path = export_graph(
        session.get_dependency_graph(),
        session.get_module_table(),
        config.output_dir,
        graph_filename=config.graph_filename,
        modules_filename=config.modules_filename,
    )
    if progress:
        progress("Exporting", 1, 1)

    logger.info("Wrote %s and %s", graph_path, modules_path)
    return PipelineResult(session=session, graph_path=graph_path, modules_path=modules_path)
