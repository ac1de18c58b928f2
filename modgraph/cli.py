"""Click CLI with build, ancestors, inspect, and serve subcommands."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from modgraph.errors import ModGraphError
from modgraph.graph import dependencies_of, dependents_of
from modgraph.models import GRAPH_IMPORT_KINDS, ImportKind, PipelineConfig
from modgraph.pipeline import open_session, run_pipeline
from modgraph.session import ModuleGraphSession

_metafile_argument = click.argument(
    "metafile", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
_entry_option = click.option(
    "--entry", "-e", "entry_path",
    help="Entry module path (default: first entryPoint in the metafile outputs)",
)
_kind_option = click.option(
    "--kind", "-k", "import_kinds", multiple=True,
    type=click.Choice([kind.value for kind in ImportKind]),
    help="Import kind to follow (repeatable; default: import-statement, dynamic-import, require-call)",
)


@click.group()
@click.version_option(version="0.3.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose (debug) output")
def cli(verbose: bool):
    """modgraph: Module dependency graphs from esbuild metafiles."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(message)s")
    if verbose:
        logging.getLogger("modgraph").setLevel(logging.DEBUG)


def _open(metafile: Path, entry_path: str | None, import_kinds: tuple[str, ...]) -> ModuleGraphSession:
    config = PipelineConfig(
        metafile_path=metafile,
        entry_path=entry_path,
        import_kinds=frozenset(import_kinds or GRAPH_IMPORT_KINDS),
    )
    try:
        return open_session(config)
    except ModGraphError as e:
        raise click.ClickException(str(e))


def _lookup_id(session: ModuleGraphSession, module_path: str) -> int:
    module_id = session.get_module_id(module_path)
    if module_id is None or session.get_module_by_id(module_id) is None:
        raise click.ClickException(f"Module not found in metafile: {module_path}")
    return module_id


def _echo_ancestors(session: ModuleGraphSession, module_id: int) -> None:
    for ancestor_id in session.get_inverse_dependencies(module_id):
        path = session.get_module_by_id(ancestor_id).path
        if ancestor_id == module_id:
            path = click.style(path, fg="cyan")
        elif ancestor_id == 0:
            path += " " + click.style("(entry)", fg="yellow")
        click.echo(f"  {ancestor_id:>5}  {path}")


@cli.command()
@_metafile_argument
@_entry_option
@_kind_option
@click.option("-o", "--output", "output_dir", type=click.Path(file_okay=False, path_type=Path), default=".", help="Output directory")
@click.option("--query", "-q", "query_path", help="Print the ancestors of this module after building")
@click.option("--graph-file", "graph_filename", default="graph.json", show_default=True, help="Graph file name")
@click.option("--modules-file", "modules_filename", default="modules.json", show_default=True, help="Module table file name")
def build(
    metafile: Path,
    entry_path: str | None,
    import_kinds: tuple[str, ...],
    output_dir: Path,
    query_path: str | None,
    graph_filename: str,
    modules_filename: str,
):
    """Build the dependency graph and write the graph and module table as JSON."""
    config = PipelineConfig(
        metafile_path=metafile,
        entry_path=entry_path,
        output_dir=output_dir,
        graph_filename=graph_filename,
        modules_filename=modules_filename,
        import_kinds=frozenset(import_kinds or GRAPH_IMPORT_KINDS),
    )

    def progress(stage: str, current: int, total: int):
        if current == total:
            click.echo(f"  {stage}: done")

    click.echo(f"Building graph from {metafile} -> {output_dir}\n")

    try:
        result = run_pipeline(config, progress=progress)
    except ModGraphError as e:
        raise click.ClickException(str(e))

    session = result.session
    graph = session.get_dependency_graph()
    edge_count = sum(len(v.dependencies) for v in graph.values())

    click.echo(f"\nDone! {len(graph)} module(s), {edge_count} edge(s), entry {session.entry_path}")
    click.echo(f"  {result.graph_path}")
    click.echo(f"  {result.modules_path}")

    if query_path:
        module_id = _lookup_id(session, query_path)
        click.echo(f"\nAncestors of {query_path}:")
        _echo_ancestors(session, module_id)


@cli.command()
@_metafile_argument
@click.argument("module_path")
@_entry_option
@_kind_option
def ancestors(metafile: Path, module_path: str, entry_path: str | None, import_kinds: tuple[str, ...]):
    """List every module that transitively imports MODULE_PATH."""
    session = _open(metafile, entry_path, import_kinds)
    module_id = _lookup_id(session, module_path)
    _echo_ancestors(session, module_id)


@cli.command()
@_metafile_argument
@click.argument("module_path")
@_entry_option
@_kind_option
def inspect(metafile: Path, module_path: str, entry_path: str | None, import_kinds: tuple[str, ...]):
    """Show one module's id, size, and direct neighbours."""
    session = _open(metafile, entry_path, import_kinds)
    module_id = _lookup_id(session, module_path)
    module = session.get_module_by_id(module_id)
    graph = session.get_dependency_graph()
    imports = dependencies_of(graph, module_id)
    importers = dependents_of(graph, module_id)

    click.echo(click.style(module.path, fg="cyan"))
    click.echo(f"  id:      {module_id}")
    click.echo(f"  bytes:   {module.bytes}")
    if module.format:
        click.echo(f"  format:  {module.format}")

    click.echo(f"\nImports ({len(imports)}):")
    for dep_id in imports:
        click.echo(f"  {session.get_module_by_id(dep_id).path}")

    click.echo(f"\nImported by ({len(importers)}):")
    for parent_id in importers:
        click.echo(f"  {session.get_module_by_id(parent_id).path}")


@cli.command()
@_metafile_argument
@_entry_option
@_kind_option
@click.option("--port", "-p", default=8430, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(metafile: Path, entry_path: str | None, import_kinds: tuple[str, ...], port: int, host: str):
    """Serve the graph over a read-only HTTP API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the HTTP API. "
            "Install with: pip install 'modgraph[web]'"
        )

    from modgraph.web import create_app

    session = _open(metafile, entry_path, import_kinds)
    click.echo(f"Serving {len(session.get_dependency_graph())} modules at http://{host}:{port}")
    uvicorn.run(create_app(session), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
