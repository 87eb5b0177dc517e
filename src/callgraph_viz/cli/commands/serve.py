"""Serve command: host an interactive engine over HTTP."""

from pathlib import Path

import typer
from loguru import logger

from ...core.exceptions import CallGraphVizError
from ..loader import open_engine
from ..output import print_error
from .visualize.server import find_free_port, start_visualization_server


def serve(
    graph_file: Path = typer.Argument(
        ...,
        help="Call graph JSON file ({nodes, edges})",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    port: int | None = typer.Option(
        None, "--port", "-p", help="Port (first free port from 8080 if omitted)", min=1024, max=65535
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Engine configuration (YAML); defaults to callgraph-viz.yaml beside the graph",
        exists=True,
        dir_okay=False,
    ),
    no_open: bool = typer.Option(
        False, "--no-open", help="Do not open a browser"
    ),
) -> None:
    """🌐 Serve the interactive call graph engine on localhost."""
    try:
        engine = open_engine(graph_file, config_file, settle=False)
    except CallGraphVizError as e:
        logger.error(f"Failed to load {graph_file}: {e}")
        print_error(str(e))
        raise typer.Exit(1)

    start_visualization_server(engine, port or find_free_port(), auto_open=not no_open)
