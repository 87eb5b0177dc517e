"""Render command: lay out a call graph and export one frame."""

from pathlib import Path

import typer
from loguru import logger

from ...core.exceptions import CallGraphVizError
from ...core.interaction import InteractionController, Resize, Search, SetEdgeFilter, Zoom
from ...core.models import Notice
from ..loader import open_engine
from ..output import print_error, print_success, print_warning
from .visualize.exporters import export_to_json, export_to_svg

SUPPORTED_SUFFIXES = (".svg", ".json")


def render(
    graph_file: Path = typer.Argument(
        ...,
        help="Call graph JSON file ({nodes, edges})",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output: Path = typer.Option(
        ..., "--output", "-o", help="Output file (.svg image or .json frame)"
    ),
    query: str | None = typer.Option(
        None, "--query", "-q", help="Render the subgraph around matching functions"
    ),
    edge_filter: str = typer.Option(
        "all", "--filter", "-f", help="Edge direction for --query: all, incoming or outgoing"
    ),
    zoom: float | None = typer.Option(
        None, "--zoom", "-z", help="Camera zoom applied after the initial layout", min=0.01
    ),
    width: int = typer.Option(1280, "--width", help="Surface width in pixels", min=1),
    height: int = typer.Option(800, "--height", help="Surface height in pixels", min=1),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Engine configuration (YAML); defaults to callgraph-viz.yaml beside the graph",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """🖼️  Lay out a call graph and export the resulting frame.

    Zooming past the detail threshold (1.6) renders function nodes instead
    of file clusters.

    [bold cyan]Examples:[/bold cyan]

    [green]File-level overview:[/green]
        $ callgraph-viz render graph.json -o overview.svg

    [green]Function-level view:[/green]
        $ callgraph-viz render graph.json -o detail.svg --zoom 2

    [green]Callers of a function, as frame data:[/green]
        $ callgraph-viz render graph.json -o frame.json -q btreeOpen -f incoming
    """
    suffix = output.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        print_error(f"Unsupported output format '{suffix}'. Use one of: {', '.join(SUPPORTED_SUFFIXES)}")
        raise typer.Exit(2)

    try:
        engine = open_engine(graph_file, config_file)
        controller = InteractionController(engine)
        controller.submit(Resize(width, height))
        if zoom is not None:
            controller.submit(Zoom(zoom))
        if query:
            controller.submit(Search(query))
            controller.submit(SetEdgeFilter(edge_filter))
        results = controller.process()
        engine.run_until_settled()
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(2)
    except CallGraphVizError as e:
        logger.error(f"Render failed: {e}")
        print_error(str(e))
        raise typer.Exit(1)

    for result in results:
        if isinstance(result, Notice):
            print_warning(result.message)
    if engine.last_stall is not None:
        print_warning(str(engine.last_stall))

    frame = engine.frame()
    if suffix == ".svg":
        export_to_svg(frame, output)
    else:
        export_to_json(frame, output)
    engine.teardown()

    print_success(
        f"Rendered {len(frame.nodes)} nodes and {len(frame.edges)} edges "
        f"({frame.mode} view) to {output}"
    )
