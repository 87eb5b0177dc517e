"""Search command: extract and print the subgraph around matching functions."""

from pathlib import Path

import typer
from loguru import logger
from rich.table import Table

from ...core.exceptions import CallGraphVizError
from ...core.interaction import InteractionController, Search, SetEdgeFilter
from ...core.models import Notice
from ..loader import open_engine
from ..output import console, print_error, print_json, print_summary, print_warning


def search(
    graph_file: Path = typer.Argument(
        ...,
        help="Call graph JSON file ({nodes, edges})",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    query: str = typer.Argument(..., help="Function name (exact, prefix or substring)"),
    edge_filter: str = typer.Option(
        "all", "--filter", "-f", help="Edge direction: all, incoming or outgoing"
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Engine configuration (YAML); defaults to callgraph-viz.yaml beside the graph",
        exists=True,
        dir_okay=False,
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results in JSON format"
    ),
) -> None:
    """🔎 Find functions and show their callers and callees.

    [bold cyan]Examples:[/bold cyan]

    [green]Everything around btree functions:[/green]
        $ callgraph-viz search graph.json btree

    [green]Only callers:[/green]
        $ callgraph-viz search graph.json btree --filter incoming
    """
    try:
        engine = open_engine(graph_file, config_file, settle=False)
        controller = InteractionController(engine)
        controller.submit(Search(query))
        controller.submit(SetEdgeFilter(edge_filter))
        result, _ = controller.process()
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(2)
    except CallGraphVizError as e:
        logger.error(f"Search failed: {e}")
        print_error(str(e))
        raise typer.Exit(1)

    if isinstance(result, Notice):
        print_warning(result.message)
        raise typer.Exit(1)

    context = engine.subgraph
    projection = engine.projection
    summary = engine.summary()
    matched = [engine.graph.detail.node(node_id) for node_id in context.matched_ids]

    if json_output:
        print_json(
            {
                "summary": summary["search"],
                "matched": [n.name for n in matched],
                "nodes": sorted(projection.node_ids),
                "edges": sorted(projection.edge_keys),
            }
        )
        return

    table = Table(title=f'Matches for "{query}"')
    table.add_column("Function", style="cyan")
    table.add_column("File", style="dim")
    table.add_column("Degree", justify="right")
    table.add_column("In", justify="right", style="green")
    table.add_column("Out", justify="right", style="yellow")
    for node in matched:
        table.add_row(node.name, node.file or "", str(node.degree), str(node.in_degree), str(node.out_degree))
    console.print(table)
    console.print()
    print_summary(summary)
