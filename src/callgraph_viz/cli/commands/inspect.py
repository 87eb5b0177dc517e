"""Inspect command: summarize a call graph file."""

from pathlib import Path

import typer
from loguru import logger
from rich.table import Table

from ...core.exceptions import CallGraphVizError
from ...core.normalizer import normalize_graph
from ..loader import read_graph_file
from ..output import console, print_error, print_json, print_warning


def inspect(
    graph_file: Path = typer.Argument(
        ...,
        help="Call graph JSON file ({nodes, edges})",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    top: int = typer.Option(
        10, "--top", "-n", help="Number of files to list", min=0
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output the summary in JSON format"
    ),
) -> None:
    """🔍 Summarize a call graph: files, functions, calls and file links."""
    try:
        graph = normalize_graph(read_graph_file(graph_file))
    except CallGraphVizError as e:
        logger.error(f"Failed to inspect {graph_file}: {e}")
        print_error(str(e))
        raise typer.Exit(1)

    clusters = sorted(graph.cluster.nodes, key=lambda c: c.member_count, reverse=True)
    summary = {
        "files": len(graph.cluster.nodes),
        "functions": len(graph.detail.nodes),
        "calls": len(graph.detail.edges),
        "file_links": len(graph.cluster.edges),
        "dropped_nodes": graph.dropped_nodes,
        "dropped_edges": graph.dropped_edges,
        "top_files": [
            {"file": c.file, "functions": c.member_count, "avg_degree": round(c.avg_degree, 1)}
            for c in clusters[:top]
        ],
    }

    if json_output:
        print_json(summary)
        return

    console.print(f"[bold blue]Call Graph:[/bold blue] {graph_file.name}\n")
    console.print(f"  Files: [cyan]{summary['files']}[/cyan]")
    console.print(f"  Functions: [cyan]{summary['functions']}[/cyan]")
    console.print(f"  Calls: [cyan]{summary['calls']}[/cyan]")
    console.print(f"  Inter-file links: [cyan]{summary['file_links']}[/cyan]")
    if graph.dropped_nodes or graph.dropped_edges:
        print_warning(
            f"Dropped {graph.dropped_nodes} nodes without a file or calls "
            f"and {graph.dropped_edges} dangling edges"
        )

    if clusters and top:
        table = Table(title="Largest files")
        table.add_column("File", style="cyan")
        table.add_column("Functions", justify="right")
        table.add_column("Total degree", justify="right")
        table.add_column("Avg degree", justify="right")
        for cluster in clusters[:top]:
            table.add_row(
                cluster.name,
                str(cluster.member_count),
                str(cluster.degree),
                f"{cluster.avg_degree:.1f}",
            )
        console.print()
        console.print(table)
