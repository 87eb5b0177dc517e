"""Rich console helpers shared by the CLI commands."""

from typing import Any

import orjson
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

console = Console()


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {message}")


def print_json(data: Any, title: str | None = None) -> None:
    """Pretty-print data as highlighted JSON."""
    if title:
        console.print(f"[bold blue]{title}[/bold blue]")
    text = orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()
    console.print(Syntax(text, "json", theme="monokai", background_color="default"))


def print_summary(summary: dict[str, Any]) -> None:
    """Print engine summary counts as a two-column table."""
    table = Table(title=summary.get("title"), show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("View mode", str(summary["mode"]))
    table.add_row("Files", str(summary["files"]))
    table.add_row("Functions", str(summary["functions"]))
    table.add_row("Calls", str(summary["calls"]))
    table.add_row("Inter-file links", str(summary["file_links"]))

    search = summary.get("search")
    if search:
        table.add_row("Query", search["query"])
        table.add_row("Filter", search["filter"])
        table.add_row("Matched | neighbors", f"{search['matched']} | {search['neighbors']}")
        table.add_row("In | out edges", f"{search['in_edges']} | {search['out_edges']}")
        table.add_row("Visible nodes | edges", f"{search['nodes']} | {search['edges']}")

    console.print(table)
