"""Main entry point for the callgraph-viz CLI."""

import typer
from loguru import logger

from .. import __version__
from .commands.inspect import inspect
from .commands.render import render
from .commands.search import search
from .commands.serve import serve
from .output import console

app = typer.Typer(
    name="callgraph-viz",
    help="🕸️  Interactive call graph visualization: file clusters, function detail and search subgraphs",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"callgraph-viz version [cyan]{__version__}[/cyan]")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
        rich_help_panel="🔧 Global Options",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
        rich_help_panel="🔧 Global Options",
    ),
) -> None:
    """🕸️  callgraph-viz: explore call graphs from the command line."""
    if verbose:
        logger.enable("callgraph_viz")
        logger.info("Verbose logging enabled")


app.command("inspect")(inspect)
app.command("search")(search)
app.command("render")(render)
app.command("serve")(serve)


if __name__ == "__main__":
    app()
