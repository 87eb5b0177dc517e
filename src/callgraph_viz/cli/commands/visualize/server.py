"""HTTP host for an interactive call graph engine.

This module runs a local FastAPI server around one ``CallGraphEngine``.
Clients post intents (search, edge filter, zoom, hover, click, resize) and
poll ``/api/frame`` for the glyphs to paint. A background task drives the
engine's frame loop while the server is running.
"""

import asyncio
import socket
import webbrowser
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import orjson
import typer
import uvicorn
from fastapi import FastAPI, HTTPException, Response
from loguru import logger
from pydantic import BaseModel, Field
from rich.console import Console
from rich.panel import Panel

from ....core.engine import CallGraphEngine
from ....core.interaction import (
    Click,
    Hover,
    InteractionController,
    Resize,
    Search,
    SetEdgeFilter,
    Zoom,
)
from ....core.models import Notice
from .exporters import render_svg

console = Console()


def find_free_port(start_port: int = 8080, end_port: int = 8099) -> int:
    """Find a free port in the given range.

    Args:
        start_port: Starting port number to check
        end_port: Ending port number to check

    Returns:
        First available port in the range

    Raises:
        OSError: If no free ports available in range
    """
    for test_port in range(start_port, end_port + 1):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind(("", test_port))
                return test_port
        except OSError:
            continue
    raise OSError(f"No free ports available in range {start_port}-{end_port}")


class SearchRequest(BaseModel):
    query: str = ""


class EdgeFilterRequest(BaseModel):
    mode: str


class ZoomRequest(BaseModel):
    level: float = Field(gt=0)
    x: float | None = None
    y: float | None = None


class NodeRequest(BaseModel):
    node_id: str | None = None


class ResizeRequest(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


def _json(payload: object, status_code: int = 200) -> Response:
    return Response(
        content=orjson.dumps(payload),
        status_code=status_code,
        media_type="application/json",
        headers={"Cache-Control": "no-cache"},
    )


def create_app(engine: CallGraphEngine, run_loop: bool = True) -> FastAPI:
    """Create the FastAPI application for an engine.

    Args:
        engine: Engine with a graph already loaded
        run_loop: Drive the engine's frame loop while the app is running

    Returns:
        Configured FastAPI application

    Design Decision: Intents go through one InteractionController

    Rationale: request handlers and the frame loop share the event loop, so
    each handler applies its intent synchronously and returns before the
    next frame tick. No locking is needed.
    """
    controller = InteractionController(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        task = asyncio.create_task(engine.run()) if run_loop else None
        try:
            yield
        finally:
            engine.teardown()
            if task is not None:
                await task

    app = FastAPI(title=f"callgraph-viz: {engine.title}", lifespan=lifespan)

    def apply(intent: object) -> object:
        controller.submit(intent)
        return controller.process()[0]

    @app.get("/api/status")
    async def status() -> Response:
        """Summary counts, mode and transition flags."""
        return _json(engine.summary())

    @app.get("/api/frame")
    async def frame() -> Response:
        """Glyphs for the current frame."""
        return _json(engine.frame().to_dict())

    @app.get("/api/frame.svg")
    async def frame_svg() -> Response:
        """Current frame as a static SVG image."""
        return Response(content=render_svg(engine.frame()), media_type="image/svg+xml")

    @app.post("/api/search")
    async def search(request: SearchRequest) -> Response:
        result = apply(Search(request.query))
        if isinstance(result, Notice):
            return _json({"status": engine.summary(), "notice": result.message})
        return _json({"status": engine.summary(), "notice": None})

    @app.post("/api/edge-filter")
    async def edge_filter(request: EdgeFilterRequest) -> Response:
        try:
            apply(SetEdgeFilter(request.mode))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return _json(engine.summary())

    @app.post("/api/zoom")
    async def zoom(request: ZoomRequest) -> Response:
        center = (request.x, request.y) if request.x is not None and request.y is not None else None
        apply(Zoom(request.level, center))
        return _json(engine.summary())

    @app.post("/api/hover")
    async def hover(request: NodeRequest) -> Response:
        apply(Hover(request.node_id))
        tooltip = engine.tooltip(request.node_id) if request.node_id else None
        return _json({"hovered": engine.hovered_id, "tooltip": tooltip})

    @app.post("/api/click")
    async def click(request: NodeRequest) -> Response:
        if request.node_id is None:
            raise HTTPException(status_code=422, detail="node_id is required")
        event = apply(Click(request.node_id))
        if event is None:
            raise HTTPException(status_code=404, detail=f"Unknown node {request.node_id!r}")
        return _json(
            {
                "node_id": event.node_id,
                "name": event.name,
                "is_cluster": event.is_cluster,
                "status": engine.summary(),
            }
        )

    @app.post("/api/resize")
    async def resize(request: ResizeRequest) -> Response:
        apply(Resize(request.width, request.height))
        return _json(engine.summary())

    return app


def start_visualization_server(
    engine: CallGraphEngine, port: int, auto_open: bool = True
) -> None:
    """Start the HTTP host for ``engine``.

    Args:
        engine: Engine with a graph loaded
        port: Port number to use
        auto_open: Whether to automatically open browser

    Raises:
        typer.Exit: If server fails to start
    """
    try:
        app = create_app(engine)
        url = f"http://localhost:{port}"

        console.print()
        console.print(
            Panel.fit(
                f"[green]✓[/green] Call graph server running\n\n"
                f"URL: [cyan]{url}/api/frame.svg[/cyan]\n"
                f"Graph: [dim]{engine.title}[/dim]\n\n"
                f"[dim]Press Ctrl+C to stop[/dim]",
                title="Server Started",
                border_style="green",
            )
        )

        if auto_open:
            webbrowser.open(f"{url}/api/frame.svg")

        config = uvicorn.Config(
            app,
            host="127.0.0.1",
            port=port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)
        server.run()

    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping server...[/yellow]")
    except OSError as e:
        if "Address already in use" in str(e):
            console.print(
                f"[red]✗ Port {port} is already in use. Try a different port with --port[/red]"
            )
        else:
            console.print(f"[red]✗ Server error: {e}[/red]")
        logger.error(f"Server failed on port {port}: {e}")
        raise typer.Exit(1)
