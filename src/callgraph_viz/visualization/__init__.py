"""Public API for the call graph visualization engine.

This module re-exports the visualization components from their internal
implementation paths, providing a stable public interface for embedding
hosts.

Exported symbols:

Engine:
    CallGraphEngine: Owns graph, view mode, search and camera state.
    InteractionController: Queue of host intents applied to an engine.
    EngineConfig: YAML-backed engine configuration.

Graph building:
    normalize_graph: Filter a raw ``{nodes, edges}`` payload and build the
        file-level cluster graph.
    extract_subgraph: Search-driven 1-hop subgraph extraction.

Exporters:
    export_to_json: Export a frame or normalized graph to a JSON file.
    export_to_svg: Export a rendered frame to a static SVG file.
    render_svg: Render a frame to an SVG string.

Server:
    find_free_port: Find an available TCP port for the local server.
    create_app: Build the FastAPI app around an engine.
    start_visualization_server: Start the HTTP host.

Example::

    from callgraph_viz.visualization import CallGraphEngine, export_to_svg

    engine = CallGraphEngine()
    engine.load_graph(raw_graph)
    engine.run_until_settled()
    export_to_svg(engine.frame(), output_path=Path("graph.svg"))
"""

from callgraph_viz.cli.commands.visualize.exporters import (
    export_to_json,
    export_to_svg,
    render_svg,
)
from callgraph_viz.cli.commands.visualize.server import (
    create_app,
    find_free_port,
    start_visualization_server,
)
from callgraph_viz.config.engine_config import EngineConfig
from callgraph_viz.core.engine import CallGraphEngine
from callgraph_viz.core.interaction import InteractionController
from callgraph_viz.core.normalizer import normalize_graph
from callgraph_viz.core.search import extract_subgraph

__all__ = [
    "CallGraphEngine",
    "EngineConfig",
    "InteractionController",
    "create_app",
    "export_to_json",
    "export_to_svg",
    "extract_subgraph",
    "find_free_port",
    "normalize_graph",
    "render_svg",
    "start_visualization_server",
]
