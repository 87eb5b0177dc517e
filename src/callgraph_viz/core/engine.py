"""Call graph engine: owns all visualization state and executes view commands.

The engine is the single owner of the working graph, the view state, the
subgraph context, highlight sets and the camera. Hosts drive it through
intents (``zoom``, ``hover``, ``click``, ``set_search_query``, ...) and read
back ``frame()`` / ``summary()``; they never touch node or edge objects.

Time is virtual: ``tick(dt_ms)`` advances the layout by one step and fires
any transition timers that came due, so the same engine runs headless in
tests and under the asyncio frame loop of ``run()``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from loguru import logger

from ..config.defaults import FOCUS_DEPTHS
from ..config.engine_config import EngineConfig
from .edge_filter import Projection, parse_filter_mode, project
from .exceptions import LayoutStallTimeout
from .highlight import focus_highlight, hover_highlight
from .layout import LayoutEngine
from .models import (
    EMPTY_HIGHLIGHT,
    EdgeFilterMode,
    GraphNode,
    HighlightState,
    NormalizedGraph,
    Notice,
    SelectionEvent,
    SubgraphContext,
    ViewMode,
    WorkingGraph,
)
from .normalizer import normalize_graph
from .renderer import Camera, Frame, Renderer, Viewport, node_tooltip
from .scheduler import TimerQueue
from .search import extract_subgraph
from .view_mode import (
    CancelTimer,
    ClusterClicked,
    ConfigureForces,
    FallbackElapsed,
    FitCamera,
    GraphLoaded,
    HideOverlay,
    LayoutSettled,
    MoveCamera,
    OverlayDelayElapsed,
    Reheat,
    ReportStall,
    SearchApplied,
    SearchCleared,
    ShowOverlay,
    StartTimer,
    SwapGraph,
    TimerKind,
    ViewCommand,
    ViewEvent,
    ViewModeController,
    ViewState,
    ZoomChanged,
)

# Camera used for a subgraph whose nodes have no coordinates yet
UNPOSITIONED_FIT_ZOOM = 2.0

DEFAULT_SETTLE_BUDGET = 2000


class CallGraphEngine:
    """Headless call graph visualization engine.

    Example:
        >>> engine = CallGraphEngine()
        >>> engine.load_graph({"nodes": [...], "edges": [...]})
        >>> engine.run_until_settled()
        >>> engine.set_search_query("btree")
        >>> frame = engine.frame()
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        title: str = "Call Graph",
        on_select: Callable[[SelectionEvent], None] | None = None,
        on_notice: Callable[[Notice], None] | None = None,
        on_toggle_overview: Callable[[bool], None] | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.title = title
        self.on_select = on_select
        self.on_notice = on_notice
        self.on_toggle_overview = on_toggle_overview

        self.controller = ViewModeController(self.config)
        self.layout = LayoutEngine(self.config.layout)
        self.renderer = Renderer(self.config.render)
        self.timers = TimerQueue()

        self.state = ViewState()
        self.camera = Camera()
        self.viewport = Viewport()
        self.graph: NormalizedGraph | None = None
        self.subgraph: SubgraphContext | None = None
        self.projection: Projection | None = None
        self.edge_filter_mode = EdgeFilterMode.ALL

        self.hovered_id: str | None = None
        self.selected_id: str | None = None
        self.dragging_id: str | None = None
        self._hover = EMPTY_HIGHLIGHT
        self._focus = EMPTY_HIGHLIGHT

        self.overlay: str | None = None
        self.overview_visible = False
        self.last_stall: LayoutStallTimeout | None = None
        self.closed = False

    # -------- read-only views --------

    @property
    def mode(self) -> ViewMode:
        return self.state.mode

    @property
    def transitioning(self) -> bool:
        return self.state.transitioning

    @property
    def search_active(self) -> bool:
        return self.subgraph is not None

    @property
    def working_graph(self) -> WorkingGraph:
        return self.layout.graph

    @property
    def highlight(self) -> HighlightState:
        """Effective highlight: focus, else search projection, else hover."""
        if self._focus.active:
            return self._focus
        if self.projection is not None:
            return self.projection.as_highlight()
        return self._hover

    def node(self, node_id: str) -> GraphNode | None:
        return self.working_graph.node(node_id)

    def tooltip(self, node_id: str) -> str | None:
        node = self.node(node_id)
        return node_tooltip(node) if node is not None else None

    # -------- graph input --------

    def load_graph(self, raw: Any) -> NormalizedGraph:
        """Replace the raw graph and restart in Cluster mode.

        Raises:
            InvalidGraphFormat: Payload is malformed; the previous graph stays
        """
        normalized = normalize_graph(raw)

        self.timers.cancel_all()
        self.layout.stop()
        self.closed = False
        self.graph = normalized
        self.subgraph = None
        self.projection = None
        self.edge_filter_mode = EdgeFilterMode.ALL
        self.hovered_id = self.selected_id = self.dragging_id = None
        self._hover = self._focus = EMPTY_HIGHLIGHT
        self.last_stall = None

        self._dispatch(GraphLoaded())
        return normalized

    # -------- search and filtering --------

    def set_search_query(self, text: str) -> SubgraphContext | None:
        """Search function names; an empty query clears the search.

        Returns:
            The new subgraph context, or None when the search was cleared

        Raises:
            NoMatch: Nothing matched; engine state is unchanged
        """
        if self.graph is None:
            return None

        if not text.strip():
            if self.subgraph is not None:
                logger.info("Search cleared")
                self.subgraph = None
                self.projection = None
                self.edge_filter_mode = EdgeFilterMode.ALL
                self._hover = self._focus = EMPTY_HIGHLIGHT
                self._dispatch(SearchCleared())
            return None

        context = extract_subgraph(
            text, self.graph.detail, self.config.max_search_matches
        )
        self.subgraph = context
        self.edge_filter_mode = EdgeFilterMode.ALL
        self.projection = project(context, self.edge_filter_mode)
        self._hover = self._focus = EMPTY_HIGHLIGHT
        self.hovered_id = None
        self._dispatch(SearchApplied())
        return context

    def set_edge_filter_mode(self, mode: str | EdgeFilterMode) -> Projection | None:
        """Change the visible direction of subgraph edges.

        The subgraph is not re-extracted; only the projection is recomputed
        and the layout reheated so the visible subset can re-settle.

        Raises:
            ValueError: Unknown mode string
        """
        mode = parse_filter_mode(mode)
        if self.subgraph is None:
            logger.debug(f"Edge filter '{mode}' ignored: no active subgraph")
            return None
        self.edge_filter_mode = mode
        self.projection = project(self.subgraph, mode)
        logger.debug(
            f"Edge filter {mode}: {len(self.projection.node_ids)} nodes, "
            f"{len(self.projection.edges)} edges"
        )
        # A transition in flight is already re-settling the subgraph
        if not self.transitioning and not self.closed:
            self.layout.reheat()
        return self.projection

    # -------- pointer and camera intents --------

    def zoom(self, level: float, center: tuple[float, float] | None = None) -> float:
        """Set the camera zoom (clamped) and evaluate the zoom thresholds."""
        self.camera.zoom = self._clamp_zoom(level)
        if center is not None:
            self.camera.center_x, self.camera.center_y = center
        self._dispatch(ZoomChanged(self.camera.zoom))
        return self.camera.zoom

    def hover(self, node_id: str | None) -> HighlightState:
        """Hover a node (or None to leave it).

        Hover highlighting applies in Detail mode without an active search.
        Ignored while a transition or a drag is in flight.
        """
        if self.transitioning or self.dragging_id is not None:
            return self.highlight

        if node_id is None or self.node(node_id) is None:
            self.hovered_id = None
            self._hover = EMPTY_HIGHLIGHT
            return self.highlight

        self.hovered_id = node_id
        if self.mode is ViewMode.DETAIL and not self.search_active:
            self._hover = hover_highlight(self.working_graph, node_id)
        return self.highlight

    def click(self, node_id: str) -> SelectionEvent | None:
        """Select a node; clicking a cluster drills into Detail mode."""
        node = self.node(node_id)
        if node is None:
            logger.debug(f"Click on unknown node {node_id!r} ignored")
            return None

        if node_id != self.selected_id:
            self._hover = self._focus = EMPTY_HIGHLIGHT
            self.selected_id = node_id

        event = SelectionEvent(node_id=node.id, name=node.name, is_cluster=node.is_cluster)
        if self.on_select is not None:
            self.on_select(event)

        if node.is_cluster:
            self._dispatch(ClusterClicked(node.id, node.x or 0.0, node.y or 0.0))
        return event

    def drag_start(self, node_id: str, x: float, y: float) -> bool:
        if self.transitioning:
            return False
        if not self.layout.pin(node_id, x, y):
            return False
        self.dragging_id = node_id
        return True

    def drag(self, node_id: str, dx: float, dy: float) -> bool:
        if node_id != self.dragging_id:
            return False
        node = self.node(node_id)
        return self.layout.move_pinned(node_id, node.fx + dx, node.fy + dy)

    def drag_end(self, node_id: str) -> bool:
        if node_id != self.dragging_id:
            return False
        self.dragging_id = None
        return self.layout.release(node_id)

    def focus(self, node_id: str | None, depth: int = 1) -> HighlightState:
        """Highlight everything within ``depth`` hops of a node (0 = all).

        Passing None clears the focus highlight.

        Raises:
            ValueError: Depth outside the supported selector values
        """
        if depth not in FOCUS_DEPTHS:
            raise ValueError(f"Focus depth must be one of {FOCUS_DEPTHS}, got {depth}")
        if node_id is None or self.node(node_id) is None:
            self._focus = EMPTY_HIGHLIGHT
        else:
            self._focus = focus_highlight(self.working_graph, node_id, depth)
        return self.highlight

    def resize(self, width: int, height: int) -> None:
        """Resize the drawing surface only; layout and mode are untouched."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid surface size {width}x{height}")
        self.viewport.width = width
        self.viewport.height = height

    def toggle_overview(self) -> bool:
        self.overview_visible = not self.overview_visible
        if self.on_toggle_overview is not None:
            self.on_toggle_overview(self.overview_visible)
        return self.overview_visible

    def notify(self, notice: Notice) -> None:
        logger.debug(f"Notice [{notice.level}]: {notice.message}")
        if self.on_notice is not None:
            self.on_notice(notice)

    # -------- frame loop --------

    def tick(self, dt_ms: float | None = None) -> None:
        """One frame: step the layout, then fire timers that came due."""
        if self.closed:
            return
        if dt_ms is None:
            dt_ms = self.config.timing.frame_interval_ms

        was_running = self.layout.running
        self.layout.tick()
        if was_running and self.layout.settled:
            self._dispatch(LayoutSettled())
        self.timers.advance(dt_ms)

    def run_until_settled(self, max_ticks: int = DEFAULT_SETTLE_BUDGET) -> int:
        """Tick until the layout is idle and no transition is in flight.

        Returns:
            Number of frames run
        """
        frames = 0
        while frames < max_ticks and not self.closed:
            if not self.layout.running and not self.transitioning:
                break
            self.tick()
            frames += 1
        return frames

    async def run(self, frame_interval_ms: float | None = None) -> None:
        """Drive ``tick`` on the event loop until ``teardown``."""
        interval = frame_interval_ms or self.config.timing.frame_interval_ms
        logger.debug(f"Frame loop started ({interval}ms)")
        while not self.closed:
            self.tick(interval)
            await asyncio.sleep(interval / 1000)
        logger.debug("Frame loop stopped")

    def teardown(self) -> None:
        """Stop the layout loop and discard every pending timer."""
        self.timers.cancel_all()
        self.layout.stop()
        self.overlay = None
        self.closed = True

    def frame(self) -> Frame:
        """Compute the glyphs for the current state."""
        graph = self.working_graph
        if self.projection is not None and self.mode is ViewMode.SUBGRAPH_DETAIL:
            visible = self.projection.node_ids
            graph = WorkingGraph(
                nodes=[n for n in graph.nodes if n.id in visible],
                edges=list(self.projection.edges),
            )
        return self.renderer.render(
            graph,
            self.mode,
            self.camera,
            self.viewport,
            highlight=self.highlight,
            search_active=self.search_active,
            overlay=self.overlay,
        )

    def summary(self) -> dict[str, Any]:
        """Counts and flags the host may display."""
        data: dict[str, Any] = {
            "title": self.title,
            "mode": str(self.mode),
            "zoom": self.camera.zoom,
            "transitioning": self.transitioning,
            "overlay": self.overlay is not None,
            "overview_visible": self.overview_visible,
            "files": 0,
            "functions": 0,
            "calls": 0,
            "file_links": 0,
            "selected": self.selected_id,
            "search": None,
        }
        if self.graph is not None:
            data.update(
                files=len(self.graph.cluster.nodes),
                functions=len(self.graph.detail.nodes),
                calls=len(self.graph.detail.edges),
                file_links=len(self.graph.cluster.edges),
            )
        if self.subgraph is not None and self.projection is not None:
            data["search"] = {
                "query": self.subgraph.query,
                "filter": str(self.edge_filter_mode),
                "matched": len(self.subgraph.matched_ids),
                "neighbors": len(self.subgraph.neighbor_ids),
                "nodes": len(self.projection.node_ids),
                "edges": len(self.projection.edges),
                "in_edges": self.subgraph.in_edge_count,
                "out_edges": self.subgraph.out_edge_count,
            }
        return data

    # -------- view command execution --------

    def _dispatch(self, event: ViewEvent) -> None:
        self.state, commands = self.controller.handle(event, self.state)
        for command in commands:
            self._execute(command)

    def _execute(self, command: ViewCommand) -> None:
        if isinstance(command, SwapGraph):
            self._swap_graph(command.mode)
        elif isinstance(command, ConfigureForces):
            self.layout.configure(self.config.forces_for(command.mode))
        elif isinstance(command, Reheat):
            self.layout.reheat()
            if command.warmup:
                self.layout.warm_up()
        elif isinstance(command, MoveCamera):
            self.camera.zoom = self._clamp_zoom(command.zoom)
            self.camera.center_x, self.camera.center_y = command.center
        elif isinstance(command, FitCamera):
            self._fit_camera()
        elif isinstance(command, ShowOverlay):
            self.overlay = f"Switching to {command.mode} view..."
        elif isinstance(command, HideOverlay):
            self.overlay = None
        elif isinstance(command, StartTimer):
            self._start_timer(command)
        elif isinstance(command, CancelTimer):
            self.timers.cancel(self._timer_name(command.kind, command.transition_id))
        elif isinstance(command, ReportStall):
            self._report_stall(command)
        else:
            raise TypeError(f"Unknown view command: {command!r}")

    def _swap_graph(self, mode: ViewMode) -> None:
        if self.graph is None:
            return
        if mode is ViewMode.CLUSTER:
            graph = self.graph.cluster
        elif mode is ViewMode.DETAIL:
            graph = self.graph.detail
        else:
            graph = self.subgraph.graph if self.subgraph else WorkingGraph()
        if self.dragging_id is not None:
            self.layout.release(self.dragging_id)
        self._hover = EMPTY_HIGHLIGHT
        self._focus = EMPTY_HIGHLIGHT
        self.hovered_id = None
        self.dragging_id = None
        self.layout.set_graph(graph)

    @staticmethod
    def _timer_name(kind: TimerKind, transition_id: int) -> str:
        return f"{kind}:{transition_id}"

    def _start_timer(self, command: StartTimer) -> None:
        tid = command.transition_id
        if command.kind is TimerKind.OVERLAY:
            event: ViewEvent = OverlayDelayElapsed(tid)
        else:
            event = FallbackElapsed(tid)
        self.timers.call_later(
            command.delay_ms,
            lambda: self._dispatch(event),
            name=self._timer_name(command.kind, tid),
        )

    def _report_stall(self, command: ReportStall) -> None:
        stall = LayoutStallTimeout(
            f"Layout did not settle in {command.mode} view; interaction re-enabled",
            context={
                "transition_id": command.transition_id,
                "mode": str(command.mode),
                "ticks": self.layout.ticks,
                "alpha": self.layout.alpha,
            },
        )
        logger.warning(str(stall))
        self.last_stall = stall
        self.notify(Notice(level="warning", message=str(stall), context=stall.context))

    def _fit_camera(self) -> None:
        settings = self.config.zoom
        box = self.layout.bounding_box()
        if box is None:
            self.camera.zoom = UNPOSITIONED_FIT_ZOOM
            self.camera.center_x = self.camera.center_y = 0.0
            return

        min_x, min_y, max_x, max_y = box
        width = max(max_x - min_x, settings.fit_min_extent)
        height = max(max_y - min_y, settings.fit_min_extent)
        fit = (
            min(self.viewport.width / width, self.viewport.height / height)
            * settings.fit_padding
        )
        self.camera.zoom = min(max(fit, settings.fit_min_zoom), settings.fit_max_zoom)
        self.camera.center_x = (min_x + max_x) / 2
        self.camera.center_y = (min_y + max_y) / 2
        logger.debug(
            f"Camera fit to subgraph: zoom={self.camera.zoom:.2f} "
            f"center=({self.camera.center_x:.1f}, {self.camera.center_y:.1f})"
        )

    def _clamp_zoom(self, level: float) -> float:
        settings = self.config.zoom
        return min(max(level, settings.min_zoom), settings.max_zoom)

