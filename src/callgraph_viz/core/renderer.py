"""Per-frame drawing computation.

The renderer turns the active working graph plus interaction state into a
``Frame``: one ``NodeGlyph`` per node and one ``EdgeGlyph`` per edge, all in
world coordinates, together with the camera that maps them to the drawing
surface. Any surface (SVG export, a canvas, a web client) only has to paint
the glyphs.

Styling rules:
    - Radius grows with sqrt(degree) (functions) or sqrt(memberCount) (clusters)
    - Fill follows a two-colour gradient keyed by degree / maxDegree
      (clusters: avgDegree against a fixed ceiling)
    - While a search or highlight is active, everything outside the highlight
      is dimmed to near-zero opacity and loses its label and arrow
    - Arrowheads sit on the target circle's boundary, never on its centre
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any

from ..config.defaults import (
    BACKGROUND_COLOR,
    CLUSTER_GRADIENT,
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    DEFAULT_ZOOM,
    FUNCTION_GRADIENT,
)
from ..config.engine_config import RenderSettings
from .models import (
    EMPTY_HIGHLIGHT,
    ClusterNode,
    GraphEdge,
    GraphNode,
    HighlightState,
    ViewMode,
    WorkingGraph,
)

RGB = tuple[int, int, int]

IN_EDGE_COLOR = "rgba(100, 255, 100, 0.8)"
OUT_EDGE_COLOR = "rgba(255, 150, 100, 0.8)"
HIGHLIGHT_EDGE_COLOR = "rgba(100, 150, 255, 0.8)"
DIM_EDGE_COLOR = "rgba(150, 150, 150, 0.05)"
EDGE_COLOR = "rgba(150, 150, 150, 0.5)"

IN_ARROW_COLOR = "rgba(100, 255, 100, 0.9)"
OUT_ARROW_COLOR = "rgba(255, 150, 100, 0.9)"
HIGHLIGHT_ARROW_COLOR = "rgba(100, 150, 255, 0.9)"
DIM_ARROW_COLOR = "rgba(180, 180, 180, 0.05)"
ARROW_COLOR = "rgba(180, 180, 180, 0.7)"

ARROW_LENGTH = 10.0
HIGHLIGHT_ARROW_LENGTH = 12.0
GLOW_BLUR = 25.0


@dataclass
class Camera:
    zoom: float = DEFAULT_ZOOM
    center_x: float = 0.0
    center_y: float = 0.0


@dataclass
class Viewport:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT


@dataclass
class Label:
    text: str
    x: float
    y: float
    font_size: float
    box_color: str
    border_color: str | None = None


@dataclass
class Badge:
    text: str
    x: float
    y: float
    radius: float
    color: str


@dataclass
class NodeGlyph:
    id: str
    x: float
    y: float
    radius: float
    fill: str
    stroke: str
    stroke_width: float
    glow: float
    dimmed: bool
    highlighted: bool
    is_cluster: bool
    label: Label | None = None
    badge: Badge | None = None


@dataclass
class Arrow:
    x: float
    y: float
    length: float
    angle: float
    rel_pos: float
    color: str


@dataclass
class EdgeGlyph:
    key: str
    source: str
    target: str
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float
    dimmed: bool
    arrow: Arrow | None = None
    count: int = 1


@dataclass
class Frame:
    mode: ViewMode
    camera: Camera
    viewport: Viewport
    nodes: list[NodeGlyph] = field(default_factory=list)
    edges: list[EdgeGlyph] = field(default_factory=list)
    background: str = BACKGROUND_COLOR
    overlay: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def node(self, node_id: str) -> NodeGlyph | None:
        return next((g for g in self.nodes if g.id == node_id), None)

    def edge(self, key: str) -> EdgeGlyph | None:
        return next((g for g in self.edges if g.key == key), None)


# -------- styling helpers --------


def node_radius(node: GraphNode) -> float:
    """Drawn radius; monotonically increasing in degree / member count."""
    if isinstance(node, ClusterNode):
        return math.sqrt(node.member_count) * 4 + 12
    return math.sqrt(node.degree) * 3 + 6


def interpolate(gradient: tuple[RGB, RGB], ratio: float) -> RGB:
    """Point on a two-colour gradient; ``ratio`` is clamped to [0, 1]."""
    ratio = min(max(ratio, 0.0), 1.0)
    low, high = gradient
    return tuple(math.floor(a + (b - a) * ratio) for a, b in zip(low, high))  # type: ignore[return-value]


def node_rgb(node: GraphNode, max_degree: int, avg_degree_ceiling: float) -> RGB:
    if isinstance(node, ClusterNode):
        return interpolate(CLUSTER_GRADIENT, node.avg_degree / avg_degree_ceiling)
    ratio = node.degree / max_degree if max_degree else 0.0
    return interpolate(FUNCTION_GRADIENT, ratio)


def rgb(color: RGB) -> str:
    return f"rgb({color[0]}, {color[1]}, {color[2]})"


def rgba(color: RGB, alpha: float) -> str:
    return f"rgba({color[0]}, {color[1]}, {color[2]}, {alpha})"


def truncate_text(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[: max(max_chars - 3, 0)] + "..."


def arrow_rel_pos(
    x1: float, y1: float, x2: float, y2: float, target_radius: float
) -> float:
    """Relative position (0 = source, 1 = target centre) of the arrow tip.

    The tip sits where the edge meets the target circle. Degenerate edges
    (zero length, or shorter than the radius) put it at the midpoint.
    """
    length = math.hypot(x2 - x1, y2 - y1)
    if length == 0 or length <= target_radius:
        return 0.5
    return 1 - target_radius / length


def label_visible(
    node: GraphNode,
    scale: float,
    highlighted: bool,
    dimmed: bool,
    settings: RenderSettings,
) -> bool:
    if dimmed:
        return False
    if isinstance(node, ClusterNode):
        return True
    return (
        highlighted
        or (scale > settings.label_zoom_threshold and node.degree > settings.label_min_degree)
        or scale > settings.label_always_zoom
    )


def node_tooltip(node: GraphNode) -> str:
    if isinstance(node, ClusterNode):
        return (
            f"{node.name}\n{node.member_count} functions\n"
            f"Total degree: {node.degree}\nAvg degree: {node.avg_degree:.1f}"
        )
    return (
        f"{node.name}\nFile: {node.file}\nDegree: {node.degree}\n"
        f"In: {node.in_degree}, Out: {node.out_degree}"
    )


class Renderer:
    """Computes glyphs for one frame of the active working graph."""

    def __init__(self, settings: RenderSettings | None = None) -> None:
        self.settings = settings or RenderSettings()

    def render(
        self,
        graph: WorkingGraph,
        mode: ViewMode,
        camera: Camera,
        viewport: Viewport,
        highlight: HighlightState = EMPTY_HIGHLIGHT,
        search_active: bool = False,
        overlay: str | None = None,
    ) -> Frame:
        emphasis = search_active or highlight.active
        max_degree = graph.max_degree
        frame = Frame(mode=mode, camera=camera, viewport=viewport, overlay=overlay)

        for edge in graph.edges:
            glyph = self._edge_glyph(graph, edge, highlight, emphasis)
            if glyph is not None:
                frame.edges.append(glyph)

        for node in graph.nodes:
            if node.x is None or node.y is None:
                continue
            frame.nodes.append(
                self._node_glyph(node, max_degree, camera.zoom, highlight, emphasis)
            )
        return frame

    def _node_glyph(
        self,
        node: GraphNode,
        max_degree: int,
        scale: float,
        highlight: HighlightState,
        emphasis: bool,
    ) -> NodeGlyph:
        settings = self.settings
        highlighted = node.id in highlight.node_ids
        dimmed = emphasis and not highlighted
        emphasized = highlighted and emphasis
        radius = node_radius(node)
        color = node_rgb(node, max_degree, settings.cluster_avg_degree_ceiling)
        is_cluster = isinstance(node, ClusterNode)

        if dimmed:
            fill = rgba(color, settings.dim_alpha)
            stroke = "rgba(255, 255, 255, 0.02)"
        elif is_cluster:
            fill = rgba(color, 1.0 if highlighted else 0.8)
            stroke = "rgba(255, 255, 255, 1.0)" if highlighted else "#fff"
        else:
            fill = rgb(color)
            stroke = "rgba(255, 255, 255, 1.0)" if emphasized else "#fff"

        if is_cluster:
            stroke_width = 4.0 if highlighted else 2.0
        else:
            stroke_width = 3.0 if emphasized else 1.5

        glyph = NodeGlyph(
            id=node.id,
            x=node.x,
            y=node.y,
            radius=radius,
            fill=fill,
            stroke=stroke,
            stroke_width=stroke_width,
            glow=GLOW_BLUR if emphasized else 0.0,
            dimmed=dimmed,
            highlighted=highlighted,
            is_cluster=is_cluster,
        )

        if label_visible(node, scale, highlighted, dimmed, settings):
            if is_cluster:
                self._cluster_label(glyph, node, scale, highlighted)
            else:
                self._function_label(glyph, node, scale, highlighted)
        return glyph

    def _cluster_label(
        self, glyph: NodeGlyph, node: ClusterNode, scale: float, highlighted: bool
    ) -> None:
        font_size = max(12 / scale, 9)
        max_chars = math.floor(15 + scale * 20)
        glyph.label = Label(
            text=truncate_text(node.name, max_chars),
            x=node.x,
            y=node.y - 3,
            font_size=font_size,
            box_color="rgba(50, 100, 200, 0.85)" if highlighted else "rgba(0, 0, 0, 0.75)",
        )
        badge_radius = font_size * 0.6
        glyph.badge = Badge(
            text=str(node.member_count),
            x=node.x + glyph.radius - badge_radius,
            y=node.y - glyph.radius + badge_radius,
            radius=badge_radius,
            color="rgba(255, 100, 100, 0.9)",
        )

    def _function_label(
        self, glyph: NodeGlyph, node: GraphNode, scale: float, highlighted: bool
    ) -> None:
        settings = self.settings
        font_size = max(11 / scale, 8)
        max_chars = math.floor(12 + scale * 15)
        if highlighted:
            max_chars = math.floor(max_chars * 1.5)
        glyph.label = Label(
            text=truncate_text(node.name, max_chars),
            x=node.x,
            y=node.y + glyph.radius + 4,
            font_size=font_size,
            box_color="rgba(50, 120, 220, 0.9)" if highlighted else "rgba(20, 20, 20, 0.85)",
            border_color="rgba(100, 180, 255, 0.8)" if highlighted else None,
        )
        if node.degree > settings.badge_min_degree and scale > settings.badge_zoom_threshold:
            badge_radius = font_size * 0.5
            glyph.badge = Badge(
                text=str(node.degree),
                x=node.x + glyph.radius - badge_radius,
                y=node.y - glyph.radius + badge_radius,
                radius=badge_radius,
                color="rgba(255, 150, 50, 0.9)",
            )

    def _edge_glyph(
        self,
        graph: WorkingGraph,
        edge: GraphEdge,
        highlight: HighlightState,
        emphasis: bool,
    ) -> EdgeGlyph | None:
        source = graph.node(edge.source)
        target = graph.node(edge.target)
        if source is None or target is None or source.x is None or target.x is None:
            return None

        key = edge.key
        is_in = key in highlight.in_edge_keys
        is_out = key in highlight.out_edge_keys
        highlighted = key in highlight.edge_keys
        dimmed = emphasis and not (highlighted or is_in or is_out)

        if is_in:
            color, arrow_color = IN_EDGE_COLOR, IN_ARROW_COLOR
        elif is_out:
            color, arrow_color = OUT_EDGE_COLOR, OUT_ARROW_COLOR
        elif highlighted:
            color, arrow_color = HIGHLIGHT_EDGE_COLOR, HIGHLIGHT_ARROW_COLOR
        elif emphasis:
            color, arrow_color = DIM_EDGE_COLOR, DIM_ARROW_COLOR
        else:
            color, arrow_color = EDGE_COLOR, ARROW_COLOR

        glyph = EdgeGlyph(
            key=key,
            source=edge.source,
            target=edge.target,
            x1=source.x,
            y1=source.y,
            x2=target.x,
            y2=target.y,
            color=color,
            width=3.0 if highlighted else 1.0,
            dimmed=dimmed,
            count=getattr(edge, "count", 1),
        )

        if not (emphasis and not highlighted):
            rel = arrow_rel_pos(source.x, source.y, target.x, target.y, node_radius(target))
            glyph.arrow = Arrow(
                x=source.x + (target.x - source.x) * rel,
                y=source.y + (target.y - source.y) * rel,
                length=HIGHLIGHT_ARROW_LENGTH if highlighted else ARROW_LENGTH,
                angle=math.atan2(target.y - source.y, target.x - source.x),
                rel_pos=rel,
                color=arrow_color,
            )
        return glyph
