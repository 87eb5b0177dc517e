"""Export rendered frames and graph data to JSON and static SVG."""

import math
from html import escape
from pathlib import Path
from typing import Any

import orjson
from loguru import logger

from ....core.models import NormalizedGraph
from ....core.renderer import Arrow, EdgeGlyph, Frame, NodeGlyph

# Arrowhead half-width as a fraction of its length
ARROW_HALF_WIDTH = 0.35


def graph_to_dict(graph: NormalizedGraph) -> dict[str, Any]:
    """Plain-dict view of a normalized graph (both aggregation levels)."""
    return {
        "detail": {
            "nodes": [
                {
                    "id": n.id,
                    "name": n.name,
                    "file": n.file,
                    "degree": n.degree,
                    "in_degree": n.in_degree,
                    "out_degree": n.out_degree,
                }
                for n in graph.detail.nodes
            ],
            "edges": [{"source": e.source, "target": e.target} for e in graph.detail.edges],
        },
        "cluster": {
            "nodes": [
                {
                    "id": c.id,
                    "name": c.name,
                    "member_count": c.member_count,
                    "degree": c.degree,
                    "avg_degree": c.avg_degree,
                }
                for c in graph.cluster.nodes
            ],
            "edges": [
                {"source": e.source, "target": e.target, "count": e.count}
                for e in graph.cluster.edges
            ],
        },
        "dropped_nodes": graph.dropped_nodes,
        "dropped_edges": graph.dropped_edges,
    }


def export_to_json(data: Frame | NormalizedGraph | dict[str, Any], output_path: Path) -> Path:
    """Export a frame, a normalized graph or a plain dict to a JSON file.

    Args:
        data: Frame, NormalizedGraph or JSON-serializable dict
        output_path: Path to output JSON file

    Returns:
        The written path
    """
    if isinstance(data, Frame):
        payload = data.to_dict()
    elif isinstance(data, NormalizedGraph):
        payload = graph_to_dict(data)
    else:
        payload = data

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
    logger.info(f"Exported JSON to {output_path}")
    return output_path


def _arrow_points(arrow: Arrow) -> str:
    cos, sin = math.cos(arrow.angle), math.sin(arrow.angle)
    back_x = arrow.x - arrow.length * cos
    back_y = arrow.y - arrow.length * sin
    half = arrow.length * ARROW_HALF_WIDTH
    points = [
        (arrow.x, arrow.y),
        (back_x - half * sin, back_y + half * cos),
        (back_x + half * sin, back_y - half * cos),
    ]
    return " ".join(f"{x:.2f},{y:.2f}" for x, y in points)


def _edge_svg(edge: EdgeGlyph) -> list[str]:
    parts = [
        f'<line x1="{edge.x1:.2f}" y1="{edge.y1:.2f}" x2="{edge.x2:.2f}" '
        f'y2="{edge.y2:.2f}" stroke="{edge.color}" stroke-width="{edge.width}"/>'
    ]
    if edge.arrow is not None:
        parts.append(f'<polygon points="{_arrow_points(edge.arrow)}" fill="{edge.arrow.color}"/>')
    return parts


def _node_svg(node: NodeGlyph) -> list[str]:
    parts = [
        f'<circle cx="{node.x:.2f}" cy="{node.y:.2f}" r="{node.radius:.2f}" '
        f'fill="{node.fill}" stroke="{node.stroke}" stroke-width="{node.stroke_width}"'
        + (' filter="url(#glow)"' if node.glow else "")
        + "/>"
    ]
    label = node.label
    if label is not None:
        # Approximate text box; SVG has no text metrics without a browser
        width = len(label.text) * label.font_size * 0.6 + 8
        height = label.font_size + 6
        top = label.y if not node.is_cluster else label.y - height / 2
        border = f' stroke="{label.border_color}"' if label.border_color else ""
        parts.append(
            f'<rect x="{label.x - width / 2:.2f}" y="{top:.2f}" width="{width:.2f}" '
            f'height="{height:.2f}" rx="3" fill="{label.box_color}"{border}/>'
        )
        parts.append(
            f'<text x="{label.x:.2f}" y="{top + height / 2:.2f}" font-size="{label.font_size:.2f}" '
            f'fill="#fff" text-anchor="middle" dominant-baseline="central">'
            f"{escape(label.text)}</text>"
        )
    badge = node.badge
    if badge is not None:
        parts.append(
            f'<circle cx="{badge.x:.2f}" cy="{badge.y:.2f}" r="{badge.radius:.2f}" fill="{badge.color}"/>'
        )
        parts.append(
            f'<text x="{badge.x:.2f}" y="{badge.y:.2f}" font-size="{badge.radius:.2f}" '
            f'fill="#fff" text-anchor="middle" dominant-baseline="central">{escape(badge.text)}</text>'
        )
    return parts


def render_svg(frame: Frame) -> str:
    """Render a frame as a standalone SVG document.

    World coordinates are mapped to the viewport with the frame's camera:
    the camera centre lands in the middle of the surface, scaled by zoom.
    """
    width, height = frame.viewport.width, frame.viewport.height
    camera = frame.camera
    transform = (
        f"translate({width / 2:.2f},{height / 2:.2f}) scale({camera.zoom:.4f}) "
        f"translate({-camera.center_x:.2f},{-camera.center_y:.2f})"
    )

    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}" font-family="sans-serif">',
        "<defs>",
        '<filter id="glow" x="-50%" y="-50%" width="200%" height="200%">'
        '<feGaussianBlur stdDeviation="6" result="blur"/>'
        '<feMerge><feMergeNode in="blur"/><feMergeNode in="SourceGraphic"/></feMerge>'
        "</filter>",
        "</defs>",
        f'<rect width="100%" height="100%" fill="{frame.background}"/>',
        f'<g transform="{transform}">',
    ]
    for edge in frame.edges:
        lines.extend(_edge_svg(edge))
    for node in frame.nodes:
        lines.extend(_node_svg(node))
    lines.append("</g>")

    if frame.overlay:
        lines.append(
            f'<text x="{width / 2}" y="{height / 2}" font-size="18" fill="#fff" '
            f'text-anchor="middle">{escape(frame.overlay)}</text>'
        )
    lines.append("</svg>")
    return "\n".join(lines)


def export_to_svg(frame: Frame, output_path: Path) -> Path:
    """Export a rendered frame to a static SVG file.

    Args:
        frame: Frame computed by the engine
        output_path: Path to output SVG file

    Returns:
        The written path
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_svg(frame), encoding="utf-8")
    logger.info(
        f"Exported SVG to {output_path} ({len(frame.nodes)} nodes, {len(frame.edges)} edges)"
    )
    return output_path
