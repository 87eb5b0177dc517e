"""Tests for frame and graph exporters."""

from __future__ import annotations

import orjson

from callgraph_viz.cli.commands.visualize.exporters import (
    export_to_json,
    export_to_svg,
    graph_to_dict,
    render_svg,
)


def test_graph_to_dict(normalized):
    data = graph_to_dict(normalized)
    assert len(data["detail"]["nodes"]) == 10
    assert len(data["cluster"]["nodes"]) == 3
    counts = {(e["source"], e["target"]): e["count"] for e in data["cluster"]["edges"]}
    assert counts[("src/a.c", "src/b.c")] == 3
    assert data["dropped_nodes"] == 2


def test_export_graph_json(normalized, tmp_path):
    path = export_to_json(normalized, tmp_path / "out" / "graph.json")
    assert orjson.loads(path.read_bytes())["dropped_edges"] == 1


def test_export_frame(settled_engine, tmp_path):
    frame = settled_engine.frame()
    data = orjson.loads(export_to_json(frame, tmp_path / "frame.json").read_bytes())
    assert data["mode"] == "cluster"

    svg = export_to_svg(frame, tmp_path / "frame.svg").read_text()
    assert svg.startswith("<svg")
    assert svg.count("<circle") >= 3
    assert "a.c" in svg


def test_svg_escapes_labels_and_overlay(engine):
    frame = engine.frame()
    frame.overlay = "<loading>"
    svg = render_svg(frame)
    assert "&lt;loading&gt;" in svg
    assert svg.rstrip().endswith("</svg>")


def test_public_api(raw_graph, tmp_path):
    from callgraph_viz.visualization import CallGraphEngine, export_to_svg

    engine = CallGraphEngine()
    engine.load_graph(raw_graph)
    engine.run_until_settled()
    path = export_to_svg(engine.frame(), output_path=tmp_path / "graph.svg")
    engine.teardown()
    assert path.exists()
