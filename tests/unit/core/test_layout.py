"""Tests for the force-directed layout engine."""

from __future__ import annotations

import math
import random

import pytest

from callgraph_viz.config.engine_config import ForceSettings, LayoutSettings
from callgraph_viz.core.layout import LayoutEngine, collide_radius, seed_positions
from callgraph_viz.core.models import Node, WorkingGraph


@pytest.fixture(autouse=True)
def seeded():
    random.seed(1234)


def _finite(graph):
    return all(math.isfinite(n.x) and math.isfinite(n.y) for n in graph.nodes)


class TestSeeding:
    def test_unpositioned_nodes_get_spiral_positions(self):
        nodes = [Node(id=str(i), name=str(i), file="f", degree=1) for i in range(5)]
        assert seed_positions(nodes) == 5
        positions = {(round(n.x, 6), round(n.y, 6)) for n in nodes}
        assert len(positions) == 5

    def test_existing_positions_are_kept(self):
        node = Node(id="a", name="a", file="f", degree=1, x=3.0, y=4.0)
        assert seed_positions([node]) == 0
        assert (node.x, node.y) == (3.0, 4.0)

    def test_pinned_node_starts_at_pin(self):
        node = Node(id="a", name="a", file="f", degree=1, fx=7.0, fy=-2.0)
        seed_positions([node])
        assert (node.x, node.y) == (7.0, -2.0)


class TestSimulation:
    def test_settles_within_cooldown(self, normalized):
        layout = LayoutEngine()
        layout.set_graph(normalized.detail)
        steps = layout.run(max_ticks=1000)
        assert layout.settled
        assert not layout.running
        assert steps <= layout.settings.cooldown_ticks
        assert _finite(normalized.detail)

    def test_alpha_min_stops_early(self, normalized):
        settings = LayoutSettings(alpha_min=0.5, cooldown_ticks=1000)
        layout = LayoutEngine(settings)
        layout.set_graph(normalized.cluster)
        steps = layout.run(max_ticks=1000)
        assert layout.settled
        assert steps < 30

    def test_warmup_does_not_consume_cooldown(self, normalized):
        layout = LayoutEngine()
        layout.set_graph(normalized.cluster, warmup=True)
        assert layout.ticks == 0
        assert layout.alpha < 0.1
        assert layout.running

    def test_tick_after_stop(self, normalized):
        layout = LayoutEngine()
        layout.set_graph(normalized.detail)
        layout.stop()
        assert layout.tick() is False
        assert not layout.settled

    def test_reheat_restarts(self, normalized):
        layout = LayoutEngine()
        layout.set_graph(normalized.cluster)
        layout.run()
        layout.reheat()
        assert layout.running
        assert layout.alpha == 1.0
        assert layout.ticks == 0

    def test_collide_separates_coincident_nodes(self):
        forces = ForceSettings(charge=0.0, link_strength=0.0, center_strength=0.0)
        settings = LayoutSettings(detail=forces)
        a = Node(id="a", name="a", file="f", degree=1, x=0.0, y=0.0)
        b = Node(id="b", name="b", file="f", degree=1, x=0.0, y=0.0)
        layout = LayoutEngine(settings)
        layout.set_graph(WorkingGraph(nodes=[a, b]))
        layout.run(50)
        assert math.hypot(a.x - b.x, a.y - b.y) > 1.0

    def test_many_body_repels(self):
        forces = ForceSettings(link_strength=0.0, center_strength=0.0, collide_strength=0.0)
        settings = LayoutSettings(detail=forces)
        a = Node(id="a", name="a", file="f", degree=1, x=-1.0, y=0.0)
        b = Node(id="b", name="b", file="f", degree=1, x=1.0, y=0.0)
        layout = LayoutEngine(settings)
        layout.set_graph(WorkingGraph(nodes=[a, b]))
        layout.run(20)
        assert b.x - a.x > 2.0

    def test_configure_swaps_forces(self):
        layout = LayoutEngine()
        preset = ForceSettings(charge=-1.0)
        layout.configure(preset)
        assert layout.forces is preset

    def test_empty_graph(self):
        layout = LayoutEngine()
        layout.set_graph(WorkingGraph())
        layout.run()
        assert layout.settled
        assert layout.bounding_box() is None


class TestDragPinning:
    def test_pin_move_release(self, normalized):
        layout = LayoutEngine()
        layout.set_graph(normalized.detail)
        layout.run()

        assert layout.pin("b1", 50.0, 60.0)
        assert layout.running
        assert layout.alpha_target == layout.settings.drag_alpha_target
        layout.tick()
        node = normalized.detail.node("b1")
        assert (node.x, node.y) == (50.0, 60.0)

        assert layout.move_pinned("b1", 80.0, 90.0)
        layout.tick()
        assert (node.x, node.y) == (80.0, 90.0)

        assert layout.release("b1")
        assert node.fx is None and node.fy is None
        assert layout.alpha_target == 0.0

    def test_new_graph_drops_drag_alpha_target(self, normalized):
        layout = LayoutEngine()
        layout.set_graph(normalized.detail)
        layout.pin("b1", 0.0, 0.0)
        layout.set_graph(normalized.cluster)
        assert layout.alpha_target == 0.0

    def test_unknown_node(self, normalized):
        layout = LayoutEngine()
        layout.set_graph(normalized.detail)
        assert not layout.pin("ghost", 0, 0)
        assert not layout.move_pinned("a1", 0, 0)
        assert not layout.release("ghost")


class TestGeometry:
    def test_collide_radius_grows_with_size(self):
        forces = ForceSettings()
        small = Node(id="s", name="s", file="f", degree=1)
        big = Node(id="b", name="b", file="f", degree=16)
        assert collide_radius(small, forces) == pytest.approx(52.0)
        assert collide_radius(big, forces) == pytest.approx(88.0)

    def test_bounding_box(self):
        nodes = [
            Node(id="a", name="a", file="f", degree=1, x=-5.0, y=2.0),
            Node(id="b", name="b", file="f", degree=1, x=10.0, y=-3.0),
        ]
        layout = LayoutEngine()
        layout.graph = WorkingGraph(nodes=nodes)
        assert layout.bounding_box() == (-5.0, -3.0, 10.0, 2.0)
