"""Force-directed layout for the active working graph.

This module implements a d3-force style simulation:
    - Many-body: pairwise charge (negative = repulsion), numpy vectorized
    - Link: spring along each edge toward a target distance
    - Center: shifts the whole layout toward the origin
    - Collide: pairwise overlap resolution with a per-node radius

Design Principles:
    - Iterative: one ``tick()`` per frame, energy (alpha) decays each tick
    - Restartable: ``reheat()`` after any topology or parameter change
    - Stochastic: coincident points are separated with a random jiggle, so
      two runs over the same graph need not agree

Positions live on the node objects themselves; node identity is the id.
"""

from __future__ import annotations

import math
import random

import numpy as np
from loguru import logger

from ..config.engine_config import ForceSettings, LayoutSettings
from .models import GraphNode, WorkingGraph

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))
DISTANCE_MIN2 = 1.0


def _jiggle() -> float:
    return (random.random() - 0.5) * 1e-6


def collide_radius(node: GraphNode, forces: ForceSettings) -> float:
    """Collision radius, a function of node size (degree or member count)."""
    return math.sqrt(node.size) * forces.collide_scale + forces.collide_base


def seed_positions(nodes: list[GraphNode]) -> int:
    """Place nodes without coordinates on a phyllotaxis spiral.

    Returns:
        Number of nodes that were seeded
    """
    seeded = 0
    for i, node in enumerate(nodes):
        if node.fx is not None:
            node.x = node.fx
        if node.fy is not None:
            node.y = node.fy
        if node.x is None or node.y is None:
            radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
            angle = i * INITIAL_ANGLE
            node.x = radius * math.cos(angle)
            node.y = radius * math.sin(angle)
            node.vx = node.vy = 0.0
            seeded += 1
    return seeded


class LayoutEngine:
    """Iterative force simulation over one working graph at a time."""

    def __init__(self, settings: LayoutSettings | None = None) -> None:
        self.settings = settings or LayoutSettings()
        self.forces = self.settings.detail
        self.graph = WorkingGraph()
        self.alpha = 1.0
        self.alpha_target = 0.0
        self.ticks = 0
        self.running = False
        self.settled = False
        self._link_bias: list[float] = []
        self._edge_pairs: list[tuple[GraphNode, GraphNode]] = []

    # -------- configuration --------

    def set_graph(self, graph: WorkingGraph, warmup: bool = False) -> None:
        """Make ``graph`` the simulated graph and restart the simulation.

        Args:
            graph: Working graph whose nodes will be positioned in place
            warmup: Run the configured warm-up ticks immediately
        """
        self.graph = graph
        self.alpha_target = 0.0
        seeded = seed_positions(graph.nodes)
        self._index_links()
        logger.debug(
            f"Layout graph set: {len(graph.nodes)} nodes ({seeded} seeded), "
            f"{len(self._edge_pairs)} links"
        )
        self.reheat()
        if warmup:
            self.warm_up()

    def configure(self, forces: ForceSettings) -> None:
        """Swap the force preset (takes effect on the next tick)."""
        self.forces = forces

    def _index_links(self) -> None:
        count: dict[str, int] = {}
        pairs = []
        for edge in self.graph.edges:
            source = self.graph.node(edge.source)
            target = self.graph.node(edge.target)
            if source is None or target is None:
                continue
            pairs.append((source, target))
            count[source.id] = count.get(source.id, 0) + 1
            count[target.id] = count.get(target.id, 0) + 1
        self._edge_pairs = pairs
        self._link_bias = [
            count[s.id] / (count[s.id] + count[t.id]) for s, t in pairs
        ]

    # -------- lifecycle --------

    def reheat(self) -> None:
        """Restart alpha decay so the current configuration can re-settle."""
        self.alpha = 1.0
        self.ticks = 0
        self.running = True
        self.settled = False

    def warm_up(self) -> None:
        """Run the warm-up steps without counting them against the cooldown."""
        for _ in range(self.settings.warmup_ticks):
            self._step()
        logger.debug(f"Warm-up complete: alpha={self.alpha:.4f}")

    def stop(self) -> None:
        self.running = False

    def tick(self) -> bool:
        """Advance the simulation by one step.

        Returns:
            True if the simulation is still running after this tick
        """
        if not self.running:
            return False

        self._step()
        self.ticks += 1

        if self.alpha < self.settings.alpha_min or self.ticks >= self.settings.cooldown_ticks:
            self.running = False
            self.settled = True
            logger.debug(
                f"Layout settled after {self.ticks} ticks (alpha={self.alpha:.4f})"
            )
        return self.running

    def run(self, max_ticks: int | None = None) -> int:
        """Tick until settled or ``max_ticks`` elapsed; returns ticks run."""
        budget = max_ticks if max_ticks is not None else self.settings.cooldown_ticks
        steps = 0
        while self.running and steps < budget:
            self.tick()
            steps += 1
        return steps

    # -------- drag pinning --------

    def pin(self, node_id: str, x: float, y: float) -> bool:
        node = self.graph.node(node_id)
        if node is None:
            return False
        node.fx, node.fy = x, y
        self.alpha_target = self.settings.drag_alpha_target
        self.reheat()
        return True

    def move_pinned(self, node_id: str, x: float, y: float) -> bool:
        node = self.graph.node(node_id)
        if node is None or node.fx is None:
            return False
        node.fx, node.fy = x, y
        if not self.running:
            self.reheat()
        return True

    def release(self, node_id: str) -> bool:
        node = self.graph.node(node_id)
        if node is None:
            return False
        node.fx = node.fy = None
        self.alpha_target = 0.0
        return True

    # -------- integration --------

    def _step(self) -> None:
        nodes = self.graph.nodes
        self.alpha += (self.alpha_target - self.alpha) * self.settings.alpha_decay
        if not nodes:
            return

        self._apply_links()
        self._apply_many_body()
        self._apply_collide()
        self._apply_center()

        friction = 1.0 - self.settings.velocity_decay
        for node in nodes:
            if node.fx is None:
                node.vx *= friction
                node.x += node.vx
            else:
                node.x = node.fx
                node.vx = 0.0
            if node.fy is None:
                node.vy *= friction
                node.y += node.vy
            else:
                node.y = node.fy
                node.vy = 0.0

    def _apply_links(self) -> None:
        distance = self.forces.link_distance
        strength = self.forces.link_strength
        for (source, target), bias in zip(self._edge_pairs, self._link_bias):
            if source is target:
                continue
            x = target.x + target.vx - source.x - source.vx or _jiggle()
            y = target.y + target.vy - source.y - source.vy or _jiggle()
            length = math.sqrt(x * x + y * y)
            length = (length - distance) / length * self.alpha * strength
            x *= length
            y *= length
            target.vx -= x * bias
            target.vy -= y * bias
            source.vx += x * (1 - bias)
            source.vy += y * (1 - bias)

    def _arrays(self) -> tuple[np.ndarray, np.ndarray]:
        nodes = self.graph.nodes
        pos = np.array([(n.x, n.y) for n in nodes], dtype=np.float64)
        vel = np.array([(n.vx, n.vy) for n in nodes], dtype=np.float64)
        return pos, vel

    def _write_velocities(self, vel: np.ndarray) -> None:
        for node, (vx, vy) in zip(self.graph.nodes, vel):
            node.vx = float(vx)
            node.vy = float(vy)

    def _apply_many_body(self) -> None:
        n = len(self.graph.nodes)
        if n < 2 or self.forces.charge == 0:
            return

        pos, vel = self._arrays()
        # delta[i, j] = pos[j] - pos[i]
        delta = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]
        coincident = (delta[..., 0] == 0) & (delta[..., 1] == 0)
        np.fill_diagonal(coincident, False)
        if coincident.any():
            delta[coincident] = (np.random.random((int(coincident.sum()), 2)) - 0.5) * 1e-6

        dist2 = (delta**2).sum(axis=2)
        near = dist2 < DISTANCE_MIN2
        dist2[near] = np.sqrt(DISTANCE_MIN2 * dist2[near])
        np.fill_diagonal(dist2, np.inf)

        weight = self.forces.charge * self.alpha / dist2
        vel += (delta * weight[..., np.newaxis]).sum(axis=1)
        self._write_velocities(vel)

    def _apply_collide(self) -> None:
        nodes = self.graph.nodes
        n = len(nodes)
        if n < 2 or self.forces.collide_strength == 0:
            return

        radii = np.array([collide_radius(node, self.forces) for node in nodes])
        radii2 = radii**2
        pos, vel = self._arrays()
        iu, ju = np.triu_indices(n, k=1)
        strength = self.forces.collide_strength

        for _ in range(self.forces.collide_iterations):
            predicted = pos + vel
            delta = predicted[iu] - predicted[ju]
            reach = radii[iu] + radii[ju]
            dist2 = (delta**2).sum(axis=1)
            overlap = dist2 < reach**2
            if not overlap.any():
                break

            i, j = iu[overlap], ju[overlap]
            d = delta[overlap]
            d2 = dist2[overlap]
            zero = d2 == 0
            if zero.any():
                d[zero] = (np.random.random((int(zero.sum()), 2)) - 0.5) * 1e-6
                d2[zero] = (d[zero] ** 2).sum(axis=1)
            length = np.sqrt(d2)
            scale = (reach[overlap] - length) / length * strength
            push = d * scale[:, np.newaxis]
            share = radii2[j] / (radii2[i] + radii2[j])

            np.add.at(vel, i, push * share[:, np.newaxis])
            np.add.at(vel, j, -push * (1 - share)[:, np.newaxis])

        self._write_velocities(vel)

    def _apply_center(self) -> None:
        nodes = self.graph.nodes
        strength = self.forces.center_strength
        if not nodes or strength == 0:
            return
        sx = sum(n.x for n in nodes) / len(nodes) * strength
        sy = sum(n.y for n in nodes) / len(nodes) * strength
        for node in nodes:
            node.x -= sx
            node.y -= sy

    # -------- queries --------

    def bounding_box(self) -> tuple[float, float, float, float] | None:
        """(min_x, min_y, max_x, max_y) of positioned nodes, or None."""
        placed = [n for n in self.graph.nodes if n.x is not None and n.y is not None]
        if not placed:
            return None
        xs = [n.x for n in placed]
        ys = [n.y for n in placed]
        return min(xs), min(ys), max(xs), max(ys)
