"""Highlight derivation for hover and focus-depth selection."""

from __future__ import annotations

from collections import deque

from .models import HighlightState, WorkingGraph, edge_key


def hover_highlight(graph: WorkingGraph, node_id: str) -> HighlightState:
    """Hovered node, its 1-hop neighbours, and its in/out edges.

    Args:
        graph: Active working graph
        node_id: Hovered node id

    Returns:
        HighlightState whose in/out edge keys are relative to the hovered node
    """
    in_keys: set[str] = set()
    out_keys: set[str] = set()
    neighbors: set[str] = set()
    for edge in graph.edges:
        key = edge_key(edge.source, edge.target)
        if edge.source == node_id:
            out_keys.add(key)
            neighbors.add(edge.target)
        if edge.target == node_id:
            in_keys.add(key)
            neighbors.add(edge.source)

    return HighlightState(
        node_ids=frozenset({node_id} | neighbors),
        edge_keys=frozenset(in_keys | out_keys),
        in_edge_keys=frozenset(in_keys),
        out_edge_keys=frozenset(out_keys),
    )


def nodes_within_depth(graph: WorkingGraph, node_id: str, depth: int) -> set[str]:
    """Breadth-first neighbourhood ignoring edge direction.

    Args:
        graph: Active working graph
        node_id: Start node
        depth: Maximum hops; 0 selects every node of the graph

    Returns:
        Set of node ids, including ``node_id``
    """
    if depth == 0:
        return {n.id for n in graph.nodes} | {node_id}

    adjacency: dict[str, set[str]] = {n.id: set() for n in graph.nodes}
    for edge in graph.edges:
        adjacency.setdefault(edge.source, set()).add(edge.target)
        adjacency.setdefault(edge.target, set()).add(edge.source)

    seen = {node_id}
    queue = deque([(node_id, 0)])
    while queue:
        current, level = queue.popleft()
        if level >= depth:
            continue
        for neighbor in adjacency.get(current, ()):
            if neighbor not in seen:
                seen.add(neighbor)
                queue.append((neighbor, level + 1))
    return seen


def focus_highlight(graph: WorkingGraph, node_id: str, depth: int) -> HighlightState:
    """Nodes within ``depth`` hops of ``node_id`` (0 = all) and the edges among them."""
    within = nodes_within_depth(graph, node_id, depth)
    keys = frozenset(
        edge_key(e.source, e.target)
        for e in graph.edges
        if e.source in within and e.target in within
    )
    return HighlightState(node_ids=frozenset(within), edge_keys=keys)
