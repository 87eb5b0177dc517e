"""Graph normalization: raw payload -> detail graph + file-level cluster graph.

Cluster edges are direction-aware: calls from ``a.c`` into ``b.c`` and calls
from ``b.c`` into ``a.c`` become two separate cluster edges, each carrying
the number of call edges it aggregates. Arrows in cluster view therefore
keep the same meaning as in detail view.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from .exceptions import InvalidGraphFormat
from .models import (
    ClusterEdge,
    ClusterNode,
    Edge,
    Node,
    NormalizedGraph,
    RawGraph,
    WorkingGraph,
    edge_key,
)

# Leading directory stripped from cluster display names
CLUSTER_NAME_PREFIX = "src/"


def parse_raw_graph(raw: Any) -> RawGraph:
    """Validate the ``{nodes, edges}`` input contract.

    Args:
        raw: Decoded JSON payload (or an already validated ``RawGraph``)

    Returns:
        Validated RawGraph

    Raises:
        InvalidGraphFormat: If either field is missing, not a list, or holds
            entries that do not validate
    """
    if isinstance(raw, RawGraph):
        return raw

    if not isinstance(raw, Mapping):
        raise InvalidGraphFormat(
            "Invalid call graph data format: expected an object with 'nodes' and 'edges'",
            context={"type": type(raw).__name__},
        )

    for key in ("nodes", "edges"):
        if not isinstance(raw.get(key), list):
            raise InvalidGraphFormat(
                f"Invalid call graph data format: '{key}' must be a list",
                context={"field": key, "type": type(raw.get(key)).__name__},
            )

    try:
        return RawGraph.model_validate(raw)
    except ValidationError as e:
        raise InvalidGraphFormat(
            f"Invalid call graph data format: {e.error_count()} invalid entries",
            context={"errors": e.errors(include_url=False)[:10]},
        ) from e


def cluster_display_name(file: str) -> str:
    if file.startswith(CLUSTER_NAME_PREFIX):
        return file[len(CLUSTER_NAME_PREFIX) :]
    return file


def build_cluster_graph(nodes: list[Node], edges: list[Edge]) -> WorkingGraph:
    """Group detail nodes by file and collapse cross-file calls.

    Args:
        nodes: Filtered detail nodes (all with a file)
        edges: Filtered detail edges

    Returns:
        WorkingGraph of ClusterNode / ClusterEdge, one cluster per file in
        first-seen order
    """
    groups: dict[str, list[Node]] = {}
    for node in nodes:
        groups.setdefault(node.file, []).append(node)

    cluster_nodes = []
    for file, members in groups.items():
        total_degree = sum(m.degree for m in members)
        cluster_nodes.append(
            ClusterNode(
                id=file,
                name=cluster_display_name(file),
                file=file,
                member_count=len(members),
                degree=total_degree,
                avg_degree=total_degree / len(members),
                members=[m.id for m in members],
            )
        )

    file_of = {n.id: n.file for n in nodes}
    counts: dict[str, list[Any]] = {}
    for edge in edges:
        source_file = file_of.get(edge.source)
        target_file = file_of.get(edge.target)
        if source_file is None or target_file is None or source_file == target_file:
            continue
        key = edge_key(source_file, target_file)
        if key not in counts:
            counts[key] = [source_file, target_file, 0]
        counts[key][2] += 1

    cluster_edges = [ClusterEdge(source=s, target=t, count=c) for s, t, c in counts.values()]
    return WorkingGraph(nodes=cluster_nodes, edges=cluster_edges)


def normalize_graph(raw: Any) -> NormalizedGraph:
    """Filter a raw call graph and derive both aggregation levels.

    Drops nodes without a file or with zero degree, then every edge touching
    a dropped (or unknown) node. Duplicate detail edges are kept.

    Args:
        raw: ``{nodes: [...], edges: [...]}`` payload

    Returns:
        NormalizedGraph with detail and cluster working graphs

    Raises:
        InvalidGraphFormat: If the payload violates the input contract
    """
    graph = parse_raw_graph(raw)

    nodes = [
        Node(
            id=n.id,
            name=n.name,
            file=n.file,
            degree=n.degree,
            in_degree=n.in_degree,
            out_degree=n.out_degree,
        )
        for n in graph.nodes
        if n.file is not None and n.degree > 0
    ]
    kept_ids = {n.id for n in nodes}
    edges = [
        Edge(source=e.source, target=e.target)
        for e in graph.edges
        if e.source in kept_ids and e.target in kept_ids
    ]

    dropped_nodes = len(graph.nodes) - len(nodes)
    dropped_edges = len(graph.edges) - len(edges)
    logger.debug(
        f"Filtered: {len(graph.nodes)} -> {len(nodes)} nodes, "
        f"{len(graph.edges)} -> {len(edges)} edges"
    )

    cluster = build_cluster_graph(nodes, edges)
    logger.info(
        f"Normalized call graph: {len(nodes)} functions in {len(cluster.nodes)} files, "
        f"{len(edges)} calls, {len(cluster.edges)} inter-file links"
    )

    return NormalizedGraph(
        detail=WorkingGraph(nodes=nodes, edges=edges),
        cluster=cluster,
        dropped_nodes=dropped_nodes,
        dropped_edges=dropped_edges,
    )
