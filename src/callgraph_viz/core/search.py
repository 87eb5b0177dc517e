"""Search-driven subgraph extraction.

A query is matched against function names in three tiers (exact, prefix,
substring). The top matches and their 1-hop neighbourhood form the
subgraph; every edge touching a match is classified as incoming (a caller
of a match) and/or outgoing (a callee of a match).
"""

from __future__ import annotations

from loguru import logger

from ..config.defaults import MAX_SEARCH_MATCHES
from .exceptions import NoMatch
from .models import Edge, Node, SubgraphContext, WorkingGraph, edge_key


def normalize_query(text: str) -> str:
    """Trim and case-fold a raw query string."""
    return text.strip().casefold()


def rank_matches(
    query: str, nodes: list[Node], limit: int = MAX_SEARCH_MATCHES
) -> list[Node]:
    """Rank function nodes by how well their name matches ``query``.

    Exact name matches come first, then names starting with the query, then
    names containing it. Each tier keeps graph order and excludes nodes
    already taken by a higher tier.

    Args:
        query: Normalized (trimmed, case-folded) query
        nodes: Detail graph nodes
        limit: Maximum number of matches returned

    Returns:
        At most ``limit`` nodes in priority order
    """
    exact: list[Node] = []
    starts: list[Node] = []
    contains: list[Node] = []
    for node in nodes:
        name = node.name.casefold()
        if name == query:
            exact.append(node)
        elif name.startswith(query):
            starts.append(node)
        elif query in name:
            contains.append(node)

    logger.debug(
        f"Search '{query}': exact={len(exact)} starts={len(starts)} contains={len(contains)}"
    )
    return (exact + starts + contains)[:limit]


def extract_subgraph(
    query: str, detail: WorkingGraph, limit: int = MAX_SEARCH_MATCHES
) -> SubgraphContext:
    """Extract the induced 1-hop neighbourhood around the best matches.

    Args:
        query: Raw query text (normalized here)
        detail: Full detail graph
        limit: Maximum number of matched functions

    Returns:
        SubgraphContext with a fresh WorkingGraph (nodes carry no coordinates)

    Raises:
        NoMatch: If the query is blank or no function name matches
    """
    needle = normalize_query(query)
    if not needle:
        raise NoMatch(query)

    matched = rank_matches(needle, detail.nodes, limit)
    if not matched:
        logger.info(f"No functions found matching '{query}'")
        raise NoMatch(query)

    matched_ids = {n.id for n in matched}
    in_neighbors: set[str] = set()
    out_neighbors: set[str] = set()
    in_keys: set[str] = set()
    out_keys: set[str] = set()
    edges: dict[str, Edge] = {}

    for edge in detail.edges:
        key = edge_key(edge.source, edge.target)
        if edge.source in matched_ids:
            out_neighbors.add(edge.target)
            out_keys.add(key)
            edges.setdefault(key, Edge(edge.source, edge.target))
        if edge.target in matched_ids:
            in_neighbors.add(edge.source)
            in_keys.add(key)
            edges.setdefault(key, Edge(edge.source, edge.target))

    keep = matched_ids | in_neighbors | out_neighbors
    sub_nodes = [n.clean_copy() for n in detail.nodes if n.id in keep]
    sub_edges = list(edges.values())

    logger.info(
        f"Subgraph for '{query}': {len(matched)} matched, {len(sub_nodes)} nodes, "
        f"{len(sub_edges)} edges (in={len(in_keys)}, out={len(out_keys)})"
    )

    return SubgraphContext(
        query=query,
        matched_ids=tuple(n.id for n in matched),
        in_neighbor_ids=frozenset(in_neighbors),
        out_neighbor_ids=frozenset(out_neighbors),
        in_edge_keys=frozenset(in_keys),
        out_edge_keys=frozenset(out_keys),
        edges=tuple(sub_edges),
        graph=WorkingGraph(nodes=sub_nodes, edges=list(sub_edges)),
    )
