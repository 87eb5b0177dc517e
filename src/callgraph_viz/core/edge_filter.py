"""Edge-direction projection over an extracted subgraph.

| mode     | visible nodes                      | visible edges       |
|----------|------------------------------------|---------------------|
| all      | matched ∪ in-neighbors ∪ out-nbrs  | in-edges ∪ out-edges |
| incoming | matched ∪ in-neighbors             | in-edges            |
| outgoing | matched ∪ out-neighbors            | out-edges           |

The projection never touches the SubgraphContext it reads.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import EdgeFilterMode, Edge, HighlightState, SubgraphContext


@dataclass(frozen=True)
class Projection:
    """Visible subset of a subgraph for one filter mode."""

    mode: EdgeFilterMode
    node_ids: frozenset[str]
    edges: tuple[Edge, ...]
    in_edge_keys: frozenset[str]
    out_edge_keys: frozenset[str]

    @property
    def edge_keys(self) -> frozenset[str]:
        return frozenset(e.key for e in self.edges)

    def as_highlight(self) -> HighlightState:
        return HighlightState(
            node_ids=self.node_ids,
            edge_keys=self.edge_keys,
            in_edge_keys=self.in_edge_keys,
            out_edge_keys=self.out_edge_keys,
        )


def parse_filter_mode(mode: str | EdgeFilterMode) -> EdgeFilterMode:
    """Coerce a mode string; raises ValueError for unknown modes."""
    try:
        return EdgeFilterMode(mode)
    except ValueError as e:
        valid = ", ".join(m.value for m in EdgeFilterMode)
        raise ValueError(f"Invalid edge filter mode '{mode}'. Must be one of: {valid}") from e


def project(context: SubgraphContext, mode: str | EdgeFilterMode) -> Projection:
    """Derive the visible nodes and edges of ``context`` for ``mode``."""
    mode = parse_filter_mode(mode)
    matched = context.matched_set

    if mode is EdgeFilterMode.INCOMING:
        node_ids = matched | context.in_neighbor_ids
        in_keys, out_keys = context.in_edge_keys, frozenset()
    elif mode is EdgeFilterMode.OUTGOING:
        node_ids = matched | context.out_neighbor_ids
        in_keys, out_keys = frozenset(), context.out_edge_keys
    else:
        node_ids = context.all_node_ids
        in_keys, out_keys = context.in_edge_keys, context.out_edge_keys

    visible = in_keys | out_keys
    edges = tuple(e for e in context.edges if e.key in visible)
    return Projection(
        mode=mode,
        node_ids=frozenset(node_ids),
        edges=edges,
        in_edge_keys=in_keys,
        out_edge_keys=out_keys,
    )
