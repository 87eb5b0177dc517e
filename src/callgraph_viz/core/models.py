"""Data models for the call graph visualization engine.

Raw input is validated with pydantic (``RawGraph``); everything the engine
owns after normalization is a plain dataclass. Edges are identified by the
string key ``"source->target"`` everywhere highlight state is stored, so a
rebuilt working graph keeps the same logical highlights.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class ViewMode(StrEnum):
    CLUSTER = "cluster"
    DETAIL = "detail"
    SUBGRAPH_DETAIL = "subgraph_detail"


class EdgeFilterMode(StrEnum):
    ALL = "all"
    INCOMING = "incoming"
    OUTGOING = "outgoing"


def edge_key(source: str, target: str) -> str:
    """Stable key for a directed edge."""
    return f"{source}->{target}"


# --- Input contract ---


class RawNode(BaseModel):
    """A function node as supplied by the analysis backend."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str
    file: str | None = None
    degree: int = Field(default=0, ge=0)
    in_degree: int = Field(default=0, ge=0)
    out_degree: int = Field(default=0, ge=0)


class RawEdge(BaseModel):
    """A directed call edge as supplied by the analysis backend."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    source: str
    target: str


class RawGraph(BaseModel):
    """Top-level ``{nodes, edges}`` payload."""

    model_config = ConfigDict(extra="ignore")

    nodes: list[RawNode]
    edges: list[RawEdge]


# --- Engine-side graph ---


@dataclass(eq=False)
class Node:
    """Function node with mutable layout state.

    ``degree == in_degree + out_degree`` is assumed, not enforced.
    """

    id: str
    name: str
    file: str | None
    degree: int
    in_degree: int = 0
    out_degree: int = 0
    x: float | None = None
    y: float | None = None
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    is_cluster = False

    @property
    def size(self) -> float:
        """Size driver for radius and collision (degree for functions)."""
        return float(self.degree)

    def clean_copy(self) -> Node:
        """Copy carrying only stable attributes (no layout coordinates)."""
        return Node(
            id=self.id,
            name=self.name,
            file=self.file,
            degree=self.degree,
            in_degree=self.in_degree,
            out_degree=self.out_degree,
        )


@dataclass(eq=False)
class ClusterNode:
    """Synthetic file-level node aggregating the functions of one file."""

    id: str
    name: str
    file: str
    member_count: int
    degree: int
    avg_degree: float
    members: list[str] = field(default_factory=list)
    x: float | None = None
    y: float | None = None
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    is_cluster = True

    @property
    def size(self) -> float:
        """Size driver for radius and collision (member count for clusters)."""
        return float(self.member_count)


GraphNode = Union[Node, ClusterNode]


@dataclass(frozen=True)
class Edge:
    """Directed call edge between two node ids."""

    source: str
    target: str

    @property
    def key(self) -> str:
        return edge_key(self.source, self.target)


@dataclass(frozen=True)
class ClusterEdge:
    """Directed file-to-file edge aggregating ``count`` call edges."""

    source: str
    target: str
    count: int = 1

    @property
    def key(self) -> str:
        return edge_key(self.source, self.target)


GraphEdge = Union[Edge, ClusterEdge]


@dataclass
class WorkingGraph:
    """The ``{nodes, edges}`` pair handed to the layout engine and renderer."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._index: dict[str, GraphNode] = {n.id: n for n in self.nodes}

    def node(self, node_id: str) -> GraphNode | None:
        return self._index.get(node_id)

    def node_ids(self) -> set[str]:
        return set(self._index)

    @property
    def max_degree(self) -> int:
        return max((n.degree for n in self.nodes), default=0)


@dataclass
class NormalizedGraph:
    """Output of the normalizer: both aggregation levels."""

    detail: WorkingGraph
    cluster: WorkingGraph
    dropped_nodes: int = 0
    dropped_edges: int = 0


@dataclass(frozen=True)
class SubgraphContext:
    """Everything derived from one search, kept across filter changes."""

    query: str
    matched_ids: tuple[str, ...]
    in_neighbor_ids: frozenset[str]
    out_neighbor_ids: frozenset[str]
    in_edge_keys: frozenset[str]
    out_edge_keys: frozenset[str]
    edges: tuple[Edge, ...]
    graph: WorkingGraph

    @property
    def matched_set(self) -> frozenset[str]:
        return frozenset(self.matched_ids)

    @property
    def all_node_ids(self) -> frozenset[str]:
        return self.matched_set | self.in_neighbor_ids | self.out_neighbor_ids

    @property
    def neighbor_ids(self) -> frozenset[str]:
        return (self.in_neighbor_ids | self.out_neighbor_ids) - self.matched_set

    @property
    def in_edge_count(self) -> int:
        return len(self.in_edge_keys)

    @property
    def out_edge_count(self) -> int:
        return len(self.out_edge_keys)


@dataclass(frozen=True)
class HighlightState:
    """Transient highlight sets; all members are node ids or edge keys."""

    node_ids: frozenset[str] = frozenset()
    edge_keys: frozenset[str] = frozenset()
    in_edge_keys: frozenset[str] = frozenset()
    out_edge_keys: frozenset[str] = frozenset()

    @property
    def active(self) -> bool:
        return bool(
            self.node_ids or self.edge_keys or self.in_edge_keys or self.out_edge_keys
        )


EMPTY_HIGHLIGHT = HighlightState()


# --- Host-facing events ---


@dataclass(frozen=True)
class SelectionEvent:
    """Emitted to the host when a node is clicked."""

    node_id: str
    name: str
    is_cluster: bool


@dataclass(frozen=True)
class Notice:
    """Non-fatal, user-visible message (no match, layout stall)."""

    level: str
    message: str
    context: dict = field(default_factory=dict, compare=False)
