"""Typed exception hierarchy for callgraph-viz.

Hierarchy
---------
CallGraphVizError (base)
├── GraphError             – input graph problems
│   └── InvalidGraphFormat – payload is not {nodes: [...], edges: [...]}
├── SearchError            – search-time failures
│   └── NoMatch            – query matched no function (non-fatal notice)
├── LayoutError            – force simulation problems
│   └── LayoutStallTimeout – simulation never reported settled
└── ConfigError            – configuration / validation errors

``NoMatch`` and ``LayoutStallTimeout`` are recoverable: the engine keeps its
previous state for the former and force-enables interaction for the latter.
"""

from typing import Any


class CallGraphVizError(Exception):
    """Base exception for callgraph-viz."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


# ── Graph input ─────────────────────────────────────────────────────────


class GraphError(CallGraphVizError):
    """Input graph errors."""

    pass


class InvalidGraphFormat(GraphError):
    """Raw graph payload is malformed.

    Fatal for the load that raised it. The engine keeps whatever working
    graph it had before the call.
    """

    pass


# ── Search ──────────────────────────────────────────────────────────────


class SearchError(CallGraphVizError):
    """Search operation failed."""

    pass


class NoMatch(SearchError):
    """No function name matched the query."""

    def __init__(self, query: str) -> None:
        super().__init__(
            f'No functions found matching "{query}"', context={"query": query}
        )
        self.query = query


# ── Layout ──────────────────────────────────────────────────────────────


class LayoutError(CallGraphVizError):
    """Force layout errors."""

    pass


class LayoutStallTimeout(LayoutError):
    """The simulation did not settle before the fallback timer fired."""

    pass


# ── Configuration ───────────────────────────────────────────────────────


class ConfigError(CallGraphVizError):
    """Configuration / validation errors."""

    pass
