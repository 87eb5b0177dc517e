"""Core functionality for callgraph-viz."""

from .exceptions import (
    CallGraphVizError,
    ConfigError,
    GraphError,
    InvalidGraphFormat,
    LayoutError,
    LayoutStallTimeout,
    NoMatch,
    SearchError,
)

__all__ = [
    "CallGraphVizError",
    "ConfigError",
    "GraphError",
    "InvalidGraphFormat",
    "LayoutError",
    "LayoutStallTimeout",
    "NoMatch",
    "SearchError",
]
