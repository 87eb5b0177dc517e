"""Tests for the typed exception hierarchy.

Validates:
- Class hierarchy is correct (isinstance checks)
- Exceptions are exported from the package root and core package
- Context payloads are carried on the instances
"""

from __future__ import annotations

import pytest


class TestExceptionHierarchy:
    """Verify the class hierarchy defined in core/exceptions.py."""

    def test_base_error_is_exception(self):
        from callgraph_viz.core.exceptions import CallGraphVizError

        err = CallGraphVizError("base")
        assert isinstance(err, Exception)
        assert err.context == {}

    def test_invalid_graph_format_is_graph_error(self):
        from callgraph_viz.core.exceptions import (
            CallGraphVizError,
            GraphError,
            InvalidGraphFormat,
        )

        err = InvalidGraphFormat("bad", context={"field": "nodes"})
        assert isinstance(err, GraphError)
        assert isinstance(err, CallGraphVizError)
        assert err.context == {"field": "nodes"}

    def test_no_match_is_search_error(self):
        from callgraph_viz.core.exceptions import NoMatch, SearchError

        err = NoMatch("btree")
        assert isinstance(err, SearchError)
        assert err.query == "btree"
        assert str(err) == 'No functions found matching "btree"'
        assert err.context == {"query": "btree"}

    def test_layout_stall_is_layout_error(self):
        from callgraph_viz.core.exceptions import LayoutError, LayoutStallTimeout

        assert isinstance(LayoutStallTimeout("stall"), LayoutError)

    def test_config_error_is_base_error(self):
        from callgraph_viz.core.exceptions import CallGraphVizError, ConfigError

        assert isinstance(ConfigError("config"), CallGraphVizError)


class TestExceptionExports:
    """Exceptions must be importable from the public packages."""

    def test_root_export(self):
        import callgraph_viz

        assert callgraph_viz.CallGraphVizError.__name__ == "CallGraphVizError"

    @pytest.mark.parametrize(
        "name",
        [
            "CallGraphVizError",
            "GraphError",
            "InvalidGraphFormat",
            "SearchError",
            "NoMatch",
            "LayoutError",
            "LayoutStallTimeout",
            "ConfigError",
        ],
    )
    def test_core_exports(self, name):
        import callgraph_viz.core as core

        assert name in core.__all__
        assert getattr(core, name).__name__ == name
