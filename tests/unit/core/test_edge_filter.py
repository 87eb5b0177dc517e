"""Tests for edge-direction projection."""

from __future__ import annotations

import pytest

from callgraph_viz.core.edge_filter import parse_filter_mode, project
from callgraph_viz.core.models import EdgeFilterMode
from callgraph_viz.core.search import extract_subgraph


@pytest.fixture
def context(normalized):
    return extract_subgraph("btree", normalized.detail)


class TestProjection:
    def test_all(self, context):
        projection = project(context, "all")
        assert projection.node_ids == context.all_node_ids
        assert projection.edge_keys == context.in_edge_keys | context.out_edge_keys

    def test_incoming_is_strict_subset_of_all(self, context):
        all_edges = project(context, EdgeFilterMode.ALL).edge_keys
        incoming = project(context, EdgeFilterMode.INCOMING)
        assert incoming.edge_keys < all_edges
        assert incoming.edge_keys <= context.in_edge_keys
        assert incoming.node_ids == context.matched_set | context.in_neighbor_ids
        assert incoming.out_edge_keys == frozenset()

    def test_outgoing(self, context):
        outgoing = project(context, "outgoing")
        assert outgoing.edge_keys == context.out_edge_keys
        assert outgoing.node_ids == {"a1", "a2", "a3", "b1", "b2"}
        assert outgoing.in_edge_keys == frozenset()

    def test_projection_does_not_mutate_context(self, context):
        before = (context.in_edge_keys, context.out_edge_keys, context.edges)
        project(context, "incoming")
        project(context, "outgoing")
        assert (context.in_edge_keys, context.out_edge_keys, context.edges) == before

    def test_as_highlight(self, context):
        highlight = project(context, "incoming").as_highlight()
        assert highlight.active
        assert highlight.in_edge_keys == {"a1->a2"}


class TestParseFilterMode:
    def test_valid(self):
        assert parse_filter_mode("outgoing") is EdgeFilterMode.OUTGOING

    def test_invalid(self):
        with pytest.raises(ValueError, match="Must be one of: all, incoming, outgoing"):
            parse_filter_mode("sideways")
