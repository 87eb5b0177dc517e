"""Tests for hover and focus-depth highlight derivation."""

from __future__ import annotations

import pytest

from callgraph_viz.core.highlight import focus_highlight, hover_highlight, nodes_within_depth


class TestHoverHighlight:
    def test_neighbors_and_directions(self, normalized):
        highlight = hover_highlight(normalized.detail, "b1")
        assert highlight.node_ids == {"b1", "a1", "a2", "b2"}
        assert highlight.in_edge_keys == {"a1->b1", "a2->b1"}
        assert highlight.out_edge_keys == {"b1->b2"}
        assert highlight.edge_keys == highlight.in_edge_keys | highlight.out_edge_keys

    def test_isolated_from_other_files(self, normalized):
        highlight = hover_highlight(normalized.detail, "c2")
        assert highlight.node_ids == {"c1", "c2", "c3"}


class TestFocusDepth:
    @pytest.mark.parametrize(
        "depth, expected",
        [
            (1, {"c1", "c2"}),
            (2, {"c1", "c2", "c3"}),
        ],
    )
    def test_depth(self, normalized, depth, expected):
        assert nodes_within_depth(normalized.detail, "c1", depth) == expected

    def test_ignores_edge_direction(self, normalized):
        assert "a1" in nodes_within_depth(normalized.detail, "b1", 1)

    def test_zero_depth_selects_every_node(self, normalized):
        everything = normalized.detail.node_ids()
        assert nodes_within_depth(normalized.detail, "a4", 0) == set(everything)
        assert nodes_within_depth(normalized.detail, "c1", 0) == set(everything)

    def test_zero_depth_focus_keeps_every_edge(self, normalized):
        highlight = focus_highlight(normalized.detail, "c1", 0)
        assert highlight.edge_keys == {e.key for e in normalized.detail.edges}

    def test_focus_edges_stay_inside_set(self, normalized):
        highlight = focus_highlight(normalized.detail, "a1", 1)
        assert highlight.node_ids == {"a1", "a2", "b1"}
        assert highlight.edge_keys == {"a1->a2", "a1->b1", "a2->b1"}
