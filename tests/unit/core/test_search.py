"""Tests for search ranking and subgraph extraction."""

from __future__ import annotations

import pytest

from callgraph_viz.core.exceptions import NoMatch
from callgraph_viz.core.models import Edge, Node, WorkingGraph
from callgraph_viz.core.search import extract_subgraph, normalize_query, rank_matches


def _fn(node_id: str, name: str) -> Node:
    return Node(id=node_id, name=name, file="f.c", degree=1)


class TestRanking:
    """Exact > starts-with > contains, graph order inside each tier."""

    def test_btree_example(self, normalized):
        matches = rank_matches("btree", normalized.detail.nodes)
        assert [n.name for n in matches] == [
            "btreeOpen",
            "sqlite3BtreeOpen",
            "fooBtreeHelper",
        ]

    def test_exact_beats_prefix_beats_substring(self):
        nodes = [_fn("1", "xopen"), _fn("2", "openFile"), _fn("3", "open")]
        assert [n.id for n in rank_matches("open", nodes)] == ["3", "2", "1"]

    def test_case_insensitive(self):
        nodes = [_fn("1", "BTreeOpen")]
        assert rank_matches(normalize_query("  btree "), nodes)[0].id == "1"

    def test_capped_at_five(self):
        nodes = [_fn(str(i), f"handler{i}") for i in range(8)]
        matches = rank_matches("handler", nodes)
        assert len(matches) == 5
        assert [n.id for n in matches] == ["0", "1", "2", "3", "4"]


class TestExtraction:
    """Induced 1-hop subgraph around the matches."""

    def test_node_set_is_matched_plus_neighbors(self, normalized):
        context = extract_subgraph("btree", normalized.detail)
        expected = (
            set(context.matched_ids) | context.in_neighbor_ids | context.out_neighbor_ids
        )
        assert context.graph.node_ids() == expected
        assert context.graph.node_ids() == {"a1", "a2", "a3", "b1", "b2"}

    def test_every_edge_touches_a_match(self, normalized):
        context = extract_subgraph("btree", normalized.detail)
        matched = context.matched_set
        assert context.edges
        for edge in context.edges:
            assert edge.source in matched or edge.target in matched

    def test_edge_classification(self, normalized):
        context = extract_subgraph("btree", normalized.detail)
        assert context.in_edge_keys == {"a1->a2"}
        assert context.out_edge_keys == {"a1->b1", "a2->b1", "a3->b2", "a1->a2"}
        assert context.neighbor_ids == {"b1", "b2"}
        assert context.in_edge_count == 1
        assert context.out_edge_count == 4

    def test_edge_between_matches_listed_once(self, normalized):
        context = extract_subgraph("btree", normalized.detail)
        keys = [e.key for e in context.edges]
        assert len(keys) == len(set(keys))

    def test_subgraph_nodes_have_no_coordinates(self, normalized):
        for node in normalized.detail.nodes:
            node.x, node.y = 5.0, 5.0
        context = extract_subgraph("bmain", normalized.detail)
        assert all(n.x is None and n.y is None for n in context.graph.nodes)
        assert normalized.detail.node("b1").x == 5.0

    def test_matched_ids_in_rank_order(self, normalized):
        context = extract_subgraph("btree", normalized.detail)
        assert context.matched_ids == ("a1", "a2", "a3")

    @pytest.mark.parametrize("query", ["", "   ", "doesNotExist"])
    def test_no_match(self, normalized, query):
        with pytest.raises(NoMatch):
            extract_subgraph(query, normalized.detail)

    def test_limit_is_configurable(self):
        nodes = [_fn(str(i), f"op{i}") for i in range(4)]
        graph = WorkingGraph(nodes=nodes, edges=[Edge("0", "1")])
        context = extract_subgraph("op", graph, limit=2)
        assert context.matched_ids == ("0", "1")
