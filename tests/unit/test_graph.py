"""Unit tests for the network graph arena."""

from __future__ import annotations

import pytest

from splitnet.core.constants import TEMPORARY_SPLIT
from splitnet.core.network import NetworkGraph


@pytest.fixture
def path_graph() -> tuple[NetworkGraph, list[int], list[int]]:
    """Three nodes in a path: 0 - 1 - 2."""
    graph = NetworkGraph()
    nodes = [graph.new_node(float(k), 0.0) for k in range(3)]
    edges = [
        graph.new_edge(nodes[0], nodes[1], split=1, weight=0.5, angle=0.1),
        graph.new_edge(nodes[1], nodes[2], split=2, weight=1.5, angle=0.2),
    ]
    return graph, nodes, edges


class TestConstruction:
    """Tests for adding and removing elements."""

    def test_ids_are_sequential(self, path_graph):
        graph, nodes, edges = path_graph
        assert nodes == [0, 1, 2]
        assert edges == [0, 1]
        assert graph.number_of_nodes() == 3
        assert graph.number_of_edges() == 2

    def test_edge_defaults(self):
        graph = NetworkGraph()
        u, v = graph.new_node(), graph.new_node()
        edge = graph.edge(graph.new_edge(u, v))
        assert edge.split == TEMPORARY_SPLIT
        assert edge.weight == 1.0

    def test_insert_after(self):
        """The new edge should follow ``after`` in the target's cyclic order."""
        graph = NetworkGraph()
        center = graph.new_node()
        leaves = [graph.new_node() for _ in range(3)]
        e0 = graph.new_edge(leaves[0], center)
        e1 = graph.new_edge(leaves[1], center)
        e2 = graph.new_edge(leaves[2], center, after=e0)
        assert graph.adjacent_edges(center) == [e0, e2, e1]

    def test_ids_not_reused(self, path_graph):
        graph, nodes, edges = path_graph
        graph.delete_edge(edges[1])
        assert graph.new_edge(nodes[0], nodes[2]) == 2

    def test_delete_node_removes_edges_and_taxa(self, path_graph):
        graph, nodes, _ = path_graph
        graph.add_taxon(nodes[1], 4)
        graph.delete_node(nodes[1])
        assert graph.number_of_nodes() == 2
        assert graph.number_of_edges() == 0
        assert graph.taxon_node(4) is None
        assert graph.degree(nodes[0]) == 0


class TestTaxa:
    """Tests for taxon attachment and labels."""

    def test_add_taxon(self):
        graph = NetworkGraph()
        node = graph.new_node()
        graph.add_taxon(node, 1, "A")
        graph.add_taxon(node, 2, "B")
        assert graph.node(node).taxa == [1, 2]
        assert graph.node(node).label == "A, B"
        assert graph.taxon_node(2) == node
        assert graph.taxa == {1, 2}

    def test_move_taxa(self):
        graph = NetworkGraph()
        u, v = graph.new_node(), graph.new_node()
        graph.add_taxon(u, 1, "A")
        graph.add_taxon(v, 2, "B")
        graph.move_taxa(u, v)
        assert graph.node(u).taxa == []
        assert graph.node(u).label is None
        assert graph.node(v).taxa == [2, 1]
        assert graph.node(v).label == "B, A"
        assert graph.taxon_node(1) == v


class TestQueries:
    """Tests for adjacency queries."""

    def test_opposite(self, path_graph):
        graph, nodes, edges = path_graph
        assert graph.opposite(nodes[0], edges[0]) == nodes[1]
        assert graph.opposite(nodes[1], edges[0]) == nodes[0]

    def test_leaves(self, path_graph):
        graph, nodes, edges = path_graph
        assert graph.is_leaf(nodes[0])
        assert not graph.is_leaf(nodes[1])
        assert graph.is_leaf_edge(edges[0])

    def test_cyclic_order(self, path_graph):
        graph, nodes, edges = path_graph
        assert graph.first_adjacent_edge(nodes[1]) == edges[0]
        assert graph.next_adjacent_edge_cyclic(edges[0], nodes[1]) == edges[1]
        assert graph.next_adjacent_edge_cyclic(edges[1], nodes[1]) == edges[0]

    def test_adjacent_edges_is_a_copy(self, path_graph):
        graph, nodes, _ = path_graph
        graph.adjacent_edges(nodes[1]).clear()
        assert graph.degree(nodes[1]) == 2

    def test_is_adjacent(self, path_graph):
        graph, nodes, _ = path_graph
        assert graph.is_adjacent(nodes[0], nodes[1])
        assert not graph.is_adjacent(nodes[0], nodes[2])

    def test_split_angles_skip_temporary(self, path_graph):
        graph, nodes, _ = path_graph
        graph.new_edge(nodes[0], nodes[2])
        assert graph.split_angles() == {1: 0.1, 2: 0.2}

    def test_location(self, path_graph):
        graph, nodes, _ = path_graph
        assert graph.node(nodes[2]).location == (2.0, 0.0)

    def test_repr(self, path_graph):
        assert repr(path_graph[0]) == "NetworkGraph(3 nodes, 2 edges)"
