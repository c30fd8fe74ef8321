"""
Unit tests for the EqualAngle layout.

The hand-checked cases are the three-taxon star, the unit square (two
crossing splits and no trivial splits) and two taxa joined by one edge.
"""

from __future__ import annotations

import math

import pytest

from splitnet.core.exceptions import (
    AlgorithmInvariantError,
    ComputationCancelledError,
    InvalidArgumentError,
)
from splitnet.core.network import EqualAngleLayout, NetworkGraph
from splitnet.core.network.equal_angle import (
    interior_splits_ordered,
    remove_temporary_edges,
    trivial_split_ids,
)
from splitnet.core.progress import ProgressMonitor
from splitnet.core.splits import Split, SplitSystem


def _length(graph: NetworkGraph, edge_id: int) -> float:
    edge = graph.edge(edge_id)
    u, v = graph.node(edge.source), graph.node(edge.target)
    return math.hypot(u.x - v.x, u.y - v.y)


def _tree_system(tree) -> SplitSystem:
    return SplitSystem(
        Split.from_part(side, tree.ntax, weight) for side, weight in tree.splits.items()
    )


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    """Tests for split classification used by the wrapping."""

    def test_trivial_split_ids(self, star_splits):
        assert trivial_split_ids(star_splits, 3) == {1: 1, 2: 2, 3: 3}

    def test_trivial_split_ids_two_taxa(self):
        """With two taxa the single split is the trivial split of taxon 2 only."""
        assert trivial_split_ids(SplitSystem([Split({1}, {2})]), 2) == {2: 1}

    def test_interior_order(self):
        """Larger far sides first, ties in id order."""
        splits = SplitSystem([
            Split({1, 2}, {3, 4, 5}),
            Split({1}, {2, 3, 4, 5}),
            Split({2, 3}, {1, 4, 5}),
            Split({1, 2, 3}, {4, 5}),
        ])
        assert interior_splits_ordered(splits) == [1, 3, 4]

    def test_remove_temporary_edges(self):
        graph = NetworkGraph()
        center, leaf, kept = graph.new_node(), graph.new_node(), graph.new_node()
        graph.add_taxon(leaf, 2, "B")
        graph.add_taxon(kept, 3, "C")
        graph.new_edge(center, leaf)
        graph.new_edge(center, kept, split=1)
        assert remove_temporary_edges(graph) == 1
        assert graph.number_of_nodes() == 2
        assert graph.taxon_node(2) == center
        assert graph.node(center).label == "B"


# =============================================================================
# Layouts
# =============================================================================


class TestStar:
    """Tests on the three-taxon star."""

    def test_topology(self, star_splits):
        graph = EqualAngleLayout().layout(star_splits, [1, 2, 3])
        assert graph.number_of_nodes() == 4
        assert graph.number_of_edges() == 3
        degrees = sorted(graph.degree(node.id) for node in graph.nodes)
        assert degrees == [1, 1, 1, 3]

    def test_each_taxon_on_a_leaf(self, star_splits):
        graph = EqualAngleLayout().layout(star_splits, [1, 2, 3])
        for taxon in (1, 2, 3):
            node = graph.taxon_node(taxon)
            assert graph.is_leaf(node)
            assert graph.node(node).taxa == [taxon]

    def test_edge_lengths_are_weights(self, star_splits):
        graph = EqualAngleLayout().layout(star_splits, [1, 2, 3])
        for edge in graph.edges:
            assert _length(graph, edge.id) == pytest.approx(edge.weight)

    def test_reference_taxon_at_origin(self, star_splits):
        graph = EqualAngleLayout().layout(star_splits, [2, 3, 1])
        assert graph.node(graph.taxon_node(1)).location == (0.0, 0.0)

    def test_unit_lengths_without_weights(self, star_splits):
        graph = EqualAngleLayout(use_weights=False).layout(star_splits, [1, 2, 3])
        assert graph.number_of_edges() == 3
        for edge in graph.edges:
            assert _length(graph, edge.id) == pytest.approx(1.0)

    def test_labels(self, star_splits):
        graph = EqualAngleLayout().layout(star_splits, [1, 2, 3], labels=["x", "y", "z"])
        assert graph.node(graph.taxon_node(3)).label == "z"

    def test_default_labels(self, star_splits):
        graph = EqualAngleLayout().layout(star_splits, [1, 2, 3])
        assert graph.node(graph.taxon_node(2)).label == "2"


class TestSquare:
    """Tests on two crossing splits without trivial splits."""

    def test_four_cycle(self, square_splits):
        graph = EqualAngleLayout().layout(square_splits, [1, 2, 3, 4])
        assert graph.number_of_nodes() == 4
        assert graph.number_of_edges() == 4
        assert all(graph.degree(node.id) == 2 for node in graph.nodes)

    def test_taxa_merged_onto_cycle(self, square_splits):
        """Leaves without a trivial split are folded into their neighbours."""
        graph = EqualAngleLayout().layout(square_splits, [1, 2, 3, 4])
        assert sorted(len(node.taxa) for node in graph.nodes) == [1, 1, 1, 1]
        assert graph.taxa == {1, 2, 3, 4}

    def test_parallel_edges_share_split(self, square_splits):
        graph = EqualAngleLayout().layout(square_splits, [1, 2, 3, 4])
        assert sorted(edge.split for edge in graph.edges) == [1, 1, 2, 2]
        assert graph.split_angles() == pytest.approx({1: 3 * math.pi / 4, 2: 5 * math.pi / 4})

    def test_coordinates(self, square_splits):
        graph = EqualAngleLayout().layout(square_splits, [1, 2, 3, 4])
        x, y = graph.node(graph.taxon_node(3)).location
        assert x == pytest.approx(-math.sqrt(2))
        assert y == pytest.approx(0.0, abs=1e-12)
        for edge in graph.edges:
            assert _length(graph, edge.id) == pytest.approx(1.0)


class TestSmallInputs:
    """Tests for two or fewer taxa."""

    def test_two_taxa(self):
        splits = SplitSystem([Split({1}, {2}, 0.7)])
        graph = EqualAngleLayout().layout(splits, [1, 2])
        assert graph.number_of_nodes() == 2
        assert graph.number_of_edges() == 1
        assert _length(graph, graph.edges[0].id) == pytest.approx(0.7)

    def test_one_taxon(self):
        graph = EqualAngleLayout().layout(SplitSystem(), [1], labels=["only"])
        assert graph.number_of_nodes() == 1
        assert graph.number_of_edges() == 0
        assert graph.nodes[0].label == "only"

    def test_no_taxa(self):
        graph = EqualAngleLayout().layout(SplitSystem(), [])
        assert graph.number_of_nodes() == 0


class TestTree:
    """Tests on compatible split systems."""

    def test_tree_topology(self, random_tree):
        splits = _tree_system(random_tree)
        graph = EqualAngleLayout().layout(splits, random_tree.ordering)
        assert graph.number_of_edges() == len(splits)
        assert graph.number_of_nodes() == graph.number_of_edges() + 1

    def test_taxa_on_leaves(self, random_tree):
        splits = _tree_system(random_tree)
        graph = EqualAngleLayout().layout(splits, random_tree.ordering)
        for taxon in random_tree.ordering:
            assert graph.is_leaf(graph.taxon_node(taxon))

    def test_edge_lengths(self, random_tree):
        splits = _tree_system(random_tree)
        graph = EqualAngleLayout().layout(splits, random_tree.ordering)
        for edge in graph.edges:
            assert _length(graph, edge.id) == pytest.approx(edge.weight)


class TestLayoutContract:
    """Tests for inputs, determinism and angle reuse."""

    def test_deterministic(self, square_splits):
        layout = EqualAngleLayout()
        first = layout.layout(square_splits, [1, 2, 3, 4])
        second = layout.layout(square_splits, [1, 2, 3, 4])
        assert [n.location for n in first.nodes] == [n.location for n in second.nodes]

    def test_splits_not_modified(self, square_splits):
        before = [(s, s.weight) for s in square_splits]
        EqualAngleLayout().layout(square_splits, [1, 2, 3, 4])
        assert [(s, s.weight) for s in square_splits] == before
        assert len(square_splits) == 2

    def test_preserved_angles(self, star_splits):
        graph = EqualAngleLayout().layout(star_splits, [1, 2, 3], preserved_angles={1: 0.0})
        assert graph.split_angles()[1] == 0.0
        center = graph.opposite(graph.taxon_node(1), graph.first_adjacent_edge(graph.taxon_node(1)))
        assert graph.node(center).location == pytest.approx((1.0, 0.0))

    def test_start_angle_rotates(self, star_splits):
        plain = EqualAngleLayout().layout(star_splits, [1, 2, 3]).split_angles()
        turned = EqualAngleLayout(start_angle=90.0).layout(star_splits, [1, 2, 3]).split_angles()
        for s, angle in plain.items():
            assert turned[s] == pytest.approx((angle + math.pi / 2) % (2 * math.pi))

    def test_invalid_ordering(self, star_splits):
        with pytest.raises(InvalidArgumentError):
            EqualAngleLayout().layout(star_splits, [1, 2, 2])

    def test_split_outside_ordering(self, star_splits):
        with pytest.raises(InvalidArgumentError):
            EqualAngleLayout().layout(star_splits, [1, 2, 3, 4])

    def test_non_circular_split(self):
        """A split whose far side is not an arc of the ordering cannot be wrapped."""
        splits = SplitSystem([Split.from_part({t}, 6) for t in range(1, 7)])
        splits.add_split(Split({2, 4}, {1, 3, 5, 6}))
        with pytest.raises(AlgorithmInvariantError, match="not circular"):
            EqualAngleLayout().layout(splits, [1, 2, 3, 4, 5, 6])

    def test_label_count(self, star_splits):
        with pytest.raises(InvalidArgumentError):
            EqualAngleLayout().layout(star_splits, [1, 2, 3], labels=["a"])

    def test_cancellation(self, square_splits):
        layout = EqualAngleLayout(progress_stride=1)
        with pytest.raises(ComputationCancelledError):
            layout.layout(square_splits, [1, 2, 3, 4], progress=lambda stage, step: False)

    def test_cancelled_monitor(self, square_splits):
        monitor = ProgressMonitor(stride=1)
        monitor.cancel()
        with pytest.raises(ComputationCancelledError):
            EqualAngleLayout().layout(square_splits, [1, 2, 3, 4], progress=monitor)

    def test_progress_reported(self, square_splits):
        seen: list[str] = []
        layout = EqualAngleLayout(progress_stride=1)
        layout.layout(square_splits, [1, 2, 3, 4], progress=lambda stage, step: seen.append(stage))
        assert "equal-angle" in seen
