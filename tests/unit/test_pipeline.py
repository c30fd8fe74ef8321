"""Unit tests for end-to-end network construction."""

from __future__ import annotations

import pytest

from splitnet.core.distances import DistanceMatrix
from splitnet.core.exceptions import ComputationCancelledError, InvalidArgumentError
from splitnet.core.pipeline import build_network
from splitnet.models.config import LayoutConfig, NetworkConfig, SolverConfig


class TestBuildNetwork:
    """Tests for build_network."""

    def test_square_defaults(self, square_distances):
        result = build_network(square_distances)
        assert len(result.splits) == 2
        assert result.fit == pytest.approx(100.0)
        assert result.graph.number_of_nodes() == 4
        assert result.graph.number_of_edges() == 4

    def test_outline(self, square_distances):
        config = NetworkConfig(layout=LayoutConfig(method="outline"))
        result = build_network(square_distances, [1, 2, 3, 4], config)
        assert result.graph.number_of_nodes() == 8
        assert len(result.splits) == 2

    def test_labels_from_matrix(self, triangle_distances):
        dm = DistanceMatrix(triangle_distances, labels=["a", "b", "c"])
        result = build_network(dm)
        assert result.graph.node(result.graph.taxon_node(2)).label == "b"

    def test_tree_distances(self, random_tree):
        result = build_network(random_tree.distances, random_tree.ordering)
        assert result.fit == pytest.approx(100.0, abs=1e-2)
        assert result.graph.taxa == set(random_tree.ordering)

    def test_unconstrained_solver(self, conflicting_distances):
        config = NetworkConfig(solver=SolverConfig(constrained=False, cutoff=0.0))
        result = build_network(conflicting_distances, config=config)
        # The negative split is dropped by the cutoff
        assert all(split.weight > 0.0 for split in result.splits)

    def test_ordering_mismatch(self, square_distances):
        with pytest.raises(InvalidArgumentError):
            build_network(square_distances, [1, 2, 3])

    def test_cancellation(self, conflicting_distances):
        with pytest.raises(ComputationCancelledError):
            build_network(conflicting_distances, progress=lambda stage, step: False)

    def test_cancellation_during_layout(self, square_distances):
        def stop_in_layout(stage: str, step: int) -> bool:
            return stage == "active-set"

        config = NetworkConfig(layout=LayoutConfig(progress_stride=1))
        with pytest.raises(ComputationCancelledError) as exc_info:
            build_network(square_distances, config=config, progress=stop_in_layout)
        assert exc_info.value.stage == "equal-angle"
