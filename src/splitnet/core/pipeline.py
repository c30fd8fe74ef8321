"""
End-to-end construction of a split network from distances.

Runs the split weight solver, then the configured layout, sharing one
progress monitor between both stages.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from splitnet.core.distances import DistanceMatrix, as_distance_matrix
from splitnet.core.network import NetworkGraph, create_layout
from splitnet.core.progress import ProgressCallback, ProgressMonitor
from splitnet.core.splits import SplitSystem
from splitnet.core.weights import CircularSplitWeights, fit_statistics
from splitnet.models.config import NetworkConfig

logger = logging.getLogger(__name__)


@dataclass
class NetworkResult:
    """Splits, their drawing and the least-squares fit in percent."""

    splits: SplitSystem
    graph: NetworkGraph
    fit: float


def build_network(
    distances: DistanceMatrix | np.ndarray | Sequence[Sequence[float]],
    ordering: Sequence[int] | None = None,
    config: NetworkConfig | None = None,
    progress: ProgressMonitor | ProgressCallback | None = None,
) -> NetworkResult:
    """
    Compute weighted circular splits and lay them out as a network.

    Args:
        distances: Pairwise distances between taxa 1..n.
        ordering: Circular ordering of the taxa; defaults to 1..n.
        config: Solver and layout settings; defaults apply when omitted.
        progress: Optional monitor or callback(stage, step) shared by both
            stages. Returning False from the callback cancels the run.

    Returns:
        NetworkResult with the split system, the graph and the fit.

    Raises:
        InvalidArgumentError: If the inputs are inconsistent.
        ComputationCancelledError: If cancelled; nothing is returned.
    """
    config = config or NetworkConfig()
    distances = as_distance_matrix(distances)
    if ordering is None:
        ordering = list(range(1, distances.ntax + 1))

    if isinstance(progress, ProgressMonitor):
        monitor = progress
    else:
        monitor = ProgressMonitor(progress, stride=config.layout.progress_stride)

    solver = CircularSplitWeights.from_config(config.solver)
    splits = solver.solve(distances, ordering, monitor)

    layout = create_layout(config=config.layout)
    graph = layout.layout(splits, ordering, labels=distances.labels, progress=monitor)

    fit = fit_statistics(distances, splits)
    logger.info(
        f"Built {config.layout.method} network: {len(splits)} splits, "
        f"{graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges, fit {fit:.2f}%"
    )
    return NetworkResult(splits=splits, graph=graph, fit=fit)
