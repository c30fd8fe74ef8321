"""
Split weight estimation.

Least-squares weights for the circular splits of an ordering, computed
with matrix-free operators over a packed pair layout.
"""

from splitnet.core.weights.least_squares import (
    CircularSplitWeights,
    compute_split_weights,
    fit_statistics,
)
from splitnet.core.weights.pair_index import pair_count, pair_from_index, pair_index

__all__ = [
    "CircularSplitWeights",
    "compute_split_weights",
    "fit_statistics",
    "pair_count",
    "pair_from_index",
    "pair_index",
]
