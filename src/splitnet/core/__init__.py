"""
Core algorithms for circular split networks.

This module contains the split data model, the least-squares split weight
solver and the EqualAngle and Outline network layouts.
"""

from splitnet.core.distances import DistanceMatrix
from splitnet.core.network import (
    EqualAngleLayout,
    NetworkGraph,
    OutlineLayout,
    create_layout,
)
from splitnet.core.pipeline import NetworkResult, build_network
from splitnet.core.splits import Split, SplitSystem
from splitnet.core.weights import CircularSplitWeights, compute_split_weights

__all__ = [
    "CircularSplitWeights",
    "DistanceMatrix",
    "EqualAngleLayout",
    "NetworkGraph",
    "NetworkResult",
    "OutlineLayout",
    "Split",
    "SplitSystem",
    "build_network",
    "compute_split_weights",
    "create_layout",
]
