"""
Splitnet: circular split networks from pairwise distances.

Estimates least-squares weights for the splits compatible with a circular
ordering of taxa and draws the resulting split system as a planar network
with the EqualAngle or the Outline algorithm.
"""

__version__ = "0.1.0"
__author__ = "Splitnet Team"

from splitnet.core.distances import DistanceMatrix
from splitnet.core.network import EqualAngleLayout, NetworkGraph, OutlineLayout
from splitnet.core.pipeline import build_network
from splitnet.core.splits import Split, SplitSystem
from splitnet.core.weights import CircularSplitWeights

__all__ = [
    "CircularSplitWeights",
    "DistanceMatrix",
    "EqualAngleLayout",
    "NetworkGraph",
    "OutlineLayout",
    "Split",
    "SplitSystem",
    "__version__",
    "build_network",
]
