"""
Planar split network layouts.

EqualAngle wraps the splits into a star tree one at a time; Outline traces
the outline of the network with an event sweep around the circle.
"""

from splitnet.core.network.base import LayoutMethod, NetworkLayout, create_layout
from splitnet.core.network.equal_angle import EqualAngleLayout
from splitnet.core.network.graph import NetworkEdge, NetworkGraph, NetworkNode
from splitnet.core.network.outline import OutlineLayout

__all__ = [
    "EqualAngleLayout",
    "LayoutMethod",
    "NetworkEdge",
    "NetworkGraph",
    "NetworkLayout",
    "NetworkNode",
    "OutlineLayout",
    "create_layout",
]
