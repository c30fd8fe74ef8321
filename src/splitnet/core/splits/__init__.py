"""
Split data model.

Provides weighted bipartitions of a taxon set and indexed collections of
unique splits.
"""

from splitnet.core.splits.split import Split
from splitnet.core.splits.split_system import SplitSystem

__all__ = [
    "Split",
    "SplitSystem",
]
