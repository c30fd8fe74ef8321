"""
Common interface of the network layout algorithms.

A layout turns a split system and a circular ordering into a planar
NetworkGraph. Both algorithms share argument validation, the angle table
and the progress handling implemented here.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING

from splitnet.core.constants import PROGRESS_STRIDE
from splitnet.core.exceptions import ConfigurationError, InvalidArgumentError
from splitnet.core.network.angles import normalize_cycle, split_angles
from splitnet.core.network.graph import NetworkGraph
from splitnet.core.progress import ProgressCallback, ProgressMonitor
from splitnet.core.splits import SplitSystem
from splitnet.core.weights.least_squares import validate_ordering

if TYPE_CHECKING:
    from splitnet.models.config import LayoutConfig

logger = logging.getLogger(__name__)


class LayoutMethod(str, Enum):
    """Available network layout algorithms."""

    EQUAL_ANGLE = "equal_angle"
    OUTLINE = "outline"


# =============================================================================
# Base Layout Class
# =============================================================================


class NetworkLayout(ABC):
    """Abstract base class for split network layouts."""

    method: LayoutMethod

    def __init__(
        self,
        use_weights: bool = True,
        start_angle: float = 0.0,
        total_angle: float = 360.0,
        progress_stride: int = PROGRESS_STRIDE,
    ) -> None:
        """
        Initialize layout settings.

        Args:
            use_weights: Scale edges by split weight; otherwise every edge
                has unit length. Topology is the same either way.
            start_angle: Direction of the first taxon, in degrees.
            total_angle: Arc the taxa are spread over, in degrees.
            progress_stride: Steps between two progress checks.
        """
        if not 0.0 < total_angle <= 360.0:
            raise ConfigurationError(
                f"total_angle = {total_angle} is outside (0, 360]",
                suggestion="Use 360 to spread the taxa over the full circle.",
            )
        if progress_stride < 1:
            raise ConfigurationError(f"progress_stride = {progress_stride} must be at least 1")
        self.use_weights = use_weights
        self.start_angle = start_angle
        self.total_angle = total_angle
        self.progress_stride = progress_stride

    @classmethod
    def from_config(cls, config: LayoutConfig) -> NetworkLayout:
        return cls(
            use_weights=config.use_weights,
            start_angle=config.start_angle,
            total_angle=config.total_angle,
            progress_stride=config.progress_stride,
        )

    @property
    def start_radians(self) -> float:
        return math.radians(self.start_angle)

    @property
    def total_radians(self) -> float:
        return math.radians(self.total_angle)

    def layout(
        self,
        splits: SplitSystem,
        ordering: Sequence[int],
        labels: Sequence[str] | None = None,
        progress: ProgressMonitor | ProgressCallback | None = None,
        preserved_angles: Mapping[int, float] | None = None,
    ) -> NetworkGraph:
        """
        Build the network for ``splits`` drawn around ``ordering``.

        The split system is never modified. Nodes are labelled with the
        names of their taxa.

        Args:
            splits: Weighted splits over the taxa of the ordering.
            ordering: Circular ordering of the taxa 1..n.
            labels: Optional taxon names, ``labels[0]`` is taxon 1.
            progress: Optional monitor or callback(stage, step).
            preserved_angles: Angles in radians, by split id, to use instead
                of the computed ones, as returned by
                ``NetworkGraph.split_angles`` for an earlier layout.

        Returns:
            A new graph owned by the caller.

        Raises:
            InvalidArgumentError: If the ordering is not a permutation of
                1..n or a split mentions a taxon outside it.
            ComputationCancelledError: If cancelled; no graph is returned.
        """
        ntax = len(ordering)
        validate_ordering(ordering, ntax)
        if labels is not None and len(labels) != ntax:
            raise InvalidArgumentError(
                f"Got {len(labels)} labels for {ntax} taxa",
                suggestion="Provide exactly one label per taxon of the ordering.",
            )
        taxa = frozenset(ordering)
        for s, split in enumerate(splits, start=1):
            if split.taxa != taxa:
                uncovered = sorted(split.taxa - taxa) or sorted(taxa - split.taxa)
                raise InvalidArgumentError(
                    f"Split {s} does not match the taxa of the ordering "
                    f"(mismatched taxa: {uncovered[:5]})",
                    suggestion="Every split must partition exactly the taxa of the ordering.",
                )

        if isinstance(progress, ProgressMonitor):
            monitor = progress
        else:
            monitor = ProgressMonitor(progress, stride=self.progress_stride)
        names = list(labels) if labels is not None else [str(t) for t in range(1, ntax + 1)]

        if ntax == 0:
            return NetworkGraph(splits.copy())
        if ntax == 1:
            graph = NetworkGraph(splits.copy())
            graph.add_taxon(graph.new_node(), ordering[0], names[0])
            return graph

        cycle = normalize_cycle(ordering, 1)
        graph = self._build(splits, cycle, names, monitor, preserved_angles or {})
        logger.info(
            f"{self.method.value} layout: {graph.number_of_nodes()} nodes, "
            f"{graph.number_of_edges()} edges for {ntax} taxa and {len(splits)} splits"
        )
        return graph

    @abstractmethod
    def _build(
        self,
        splits: SplitSystem,
        cycle: list[int],
        names: list[str],
        monitor: ProgressMonitor,
        preserved_angles: Mapping[int, float],
    ) -> NetworkGraph:
        """Lay out ``splits`` around ``cycle``, which starts with taxon 1."""
        ...

    def _angles(
        self,
        splits: SplitSystem,
        cycle: list[int],
        preserved_angles: Mapping[int, float],
    ) -> dict[int, float]:
        """Angle table of ``splits``, with preserved angles taking precedence."""
        angles = split_angles(splits, cycle, self.start_radians, self.total_radians)
        for s, angle in preserved_angles.items():
            if s in angles:
                angles[s] = angle
        return angles

    def _step(self, weight: float) -> float:
        return weight if self.use_weights else 1.0


def create_layout(
    method: LayoutMethod | str = LayoutMethod.EQUAL_ANGLE,
    config: LayoutConfig | None = None,
) -> NetworkLayout:
    """
    Create a layout engine by method name.

    When ``config`` is given its method and settings take precedence.

    Raises:
        ConfigurationError: For an unknown method.
    """
    from splitnet.core.network.equal_angle import EqualAngleLayout
    from splitnet.core.network.outline import OutlineLayout

    if config is not None:
        method = config.method
    try:
        method = LayoutMethod(str(getattr(method, "value", method)).replace("-", "_"))
    except ValueError:
        raise ConfigurationError(
            f"Unknown layout method '{method}'",
            suggestion=f"Use one of: {', '.join(m.value for m in LayoutMethod)}",
        ) from None

    layout_class: type[NetworkLayout] = (
        EqualAngleLayout if method is LayoutMethod.EQUAL_ANGLE else OutlineLayout
    )
    if config is None:
        return layout_class()
    return layout_class.from_config(config)
