"""
EqualAngle layout of circular split networks.

The network is grown from a star tree. Each non-trivial split is added by
walking along the boundary of the current network between the first and
the last taxon of its far side, and inserting a band of parallel edges
that separates those taxa from the rest. Splits are drawn in the direction
given by the shared angle table, so every band is a set of parallel edges.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping

from splitnet.core.constants import TEMPORARY_SPLIT
from splitnet.core.exceptions import AlgorithmInvariantError
from splitnet.core.network.angles import far_side_extremes, taxon_positions
from splitnet.core.network.base import LayoutMethod, NetworkLayout
from splitnet.core.network.graph import NetworkGraph
from splitnet.core.progress import ProgressMonitor
from splitnet.core.splits import Split, SplitSystem

logger = logging.getLogger(__name__)


def trivial_split_ids(splits: SplitSystem, ntax: int) -> dict[int, int]:
    """Map each taxon with a trivial split to that split's id."""
    taxon2split: dict[int, int] = {}
    for s, split in enumerate(splits, start=1):
        part = split.b if len(split.a) == ntax - 1 else split.a
        if len(part) == 1:
            (taxon,) = part
            taxon2split[taxon] = s
    return taxon2split


def interior_splits_ordered(splits: SplitSystem, reference: int = 1) -> list[int]:
    """
    Ids of the non-trivial splits in wrapping order.

    Splits are ordered by increasing size of the side containing
    ``reference``, so splits with a larger far side are wrapped first.
    Ties keep split id order. This is the classic EqualAngle wrapping
    order and is intentional; wrapping smaller far sides first changes the
    drawing.
    """
    interior: list[tuple[int, int]] = []
    for s, split in enumerate(splits, start=1):
        if split.size > 1:
            near = split.part_containing(reference)
            interior.append((len(near) if near is not None else 0, s))
    return [s for _, s in sorted(interior)]


class EqualAngleLayout(NetworkLayout):
    """
    Incremental wrapping layout.

    Produces a tree when the splits are pairwise compatible, and a planar
    network with one band of parallel edges per split otherwise.

    Example:
        >>> layout = EqualAngleLayout(use_weights=True)
        >>> graph = layout.layout(splits, ordering=[1, 2, 3, 4])
        >>> angles = graph.split_angles()
    """

    method = LayoutMethod.EQUAL_ANGLE

    def _build(
        self,
        splits: SplitSystem,
        cycle: list[int],
        names: list[str],
        monitor: ProgressMonitor,
        preserved_angles: Mapping[int, float],
    ) -> NetworkGraph:
        ntax = len(cycle)
        graph = NetworkGraph(splits.copy())
        self._init_star(graph, splits, cycle, names)
        positions = taxon_positions(cycle)

        for step, s in enumerate(interior_splits_ordered(splits, cycle[0]), start=1):
            monitor.tick("equal-angle", step)
            self._wrap_split(graph, splits.get_split(s), s, cycle, positions)

        removed = remove_temporary_edges(graph)
        if removed:
            logger.debug(f"Merged {removed} taxa without a trivial split into their neighbours")

        angles = self._angles(splits, cycle, preserved_angles)
        for edge in graph.edges:
            edge.angle = angles[edge.split]

        self._assign_coordinates(graph, cycle[0], monitor)
        logger.debug(f"Wrapped {len(splits)} splits around {ntax} taxa")
        return graph

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _init_star(
        self,
        graph: NetworkGraph,
        splits: SplitSystem,
        cycle: list[int],
        names: list[str],
    ) -> None:
        """Star tree; leaf edges of taxa without a trivial split are temporary."""
        taxon2split = trivial_split_ids(splits, len(cycle))
        center = graph.new_node()
        for taxon in cycle:
            leaf = graph.new_node()
            graph.add_taxon(leaf, taxon, names[taxon - 1])
            s = taxon2split.get(taxon)
            if s is None:
                graph.new_edge(center, leaf)
            else:
                graph.new_edge(center, leaf, split=s, weight=splits.get_split(s).weight)

    def _wrap_split(
        self,
        graph: NetworkGraph,
        split: Split,
        s: int,
        cycle: list[int],
        positions: Mapping[int, int],
    ) -> None:
        """
        Insert split ``s`` by walking the boundary from its first to its last taxon.

        Raises:
            AlgorithmInvariantError: If the far side is not an arc of the
                cycle, or the walk revisits a node or wraps round one.
        """
        far = split.part_not_containing(cycle[0])
        first, last = far_side_extremes(split, cycle, positions)
        if last - first + 1 != len(far):
            raise AlgorithmInvariantError(
                f"Split {s} is not circular: its far side spans circle positions "
                f"{first}..{last} but holds only {len(far)} taxa"
            )
        xp, xq = cycle[first - 1], cycle[last - 1]

        v = graph.taxon_node(xp)
        target = graph.first_adjacent_edge(graph.taxon_node(xq))
        e = graph.first_adjacent_edge(v)
        v = graph.opposite(v, e)
        u: int | None = None
        leaf_edges = [e]
        visited: set[int] = set()

        while True:
            if v in visited:
                raise AlgorithmInvariantError(
                    f"Boundary walk for split {s} revisited node {v}"
                )
            visited.add(v)

            f0 = e
            f = graph.next_adjacent_edge_cyclic(f0, v)
            while graph.is_leaf_edge(f):
                leaf_edges.append(f)
                if f == target:
                    break
                if f == f0:
                    raise AlgorithmInvariantError(
                        f"Boundary walk for split {s} wrapped round node {v}"
                    )
                f = graph.next_adjacent_edge_cyclic(f, v)
            next_e = None if graph.is_leaf_edge(f) else f

            w = graph.new_node()
            graph.new_edge(w, v, split=s, weight=split.weight, after=f0)
            if u is not None:
                entered = graph.edge(e)
                graph.new_edge(w, u, split=entered.split, weight=entered.weight)
            for leaf_edge in leaf_edges:
                old = graph.edge(leaf_edge)
                graph.new_edge(w, old.opposite(v), split=old.split, weight=old.weight)
                graph.delete_edge(leaf_edge)
            leaf_edges = []

            if next_e is None:
                return
            v = graph.opposite(v, next_e)
            e = next_e
            u = w

    # ------------------------------------------------------------------
    # Embedding
    # ------------------------------------------------------------------

    def _assign_coordinates(
        self,
        graph: NetworkGraph,
        reference: int,
        monitor: ProgressMonitor,
    ) -> None:
        """
        Place nodes by a depth-first walk from the node of ``reference``.

        A path never crosses the same split twice, and every crossing moves
        from the reference side to the far side of the split.
        """
        start = graph.taxon_node(reference)
        if start is None:
            return
        origin = graph.node(start)
        origin.x, origin.y = 0.0, 0.0

        visited = {start}
        splits_in_path: set[int] = set()
        stack = [(start, iter(graph.adjacent_edges(start)), None)]
        while stack:
            v, pending, entered_by = stack[-1]
            for edge_id in pending:
                edge = graph.edge(edge_id)
                w = edge.opposite(v)
                if edge.split in splits_in_path or w in visited:
                    continue
                here, there = graph.node(v), graph.node(w)
                step = self._step(edge.weight)
                there.x = here.x + step * math.cos(edge.angle)
                there.y = here.y + step * math.sin(edge.angle)
                visited.add(w)
                monitor.tick("equal-angle-coordinates", len(visited))
                splits_in_path.add(edge.split)
                stack.append((w, iter(graph.adjacent_edges(w)), edge.split))
                break
            else:
                stack.pop()
                if entered_by is not None:
                    splits_in_path.discard(entered_by)


def remove_temporary_edges(graph: NetworkGraph) -> int:
    """
    Delete leaf edges still marked temporary, moving their taxa inward.

    Returns:
        Number of leaves removed.
    """
    removed = 0
    for edge in graph.edges:
        if edge.split != TEMPORARY_SPLIT:
            continue
        if graph.is_leaf(edge.source):
            leaf, neighbour = edge.source, edge.target
        else:
            leaf, neighbour = edge.target, edge.source
        graph.move_taxa(leaf, neighbour)
        graph.delete_node(leaf)
        removed += 1
    return removed
