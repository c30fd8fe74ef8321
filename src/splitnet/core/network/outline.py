"""
Outline layout of circular split networks.

Every split contributes two events, one where its far side starts on the
circle and one where it ends. Sweeping the events in circular order while
keeping track of the set of splits crossed so far traces the outline of
the network; nodes are identified by that set, so returning to a set that
was seen before closes a cycle.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from splitnet.core.constants import PROGRESS_STRIDE
from splitnet.core.network.angles import far_side_extremes, taxon_positions
from splitnet.core.network.base import LayoutMethod, NetworkLayout
from splitnet.core.network.graph import NetworkGraph
from splitnet.core.progress import ProgressMonitor
from splitnet.core.splits import SplitSystem

if TYPE_CHECKING:
    from splitnet.models.config import LayoutConfig

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    OUTBOUND = "outbound"
    INBOUND = "inbound"


@dataclass(frozen=True)
class Event:
    """Start (outbound) or end (inbound) of a split's far side on the circle."""

    type: EventType
    split: int
    weight: float
    i_pos: int
    j_pos: int

    @property
    def is_start(self) -> bool:
        return self.type is EventType.OUTBOUND


def counting_sort(events: list[Event], max_key: int, key: Callable[[Event], int]) -> list[Event]:
    """
    Stable counting sort of ``events`` by an integer key in 0..max_key.

    Events with equal keys keep their relative order.
    """
    if len(events) <= 1:
        return list(events)
    counts = [0] * (max_key + 1)
    for event in events:
        counts[key(event)] += 1
    position = 0
    for k, count in enumerate(counts):
        counts[k] = position
        position += count
    result: list[Event | None] = [None] * len(events)
    for event in events:
        k = key(event)
        result[counts[k]] = event
        counts[k] += 1
    return result  # type: ignore[return-value]


def sort_events(ntax: int, outbound: list[Event], inbound: list[Event]) -> list[Event]:
    """
    Order the events of a sweep.

    Outbound events are sorted by ascending i_pos, then descending j_pos;
    inbound events by ascending j_pos, then descending i_pos. The two
    lists are then merged, taking the outbound event while its i_pos is
    below the next inbound j_pos + 1.
    """
    outbound = counting_sort(outbound, ntax, lambda e: ntax - e.j_pos)
    outbound = counting_sort(outbound, ntax, lambda e: e.i_pos)
    inbound = counting_sort(inbound, ntax, lambda e: ntax - e.i_pos)
    inbound = counting_sort(inbound, ntax, lambda e: e.j_pos)

    events: list[Event] = []
    ob = ib = 0
    while ob < len(outbound) and ib < len(inbound):
        if outbound[ob].i_pos < inbound[ib].j_pos + 1:
            events.append(outbound[ob])
            ob += 1
        else:
            events.append(inbound[ib])
            ib += 1
    events.extend(outbound[ob:])
    events.extend(inbound[ib:])
    return events


class OutlineLayout(NetworkLayout):
    """
    Event-sweep layout.

    Missing trivial splits are added to a copy of the split system before
    the sweep, so that every taxon ends up on its own leaf. With
    ``add_trivial_splits=False`` taxa without a trivial split are attached
    to the node where their far side is entered and left, or to the start
    node.
    """

    method = LayoutMethod.OUTLINE

    def __init__(
        self,
        use_weights: bool = True,
        start_angle: float = 0.0,
        total_angle: float = 360.0,
        progress_stride: int = PROGRESS_STRIDE,
        add_trivial_splits: bool = True,
        trivial_weight: float = 0.0,
    ) -> None:
        super().__init__(use_weights, start_angle, total_angle, progress_stride)
        self.add_trivial_splits = add_trivial_splits
        self.trivial_weight = trivial_weight

    @classmethod
    def from_config(cls, config: LayoutConfig) -> OutlineLayout:
        return cls(
            use_weights=config.use_weights,
            start_angle=config.start_angle,
            total_angle=config.total_angle,
            progress_stride=config.progress_stride,
            add_trivial_splits=config.add_trivial_splits,
            trivial_weight=config.trivial_weight,
        )

    def _build(
        self,
        splits: SplitSystem,
        cycle: list[int],
        names: list[str],
        monitor: ProgressMonitor,
        preserved_angles: Mapping[int, float],
    ) -> NetworkGraph:
        ntax = len(cycle)
        splits = splits.copy()
        if self.add_trivial_splits:
            splits.add_all_trivial(ntax, self.trivial_weight)

        positions = taxon_positions(cycle)
        angles = self._angles(splits, cycle, preserved_angles)
        events = self._events(splits, cycle, positions)
        graph = NetworkGraph(splits)

        location = (0.0, 0.0)
        start = graph.new_node(*location)
        current: set[int] = set()
        node_of: dict[frozenset[int], int] = {frozenset(): start}
        taxa_found: set[int] = set()

        previous_node = start
        previous_event: Event | None = None
        for step, event in enumerate(events, start=1):
            monitor.tick("outline", step)
            angle = angles[event.split]
            if event.is_start:
                current.add(event.split)
                direction = angle
            else:
                current.discard(event.split)
                direction = angle + math.pi
            distance = self._step(event.weight)
            location = (
                location[0] + distance * math.cos(direction),
                location[1] + distance * math.sin(direction),
            )

            key = frozenset(current)
            v = node_of.get(key)
            if v is None:
                v = graph.new_node(*location)
                node_of[key] = v
            else:
                node = graph.node(v)
                location = (node.x, node.y)

            if not graph.is_adjacent(previous_node, v):
                graph.new_edge(
                    previous_node, v, split=event.split, weight=distance, angle=angle
                )

            if previous_event is not None and previous_event.split == event.split:
                far = splits.get_split(event.split).part_not_containing(cycle[0])
                for taxon in sorted(far, key=positions.__getitem__):
                    graph.add_taxon(previous_node, taxon, names[taxon - 1])
                    taxa_found.add(taxon)

            previous_node = v
            previous_event = event

        for taxon in cycle:
            if taxon not in taxa_found:
                graph.add_taxon(start, taxon, names[taxon - 1])

        logger.debug(f"Swept {len(events)} events, {len(node_of)} distinct split sets")
        return graph

    def _events(
        self,
        splits: SplitSystem,
        cycle: list[int],
        positions: Mapping[int, int],
    ) -> list[Event]:
        outbound: list[Event] = []
        inbound: list[Event] = []
        for s, split in enumerate(splits, start=1):
            i_pos, j_pos = far_side_extremes(split, cycle, positions)
            outbound.append(Event(EventType.OUTBOUND, s, split.weight, i_pos, j_pos))
            inbound.append(Event(EventType.INBOUND, s, split.weight, i_pos, j_pos))
        return sort_events(len(cycle), outbound, inbound)
