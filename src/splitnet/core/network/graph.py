"""
Planar split network graph.

Nodes and edges live in an arena addressed by integer ids. Each node keeps
an ordered list of its incident edges; the order is the cyclic order of
the edges around the node in the embedding, which the EqualAngle wrapping
step depends on.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from splitnet.core.constants import LABEL_SEPARATOR, TEMPORARY_SPLIT
from splitnet.core.splits import SplitSystem


@dataclass
class NetworkNode:
    """A node with 2D coordinates and the taxa attached to it."""

    id: int
    x: float = 0.0
    y: float = 0.0
    taxa: list[int] = field(default_factory=list)
    label: str | None = None

    @property
    def location(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass
class NetworkEdge:
    """An edge representing one split, drawn with the split's angle."""

    id: int
    source: int
    target: int
    split: int = TEMPORARY_SPLIT
    weight: float = 1.0
    angle: float = 0.0

    def opposite(self, node: int) -> int:
        return self.target if node == self.source else self.source


class NetworkGraph:
    """
    Arena of nodes and edges for a split network.

    Ids are never reused within one graph, so deleting an element leaves a
    gap. ``splits`` is the split system the edge split ids refer to.

    Example:
        >>> graph = NetworkGraph()
        >>> u, v = graph.new_node(), graph.new_node()
        >>> e = graph.new_edge(u, v, split=1, weight=0.5)
        >>> graph.opposite(u, e)
        1
    """

    def __init__(self, splits: SplitSystem | None = None) -> None:
        self.splits: SplitSystem = splits if splits is not None else SplitSystem()
        self._nodes: dict[int, NetworkNode] = {}
        self._edges: dict[int, NetworkEdge] = {}
        self._adjacent: dict[int, list[int]] = {}
        self._taxon2node: dict[int, int] = {}
        self._next_node = 0
        self._next_edge = 0

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def new_node(self, x: float = 0.0, y: float = 0.0) -> int:
        node_id = self._next_node
        self._next_node += 1
        self._nodes[node_id] = NetworkNode(node_id, x, y)
        self._adjacent[node_id] = []
        return node_id

    def new_edge(
        self,
        source: int,
        target: int,
        split: int = TEMPORARY_SPLIT,
        weight: float = 1.0,
        angle: float = 0.0,
        after: int | None = None,
    ) -> int:
        """
        Add an edge between two existing nodes.

        The edge is appended to the incidence list of ``source``. At
        ``target`` it is inserted directly after edge ``after`` when given,
        otherwise appended.
        """
        edge_id = self._next_edge
        self._next_edge += 1
        self._edges[edge_id] = NetworkEdge(edge_id, source, target, split, weight, angle)
        self._adjacent[source].append(edge_id)
        incident = self._adjacent[target]
        if after is None:
            incident.append(edge_id)
        else:
            incident.insert(incident.index(after) + 1, edge_id)
        return edge_id

    def delete_edge(self, edge_id: int) -> None:
        edge = self._edges.pop(edge_id)
        self._adjacent[edge.source].remove(edge_id)
        if edge.target != edge.source:
            self._adjacent[edge.target].remove(edge_id)

    def delete_node(self, node_id: int) -> None:
        """Delete a node together with its incident edges and taxa."""
        for edge_id in list(self._adjacent[node_id]):
            self.delete_edge(edge_id)
        for taxon in self._nodes[node_id].taxa:
            if self._taxon2node.get(taxon) == node_id:
                del self._taxon2node[taxon]
        del self._adjacent[node_id]
        del self._nodes[node_id]

    def add_taxon(self, node_id: int, taxon: int, label: str | None = None) -> None:
        """Attach a taxon to a node, appending ``label`` to the node label."""
        node = self._nodes[node_id]
        node.taxa.append(taxon)
        self._taxon2node[taxon] = node_id
        if label:
            node.label = f"{node.label}{LABEL_SEPARATOR}{label}" if node.label else label

    def move_taxa(self, source: int, target: int) -> None:
        """Move every taxon and the label of ``source`` onto ``target``."""
        node = self._nodes[source]
        for taxon in node.taxa:
            self.add_taxon(target, taxon)
        other = self._nodes[target]
        if node.label:
            other.label = f"{other.label}{LABEL_SEPARATOR}{node.label}" if other.label else node.label
        node.taxa = []
        node.label = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def node(self, node_id: int) -> NetworkNode:
        return self._nodes[node_id]

    def edge(self, edge_id: int) -> NetworkEdge:
        return self._edges[edge_id]

    @property
    def nodes(self) -> list[NetworkNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[NetworkEdge]:
        return list(self._edges.values())

    def number_of_nodes(self) -> int:
        return len(self._nodes)

    def number_of_edges(self) -> int:
        return len(self._edges)

    def adjacent_edges(self, node_id: int) -> list[int]:
        """Incident edges of a node in cyclic order (a copy)."""
        return list(self._adjacent[node_id])

    def degree(self, node_id: int) -> int:
        return len(self._adjacent[node_id])

    def is_leaf(self, node_id: int) -> bool:
        return len(self._adjacent[node_id]) == 1

    def is_leaf_edge(self, edge_id: int) -> bool:
        edge = self._edges[edge_id]
        return self.is_leaf(edge.source) or self.is_leaf(edge.target)

    def opposite(self, node_id: int, edge_id: int) -> int:
        return self._edges[edge_id].opposite(node_id)

    def first_adjacent_edge(self, node_id: int) -> int:
        return self._adjacent[node_id][0]

    def next_adjacent_edge_cyclic(self, edge_id: int, node_id: int) -> int:
        """The edge following ``edge_id`` around ``node_id``, wrapping round."""
        incident = self._adjacent[node_id]
        return incident[(incident.index(edge_id) + 1) % len(incident)]

    def is_adjacent(self, u: int, v: int) -> bool:
        return any(self._edges[e].opposite(u) == v for e in self._adjacent[u])

    def taxon_node(self, taxon: int) -> int | None:
        """Id of the node a taxon is attached to, if any."""
        return self._taxon2node.get(taxon)

    @property
    def taxa(self) -> set[int]:
        return set(self._taxon2node)

    def split_angles(self) -> dict[int, float]:
        """Angle per split id, as drawn; useful to keep angles across re-layouts."""
        return {
            edge.split: edge.angle
            for edge in self._edges.values()
            if edge.split != TEMPORARY_SPLIT
        }

    def __repr__(self) -> str:
        return f"NetworkGraph({len(self._nodes)} nodes, {len(self._edges)} edges)"
