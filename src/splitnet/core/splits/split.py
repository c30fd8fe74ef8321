"""
Weighted bipartitions of a taxon set.

A split A | B divides the taxa 1..n into two disjoint, non-empty sides.
Splits compare equal when they describe the same bipartition, regardless of
which side is called A and regardless of weight.
"""

from __future__ import annotations

from collections.abc import Iterable

from splitnet.core.exceptions import InvalidArgumentError


class Split:
    """
    A weighted split of the taxa 1..n.

    The sides are stored as frozensets of 1-based taxon ids and never
    change after construction; only the weight is mutable.

    Raises:
        InvalidArgumentError: If a side is empty or the sides share a taxon.

    Example:
        >>> s = Split({1, 2}, {3, 4}, weight=0.5)
        >>> s == Split({3, 4}, {1, 2})
        True
        >>> sorted(s.part_not_containing(1))
        [3, 4]
    """

    __slots__ = ("_a", "_b", "weight")

    def __init__(
        self,
        a: Iterable[int],
        b: Iterable[int],
        weight: float = 1.0,
    ) -> None:
        self._a: frozenset[int] = frozenset(a)
        self._b: frozenset[int] = frozenset(b)
        if not self._a or not self._b:
            raise InvalidArgumentError(
                "Split sides must both be non-empty",
                suggestion="A split must separate at least one taxon from the rest.",
            )
        shared = self._a & self._b
        if shared:
            raise InvalidArgumentError(
                f"Split sides overlap on taxa {sorted(shared)}",
                suggestion="Each taxon must appear on exactly one side of a split.",
            )
        self.weight = float(weight)

    @classmethod
    def from_part(cls, part: Iterable[int], ntax: int, weight: float = 1.0) -> Split:
        """Create the split ``part | {1..ntax} - part``."""
        a = frozenset(part)
        b = frozenset(t for t in range(1, ntax + 1) if t not in a)
        return cls(a, b, weight)

    @property
    def a(self) -> frozenset[int]:
        return self._a

    @property
    def b(self) -> frozenset[int]:
        return self._b

    @property
    def taxa(self) -> frozenset[int]:
        """All taxa mentioned by either side."""
        return self._a | self._b

    @property
    def ntax(self) -> int:
        return len(self._a) + len(self._b)

    @property
    def size(self) -> int:
        """Cardinality of the smaller side."""
        return min(len(self._a), len(self._b))

    def part_containing(self, taxon: int) -> frozenset[int] | None:
        if taxon in self._a:
            return self._a
        if taxon in self._b:
            return self._b
        return None

    def part_not_containing(self, taxon: int) -> frozenset[int] | None:
        """Return the first side that does not contain ``taxon``."""
        if taxon not in self._a:
            return self._a
        if taxon not in self._b:
            return self._b
        return None

    def is_trivial(self) -> bool:
        """True if one side holds a single taxon."""
        return len(self._a) == 1 or len(self._b) == 1

    def is_compatible(self, other: Split) -> bool:
        """
        Two splits are compatible unless all four side intersections are non-empty.
        """
        return not (
            self._a & other._a
            and self._a & other._b
            and self._b & other._a
            and self._b & other._b
        )

    def separates(self, t1: int, t2: int) -> bool:
        """True if the split puts ``t1`` and ``t2`` on different sides."""
        return (t1 in self._a and t2 in self._b) or (t2 in self._a and t1 in self._b)

    def splits_taxa(self, taxa: Iterable[int]) -> bool:
        """True if both sides intersect ``taxa``."""
        taxa = frozenset(taxa)
        return bool(self._a & taxa) and bool(self._b & taxa)

    def induced(self, taxa: Iterable[int]) -> Split | None:
        """
        Restrict the split to a subset of taxa.

        Returns:
            The induced split with the same weight, or None if one side
            becomes empty.
        """
        taxa = frozenset(taxa)
        a = self._a & taxa
        b = self._b & taxa
        if a and b:
            return Split(a, b, self.weight)
        return None

    def copy(self) -> Split:
        return Split(self._a, self._b, self.weight)

    def _ordered_parts(self) -> tuple[tuple[int, ...], tuple[int, ...]]:
        first, second = sorted((tuple(sorted(self._a)), tuple(sorted(self._b))))
        return first, second

    def sort_key(self) -> tuple[tuple[int, ...], tuple[int, ...]]:
        """Key ordering splits lexicographically by their first, then second side."""
        return self._ordered_parts()

    def by_decreasing_weight(self) -> tuple[float, tuple[tuple[int, ...], tuple[int, ...]]]:
        """Key ordering splits by decreasing weight, then lexicographically."""
        return (-self.weight, self._ordered_parts())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Split):
            return NotImplemented
        return (self._a == other._a and self._b == other._b) or (
            self._a == other._b and self._b == other._a
        )

    def __hash__(self) -> int:
        return hash(frozenset((self._a, self._b)))

    def __repr__(self) -> str:
        first, second = self._ordered_parts()
        return (
            f"Split({' '.join(map(str, first))} | {' '.join(map(str, second))}, "
            f"weight={self.weight:g})"
        )
