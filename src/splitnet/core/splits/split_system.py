"""
Indexed collections of unique splits.

A SplitSystem keeps splits in insertion order under 1-based indices and
answers membership by bipartition, ignoring weights.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence

from splitnet.core.exceptions import SplitIndexError
from splitnet.core.splits.split import Split

logger = logging.getLogger(__name__)


class SplitSystem:
    """
    Ordered, 1-indexed collection of unique splits.

    Adding a split whose bipartition is already present returns the index of
    the existing entry and leaves its weight untouched. Callers that need to
    accumulate weights look the split up and update it explicitly.

    Example:
        >>> splits = SplitSystem()
        >>> splits.add_split(Split({1}, {2, 3}, 0.5))
        1
        >>> splits.add_split(Split({2, 3}, {1}, 9.0))
        1
        >>> splits.get_split(1).weight
        0.5
    """

    __slots__ = ("_index", "_splits")

    def __init__(self, splits: Iterable[Split] = ()) -> None:
        self._splits: list[Split] = []
        self._index: dict[Split, int] = {}
        for split in splits:
            self.add_split(split)

    @classmethod
    def all_circular_splits(
        cls,
        ntax: int,
        ordering: Sequence[int],
        weight: float = 1.0,
    ) -> SplitSystem:
        """
        Build all n(n-1)/2 splits that are compatible with a circular ordering.

        The splits are generated in packed pair order: for i < j the split
        holds the taxa at circle positions i+2..j+1 on one side.

        Args:
            ntax: Number of taxa.
            ordering: Circular ordering, ``ordering[0]`` is position 1.
            weight: Weight given to every split.
        """
        result = cls()
        for i in range(ntax):
            part: set[int] = set()
            for j in range(i + 1, ntax):
                part.add(ordering[j])
                result.add_split(Split.from_part(part, ntax, weight))
        return result

    def add_split(self, split: Split) -> int:
        """
        Add a split and return its 1-based index.

        If an equal bipartition is already present, nothing changes and the
        existing index is returned.
        """
        existing = self._index.get(split)
        if existing is not None:
            return existing
        self._splits.append(split)
        self._index[split] = len(self._splits)
        return len(self._splits)

    def add_all(self, splits: Iterable[Split]) -> int:
        """Add every split not yet present and return how many were added."""
        before = len(self._splits)
        for split in splits:
            self.add_split(split)
        return len(self._splits) - before

    def add_all_trivial(self, ntax: int, weight: float = 0.0) -> int:
        """
        Add a trivial split for every taxon that does not have one yet.

        Returns:
            Number of trivial splits added.
        """
        added = 0
        for taxon in range(1, ntax + 1):
            if self.trivial_split(taxon) is None:
                self.add_split(Split.from_part((taxon,), ntax, weight))
                added += 1
        if added:
            logger.debug(f"Added {added} missing trivial splits with weight {weight:g}")
        return added

    def index_of(self, split: Split) -> int:
        """Return the 1-based index of ``split``, or -1 if absent."""
        return self._index.get(split, -1)

    def get_split(self, index: int) -> Split:
        """
        Return the split with the given 1-based index.

        Raises:
            SplitIndexError: If index is outside 1..size().
        """
        if not 1 <= index <= len(self._splits):
            raise SplitIndexError(index, len(self._splits))
        return self._splits[index - 1]

    def get(self, split: Split) -> Split | None:
        """Return the stored split equal to ``split`` (it may carry another weight)."""
        index = self._index.get(split)
        if index is None:
            return None
        return self._splits[index - 1]

    def size(self) -> int:
        return len(self._splits)

    def as_list(self) -> list[Split]:
        """All splits in index order, as a new list."""
        return list(self._splits)

    def copy(self) -> SplitSystem:
        """Deep copy; weights of the copy can be changed independently."""
        return SplitSystem(split.copy() for split in self._splits)

    def clear(self) -> None:
        self._splits.clear()
        self._index.clear()

    def trivial_split(self, taxon: int) -> Split | None:
        """Return the split separating ``taxon`` from all others, if present."""
        for split in self._splits:
            if (len(split.a) == 1 and taxon in split.a) or (
                len(split.b) == 1 and taxon in split.b
            ):
                return split
        return None

    def heaviest_trivial_split(self) -> Split | None:
        result: Split | None = None
        for split in self._splits:
            if split.size == 1 and (result is None or split.weight > result.weight):
                result = split
        return result

    def has_incompatible_pair(self) -> bool:
        """True if some pair of splits has all four side intersections non-empty."""
        for s, first in enumerate(self._splits):
            for second in self._splits[s + 1:]:
                if not first.is_compatible(second):
                    return True
        return False

    def is_full(self, ntax: int) -> bool:
        """True if every split covers exactly the taxa 1..ntax."""
        taxa = frozenset(range(1, ntax + 1))
        return all(split.taxa == taxa for split in self._splits)

    def delete_taxa(self, taxa: Iterable[int]) -> SplitSystem:
        """
        Restrict all splits to the taxa not listed.

        Splits that collapse onto the same bipartition have their weights
        summed; splits that lose a whole side are dropped.
        """
        removed = frozenset(taxa)
        keep = frozenset().union(*(s.taxa for s in self._splits)) - removed
        result = SplitSystem()
        for split in self._splits:
            induced = split.induced(keep)
            if induced is None:
                continue
            other = result.get(induced)
            if other is not None:
                other.weight += induced.weight
            else:
                result.add_split(induced)
        return result

    def to_binary_sequences(self, labels: Sequence[str]) -> str:
        """
        Encode the splits as FastA-style binary characters, one row per taxon.

        Args:
            labels: Taxon labels, ``labels[0]`` is taxon 1.
        """
        lines: list[str] = []
        for taxon, name in enumerate(labels, start=1):
            lines.append(f"> {name}")
            lines.append("".join("1" if taxon in split.a else "0" for split in self._splits))
        return "\n".join(lines) + "\n"

    def __len__(self) -> int:
        return len(self._splits)

    def __iter__(self) -> Iterator[Split]:
        return iter(self._splits)

    def __contains__(self, split: object) -> bool:
        return split in self._index

    def __repr__(self) -> str:
        return f"SplitSystem({len(self._splits)} splits)"
