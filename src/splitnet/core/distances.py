"""
Validated pairwise distance matrices.

This module provides the DistanceMatrix class, the read-only input of the
split weight solver. Values are stored in a NumPy array; taxa are addressed
by 1-based ids, matching the split and ordering conventions.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from splitnet.core.exceptions import (
    DistanceMatrixNotSquareError,
    InvalidDistanceMatrixError,
)

if TYPE_CHECKING:
    import polars as pl

logger = logging.getLogger(__name__)

# Relative tolerance for the symmetry check
_SYMMETRY_RTOL = 1e-9


class DistanceMatrix:
    """
    Symmetric, non-negative distance matrix with a zero diagonal.

    The matrix is copied on construction and exposed read-only, so a solver
    can never modify the caller's data.

    Example:
        >>> dm = DistanceMatrix([[0, 1, 2], [1, 0, 1], [2, 1, 0]], labels=["a", "b", "c"])
        >>> dm.ntax
        3
        >>> dm.get(1, 3)
        2.0
    """

    __slots__ = ("_labels", "_values")

    def __init__(
        self,
        values: Sequence[Sequence[float]] | np.ndarray,
        labels: Sequence[str] | None = None,
        validate: bool = True,
    ) -> None:
        """
        Initialize from a dense n x n array.

        Args:
            values: Square array of distances, row/column k is taxon k+1.
            labels: Optional taxon names; defaults to "1".."n".
            validate: Check symmetry, sign and diagonal.

        Raises:
            DistanceMatrixNotSquareError: If the array is not n x n.
            InvalidDistanceMatrixError: If a value invariant is violated.
        """
        array = np.array(values, dtype=np.float64)
        if array.size == 0:
            array = array.reshape(0, 0)
        if array.ndim != 2 or array.shape[0] != array.shape[1]:
            rows = array.shape[0] if array.ndim >= 1 else 0
            cols = array.shape[1] if array.ndim >= 2 else 0
            raise DistanceMatrixNotSquareError(rows, cols)

        n = array.shape[0]
        if labels is None:
            labels = [str(t) for t in range(1, n + 1)]
        if len(labels) != n:
            msg = f"Got {len(labels)} labels for a {n} x {n} distance matrix"
            raise ValueError(msg)

        if validate:
            _validate(array)

        array.setflags(write=False)
        self._values = array
        self._labels: tuple[str, ...] = tuple(labels)

    @classmethod
    def from_frame(cls, frame: pl.DataFrame) -> DistanceMatrix:
        """
        Build a matrix from a polars DataFrame.

        The first column holds taxon labels, the remaining columns the
        distances in the same order.
        """
        labels = [str(v) for v in frame.get_column(frame.columns[0]).to_list()]
        values = frame.select(frame.columns[1:]).to_numpy()
        return cls(values, labels=labels)

    @property
    def ntax(self) -> int:
        return self._values.shape[0]

    @property
    def labels(self) -> tuple[str, ...]:
        return self._labels

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the underlying array (0-based)."""
        return self._values

    def get(self, i: int, j: int) -> float:
        """Distance between taxa ``i`` and ``j`` (1-based)."""
        return float(self._values[i - 1, j - 1])

    def label(self, taxon: int) -> str:
        return self._labels[taxon - 1]

    def __len__(self) -> int:
        return self.ntax

    def __repr__(self) -> str:
        return f"DistanceMatrix(ntax={self.ntax})"


def _validate(array: np.ndarray) -> None:
    """Check the value invariants of a square distance array."""
    if not np.all(np.isfinite(array)):
        bad = np.argwhere(~np.isfinite(array))
        raise InvalidDistanceMatrixError(
            "not finite", [(int(i) + 1, int(j) + 1, float(array[i, j])) for i, j in bad[:3]]
        )

    negative = np.argwhere(array < 0)
    if len(negative):
        raise InvalidDistanceMatrixError(
            "negative", [(int(i) + 1, int(j) + 1, float(array[i, j])) for i, j in negative[:3]]
        )

    diagonal = np.flatnonzero(np.diag(array) != 0)
    if len(diagonal):
        raise InvalidDistanceMatrixError(
            "non-zero on the diagonal",
            [(int(k) + 1, int(k) + 1, float(array[k, k])) for k in diagonal[:3]],
        )

    scale = max(float(array.max(initial=0.0)), 1.0)
    asymmetric = np.argwhere(np.abs(array - array.T) > _SYMMETRY_RTOL * scale)
    if len(asymmetric):
        raise InvalidDistanceMatrixError(
            "not symmetric",
            [(int(i) + 1, int(j) + 1, float(array[i, j])) for i, j in asymmetric[:3]],
        )


def as_distance_matrix(
    distances: DistanceMatrix | Sequence[Sequence[float]] | np.ndarray,
) -> DistanceMatrix:
    """Return ``distances`` as a validated DistanceMatrix."""
    if isinstance(distances, DistanceMatrix):
        return distances
    return DistanceMatrix(distances)
