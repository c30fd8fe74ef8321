"""
Packed upper-triangular pair indexing.

Pairs (i, j) with 0 <= i < j < n are stored in the order
(0,1), (0,2), ..., (0,n-1), (1,2), ..., (n-2,n-1). Distances, split
weights and every vector the solver handles use this layout; split (i, j)
is the circular split {i+1, ..., j} | rest.
"""

from __future__ import annotations

import math


def pair_count(n: int) -> int:
    """Number of unordered pairs of ``n`` items."""
    return n * (n - 1) // 2


def pair_index(n: int, i: int, j: int) -> int:
    """
    Position of the pair (i, j), i < j, in the packed vector.

    index(i, j) = (2n - i - 3) * i / 2 + j - 1
    """
    return (2 * n - i - 3) * i // 2 + j - 1


def pair_from_index(n: int, index: int) -> tuple[int, int]:
    """
    Inverse of ``pair_index``.

    Raises:
        ValueError: If index is outside the packed vector.
    """
    if not 0 <= index < pair_count(n):
        msg = f"Pair index {index} is out of range for n={n}"
        raise ValueError(msg)
    # Row i starts at pair_index(n, i, i + 1); solve the quadratic, then fix rounding
    b = 2 * n - 1
    i = int((b - math.sqrt(b * b - 8 * index)) // 2)
    i = max(0, min(i, n - 2))
    while i > 0 and pair_index(n, i, i + 1) > index:
        i -= 1
    while i < n - 2 and pair_index(n, i + 1, i + 2) <= index:
        i += 1
    j = index - pair_index(n, i, i + 1) + i + 1
    return i, j


def distance(d, n: int, i: int, j: int) -> float:
    """
    Entry (i, j) of a packed symmetric vector, for any i, j taken modulo n.

    The diagonal is zero.
    """
    i %= n
    j %= n
    if i == j:
        return 0.0
    if i > j:
        i, j = j, i
    return d[pair_index(n, i, j)]
