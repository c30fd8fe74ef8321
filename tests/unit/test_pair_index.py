"""Unit tests for the packed pair layout."""

from __future__ import annotations

import numpy as np
import pytest

from splitnet.core.weights.pair_index import (
    distance,
    pair_count,
    pair_from_index,
    pair_index,
)


class TestPairIndex:
    """Tests for index(i, j) = (2n - i - 3) i / 2 + j - 1."""

    def test_pair_count(self):
        assert pair_count(0) == 0
        assert pair_count(1) == 0
        assert pair_count(4) == 6

    def test_known_positions(self):
        """Rows of the upper triangle should be stored one after another."""
        assert pair_index(4, 0, 1) == 0
        assert pair_index(4, 0, 3) == 2
        assert pair_index(4, 1, 2) == 3
        assert pair_index(4, 1, 3) == 4
        assert pair_index(4, 2, 3) == 5

    @pytest.mark.parametrize("n", [2, 3, 5, 8, 13])
    def test_is_a_bijection(self, n):
        indices = [pair_index(n, i, j) for i in range(n) for j in range(i + 1, n)]
        assert indices == list(range(pair_count(n)))

    def test_vectorised(self):
        """Should accept numpy index arrays."""
        rows, cols = np.triu_indices(6, 1)
        assert list(pair_index(6, rows, cols)) == list(range(15))


class TestPairFromIndex:
    """Tests for the inverse mapping."""

    @pytest.mark.parametrize("n", [2, 3, 4, 7, 20])
    def test_inverse(self, n):
        for i in range(n):
            for j in range(i + 1, n):
                assert pair_from_index(n, pair_index(n, i, j)) == (i, j)

    @pytest.mark.parametrize("index", [-1, 6])
    def test_out_of_range(self, index):
        with pytest.raises(ValueError):
            pair_from_index(4, index)


class TestCircularDistance:
    """Tests for reading a packed vector with indices taken around the circle."""

    def test_symmetric_and_modular(self):
        d = np.arange(1.0, 7.0)  # n = 4
        assert distance(d, 4, 1, 3) == d[4]
        assert distance(d, 4, 3, 1) == d[4]
        assert distance(d, 4, 4, 2) == d[1]

    def test_diagonal_is_zero(self):
        d = np.ones(6)
        assert distance(d, 4, 2, 2) == 0.0
        assert distance(d, 4, 0, 4) == 0.0
