"""
Shared pytest fixtures for splitnet tests.

Provides small hand-checked distance matrices, seeded random trees and
temporary files for unit and integration testing.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import numpy as np
import polars as pl
import pytest

from splitnet.core.splits import Split, SplitSystem
from tests.factories import CircularTree, TreeFactory


# =============================================================================
# Distance Matrix Fixtures
# =============================================================================


@pytest.fixture
def square_distances() -> np.ndarray:
    """Four taxa on a unit square: two crossing splits of weight 1."""
    return np.array([
        [0.0, 1.0, 2.0, 1.0],
        [1.0, 0.0, 1.0, 2.0],
        [2.0, 1.0, 0.0, 1.0],
        [1.0, 2.0, 1.0, 0.0],
    ])


@pytest.fixture
def triangle_distances() -> np.ndarray:
    """Three taxa with pendant edge lengths 1, 2 and 3."""
    return np.array([
        [0.0, 3.0, 4.0],
        [3.0, 0.0, 5.0],
        [4.0, 5.0, 0.0],
    ])


@pytest.fixture
def conflicting_distances() -> np.ndarray:
    """Four taxa whose unconstrained fit has a negative split weight."""
    return np.array([
        [0.0, 2.0, 1.0, 2.0],
        [2.0, 0.0, 2.0, 1.0],
        [1.0, 2.0, 0.0, 2.0],
        [2.0, 1.0, 2.0, 0.0],
    ])


# =============================================================================
# Split System Fixtures
# =============================================================================


@pytest.fixture
def square_splits() -> SplitSystem:
    """The two crossing splits of the unit square on ordering 1, 2, 3, 4."""
    return SplitSystem([
        Split({2, 3}, {1, 4}, 1.0),
        Split({3, 4}, {1, 2}, 1.0),
    ])


@pytest.fixture
def star_splits() -> SplitSystem:
    """Trivial splits of three taxa."""
    return SplitSystem([
        Split({1}, {2, 3}, 1.0),
        Split({2}, {1, 3}, 2.0),
        Split({3}, {1, 2}, 3.0),
    ])


# =============================================================================
# Random Data Fixtures
# =============================================================================


@pytest.fixture
def tree_factory() -> TreeFactory:
    """Seeded tree factory."""
    return TreeFactory(seed=7)


@pytest.fixture
def random_tree(tree_factory: TreeFactory) -> CircularTree:
    """A random weighted tree on 9 taxa."""
    return tree_factory.tree(9)


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Path:
    """Temporary directory that is cleaned up after tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def distance_csv(temp_dir: Path, square_distances: np.ndarray) -> Path:
    """The unit square matrix as CSV with labels A-D."""
    labels = ["A", "B", "C", "D"]
    frame = pl.DataFrame(
        {"taxon": labels, **{label: square_distances[:, k] for k, label in enumerate(labels)}}
    )
    path = temp_dir / "distances.csv"
    frame.write_csv(path)
    return path
