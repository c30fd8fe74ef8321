"""
Least-squares split weights for a circular ordering.

Given a circular ordering of n taxa, the n(n-1)/2 circular splits form a
basis for all pairwise distance vectors. This module estimates their
weights by ordinary (unconstrained) least squares, using the closed form
of Chepoi and Fichet, or by non-negative least squares using an active-set
method whose inner problem is solved by conjugate gradients.

The design matrix A is never built. ``apply_a`` computes the distances
induced by a vector of split weights, ``apply_at`` its transpose; both run
in O(n^2) using the packed pair layout of ``pair_index``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from splitnet.core.constants import (
    CG_EPSILON,
    CONTRACT_PROPORTION,
    GRADIENT_TOLERANCE,
    VARIANCE_MODELS,
    ZERO_VARIANCE_WEIGHT,
)
from splitnet.core.distances import DistanceMatrix, as_distance_matrix
from splitnet.core.exceptions import (
    ConfigurationError,
    ConvergenceError,
    InvalidOrderingError,
    OrderingMismatchError,
)
from splitnet.core.progress import ProgressCallback, ProgressMonitor, as_monitor
from splitnet.core.splits import Split, SplitSystem
from splitnet.core.weights.pair_index import distance, pair_count, pair_index

if TYPE_CHECKING:
    from splitnet.models.config import SolverConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input handling
# ---------------------------------------------------------------------------


def validate_ordering(ordering: Sequence[int], ntax: int) -> None:
    """
    Check that ``ordering`` is a permutation of 1..ntax.

    Raises:
        OrderingMismatchError: If the lengths differ.
        InvalidOrderingError: If a taxon is missing or repeated.
    """
    if len(ordering) != ntax:
        raise OrderingMismatchError(len(ordering), ntax)
    seen: set[int] = set()
    duplicated: set[int] = set()
    for taxon in ordering:
        if taxon in seen:
            duplicated.add(taxon)
        seen.add(taxon)
    missing = set(range(1, ntax + 1)) - seen
    if missing or duplicated:
        raise InvalidOrderingError(ntax, missing, duplicated)


def packed_distances(distances: DistanceMatrix, ordering: Sequence[int]) -> np.ndarray:
    """
    Reorder distances into a packed vector so that the ordering becomes 0..n-1.

    Entry ``pair_index(n, i, j)`` holds the distance between the taxa at
    circle positions i+1 and j+1.
    """
    n = len(ordering)
    order = np.asarray(ordering, dtype=np.intp) - 1
    rows, cols = np.triu_indices(n, 1)
    d = np.zeros(pair_count(n))
    d[pair_index(n, rows, cols)] = distances.values[order[rows], order[cols]]
    return d


def variance_weights(d: np.ndarray, variance: str) -> np.ndarray:
    """
    Inverse-variance weights of the constrained objective.

    ``ols`` weighs all pairs equally, ``fm1`` and ``fm2`` use the
    Fitch-Margoliash variances d and d^2. Pairs with zero variance get a
    very large weight.
    """
    if variance == "ols":
        return np.ones_like(d)
    if variance == "fm1":
        v = d.copy()
    elif variance == "fm2":
        v = d * d
    else:
        raise ConfigurationError(
            f"Unknown variance model '{variance}'",
            suggestion=f"Use one of: {', '.join(VARIANCE_MODELS)}",
        )
    w = np.full_like(d, ZERO_VARIANCE_WEIGHT)
    nonzero = v != 0.0
    w[nonzero] = 1.0 / v[nonzero]
    return w


# ---------------------------------------------------------------------------
# Matrix-free design operators
# ---------------------------------------------------------------------------


def _symmetric(n: int, packed: np.ndarray) -> np.ndarray:
    """Expand a packed vector into a symmetric n x n array with zero diagonal."""
    rows, cols = np.triu_indices(n, 1)
    square = np.zeros((n, n))
    square[rows, cols] = packed[pair_index(n, rows, cols)]
    return square + square.T


def apply_a(n: int, b: np.ndarray) -> np.ndarray:
    """
    Compute d = A b, the pairwise distances induced by split weights ``b``.
    """
    d = np.zeros(pair_count(n))
    if n < 2:
        return d

    # Adjacent pairs (i, i+1) are separated by every split (k, i) and (i, k)
    i = np.arange(n - 1)
    d[pair_index(n, i, i + 1)] = _symmetric(n, b).sum(axis=1)[: n - 1]

    # Pairs two apart
    i = np.arange(n - 2)
    d[pair_index(n, i, i + 2)] = (
        d[pair_index(n, i, i + 1)]
        + d[pair_index(n, i + 1, i + 2)]
        - 2.0 * b[pair_index(n, i, i + 1)]
    )

    # d[i][j] = d[i][j-1] + d[i+1][j] - d[i+1][j-1] - 2 b[i][j-1]
    for k in range(3, n):
        i = np.arange(n - k)
        j = i + k
        d[pair_index(n, i, j)] = (
            d[pair_index(n, i, j - 1)]
            + d[pair_index(n, i + 1, j)]
            - d[pair_index(n, i + 1, j - 1)]
            - 2.0 * b[pair_index(n, i, j - 1)]
        )
    return d


def apply_at(n: int, d: np.ndarray) -> np.ndarray:
    """
    Compute p = A^t d, summing ``d`` over the pairs each split separates.
    """
    p = np.zeros(pair_count(n))
    if n < 2:
        return p

    # Trivial splits (i, i+1) = {i+1}: row sums
    i = np.arange(n - 1)
    p[pair_index(n, i, i + 1)] = _symmetric(n, d).sum(axis=1)[1:]

    # Splits separating out two adjacent taxa
    i = np.arange(n - 2)
    p[pair_index(n, i, i + 2)] = (
        p[pair_index(n, i, i + 1)]
        + p[pair_index(n, i + 1, i + 2)]
        - 2.0 * d[pair_index(n, i + 1, i + 2)]
    )

    # p[i][j] = p[i][j-1] + p[i+1][j] - p[i+1][j-1] - 2 d[i+1][j]
    for k in range(3, n):
        i = np.arange(n - k)
        j = i + k
        p[pair_index(n, i, j)] = (
            p[pair_index(n, i, j - 1)]
            + p[pair_index(n, i + 1, j)]
            - p[pair_index(n, i + 1, j - 1)]
            - 2.0 * d[pair_index(n, i + 1, j)]
        )
    return p


# ---------------------------------------------------------------------------
# Solvers
# ---------------------------------------------------------------------------


def unconstrained_weights(n: int, d: np.ndarray) -> np.ndarray:
    """
    Ordinary least-squares split weights in O(n^2) (Chepoi and Fichet).

    x[i][j] = (d[i][j] + d[i+1][j+1] - d[i][j+1] - d[i+1][j]) / 2,
    with indices taken around the circle.
    """
    x = np.zeros(pair_count(n))
    for i in range(n - 1):
        for j in range(i + 1, n):
            x[pair_index(n, i, j)] = (
                distance(d, n, i, j)
                + distance(d, n, i + 1, j + 1)
                - distance(d, n, i, j + 1)
                - distance(d, n, i + 1, j)
            ) / 2.0
    return x


def worst_indices(x: np.ndarray, proportion: float) -> np.ndarray:
    """
    Indices of the most negative ``proportion`` of the negative entries of ``x``.

    The count is rounded up; ties are broken in favour of earlier indices.
    """
    negative = np.flatnonzero(x < 0.0)
    if proportion <= 0.0 or negative.size == 0:
        return np.empty(0, dtype=np.intp)
    keep = math.ceil(proportion * negative.size)
    order = np.argsort(x[negative], kind="stable")
    return negative[order[:keep]]


def conjugate_gradients(
    n: int,
    w: np.ndarray,
    b: np.ndarray,
    active: np.ndarray,
    x: np.ndarray,
    strict: bool = False,
    max_iterations: int | None = None,
) -> int:
    """
    Solve A^t W A x = b over the inactive variables, updating ``x`` in place.

    Active variables are assumed to be zero in ``x`` and stay zero. The
    current ``x`` is the starting vector.
    The iteration cap defaults to the number of taxon pairs.

    Returns:
        Number of iterations performed.

    Raises:
        ConvergenceError: In strict mode, if the iteration cap is reached.
    """
    kmax = pair_count(n) if max_iterations is None else max_iterations

    r = b - apply_at(n, w * apply_a(n, x))
    r[active] = 0.0

    rho = float(r @ r)
    rho_old = 0.0
    threshold = CG_EPSILON * math.sqrt(float(b @ b))
    p = r.copy()

    k = 0
    while rho > threshold * threshold and k < kmax:
        k += 1
        if k > 1:
            p = r + (rho / rho_old) * p

        q = apply_at(n, w * apply_a(n, p))
        q[active] = 0.0

        alpha = rho / float(p @ q)
        x += alpha * p
        r -= alpha * q

        rho_old = rho
        rho = float(r @ r)

    if rho > threshold * threshold:
        residual = math.sqrt(rho)
        if strict:
            raise ConvergenceError(k, residual, threshold)
        logger.warning(
            f"Conjugate gradient stopped after {k} iterations without converging "
            f"(residual {residual:.3g}, threshold {threshold:.3g}); using best iterate"
        )
    return k


def active_set_weights(
    n: int,
    d: np.ndarray,
    w: np.ndarray,
    monitor: ProgressMonitor | None = None,
    strict: bool = False,
) -> np.ndarray:
    """
    Non-negative least-squares split weights minimising (Ax - d)^t W (Ax - d).

    Starts from the unconstrained optimum and returns it directly when it is
    feasible. Otherwise alternates between conjugate-gradient solves over
    the free variables and updates of the active set (variables held at 0).

    Args:
        n: Number of taxa.
        d: Packed distances.
        w: Packed inverse variances.
        monitor: Checked at the start of every outer iteration.
        strict: Raise ConvergenceError when a CG solve hits its cap.
    """
    monitor = monitor or ProgressMonitor()
    npairs = d.size

    x = unconstrained_weights(n, d)
    if np.all(x >= 0.0):
        logger.debug("Unconstrained optimum is feasible")
        return x

    old_x = np.ones(npairs)
    active = np.zeros(npairs, dtype=bool)
    atwd = apply_at(n, w * d)

    first_pass = True
    outer = 0
    while True:
        monitor.check("active-set", outer)
        outer += 1

        # Inner loop: move to the next feasible optimum
        while True:
            if not first_pass:
                conjugate_gradients(n, w, atwd, active, x, strict)
            first_pass = False

            worst = worst_indices(x, CONTRACT_PROPORTION)
            if worst.size:
                x[worst] = 0.0
                active[worst] = True
                conjugate_gradients(n, w, atwd, active, x, strict)

            negative = np.flatnonzero(x < 0.0)
            if negative.size == 0:
                break

            # Last feasible point on the segment from old_x to x
            steps = old_x[negative] / (old_x[negative] - x[negative])
            first = int(np.argmin(steps))
            min_i = int(negative[first])
            min_step = float(steps[first])

            free = ~active
            old_x[free] += min_step * (x[free] - old_x[free])
            active[min_i] = True
            x[min_i] = 0.0

        # grad = 2 (A^t W A x - A^t W d); optimal when no active gradient is negative
        gradient = 2.0 * (apply_at(n, w * apply_a(n, x)) - atwd)
        candidates = np.flatnonzero(active)
        logger.debug(f"Active-set iteration {outer}: {candidates.size} of {npairs} held at zero")
        if candidates.size == 0:
            return x
        worst_free = int(np.argmin(gradient[candidates]))
        if gradient[candidates[worst_free]] > GRADIENT_TOLERANCE:
            return x
        active[candidates[worst_free]] = False


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_splits(
    x: np.ndarray,
    ordering: Sequence[int],
    cutoff: float,
) -> SplitSystem:
    """
    Turn packed split weights into a SplitSystem.

    Pair (i, j) becomes the split holding the taxa at circle positions
    i+2..j+1 (1-based) on one side; only weights above ``cutoff`` are kept.
    """
    n = len(ordering)
    splits = SplitSystem()
    for i in range(n):
        part: set[int] = set()
        for j in range(i + 1, n):
            part.add(ordering[j])
            weight = float(x[pair_index(n, i, j)])
            if weight > cutoff:
                splits.add_split(Split.from_part(part, n, weight))
    return splits


class CircularSplitWeights:
    """
    Estimates weights of the circular splits of an ordering from distances.

    The object holds configuration only; every call to ``solve`` allocates
    its own working vectors, so one instance can be reused freely.

    Example:
        >>> solver = CircularSplitWeights(constrained=True, cutoff=1e-4)
        >>> splits = solver.solve(distances, ordering=[1, 3, 2, 4])
    """

    def __init__(
        self,
        constrained: bool = True,
        cutoff: float = 0.0001,
        variance: str = "ols",
        strict_convergence: bool = False,
    ) -> None:
        """
        Args:
            constrained: Force all weights to be non-negative.
            cutoff: Splits with weight <= cutoff are dropped.
            variance: "ols", "fm1" or "fm2" weighting of the constrained objective.
            strict_convergence: Raise instead of warn on CG non-convergence.
        """
        if cutoff < 0:
            raise ConfigurationError(
                f"cutoff = {cutoff} must not be negative",
                suggestion="Use 0 to keep every positive split weight.",
            )
        if variance not in VARIANCE_MODELS:
            raise ConfigurationError(
                f"Unknown variance model '{variance}'",
                suggestion=f"Use one of: {', '.join(VARIANCE_MODELS)}",
            )
        self.constrained = constrained
        self.cutoff = cutoff
        self.variance = variance
        self.strict_convergence = strict_convergence

    @classmethod
    def from_config(cls, config: SolverConfig) -> CircularSplitWeights:
        return cls(
            constrained=config.constrained,
            cutoff=config.cutoff,
            variance=config.variance,
            strict_convergence=config.strict_convergence,
        )

    def solve(
        self,
        distances: DistanceMatrix | np.ndarray | Sequence[Sequence[float]],
        ordering: Sequence[int],
        progress: ProgressMonitor | ProgressCallback | None = None,
    ) -> SplitSystem:
        """
        Compute the weighted circular splits.

        Args:
            distances: Pairwise distances between taxa 1..n.
            ordering: Circular ordering, ``ordering[0]`` is circle position 1.
            progress: Optional monitor or callback(stage, step); returning
                False cancels.

        Returns:
            New SplitSystem with the splits whose weight exceeds the cutoff.

        Raises:
            InvalidArgumentError: If the ordering does not match the matrix.
            ComputationCancelledError: If cancelled; no result is produced.
        """
        distances = as_distance_matrix(distances)
        ntax = distances.ntax
        validate_ordering(ordering, ntax)
        monitor = as_monitor(progress)

        if ntax <= 1:
            return SplitSystem()
        if ntax == 2:
            splits = SplitSystem()
            d12 = distances.get(ordering[0], ordering[1])
            if d12 > 0.0:
                splits.add_split(Split.from_part((ordering[0],), ntax, d12))
            return splits

        d = packed_distances(distances, ordering)
        if self.constrained:
            w = variance_weights(d, self.variance)
            x = active_set_weights(ntax, d, w, monitor, self.strict_convergence)
        else:
            x = unconstrained_weights(ntax, d)

        splits = extract_splits(x, ordering, self.cutoff)
        logger.info(
            f"Computed {len(splits)} splits for {ntax} taxa "
            f"({'constrained' if self.constrained else 'unconstrained'}, "
            f"cutoff {self.cutoff:g})"
        )
        return splits


def compute_split_weights(
    distances: DistanceMatrix | np.ndarray | Sequence[Sequence[float]],
    ordering: Sequence[int],
    constrained: bool = True,
    cutoff: float = 0.0001,
    variance: str = "ols",
    progress: ProgressMonitor | ProgressCallback | None = None,
) -> SplitSystem:
    """Convenience wrapper around ``CircularSplitWeights.solve``."""
    solver = CircularSplitWeights(constrained=constrained, cutoff=cutoff, variance=variance)
    return solver.solve(distances, ordering, progress)


def fit_statistics(distances: DistanceMatrix, splits: SplitSystem) -> float:
    """
    Least-squares fit of a split system to a distance matrix, in percent.

    fit = 100 * (1 - sum (d - d_splits)^2 / sum d^2), over all pairs.
    """
    n = distances.ntax
    if n < 2:
        return 100.0
    induced = np.zeros((n, n))
    for split in splits:
        side = np.zeros(n, dtype=bool)
        side[[t - 1 for t in split.a]] = True
        induced += split.weight * np.not_equal.outer(side, side)
    rows, cols = np.triu_indices(n, 1)
    observed = distances.values[rows, cols]
    ss_dist = float(observed @ observed)
    if ss_dist == 0.0:
        return 100.0
    diff = observed - induced[rows, cols]
    return 100.0 * (1.0 - float(diff @ diff) / ss_dist)
