"""
Custom exceptions with actionable guidance.

Provides specific error types for the failure scenarios of split weight
estimation and network layout, each with a suggestion for resolution.
"""

from __future__ import annotations


class SplitNetError(Exception):
    """Base exception for splitnet errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class InvalidArgumentError(SplitNetError):
    """Raised when inputs are inconsistent before any computation starts."""


class DistanceMatrixNotSquareError(InvalidArgumentError):
    """Raised when the distance matrix is not square."""

    def __init__(self, rows: int, cols: int):
        super().__init__(
            message=f"Distance matrix is not square: {rows} rows x {cols} columns",
            suggestion=(
                "Provide a full n x n matrix with one row and one column per taxon. "
                "Lower-triangular input must be mirrored before use."
            ),
        )
        self.rows = rows
        self.cols = cols


class InvalidDistanceMatrixError(InvalidArgumentError):
    """Raised when distance values violate the matrix invariants."""

    def __init__(self, problem: str, examples: list[tuple[int, int, float]]):
        example_str = ", ".join(f"({i},{j}): {val:g}" for i, j, val in examples[:3])
        super().__init__(
            message=f"Distance matrix is {problem}: {example_str}",
            suggestion=(
                "Distances must be non-negative, symmetric and zero on the diagonal. "
                "Check the tool that produced the matrix."
            ),
        )
        self.problem = problem


class OrderingMismatchError(InvalidArgumentError):
    """Raised when the circular ordering and the matrix disagree in size."""

    def __init__(self, ordering_length: int, ntax: int):
        super().__init__(
            message=(
                f"Circular ordering has {ordering_length} entries but the "
                f"distance matrix has {ntax} taxa"
            ),
            suggestion="Pass an ordering that lists every taxon of the matrix exactly once.",
        )
        self.ordering_length = ordering_length
        self.ntax = ntax


class InvalidOrderingError(InvalidArgumentError):
    """Raised when the circular ordering is not a permutation of 1..n."""

    def __init__(self, ntax: int, missing: set[int], duplicated: set[int] | None = None):
        details = []
        if missing:
            details.append(f"missing taxa: {', '.join(str(t) for t in sorted(missing)[:5])}")
        if duplicated:
            details.append(
                f"repeated taxa: {', '.join(str(t) for t in sorted(duplicated)[:5])}"
            )
        super().__init__(
            message=f"Circular ordering is not a permutation of 1..{ntax} ({'; '.join(details)})",
            suggestion=(
                "Taxa are numbered from 1. Every taxon must appear exactly once "
                "in the circular ordering."
            ),
        )
        self.missing = missing
        self.duplicated = duplicated or set()


class SplitIndexError(SplitNetError, IndexError):
    """Raised when a split index is outside 1..size."""

    def __init__(self, index: int, size: int):
        super().__init__(
            message=f"Split index {index} is out of range [1, {size}]",
            suggestion="Split systems are 1-indexed; use index_of() to look up a split.",
        )
        self.index = index
        self.size = size


class AlgorithmInvariantError(SplitNetError):
    """Raised when a layout algorithm detects an internally inconsistent state."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            suggestion=(
                "The split system is not circular with respect to the given "
                "ordering. Use splits computed for this ordering, or the "
                "outline layout."
            ),
        )


class ConvergenceError(SplitNetError):
    """Raised in strict mode when conjugate gradients hit the iteration cap."""

    def __init__(self, iterations: int, residual: float, threshold: float):
        super().__init__(
            message=(
                f"Conjugate gradient did not converge after {iterations} iterations "
                f"(residual {residual:.3g} > {threshold:.3g})"
            ),
            suggestion=(
                "Check the distance matrix for extreme values, or disable "
                "strict_convergence to accept the best iterate."
            ),
        )
        self.iterations = iterations
        self.residual = residual
        self.threshold = threshold


class ComputationCancelledError(SplitNetError):
    """Raised when a progress monitor requests cancellation."""

    def __init__(self, stage: str):
        super().__init__(message=f"Computation cancelled during {stage}")
        self.stage = stage


class ConfigurationError(SplitNetError):
    """Raised when configuration is invalid."""
