"""
Cooperative progress reporting and cancellation.

Long-running computations call ``ProgressMonitor.check`` at well-defined
points (each outer active-set iteration, every ``stride`` layout steps).
The monitor forwards the position to an optional callback; a callback that
returns ``False``, or a call to ``cancel()``, makes the next check raise
``ComputationCancelledError``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from splitnet.core.constants import PROGRESS_STRIDE
from splitnet.core.exceptions import ComputationCancelledError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int], "bool | None"]


class ProgressMonitor:
    """
    Checkpoint handler shared by the solver and the layout algorithms.

    Example:
        >>> monitor = ProgressMonitor(lambda stage, step: step < 10)
        >>> monitor.check("active-set", 3)   # continues
        >>> monitor.check("active-set", 10)  # raises ComputationCancelledError
    """

    __slots__ = ("_callback", "_cancelled", "stride")

    def __init__(
        self,
        callback: ProgressCallback | None = None,
        stride: int = PROGRESS_STRIDE,
    ) -> None:
        if stride < 1:
            msg = f"Progress stride must be at least 1, got {stride}"
            raise ValueError(msg)
        self._callback = callback
        self._cancelled = False
        self.stride = stride

    def cancel(self) -> None:
        """Request cancellation at the next checkpoint."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def check(self, stage: str, step: int) -> None:
        """
        Report progress and honour a pending cancellation request.

        Raises:
            ComputationCancelledError: If cancellation was requested.
        """
        if self._callback is not None and self._callback(stage, step) is False:
            self._cancelled = True
        if self._cancelled:
            logger.info(f"Cancelling {stage} at step {step}")
            raise ComputationCancelledError(stage)

    def tick(self, stage: str, step: int) -> None:
        """Call ``check`` only on every ``stride``-th step."""
        if step % self.stride == 0:
            self.check(stage, step)


def as_monitor(progress: ProgressMonitor | ProgressCallback | None) -> ProgressMonitor:
    """Wrap a bare callback (or nothing) into a ``ProgressMonitor``."""
    if isinstance(progress, ProgressMonitor):
        return progress
    return ProgressMonitor(progress)
