"""
Shared CLI utilities for splitnet commands.

Provides common functionality used across CLI modules.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from splitnet.core.distances import DistanceMatrix


@contextmanager
def spinner_progress(
    description: str,
    console: Console | None = None,
    quiet: bool = False,
) -> Generator[Progress, None, None]:
    """Context manager for spinner-style progress display.

    The spinner is suppressed when quiet mode is enabled.

    Args:
        description: Task description to display.
        console: Rich Console instance. If None and not quiet, creates one.
        quiet: If True, suppress the progress display entirely.

    Yields:
        Progress instance (even when quiet, for API consistency).
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console if not quiet else None,
        disable=quiet,
    ) as progress:
        progress.add_task(description=description, total=None)
        yield progress


def setup_logging(verbose: bool = False, console: Console | None = None) -> None:
    """
    Route the splitnet loggers to a Rich handler.

    Args:
        verbose: Log at DEBUG level instead of WARNING.
        console: Console the handler writes to.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("splitnet")
    logger.setLevel(level)

    # Avoid duplicate handlers when several commands run in one process
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = RichHandler(console=console, show_path=False, rich_tracebacks=False)
    handler.setLevel(level)
    logger.addHandler(handler)


def read_distance_matrix(path: Path) -> DistanceMatrix:
    """
    Read a distance matrix CSV.

    The first column holds the taxon labels, the header row the same
    labels in the same order.
    """
    import polars as pl

    frame = pl.read_csv(path)
    return DistanceMatrix.from_frame(frame)


def parse_ordering(text: str | None, labels: Sequence[str]) -> list[int]:
    """
    Turn a comma-separated ordering into 1-based taxon ids.

    Items are matched against the labels first; items that are not labels
    are read as taxon numbers. Without ``text`` the matrix order is used.

    Raises:
        ValueError: If an item is neither a label nor a number.
    """
    if text is None:
        return list(range(1, len(labels) + 1))
    index = {label: taxon for taxon, label in enumerate(labels, start=1)}
    ordering: list[int] = []
    for item in (part.strip() for part in text.split(",")):
        if not item:
            continue
        if item in index:
            ordering.append(index[item])
        elif item.isdigit():
            ordering.append(int(item))
        else:
            msg = f"Unknown taxon '{item}' in ordering"
            raise ValueError(msg)
    return ordering


class QuietConsole:
    """Console wrapper that suppresses output in quiet mode.

    All console methods other than ``print`` are delegated to the wrapped
    instance.

    Example:
        >>> console = Console()
        >>> qc = QuietConsole(console, quiet=True)
        >>> qc.print("This won't be shown")  # Suppressed
    """

    def __init__(self, console: Console, quiet: bool = False):
        self._console = console
        self._quiet = quiet

    @property
    def console(self) -> Console:
        """The wrapped Console, for output that ignores quiet mode (tables)."""
        return self._console

    def print(self, *args: Any, **kwargs: Any) -> None:
        if not self._quiet:
            self._console.print(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._console, name)
