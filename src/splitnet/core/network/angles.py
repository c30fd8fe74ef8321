"""
Angles shared by the network layouts.

Taxa are placed on a circle (or an arc of ``total_angle`` radians) in the
order of the circular ordering. Every split is drawn perpendicular to the
chord that cuts its far side off, that is, in the direction midway between
the first and the last taxon of the far side.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from splitnet.core.constants import FULL_TURN
from splitnet.core.exceptions import InvalidArgumentError
from splitnet.core.splits import Split, SplitSystem


def normalize_cycle(ordering: Sequence[int], first: int = 1) -> list[int]:
    """
    Rotate a circular ordering so that it starts with taxon ``first``.

    Example:
        >>> normalize_cycle([3, 1, 4, 2])
        [1, 4, 2, 3]

    Raises:
        InvalidArgumentError: If ``first`` is not in the ordering.
    """
    cycle = list(ordering)
    try:
        start = cycle.index(first)
    except ValueError:
        raise InvalidArgumentError(
            f"Taxon {first} does not appear in the circular ordering",
            suggestion="The ordering must be a permutation of 1..n.",
        ) from None
    return cycle[start:] + cycle[:start]


def taxon_positions(cycle: Sequence[int]) -> dict[int, int]:
    """Map each taxon to its 1-based circle position."""
    return {taxon: position for position, taxon in enumerate(cycle, start=1)}


def taxon_angle(
    position: int,
    ntax: int,
    start_angle: float = 0.0,
    total_angle: float = FULL_TURN,
) -> float:
    """Angle of the taxon at 1-based circle ``position``, in radians."""
    return start_angle + total_angle * (position - 1) / ntax


def far_side_extremes(
    split: Split,
    cycle: Sequence[int],
    positions: Mapping[int, int] | None = None,
) -> tuple[int, int]:
    """
    First and last circle positions of the side not containing ``cycle[0]``.

    Raises:
        InvalidArgumentError: If a taxon of the far side is not in the cycle.
    """
    if positions is None:
        positions = taxon_positions(cycle)
    far = split.part_not_containing(cycle[0])
    try:
        occupied = [positions[t] for t in far]
    except KeyError as exc:
        raise InvalidArgumentError(
            f"Taxon {exc.args[0]} of a split is not covered by the circular ordering",
            suggestion="Check that the splits and the ordering refer to the same taxa.",
        ) from None
    return min(occupied), max(occupied)


def split_angle(
    xp: int,
    xq: int,
    ntax: int,
    start_angle: float = 0.0,
    total_angle: float = FULL_TURN,
) -> float:
    """
    Direction of a split whose far side spans circle positions xp..xq.

    The midpoint of the two taxon angles, reduced modulo a full turn.
    """
    angle = start_angle + total_angle * (xp + xq - 2) / (2 * ntax)
    return angle % FULL_TURN


def split_angles(
    splits: SplitSystem,
    cycle: Sequence[int],
    start_angle: float = 0.0,
    total_angle: float = FULL_TURN,
) -> dict[int, float]:
    """
    Angle of every split in the system, keyed by 1-based split id.

    Args:
        splits: Split system to draw.
        cycle: Circular ordering whose first taxon is the reference taxon.
        start_angle: Angle of the first taxon, in radians.
        total_angle: Arc spanned by the taxa, in radians.
    """
    ntax = len(cycle)
    positions = taxon_positions(cycle)
    angles: dict[int, float] = {}
    for s, split in enumerate(splits, start=1):
        xp, xq = far_side_extremes(split, cycle, positions)
        angles[s] = split_angle(xp, xq, ntax, start_angle, total_angle)
    return angles
