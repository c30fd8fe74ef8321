"""
Split and network commands.

Provides commands:
- splits: Estimate weighted circular splits from a distance matrix
- network: Build and summarize a planar split network
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from splitnet.cli.utils import (
    QuietConsole,
    parse_ordering,
    read_distance_matrix,
    setup_logging,
    spinner_progress,
)
from splitnet.core.distances import DistanceMatrix
from splitnet.core.exceptions import SplitNetError
from splitnet.core.network import NetworkGraph
from splitnet.core.splits import SplitSystem
from splitnet.models.config import LayoutConfig, NetworkConfig, SolverConfig

logger = logging.getLogger(__name__)

console = Console()


class NetworkMethod(str, Enum):
    """Layout algorithm choices on the command line."""

    EQUAL_ANGLE = "equal-angle"
    OUTLINE = "outline"


# =============================================================================
# Helpers
# =============================================================================


def _load_config(
    config_path: Path | None,
    solver_overrides: dict[str, Any],
    layout_overrides: dict[str, Any] | None = None,
) -> NetworkConfig:
    """Merge a YAML config (or the defaults) with options given on the command line."""
    base = NetworkConfig.from_yaml(config_path) if config_path else NetworkConfig()
    solver = {**base.solver.model_dump(), **solver_overrides}
    layout = {**base.layout.model_dump(), **(layout_overrides or {})}
    return NetworkConfig(solver=SolverConfig(**solver), layout=LayoutConfig(**layout))


def _load_inputs(distances: Path, ordering: str | None) -> tuple[DistanceMatrix, list[int]]:
    try:
        matrix = read_distance_matrix(distances)
    except SplitNetError as e:
        _report_error(e)
        raise typer.Exit(code=1) from None
    except Exception as e:
        console.print(f"[red]Error loading distance matrix: {e}[/red]")
        raise typer.Exit(code=1) from None
    try:
        cycle = parse_ordering(ordering, matrix.labels)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from None
    return matrix, cycle


def _report_error(error: SplitNetError) -> None:
    console.print(f"[red]Error: {error.message}[/red]")
    if error.suggestion:
        console.print(f"[yellow]Suggestion: {error.suggestion}[/yellow]")


def _far_side_labels(splits: SplitSystem, s: int, cycle: list[int], labels: tuple[str, ...]) -> str:
    far = splits.get_split(s).part_not_containing(cycle[0])
    return ", ".join(labels[t - 1] for t in cycle if t in far)


def splits_table(splits: SplitSystem, cycle: list[int], labels: tuple[str, ...]) -> Table:
    """Rich table with one row per split."""
    table = Table(title="Circular Splits", show_header=True)
    table.add_column("Split", justify="right", style="cyan", no_wrap=True)
    table.add_column("Weight", justify="right", style="magenta")
    table.add_column("Size", justify="right", style="green")
    table.add_column("Taxa", style="blue")
    for s, split in enumerate(splits, start=1):
        table.add_row(
            str(s),
            f"{split.weight:.6f}",
            str(split.size),
            _far_side_labels(splits, s, cycle, labels),
        )
    return table


def nodes_table(graph: NetworkGraph) -> Table:
    table = Table(title="Network Nodes", show_header=True)
    table.add_column("Node", justify="right", style="cyan", no_wrap=True)
    table.add_column("X", justify="right", style="magenta")
    table.add_column("Y", justify="right", style="magenta")
    table.add_column("Degree", justify="right", style="green")
    table.add_column("Label", style="blue")
    for node in graph.nodes:
        table.add_row(
            str(node.id),
            f"{node.x:.4f}",
            f"{node.y:.4f}",
            str(graph.degree(node.id)),
            node.label or "",
        )
    return table


def edges_table(graph: NetworkGraph) -> Table:
    table = Table(title="Network Edges", show_header=True)
    table.add_column("Edge", justify="right", style="cyan", no_wrap=True)
    table.add_column("Source", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Split", justify="right", style="green")
    table.add_column("Weight", justify="right", style="magenta")
    table.add_column("Angle", justify="right", style="yellow")
    for edge in graph.edges:
        table.add_row(
            str(edge.id),
            str(edge.source),
            str(edge.target),
            str(edge.split),
            f"{edge.weight:.6f}",
            f"{edge.angle:.4f}",
        )
    return table


# =============================================================================
# Commands
# =============================================================================


def splits(
    distances: Path = typer.Option(
        ...,
        "--distances",
        "-d",
        help="Distance matrix CSV (labels in the first column and the header)",
        exists=True,
        dir_okay=False,
    ),
    ordering: str | None = typer.Option(
        None,
        "--ordering",
        "-O",
        help="Comma-separated circular ordering of taxon labels (default: matrix order)",
    ),
    unconstrained: bool = typer.Option(
        False,
        "--unconstrained",
        help="Allow negative split weights (closed-form least squares)",
    ),
    cutoff: float | None = typer.Option(
        None,
        "--cutoff",
        "-c",
        help="Drop splits with weight at or below this value",
        min=0.0,
    ),
    variance: str | None = typer.Option(
        None,
        "--variance",
        help="Variance model of the constrained fit: ols, fm1 or fm2",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Estimate weighted circular splits from a distance matrix.

    Examples:

        # Non-negative least-squares splits in matrix order
        splitnet splits --distances distances.csv

        # Unconstrained fit for a given ordering
        splitnet splits -d distances.csv --ordering A,C,B,D --unconstrained
    """
    from splitnet.core.weights import CircularSplitWeights, fit_statistics

    setup_logging(verbose, console)
    out = QuietConsole(console, quiet=quiet)

    solver_overrides: dict[str, Any] = {}
    if unconstrained:
        solver_overrides["constrained"] = False
    if cutoff is not None:
        solver_overrides["cutoff"] = cutoff
    if variance is not None:
        solver_overrides["variance"] = variance

    try:
        settings = _load_config(config, solver_overrides)
    except ValueError as e:
        console.print(f"[red]Error: invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from None
    logger.debug(f"Configuration: {settings.model_dump()}")

    matrix, cycle = _load_inputs(distances, ordering)
    out.print(f"\n[bold blue]Splitnet[/bold blue]: {matrix.ntax} taxa from {distances}\n")

    try:
        with spinner_progress("Estimating split weights...", console, quiet):
            solver = CircularSplitWeights.from_config(settings.solver)
            result = solver.solve(matrix, cycle)
    except SplitNetError as e:
        _report_error(e)
        raise typer.Exit(code=1) from None

    console.print(splits_table(result, cycle, matrix.labels))
    out.print(f"[bold]Fit:[/bold] {fit_statistics(matrix, result):.2f}%")


def network(
    distances: Path = typer.Option(
        ...,
        "--distances",
        "-d",
        help="Distance matrix CSV (labels in the first column and the header)",
        exists=True,
        dir_okay=False,
    ),
    ordering: str | None = typer.Option(
        None,
        "--ordering",
        "-O",
        help="Comma-separated circular ordering of taxon labels (default: matrix order)",
    ),
    method: NetworkMethod | None = typer.Option(
        None,
        "--method",
        "-m",
        help="Layout algorithm: equal-angle or outline",
    ),
    no_weights: bool = typer.Option(
        False,
        "--no-weights",
        help="Draw every edge with unit length",
    ),
    unconstrained: bool = typer.Option(
        False,
        "--unconstrained",
        help="Allow negative split weights (closed-form least squares)",
    ),
    cutoff: float | None = typer.Option(
        None,
        "--cutoff",
        "-c",
        help="Drop splits with weight at or below this value",
        min=0.0,
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    show_edges: bool = typer.Option(
        False,
        "--edges",
        help="Also print the edge table",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Build a planar split network and print its nodes.

    Examples:

        # EqualAngle network in matrix order
        splitnet network --distances distances.csv

        # Outline network with unit edge lengths
        splitnet network -d distances.csv --method outline --no-weights --edges
    """
    from splitnet.core.pipeline import build_network

    setup_logging(verbose, console)
    out = QuietConsole(console, quiet=quiet)

    solver_overrides: dict[str, Any] = {}
    if unconstrained:
        solver_overrides["constrained"] = False
    if cutoff is not None:
        solver_overrides["cutoff"] = cutoff
    layout_overrides: dict[str, Any] = {}
    if method is not None:
        layout_overrides["method"] = method.value.replace("-", "_")
    if no_weights:
        layout_overrides["use_weights"] = False

    try:
        settings = _load_config(config, solver_overrides, layout_overrides)
    except ValueError as e:
        console.print(f"[red]Error: invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from None
    logger.debug(f"Configuration: {settings.model_dump()}")

    matrix, cycle = _load_inputs(distances, ordering)
    out.print(f"\n[bold blue]Splitnet[/bold blue]: {matrix.ntax} taxa from {distances}")
    out.print(f"[bold]Layout:[/bold] {settings.layout.method}\n")

    try:
        with spinner_progress("Building split network...", console, quiet):
            result = build_network(matrix, cycle, settings)
    except SplitNetError as e:
        _report_error(e)
        raise typer.Exit(code=1) from None

    graph = result.graph
    out.print(
        f"[bold]Splits:[/bold] {len(result.splits)}  "
        f"[bold]Nodes:[/bold] {graph.number_of_nodes()}  "
        f"[bold]Edges:[/bold] {graph.number_of_edges()}  "
        f"[bold]Fit:[/bold] {result.fit:.2f}%"
    )
    console.print(nodes_table(graph))
    if show_edges:
        console.print(edges_table(graph))
