"""
Main CLI entry point for splitnet.

Provides commands for each stage of split network construction:
- splits: Estimate weighted circular splits from a distance matrix
- network: Build a planar split network (EqualAngle or Outline)
"""

from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console

from splitnet import __version__

app = typer.Typer(
    name="splitnet",
    help="Circular split networks from pairwise distances",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"splitnet version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Splitnet: circular split networks from pairwise distances.

    Estimates least-squares weights for the splits of a circular ordering and
    lays the split system out as a planar network.
    """


# Register commands
from splitnet.cli import network

app.command(name="splits")(network.splits)
app.command(name="network")(network.network)


if __name__ == "__main__":
    app()
