"""
Pydantic configuration models for splitnet.

These models hold the settings of the split weight solver and of the
network layouts. Configuration can be loaded from YAML files or built from
CLI arguments; every engine also accepts the same settings as plain
keyword arguments.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class SolverConfig(BaseModel):
    """Configuration of the least-squares split weight solver."""

    constrained: bool = Field(
        default=True,
        description="Force split weights to be non-negative (active-set NNLS).",
    )
    cutoff: float = Field(
        default=0.0001,
        ge=0.0,
        description="Splits with weight at or below this value are dropped.",
    )
    variance: Literal["ols", "fm1", "fm2"] = Field(
        default="ols",
        description=(
            "Weighting of the constrained objective: ordinary least squares, "
            "or Fitch-Margoliash variances proportional to d (fm1) or d^2 (fm2)."
        ),
    )
    strict_convergence: bool = Field(
        default=False,
        description=(
            "Raise an error when the conjugate gradient solve reaches its "
            "iteration cap instead of logging a warning."
        ),
    )

    model_config = {"frozen": True}


class LayoutConfig(BaseModel):
    """Configuration of the network layout."""

    method: Literal["equal_angle", "outline"] = Field(
        default="equal_angle",
        description="Layout algorithm.",
    )
    use_weights: bool = Field(
        default=True,
        description="Scale edges by split weight; otherwise all edges have unit length.",
    )
    total_angle: float = Field(
        default=360.0,
        gt=0.0,
        le=360.0,
        description="Arc in degrees over which the taxa are spread.",
    )
    start_angle: float = Field(
        default=0.0,
        description="Direction in degrees of the first taxon of the ordering.",
    )
    add_trivial_splits: bool = Field(
        default=True,
        description="Outline only: add missing trivial splits before the sweep.",
    )
    trivial_weight: float = Field(
        default=0.0,
        ge=0.0,
        description="Outline only: weight of added trivial splits.",
    )
    progress_stride: int = Field(
        default=1000,
        ge=1,
        description="Layout steps between two progress checks.",
    )

    model_config = {"frozen": True}


class NetworkConfig(BaseModel):
    """
    Complete configuration of a network construction run.

    Example YAML:

        solver:
          constrained: true
          cutoff: 0.0001
        layout:
          method: outline
          use_weights: false
    """

    solver: SolverConfig = Field(default_factory=SolverConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> NetworkConfig:
        """
        Load configuration from a YAML file.

        Unknown keys are ignored (forward compatibility); missing keys keep
        their defaults.

        Args:
            path: Path to YAML configuration file.

        Raises:
            FileNotFoundError: If YAML file does not exist.
            ValueError: If the file is not a mapping or a value is invalid.
        """
        import yaml

        raw = yaml.safe_load(Path(path).read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            msg = f"YAML config must be a mapping, got {type(raw).__name__}"
            raise ValueError(msg)

        solver = _known_keys(raw.get("solver"), SolverConfig, "solver")
        layout = _known_keys(raw.get("layout"), LayoutConfig, "layout")
        return cls(solver=SolverConfig(**solver), layout=LayoutConfig(**layout))

    def to_yaml(self, path: Path) -> None:
        """Write configuration to a YAML file."""
        Path(path).write_text(self.to_yaml_str())

    def to_yaml_str(self) -> str:
        """Serialize configuration to a YAML string with solver and layout sections."""
        import yaml

        data = {
            "solver": self.solver.model_dump(),
            "layout": self.layout.model_dump(),
        }
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    model_config = {"frozen": True}


def _known_keys(
    section: Any,
    model: type[BaseModel],
    name: str,
) -> dict[str, Any]:
    """Keep the keys of a YAML section that ``model`` knows about."""
    if section is None:
        return {}
    if not isinstance(section, dict):
        msg = f"YAML section '{name}' must be a mapping, got {type(section).__name__}"
        raise ValueError(msg)
    unknown = sorted(set(section) - set(model.model_fields))
    if unknown:
        logger.debug(f"Ignoring unknown {name} keys: {', '.join(unknown)}")
    return {key: value for key, value in section.items() if key in model.model_fields}
