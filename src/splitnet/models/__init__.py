"""
Pydantic data models for splitnet.

Provides type-safe configuration for the solver and the layouts.
"""

from splitnet.models.config import LayoutConfig, NetworkConfig, SolverConfig

__all__ = [
    "LayoutConfig",
    "NetworkConfig",
    "SolverConfig",
]
