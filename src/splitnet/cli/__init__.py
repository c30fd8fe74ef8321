"""
CLI commands for splitnet.

Provides the command-line interface for split weight estimation and
network layout.
"""

__all__ = ["main", "network", "utils"]
