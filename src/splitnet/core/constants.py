"""
Constants used throughout the splitnet package.

Centralizes numeric tolerances and default values shared by the split
weight solver and the network layout algorithms.
"""

from __future__ import annotations

import math

# =============================================================================
# Least-squares solver
# =============================================================================

# Relative residual threshold for the conjugate gradient inner solve
CG_EPSILON = 0.0001

# Active variables with a gradient above this value are left at zero
GRADIENT_TOLERANCE = -0.0001

# Fraction of negative weights contracted to zero in one step
CONTRACT_PROPORTION = 0.6

# Weight given to pairs with zero variance under fm1/fm2 weighting
ZERO_VARIANCE_WEIGHT = 10e10

# Supported variance models for the constrained objective
VARIANCE_MODELS = ("ols", "fm1", "fm2")

# =============================================================================
# Network layout
# =============================================================================

# Split id carried by star edges that have no trivial split (yet)
TEMPORARY_SPLIT = -1

# Full turn in radians
FULL_TURN = 2.0 * math.pi

# Number of sweep steps between two progress checks
PROGRESS_STRIDE = 1000

# Separator used when several taxa share a node label
LABEL_SEPARATOR = ", "
