"""
growth_vfi/_defaults.py

Centralized default constants for the growth model and its VFI solver.

This module contains ONLY constants with NO imports so that parameter
classes, grid configuration and the parameter-file loader can all share a
single source of truth without creating import cycles.
"""

# =============================================================================
# ECONOMIC DEFAULTS
# =============================================================================

DEFAULT_ETA = 2.0      # Coefficient of relative risk aversion
DEFAULT_BETA = 0.984   # Time discount factor
DEFAULT_ALPHA = 0.35   # Capital share in production
DEFAULT_DELTA = 0.01   # Depreciation rate

# AR(1) for log productivity: log z' = mu + rho * log z + sigma * eps
DEFAULT_MU = 0.0
DEFAULT_RHO = 0.95
DEFAULT_SIGMA = 0.005


# =============================================================================
# GRID & SOLVER DEFAULTS
# =============================================================================

DEFAULT_NK = 256
DEFAULT_NZ = 4
DEFAULT_LAMBDA = 3.0   # Half-width of the productivity grid in std-devs
DEFAULT_TOL = 1e-8
DEFAULT_MAX_ITER = 5000
DEFAULT_MAX_TYPE = "grid"
DEFAULT_DTYPE = "float64"

# Capital grid spans [KGRID_LOWER * k*(z_min), KGRID_UPPER * k*(z_max)]
KGRID_LOWER = 0.95
KGRID_UPPER = 1.05

# Howard schedule: full maximization on the first HOWARD_WARMUP passes and on
# every HOWARD_EVERY-th pass after that, policy-fixed updates otherwise.
DEFAULT_HOWARD_WARMUP = 3
DEFAULT_HOWARD_EVERY = 10

DEFAULT_LOG_EVERY = 50


# =============================================================================
# PARAMETER FILE LAYOUT
# =============================================================================

# One "value, description" line per entry, in this order.
PARAMETER_FILE_FIELDS = (
    "eta", "beta", "alpha", "delta", "mu", "rho", "sigma",
    "lambda", "nk", "nz", "tol", "maxtype", "howard",
)
