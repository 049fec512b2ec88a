"""
DDP-specific grid and solver configuration.

This module provides DDPGridConfig for the VFI solver settings, the grid
builders that depend on them, and the loader for plain-text parameter files.
Keeps grid discretization separate from economic primitives.
"""

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Tuple, Union

import numpy as np

from growth_vfi._defaults import (
    DEFAULT_NK,
    DEFAULT_NZ,
    DEFAULT_LAMBDA,
    DEFAULT_TOL,
    DEFAULT_MAX_ITER,
    DEFAULT_MAX_TYPE,
    DEFAULT_DTYPE,
    DEFAULT_HOWARD_WARMUP,
    DEFAULT_HOWARD_EVERY,
    KGRID_LOWER,
    KGRID_UPPER,
    PARAMETER_FILE_FIELDS,
)
from growth_vfi.economy.parameters import EconomicParams, ShockParams, _replace_with_log
from growth_vfi.economy.shocks import tauchen

logger = logging.getLogger(__name__)

MAX_TYPES = ("grid", "bisection")
DTYPES = ("float32", "float64")


@dataclass(frozen=True)
class DDPGridConfig:
    """
    DDP-specific grid and solver settings.

    These are NOT economic primitives; they are numerical settings for the
    solution method.

    Attributes:
        nk: Number of capital grid points
        nz: Number of productivity grid points (1 = no productivity risk)
        lam: Half-width of the productivity grid in unconditional std-devs
        tol: Convergence tolerance on max |V - V0|
        max_type: Maximization method, "grid" (exhaustive) or "bisection"
            (assumes the value function is concave in capital)
        howard: Interleave policy-fixed (Howard) passes with maximization
        dtype: Floating point precision of every grid and value array
        max_iter: Maximum number of passes
        howard_warmup: Number of initial passes that always maximize
        howard_every: With howard on, every howard_every-th pass maximizes

    Example:
        config = DDPGridConfig(nk=100, nz=5, howard=True)
        k_grid = config.generate_capital_grid(params, z_grid)
    """
    nk: int = DEFAULT_NK
    nz: int = DEFAULT_NZ
    lam: float = DEFAULT_LAMBDA
    tol: float = DEFAULT_TOL
    max_type: Literal["grid", "bisection"] = DEFAULT_MAX_TYPE
    howard: bool = False
    dtype: Literal["float32", "float64"] = DEFAULT_DTYPE
    max_iter: int = DEFAULT_MAX_ITER
    howard_warmup: int = DEFAULT_HOWARD_WARMUP
    howard_every: int = DEFAULT_HOWARD_EVERY

    def __post_init__(self):
        """Validate grid settings."""
        if self.max_type not in MAX_TYPES:
            raise ValueError(f"Unknown max_type: {self.max_type}. Valid options: {MAX_TYPES}")

        if self.dtype not in DTYPES:
            raise ValueError(f"Unknown dtype: {self.dtype}. Valid options: {DTYPES}")

        if self.nk < 2:
            raise ValueError(f"nk must be >= 2. Got {self.nk}")

        if self.nz < 1:
            raise ValueError(f"nz must be >= 1. Got {self.nz}")

        if self.lam <= 0:
            raise ValueError(f"lam must be > 0. Got {self.lam}")

        if self.tol <= 0:
            raise ValueError(f"tol must be > 0. Got {self.tol}")

        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1. Got {self.max_iter}")

        if self.howard_warmup < 1:
            raise ValueError(f"howard_warmup must be >= 1. Got {self.howard_warmup}")

        if self.howard_every < 2:
            raise ValueError(f"howard_every must be >= 2. Got {self.howard_every}")

        # Skipping maximization can break the concavity bisection relies on
        if self.howard and self.max_type == "bisection":
            raise ValueError("howard=True cannot be combined with max_type='bisection'")

    @classmethod
    def with_overrides(
        cls,
        base: Optional["DDPGridConfig"] = None,
        log_changes: bool = True,
        **overrides
    ) -> "DDPGridConfig":
        """Update DDPGridConfig with strict key validation and logging."""
        return _replace_with_log(cls, base, log_changes, overrides)

    def is_howard_pass(self, iteration: int) -> bool:
        """
        Whether pass number ``iteration`` (0-based) holds the policy fixed.

        The first howard_warmup passes and every howard_every-th pass after
        that run a full maximization.
        """
        if not self.howard or iteration < self.howard_warmup:
            return False
        return iteration % self.howard_every != 0

    def initialize_markov_process(
        self, shock_params: ShockParams
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Productivity grid and transition matrix at this config's nz and lam."""
        return tauchen(shock_params, self.nz, self.lam)

    def compute_k_bounds(self, params: EconomicParams, z_grid: np.ndarray) -> Tuple[float, float]:
        """
        Capital grid bounds around the deterministic steady states implied by
        the lowest and highest productivity levels.

        Args:
            params: Economic parameters
            z_grid: Productivity grid (levels, increasing)

        Returns:
            (k_min, k_max) tuple
        """
        k_min = KGRID_LOWER * params.steady_state_k(z_grid[0])
        k_max = KGRID_UPPER * params.steady_state_k(z_grid[-1])
        return float(k_min), float(k_max)

    def generate_capital_grid(self, params: EconomicParams, z_grid: np.ndarray) -> np.ndarray:
        """
        Generate the equally spaced capital grid.

        Args:
            params: Economic parameters
            z_grid: Productivity grid (levels, increasing)

        Returns:
            (nk,) array of capital grid points
        """
        k_min, k_max = self.compute_k_bounds(params, z_grid)
        return np.linspace(k_min, k_max, self.nk)


# =============================================================================
# PARAMETER FILES
# =============================================================================

_MAX_TYPE_ALIASES = {"g": "grid", "grid": "grid", "b": "bisection", "bisection": "bisection"}
_BOOL_ALIASES = {"0": False, "1": True, "false": False, "true": True}


def _parse_field(name: str, raw: str, line_no: int) -> Union[int, float, str, bool]:
    try:
        if name in ("nk", "nz"):
            return int(float(raw))
        if name == "maxtype":
            return _MAX_TYPE_ALIASES[raw.lower()]
        if name == "howard":
            return _BOOL_ALIASES[raw.lower()]
        return float(raw)
    except (KeyError, ValueError) as e:
        raise ValueError(f"Line {line_no}: cannot parse {name} from '{raw}'") from e


def load_parameter_file(
    path: Union[str, Path],
    **grid_overrides
) -> Tuple[EconomicParams, ShockParams, DDPGridConfig]:
    """
    Load a plain-text parameter file.

    Each non-empty line starts with a value followed by a comma and a free
    text description, e.g. ``0.984, time discount factor``. Lines appear in
    the order of PARAMETER_FILE_FIELDS:

        eta, beta, alpha, delta, mu, rho, sigma, lambda, nk, nz, tol,
        maxtype (g | b), howard (0 | 1)

    Args:
        path: Location of the file.
        **grid_overrides: Extra DDPGridConfig fields not stored in the file
            (e.g. dtype, max_iter).

    Returns:
        (EconomicParams, ShockParams, DDPGridConfig)
    """
    path = Path(path)
    lines = [
        (i, line.strip())
        for i, line in enumerate(path.read_text().splitlines(), 1)
        if line.strip()
    ]
    if len(lines) != len(PARAMETER_FILE_FIELDS):
        raise ValueError(
            f"{path} must have {len(PARAMETER_FILE_FIELDS)} parameter lines. Got {len(lines)}"
        )

    values = {}
    for name, (line_no, line) in zip(PARAMETER_FILE_FIELDS, lines):
        raw = line.split(",", 1)[0].strip()
        values[name] = _parse_field(name, raw, line_no)

    logger.info(f"Loaded parameters from {path}")

    params = EconomicParams(
        eta=values["eta"], beta=values["beta"],
        alpha=values["alpha"], delta=values["delta"],
    )
    shock_params = ShockParams(mu=values["mu"], rho=values["rho"], sigma=values["sigma"])
    grid_config = DDPGridConfig(
        nk=values["nk"], nz=values["nz"], lam=values["lambda"], tol=values["tol"],
        max_type=values["maxtype"], howard=values["howard"],
        **grid_overrides
    )
    return params, shock_params, grid_config


def write_parameter_file(
    path: Union[str, Path],
    params: EconomicParams,
    shock_params: ShockParams,
    grid_config: DDPGridConfig
) -> None:
    """Write the three configuration objects in load_parameter_file's format."""
    values = {
        **dataclasses.asdict(params),
        **dataclasses.asdict(shock_params),
        "lambda": grid_config.lam,
        "nk": grid_config.nk,
        "nz": grid_config.nz,
        "tol": grid_config.tol,
        "maxtype": grid_config.max_type[0],
        "howard": int(grid_config.howard),
    }
    lines = [f"{values[name]}, {name}" for name in PARAMETER_FILE_FIELDS]
    Path(path).write_text("\n".join(lines) + "\n")
