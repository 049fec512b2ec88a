"""
Economic parameters for the stochastic growth model.

This module provides:
- EconomicParams: Preferences and technology (single source of truth)
- ShockParams: The AR(1) process for log productivity

It works in tandem with growth_vfi.ddp.DDPGridConfig (for numerical grid
settings), keeping economic fundamentals separate from the solution method.
"""

from __future__ import annotations
import dataclasses
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np
import tensorflow as tf

from growth_vfi._defaults import (
    DEFAULT_ETA,
    DEFAULT_BETA,
    DEFAULT_ALPHA,
    DEFAULT_DELTA,
    DEFAULT_MU,
    DEFAULT_RHO,
    DEFAULT_SIGMA,
    DEFAULT_DTYPE,
)

logger = logging.getLogger(__name__)


def _replace_with_log(cls, base, log_changes: bool, overrides: dict):
    """Shared body of the ``with_overrides`` constructors."""
    base = base or cls()

    # 1. Validate keys to prevent typos
    valid_keys = {f.name for f in dataclasses.fields(cls)}
    if unknown := set(overrides) - valid_keys:
        raise ValueError(f"Invalid override keys: {unknown}. Valid: {sorted(valid_keys)}")

    # 2. Log significant changes
    if log_changes:
        changes = [
            f"{k}: {getattr(base, k)} -> {v}"
            for k, v in overrides.items()
            if getattr(base, k) != v
        ]
        if changes:
            logger.info(f"{cls.__name__} overrides: {', '.join(changes)}")

    return dataclasses.replace(base, **overrides)


# =============================================================================
# SHOCK PARAMS
# =============================================================================

@dataclass(frozen=True)
class ShockParams:
    """
    Immutable container for the productivity process.

    log(z') = mu + rho * log(z) + sigma * eps,  eps ~ N(0, 1)

    Note that ``mu`` is the intercept, not the unconditional mean; the
    unconditional mean of log(z) is mu / (1 - rho).
    """
    mu: float = DEFAULT_MU
    rho: float = DEFAULT_RHO
    sigma: float = DEFAULT_SIGMA

    def __post_init__(self):
        if self.sigma <= 0:
            raise ValueError(f"sigma must be > 0. Got {self.sigma}")

        if not (-1.0 < self.rho < 1.0):
            raise ValueError(f"rho must be in (-1, 1). Got {self.rho}")

    @classmethod
    def with_overrides(
        cls,
        base: Optional[ShockParams] = None,
        log_changes: bool = True,
        **overrides
    ) -> ShockParams:
        """
        Update ShockParams with strict validation and logging.

        Args:
            base: Existing parameters to update. If None, uses defaults.
            log_changes: Whether to log the differences.
            **overrides: Key-value pairs of parameters to update.

        Returns:
            New ShockParams instance.
        """
        return _replace_with_log(cls, base, log_changes, overrides)

    @property
    def unconditional_mean(self) -> float:
        """Mean of log productivity under the ergodic distribution."""
        return self.mu / (1 - self.rho)

    @property
    def unconditional_std(self) -> float:
        """Standard deviation of log productivity under the ergodic distribution."""
        return self.sigma / np.sqrt(1 - self.rho ** 2)


# =============================================================================
# ECONOMIC PARAMS
# =============================================================================

@dataclass(frozen=True)
class EconomicParams:
    """
    Immutable container for preferences and technology.

    Attributes:
        eta: Coefficient of relative risk aversion (CRRA utility)
        beta: Time discount factor
        alpha: Capital share in Cobb-Douglas production y = z * k^alpha
        delta: Depreciation rate

    Example:
        params = EconomicParams()  # Use defaults
        params = EconomicParams(eta=1.0)  # Log utility
        params = EconomicParams.with_overrides(beta=0.95)  # Same, with logging
    """
    eta: float = DEFAULT_ETA
    beta: float = DEFAULT_BETA
    alpha: float = DEFAULT_ALPHA
    delta: float = DEFAULT_DELTA

    def __post_init__(self):
        """Validate parameters immediately after initialization."""
        if self.eta <= 0:
            raise ValueError(f"eta must be > 0. Got {self.eta}")

        if not (0.0 < self.beta < 1.0):
            raise ValueError(f"beta must be in (0, 1). Got {self.beta}")

        # Steady-state formulas divide by (alpha - 1)
        if not (0.0 < self.alpha < 1.0):
            raise ValueError(f"alpha must be in (0, 1). Got {self.alpha}")

        if not (0.0 <= self.delta <= 1.0):
            raise ValueError(f"delta must be in [0, 1]. Got {self.delta}")

    @classmethod
    def with_overrides(
        cls,
        base: Optional[EconomicParams] = None,
        log_changes: bool = True,
        **overrides
    ) -> EconomicParams:
        """
        Create (or update) EconomicParams with strict validation and logging.

        Args:
            base: Existing parameters to update. If None, uses defaults.
            log_changes: Whether to log the differences.
            **overrides: Key-value pairs of parameters to update.

        Returns:
            New EconomicParams instance.
        """
        return _replace_with_log(cls, base, log_changes, overrides)

    def steady_state_k(self, z: Union[float, np.ndarray] = 1.0) -> Union[float, np.ndarray]:
        """
        Deterministic steady-state capital for productivity level z.

        k*(z) = ((1 / (alpha z)) * (1/beta - 1 + delta))^(1 / (alpha - 1))
        """
        user_cost = 1 / self.beta - 1 + self.delta
        return ((1 / (self.alpha * z)) * user_cost) ** (1 / (self.alpha - 1))

    def steady_state_c(self, z: Union[float, np.ndarray] = 1.0) -> Union[float, np.ndarray]:
        """Consumption sustaining k*(z) forever: z k*^alpha - delta k*."""
        k_ss = self.steady_state_k(z)
        return z * k_ss ** self.alpha - self.delta * k_ss


# =============================================================================
# HOST / DEVICE TRANSFER
# =============================================================================

def convert_to_tf(*args: np.ndarray, dtype: str = DEFAULT_DTYPE) -> List[tf.Tensor]:
    """Copies NumPy arrays to TensorFlow constants of the given precision."""
    return [tf.constant(arg, dtype=tf.as_dtype(dtype)) for arg in args]


def convert_to_numpy(*args: tf.Tensor) -> List[np.ndarray]:
    """Copies TensorFlow tensors back to host NumPy arrays."""
    return [arg.numpy() if tf.is_tensor(arg) else np.asarray(arg) for arg in args]
