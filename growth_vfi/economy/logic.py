"""
growth_vfi/economy/logic.py

Core economic equations of the growth model.

Design:
- Backend Agnostic: Accepts floats, NumPy arrays or TF Tensors and returns
  the same kind of object, so the per-state host kernels and the vectorized
  TensorFlow kernels share one definition of the economics.
"""

from typing import Any, Union

import numpy as np
import tensorflow as tf

from growth_vfi.economy.parameters import EconomicParams

# Type alias: Accepts Tensors, NumPy arrays, or floats
Numeric = Union[tf.Tensor, Any]


def production_function(k: Numeric, z: Numeric, params: EconomicParams) -> Numeric:
    """ Cobb-Douglas Production: y = z * k^alpha """
    return z * (k ** params.alpha)


def available_resources(k: Numeric, z: Numeric, params: EconomicParams) -> Numeric:
    """ Output plus undepreciated capital: z k^alpha + (1 - delta) k """
    return production_function(k, z, params) + (1 - params.delta) * k


def crra_utility(c: Numeric, eta: float) -> Numeric:
    """
    CRRA utility u(c) = c^(1-eta) / (1-eta).

    eta == 1 uses the log limit. Non-positive consumption is not guarded:
    c == 0 gives -inf for eta >= 1 and negative c gives nan, which the
    maximizers never select over a feasible choice.
    """
    if eta == 1.0:
        log = tf.math.log if tf.is_tensor(c) else np.log
        return log(c)
    return c ** (1 - eta) / (1 - eta)


def steady_state_value(z: Numeric, params: EconomicParams) -> Numeric:
    """Per-period utility of consuming the steady-state c*(z)."""
    return crra_utility(params.steady_state_c(z), params.eta)
