"""
Unit tests for the economic parameter containers.

Validates the __post_init__ checks, the with_overrides constructors and the
closed-form steady state.
"""

import logging

import pytest
import numpy as np
import tensorflow as tf
from dataclasses import replace

from growth_vfi.economy.parameters import (
    EconomicParams,
    ShockParams,
    convert_to_tf,
    convert_to_numpy,
)


# --- Fixtures ---

@pytest.fixture
def default_params():
    """A fresh EconomicParams instance with default values."""
    return EconomicParams()


# --- 1. Validation ---

def test_input_validation_logic():
    """The __post_init__ validators catch invalid values and name the field."""
    base = EconomicParams()
    shock_base = ShockParams()

    with pytest.raises(ValueError, match="alpha"):
        replace(base, alpha=1.0)

    with pytest.raises(ValueError, match="beta"):
        replace(base, beta=1.0)

    with pytest.raises(ValueError, match="eta"):
        replace(base, eta=0.0)

    with pytest.raises(ValueError, match="delta"):
        replace(base, delta=-0.1)

    with pytest.raises(ValueError, match="sigma"):
        replace(shock_base, sigma=0.0)

    with pytest.raises(ValueError, match="rho"):
        replace(shock_base, rho=1.0)


def test_params_are_frozen(default_params):
    with pytest.raises(Exception):
        default_params.beta = 0.5


# --- 2. Overrides ---

def test_with_overrides_updates_and_logs(caplog):
    with caplog.at_level(logging.INFO):
        params = EconomicParams.with_overrides(beta=0.95, eta=1.0)

    assert params.beta == 0.95
    assert params.eta == 1.0
    assert "beta: " in caplog.text


def test_with_overrides_rejects_unknown_keys():
    with pytest.raises(ValueError, match="Invalid override keys"):
        ShockParams.with_overrides(persistence=0.5)


def test_with_overrides_keeps_base():
    base = ShockParams(rho=0.5)
    updated = ShockParams.with_overrides(base, log_changes=False, sigma=0.1)

    assert updated.rho == 0.5
    assert updated.sigma == 0.1
    assert base.sigma != 0.1


# --- 3. Steady State ---

def test_steady_state_satisfies_euler_equation(default_params):
    """At k*(z): beta * (alpha z k^(alpha-1) + 1 - delta) = 1."""
    p = default_params
    for z in (0.8, 1.0, 1.3):
        k_ss = p.steady_state_k(z)
        gross_return = p.alpha * z * k_ss ** (p.alpha - 1) + 1 - p.delta
        assert np.isclose(p.beta * gross_return, 1.0, rtol=1e-12)


def test_steady_state_increasing_in_productivity(default_params):
    z = np.array([0.9, 1.0, 1.1])
    k_ss = default_params.steady_state_k(z)
    assert np.all(np.diff(k_ss) > 0)


def test_steady_state_consumption_positive(default_params):
    assert default_params.steady_state_c(1.0) > 0


def test_unconditional_moments():
    shock = ShockParams(mu=0.1, rho=0.5, sigma=0.2)
    assert np.isclose(shock.unconditional_mean, 0.2)
    assert np.isclose(shock.unconditional_std, 0.2 / np.sqrt(0.75))


# --- 4. Host / Device Transfer ---

def test_convert_round_trip():
    arr = np.linspace(0.0, 1.0, 5)
    t32, = convert_to_tf(arr, dtype="float32")
    t64, = convert_to_tf(arr)

    assert isinstance(t32, tf.Tensor)
    assert t32.dtype == tf.float32
    assert t64.dtype == tf.float64

    back, = convert_to_numpy(t64)
    np.testing.assert_array_equal(back, arr)
