"""
test_simulation.py

Unit tests for the solve-and-analyze pipeline (simulation.py).
Verifies:
1. Sweeps route each override to the object that owns it.
2. Fixed points of a policy are found on synthetic input.
3. Simulated paths follow the solved policy and the Markov chain.
"""

import pytest
import numpy as np

from growth_vfi.ddp import simulation, DDPGridConfig, GrowthModelDDP
from growth_vfi.economy.parameters import EconomicParams, ShockParams


@pytest.fixture
def params():
    return EconomicParams(eta=2.0, beta=0.95, alpha=0.3, delta=0.1)


@pytest.fixture
def shock_params():
    return ShockParams(mu=0.0, rho=0.9, sigma=0.02)


@pytest.fixture
def small_grid():
    return DDPGridConfig(nk=15, nz=2, tol=1e-6)


@pytest.fixture
def solved(params, shock_params, small_grid):
    model = GrowthModelDDP(params, shock_params, small_grid)
    return model, model.solve()


# --- TEST 1: Parameter Sweep ---

def test_parameter_sweep_routes_overrides(params, shock_params, small_grid):
    scenarios = {
        "base": {},
        "patient": {"beta": 0.97},
        "risky": {"sigma": 0.04},
        "fine": {"nk": 20, "max_type": "bisection"},
    }

    results = simulation.run_parameter_sweep(
        params, shock_params, scenarios, base_grid_config=small_grid
    )

    assert list(results) == list(scenarios)
    assert results["base"]["params"] == params
    assert results["patient"]["params"].beta == 0.97
    assert results["risky"]["shock_params"].sigma == 0.04
    assert results["risky"]["params"] == params
    assert results["fine"]["grid_config"].nk == 20
    assert results["fine"]["grid_config"].max_type == "bisection"

    for name, res in results.items():
        sol = res["solution"]
        nk = res["grid_config"].nk
        assert sol.value.shape == (nk, 2), name
        assert sol.converged, name
        assert res["duration"] >= 0.0


def test_patient_households_save_more(params, shock_params):
    results = simulation.run_parameter_sweep(
        params, shock_params,
        {"base": {}, "patient": {"beta": 0.97}},
        base_grid_config=DDPGridConfig(nk=25, nz=1, tol=1e-6),
    )
    base = results["base"]["solution"].policy_k
    patient = results["patient"]["solution"].policy_k
    # The patient grid sits higher, so compare levels
    assert np.mean(patient) > np.mean(base)


def test_parameter_sweep_rejects_unknown_keys(params, shock_params, small_grid):
    with pytest.raises(ValueError, match="unknown keys"):
        simulation.run_parameter_sweep(
            params, shock_params, {"typo": {"betta": 0.9}}, base_grid_config=small_grid
        )


def test_parameter_sweep_validates_overrides(params, shock_params, small_grid):
    with pytest.raises(ValueError, match="beta"):
        simulation.run_parameter_sweep(
            params, shock_params, {"bad": {"beta": 1.5}}, base_grid_config=small_grid
        )


# --- TEST 2: Fixed Points ---

def test_policy_fixed_points_synthetic():
    policy = np.array([
        [1, 0],
        [1, 2],
        [3, 2],
        [3, 3],
        [3, 4],
    ])
    np.testing.assert_array_equal(simulation.policy_fixed_points(policy, 0), [1, 3])
    np.testing.assert_array_equal(simulation.policy_fixed_points(policy, 1), [0, 2, 3, 4])


def test_policy_fixed_points_single_and_none():
    assert list(simulation.policy_fixed_points(np.array([[2], [2], [2]]), 0)) == [2]
    assert len(simulation.policy_fixed_points(np.array([[1], [0]]), 0)) == 0


# --- TEST 3: Simulated Paths ---

def test_simulate_path_follows_policy(solved):
    model, sol = solved
    path = simulation.simulate_path(model, sol, ts_length=200, k_init=0, z_init=1, seed=3)

    for key in ("z_idx", "k_idx", "z", "k", "c"):
        assert path[key].shape == (200,), key

    assert path["k_idx"][0] == 0
    assert path["z_idx"][0] == 1
    np.testing.assert_array_equal(
        path["k_idx"][1:], sol.policy_idx[path["k_idx"][:-1], path["z_idx"][:-1]]
    )

    host = model.host_grids()
    np.testing.assert_allclose(path["k"], host.k_grid[path["k_idx"]])
    np.testing.assert_allclose(path["z"], host.z_grid[path["z_idx"]])
    assert np.all(path["c"] > 0)


def test_simulate_path_is_reproducible(solved):
    model, sol = solved
    a = simulation.simulate_path(model, sol, ts_length=100, seed=11)
    b = simulation.simulate_path(model, sol, ts_length=100, seed=11)

    np.testing.assert_array_equal(a["z_idx"], b["z_idx"])
    np.testing.assert_array_equal(a["k_idx"], b["k_idx"])
