# ---
# jupyter:
#   jupytext:
#     text_representation:
#       extension: .py
#       format_name: percent
#       format_version: '1.3'
#       jupytext_version: 1.16.1
#   kernelspec:
#     display_name: Python 3
#     language: python
#     name: python3
# ---

# %% [markdown]
# # VFI: Stochastic Growth Model
#
# Solves the model from `parameters.txt` with each maximization method and
# compares wall time and iteration counts:
# - **grid**: exhaustive search over feasible k'
# - **bisection**: binary search assuming concavity
# - **grid + howard**: exhaustive search with policy-fixed passes in between

# %%
# =============================================================================
# 0. IMPORTS & SETUP
# =============================================================================
from pathlib import Path

import numpy as np

from growth_vfi.ddp import (
    DDPGridConfig,
    load_parameter_file,
    run_parameter_sweep,
    policy_fixed_points,
)
from growth_vfi.utils.logging_config import setup_logging

setup_logging('INFO')

PARAM_FILE = Path(__file__).resolve().parent / "parameters.txt"
params, shock_params, grid_config = load_parameter_file(PARAM_FILE)

# %%
# =============================================================================
# 1. SOLVE
# =============================================================================
scenarios = {
    "grid": {"max_type": "grid", "howard": False},
    "bisection": {"max_type": "bisection", "howard": False},
    "grid_howard": {"max_type": "grid", "howard": True},
}

results = run_parameter_sweep(params, shock_params, scenarios, base_grid_config=grid_config)

# %%
# =============================================================================
# 2. SUMMARY
# =============================================================================
reference = results["grid"]["solution"]

for name, res in results.items():
    sol = res["solution"]
    gap = np.max(np.abs(sol.value - reference.value))
    print(
        f"{name:>12}: {sol.iterations:5d} passes, {sol.elapsed:7.2f}s, "
        f"converged={sol.converged}, max |V - V_grid| = {gap:.2e}"
    )

k_grid = results["grid"]["model"].host_grids().k_grid
mid_z = grid_config.nz // 2
fixed = policy_fixed_points(reference.policy_idx, mid_z)
print(f"Stationary capital at z index {mid_z}: {k_grid[fixed]}")
print(f"Closed-form k*(z): {params.steady_state_k(results['grid']['model'].host_grids().z_grid[mid_z]):.4f}")
