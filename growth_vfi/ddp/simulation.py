"""
simulation.py

Runs model solutions and post-processes results.

Strictly separates the "Solving" phase (heavy computation) from the
"Analysis" phase (policy fixed points, simulated paths).
"""

import logging
import time
from typing import Any, Dict, Optional

import numpy as np

from growth_vfi.economy.parameters import EconomicParams, ShockParams
from growth_vfi.economy.logic import available_resources
from growth_vfi.economy.shocks import simulate_productivity_indices
from growth_vfi.ddp.ddp_config import DDPGridConfig
from growth_vfi.ddp.ddp_growth import GrowthModelDDP, VFISolution

logger = logging.getLogger(__name__)


def run_parameter_sweep(
    base_params: EconomicParams,
    base_shock_params: ShockParams,
    scenarios: Dict[str, Dict[str, Any]],
    base_grid_config: Optional[DDPGridConfig] = None,
    solver_kwargs: Optional[Dict[str, Any]] = None
) -> Dict[str, Dict[str, Any]]:
    """
    Solves a batch of scenarios (parameter sweep).

    Args:
        base_params: Baseline economic parameters.
        base_shock_params: Baseline shock parameters.
        scenarios: Scenario name -> overrides. Keys may belong to
            EconomicParams, ShockParams or DDPGridConfig, e.g.
            {"high_risk_aversion": {"eta": 5.0}, "fine_grid": {"nk": 500}}.
        base_grid_config: Baseline grid settings (defaults if None).
        solver_kwargs: Extra arguments for GrowthModelDDP.solve.

    Returns:
        {
            "ScenarioName": {
                "params": EconomicParams,
                "shock_params": ShockParams,
                "grid_config": DDPGridConfig,
                "model": GrowthModelDDP,
                "solution": VFISolution,
                "duration": float
            },
            ...
        }
    """
    solver_kwargs = solver_kwargs or {}
    base_grid_config = base_grid_config or DDPGridConfig()
    targets = (
        (EconomicParams, base_params),
        (ShockParams, base_shock_params),
        (DDPGridConfig, base_grid_config),
    )

    results = {}
    total_scenarios = len(scenarios)
    logger.info(f"Starting parameter sweep over {total_scenarios} scenarios")

    for i, (name, overrides) in enumerate(scenarios.items(), 1):
        start_time = time.time()
        logger.info(f"[{i}/{total_scenarios}] Running scenario '{name}'")

        # 1. Route each override to the object that owns the field
        remaining = dict(overrides)
        updated = []
        for cls, base in targets:
            own = {k: remaining.pop(k) for k in list(remaining) if k in cls.__dataclass_fields__}
            updated.append(cls.with_overrides(base, log_changes=False, **own))
        if remaining:
            raise ValueError(f"Scenario '{name}' has unknown keys: {sorted(remaining)}")
        params, shock_params, grid_config = updated

        # 2. Solve
        model = GrowthModelDDP(params, shock_params, grid_config)
        solution = model.solve(**solver_kwargs)

        duration = time.time() - start_time
        logger.info(f"   > Completed in {duration:.2f} seconds ({solution.iterations} passes)")

        results[name] = {
            "params": params,
            "shock_params": shock_params,
            "grid_config": grid_config,
            "model": model,
            "solution": solution,
            "duration": duration,
        }

    return results


def policy_fixed_points(policy_idx: np.ndarray, z_idx: int = 0) -> np.ndarray:
    """
    Capital indices k with policy_idx[k, z_idx] == k.

    With productivity held at z_idx these are the stationary capital
    levels of the discretized policy.
    """
    nk = policy_idx.shape[0]
    return np.flatnonzero(policy_idx[:, z_idx] == np.arange(nk))


def simulate_path(
    model: GrowthModelDDP,
    solution: VFISolution,
    ts_length: int,
    k_init: int = 0,
    z_init: Optional[int] = None,
    seed: Optional[int] = None
) -> Dict[str, np.ndarray]:
    """
    Simulates capital and productivity under the solved policy.

    Args:
        model: The solved model (for its grids).
        solution: Output of model.solve().
        ts_length: Number of periods.
        k_init: Initial capital index.
        z_init: Initial productivity index (random if None).
        seed: Seed for the productivity draws.

    Returns:
        {"z_idx", "k_idx", "z", "k", "c"} arrays of length ts_length.
        c is consumption in each period.
    """
    host = model.host_grids()
    z_idx = simulate_productivity_indices(host.prob_matrix, ts_length, init=z_init, seed=seed)

    k_idx = np.empty(ts_length, dtype=np.int64)
    k_idx[0] = k_init
    for t in range(1, ts_length):
        k_idx[t] = solution.policy_idx[k_idx[t - 1], z_idx[t - 1]]

    k = host.k_grid[k_idx]
    z = host.z_grid[z_idx]
    k_next = host.k_grid[solution.policy_idx[k_idx, z_idx]]
    c = available_resources(k, z, model.params) - k_next

    return {"z_idx": z_idx, "k_idx": k_idx, "z": z, "k": k, "c": c}
