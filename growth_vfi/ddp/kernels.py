"""
growth_vfi/ddp/kernels.py

Per-state Bellman kernels (host side).

Each kernel updates a single state (k, j) and reads only shared, read-only
inputs: the grids, the transition matrix, the current value function V0 and,
for policy-fixed updates, the current policy G. They are pure functions of
their arguments, so parallel_vf_step may evaluate states in any order and on
any number of workers.

Arrays use the (capital, productivity) layout: v0[k, j], policy[k, j].
The vectorized TensorFlow solver in ddp_growth.py implements the same
semantics for all states at once.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from growth_vfi.economy.parameters import EconomicParams
from growth_vfi.economy.logic import available_resources, crra_utility
from growth_vfi.ddp.search import feasible_upper_index
from growth_vfi.utils.parallel import parallel_map


@dataclass(frozen=True)
class HostGrids:
    """
    Read-only inputs shared by every state of a pass.

    Attributes:
        k_grid: (nk,) capital grid.
        z_grid: (nz,) productivity grid (levels).
        prob_matrix: (nz, nz), prob_matrix[j, j'] = Pr(z_j' | z_j).
        params: Economic parameters.
    """
    k_grid: np.ndarray
    z_grid: np.ndarray
    prob_matrix: np.ndarray
    params: EconomicParams

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.k_grid), len(self.z_grid)


def bellman_objective(kp: int, j: int, ydepk: float, grids: HostGrids, v0: np.ndarray) -> float:
    """
    u(ydepK - K[k']) + beta * sum_j' P[j, j'] * V0[k', j']
    """
    expected = grids.prob_matrix[j] @ v0[kp]
    consumption = ydepk - grids.k_grid[kp]
    return crra_utility(consumption, grids.params.eta) + grids.params.beta * expected


def grid_max(khi: int, j: int, ydepk: float, grids: HostGrids, v0: np.ndarray) -> Tuple[float, int]:
    """
    Maximize the Bellman objective by evaluating every k' in [0, khi].

    Makes no assumption on the shape of V0. Ties keep the lowest index.

    Returns:
        (max value, argmax index)
    """
    wmax = bellman_objective(0, j, ydepk, grids, v0)
    kmax = 0
    for kp in range(1, khi + 1):
        w = bellman_objective(kp, j, ydepk, grids, v0)
        if w > wmax:
            wmax, kmax = w, kp
    return wmax, kmax


def binary_max(khi: int, j: int, ydepk: float, grids: HostGrids, v0: np.ndarray) -> Tuple[float, int]:
    """
    Maximize the Bellman objective by bisection over [0, khi].

    Assumes the objective is strictly concave in k', which holds when V0 is
    concave in capital (Heer and Maussner, 2005). A non-concave V0 silently
    yields a local maximum; use grid_max when in doubt.

    Returns:
        (max value, argmax index)
    """
    lo, hi = 0, khi
    while hi - lo > 2:
        mid1 = (lo + hi) // 2
        mid2 = mid1 + 1
        w1 = bellman_objective(mid1, j, ydepk, grids, v0)
        w2 = bellman_objective(mid2, j, ydepk, grids, v0)
        if w2 > w1:
            lo = mid1
        else:
            hi = mid2

    # At most three candidates remain
    wmax = bellman_objective(lo, j, ydepk, grids, v0)
    kmax = lo
    for kp in range(lo + 1, hi + 1):
        w = bellman_objective(kp, j, ydepk, grids, v0)
        if w > wmax:
            wmax, kmax = w, kp
    return wmax, kmax


def howard_value(k: int, j: int, ydepk: float, grids: HostGrids, v0: np.ndarray, policy: np.ndarray) -> float:
    """Bellman objective at the current policy choice, without maximizing."""
    return bellman_objective(int(policy[k, j]), j, ydepk, grids, v0)


def state_update(
    k: int,
    j: int,
    grids: HostGrids,
    v0: np.ndarray,
    policy: Optional[np.ndarray] = None,
    max_type: str = "grid",
    howard: bool = False
) -> Tuple[float, int]:
    """
    Update one state (k, j).

    Args:
        k, j: Capital and productivity indices.
        grids: Shared grids and parameters.
        v0: (nk, nz) current value function.
        policy: (nk, nz) current policy indices; required when howard is True.
        max_type: "grid" or "bisection".
        howard: Hold the policy fixed instead of maximizing.

    Returns:
        (new value, policy index) for the state.
    """
    ydepk = available_resources(grids.k_grid[k], grids.z_grid[j], grids.params)

    if howard:
        if policy is None:
            raise ValueError("A policy is required for a policy-fixed update")
        return howard_value(k, j, ydepk, grids, v0, policy), int(policy[k, j])

    khi = feasible_upper_index(ydepk, grids.k_grid)
    if max_type == "grid":
        return grid_max(khi, j, ydepk, grids, v0)
    elif max_type == "bisection":
        return binary_max(khi, j, ydepk, grids, v0)
    else:
        raise ValueError(f"Unknown max_type: {max_type}")


def parallel_vf_step(
    grids: HostGrids,
    v0: np.ndarray,
    policy: Optional[np.ndarray] = None,
    max_type: str = "grid",
    howard: bool = False,
    n_jobs: Optional[int] = 1
) -> Tuple[np.ndarray, np.ndarray]:
    """
    One pass of the Bellman update over every state, on the host.

    Each state is dispatched to state_update through parallel_map. All tasks
    complete before the new arrays are assembled, so the caller may treat
    the return as the barrier between passes. v0 and policy are never
    written.

    Returns:
        (v_new, policy_new), both shaped (nk, nz).
    """
    shape = grids.shape

    def update(idx: int) -> Tuple[float, int]:
        k, j = np.unravel_index(idx, shape)
        return state_update(int(k), int(j), grids, v0, policy, max_type, howard)

    results = parallel_map(update, int(np.prod(shape)), n_jobs=n_jobs)

    v_new = np.array([w for w, _ in results], dtype=v0.dtype).reshape(shape)
    policy_new = np.array([g for _, g in results], dtype=np.int32).reshape(shape)
    return v_new, policy_new
