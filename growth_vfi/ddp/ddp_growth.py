"""
ddp_growth.py

Value Function Iteration for the stochastic growth model using TensorFlow.

Every state (k, z) of a pass is evaluated in lockstep by vectorized kernels,
so a pass is a single device-parallel dispatch. Passes are sequential: the
next pass starts only from the completed value tensor of the previous one.
"""

import logging
import time
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

import numpy as np
import tensorflow as tf

from growth_vfi._defaults import DEFAULT_LOG_EVERY
from growth_vfi.economy.parameters import (
    EconomicParams,
    ShockParams,
    convert_to_tf,
    convert_to_numpy,
)
from growth_vfi.economy.logic import available_resources, crra_utility, steady_state_value
from growth_vfi.ddp.ddp_config import DDPGridConfig
from growth_vfi.ddp.kernels import HostGrids, parallel_vf_step
from growth_vfi.ddp.search import feasible_upper_index_tf

logger = logging.getLogger(__name__)


@dataclass
class VFISolution:
    """
    Result of GrowthModelDDP.solve, on the host.

    Attributes:
        value: (nk, nz) value function.
        policy_idx: (nk, nz) index of next-period capital in the capital grid.
        policy_k: (nk, nz) next-period capital in levels.
        iterations: Number of passes run.
        diff: max |V - V0| of the last pass.
        converged: Whether a maximization pass reached the tolerance.
        elapsed: Wall time in seconds.
    """
    value: np.ndarray
    policy_idx: np.ndarray
    policy_k: np.ndarray
    iterations: int
    diff: float
    converged: bool
    elapsed: float


class GrowthModelDDP:
    """
    Solves the stochastic growth model with Value Function Iteration,
    accelerated by TensorFlow.

    Attributes:
        params (EconomicParams): Preferences and technology.
        shock_params (ShockParams): Productivity process.
        grid_config (DDPGridConfig): Grid and solver settings.
        z_grid (tf.Tensor): Productivity grid (nz,).
        prob_matrix (tf.Tensor): Transition matrix (nz, nz), row = origin.
        k_grid (tf.Tensor): Capital grid (nk,).
        ydepk (tf.Tensor): Output plus undepreciated capital (nk, nz).
        khi (tf.Tensor): Highest feasible next-capital index (nk, nz).
        nz (int): Number of productivity states.
        nk (int): Number of capital grid points.
    """

    def __init__(
        self,
        params: EconomicParams,
        shock_params: ShockParams,
        grid_config: Optional[DDPGridConfig] = None
    ):
        """
        Initializes the model, generates grids and the feasibility bounds.

        Args:
            params (EconomicParams): The economic parameters.
            shock_params (ShockParams): The shock parameters.
            grid_config (DDPGridConfig): Grid settings (uses defaults if None).
        """
        self.params = params
        self.shock_params = shock_params
        self.grid_config = grid_config or DDPGridConfig()
        self.dtype = tf.as_dtype(self.grid_config.dtype)

        # Generate grids on the host
        z_grid_np, prob_matrix_np = self.grid_config.initialize_markov_process(shock_params)
        k_grid_np = self.grid_config.generate_capital_grid(params, z_grid_np)

        # Copy to the device
        self.z_grid, self.prob_matrix, self.k_grid = convert_to_tf(
            z_grid_np, prob_matrix_np, k_grid_np, dtype=self.grid_config.dtype
        )

        # Store dimensions
        self.nz = self.grid_config.nz
        self.nk = self.grid_config.nk

        # Resources and feasible bracket do not change across passes
        self.ydepk = available_resources(
            self.k_grid[:, tf.newaxis], self.z_grid[tf.newaxis, :], params
        )
        self.khi = feasible_upper_index_tf(self.ydepk, self.k_grid)
        self._z_index = tf.broadcast_to(tf.range(self.nz)[tf.newaxis, :], [self.nk, self.nz])

    def host_grids(self) -> HostGrids:
        """Copies the grids back to the host for the per-state kernels."""
        k_grid, z_grid, prob_matrix = convert_to_numpy(self.k_grid, self.z_grid, self.prob_matrix)
        return HostGrids(k_grid=k_grid, z_grid=z_grid, prob_matrix=prob_matrix, params=self.params)

    def initial_value(self) -> tf.Tensor:
        """
        Steady-state seed: V[k, j] = u(c*(z_j)) for every capital index k.

        Flat in capital, varying only with productivity.
        """
        v_row = steady_state_value(self.z_grid, self.params)
        return tf.broadcast_to(v_row[tf.newaxis, :], [self.nk, self.nz])

    def expected_value(self, v0: tf.Tensor) -> tf.Tensor:
        """
        E[V0(k', z') | z_j] for every (k', j).

        EV[k', j] = sum_j' P[j, j'] * V0[k', j']  ->  V0 @ P^T, shape (nk, nz).
        """
        return tf.matmul(v0, self.prob_matrix, transpose_b=True)

    def _objective_at(self, kp_idx: tf.Tensor, ev: tf.Tensor) -> tf.Tensor:
        """Bellman objective of every state (k, j) at the choice kp_idx[k, j]."""
        consumption = self.ydepk - tf.gather(self.k_grid, kp_idx)
        continuation = tf.gather_nd(ev, tf.stack([kp_idx, self._z_index], axis=-1))
        return crra_utility(consumption, self.params.eta) + self.params.beta * continuation

    @tf.function
    def grid_max(self, v0: tf.Tensor) -> Tuple[tf.Tensor, tf.Tensor]:
        """
        Bellman update by exhaustive search over feasible k'.

        T(V)(k, z) = max_{k' <= khi(k, z)} [ u(ydepK - k') + beta * E[V(k', z') | z] ]

        Args:
            v0 (tf.Tensor): Current value function (nk, nz).

        Returns:
            Tuple[tf.Tensor, tf.Tensor]:
                - v_new: Updated value function (nk, nz).
                - policy_idx: int32 argmax indices (nk, nz).
        """
        ev = self.expected_value(v0)

        # Axes: (k, z, k')
        consumption = self.ydepk[:, :, tf.newaxis] - self.k_grid[tf.newaxis, tf.newaxis, :]
        continuation = tf.transpose(ev)[tf.newaxis, :, :]
        rhs = crra_utility(consumption, self.params.eta) + self.params.beta * continuation

        # Only k' <= khi keeps consumption non-negative
        kp = tf.range(self.nk)[tf.newaxis, tf.newaxis, :]
        feasible = kp <= self.khi[:, :, tf.newaxis]
        rhs = tf.where(feasible, rhs, tf.constant(-np.inf, dtype=self.dtype))

        v_new = tf.reduce_max(rhs, axis=2)
        policy_idx = tf.argmax(rhs, axis=2, output_type=tf.int32)
        return v_new, policy_idx

    @tf.function
    def binary_max(self, v0: tf.Tensor) -> Tuple[tf.Tensor, tf.Tensor]:
        """
        Bellman update by bisection over [0, khi], assuming concavity in k'.

        Every state shrinks its own bracket: while it holds more than three
        points, compare the objective at two adjacent midpoints and keep the
        half containing the larger one. States whose bracket is already small
        sit idle until all states are done. The last (at most three)
        candidates are compared directly.

        Args:
            v0 (tf.Tensor): Current value function (nk, nz), concave in capital.

        Returns:
            Tuple[tf.Tensor, tf.Tensor]: (v_new, policy_idx), both (nk, nz).
        """
        ev = self.expected_value(v0)
        lo = tf.zeros_like(self.khi)
        hi = self.khi

        def not_done(lo, hi):
            return tf.reduce_any(hi - lo > 2)

        def shrink(lo, hi):
            active = hi - lo > 2
            mid1 = (lo + hi) // 2
            mid2 = tf.minimum(mid1 + 1, self.nk - 1)
            w1 = self._objective_at(mid1, ev)
            w2 = self._objective_at(mid2, ev)
            rising = w2 > w1
            lo = tf.where(active & rising, mid1, lo)
            hi = tf.where(active & tf.logical_not(rising), mid2, hi)
            return lo, hi

        lo, hi = tf.while_loop(not_done, shrink, [lo, hi])

        v_new = self._objective_at(lo, ev)
        policy_idx = lo
        for offset in (1, 2):
            candidate = lo + offset
            w = self._objective_at(tf.minimum(candidate, self.nk - 1), ev)
            better = (candidate <= hi) & (w > v_new)
            v_new = tf.where(better, w, v_new)
            policy_idx = tf.where(better, candidate, policy_idx)
        return v_new, policy_idx

    @tf.function
    def howard_step(self, v0: tf.Tensor, policy_idx: tf.Tensor) -> Tuple[tf.Tensor, tf.Tensor]:
        """
        Policy-fixed update: V(k, z) = u(ydepK - k'(k, z)) + beta * E[V0(k'(k, z), z') | z].

        Args:
            v0 (tf.Tensor): Current value function (nk, nz).
            policy_idx (tf.Tensor): int32 policy from the last maximization.

        Returns:
            Tuple[tf.Tensor, tf.Tensor]: (v_new, policy_idx unchanged).
        """
        ev = self.expected_value(v0)
        return self._objective_at(policy_idx, ev), policy_idx

    def vf_step(
        self,
        v0: tf.Tensor,
        policy_idx: tf.Tensor,
        howard: bool = False
    ) -> Tuple[tf.Tensor, tf.Tensor]:
        """
        One pass over the full state space with a single update rule.

        Args:
            v0: Current value function (nk, nz); never modified.
            policy_idx: Current policy (nk, nz); read only on Howard passes.
            howard: Hold the policy fixed instead of maximizing.

        Returns:
            (v_new, policy_idx_new)
        """
        if howard:
            return self.howard_step(v0, policy_idx)
        if self.grid_config.max_type == "bisection":
            return self.binary_max(v0)
        return self.grid_max(v0)

    @staticmethod
    def max_abs_diff(v: tf.Tensor, v0: tf.Tensor) -> tf.Tensor:
        """Convergence metric: max over all states of |V - V0|."""
        return tf.reduce_max(tf.abs(v - v0))

    def solve(
        self,
        v_init: Optional[tf.Tensor] = None,
        backend: Literal["device", "host"] = "device",
        n_jobs: Optional[int] = 1,
        log_every: int = DEFAULT_LOG_EVERY
    ) -> VFISolution:
        """
        Solves the model by Value Function Iteration.

        With grid_config.howard on, policy-fixed passes are interleaved with
        maximization according to DDPGridConfig.is_howard_pass. Convergence
        is only declared on a maximization pass.

        Args:
            v_init: Initial value function. Defaults to initial_value().
            backend: "device" runs the vectorized TensorFlow kernels;
                "host" runs the per-state kernels through parallel_map.
            n_jobs: Number of host workers (host backend only).
            log_every: Log progress every log_every passes (DEBUG level).

        Returns:
            VFISolution on the host.
        """
        cfg = self.grid_config
        start_time = time.time()

        v0 = self.initial_value() if v_init is None else tf.convert_to_tensor(v_init, dtype=self.dtype)
        policy_idx = tf.zeros((self.nk, self.nz), dtype=tf.int32)

        if backend == "host":
            grids = self.host_grids()
            v0, policy_idx = convert_to_numpy(v0, policy_idx)
        elif backend != "device":
            raise ValueError(f"Unknown backend: {backend}")

        diff = np.inf
        converged = False
        iterations = 0

        while iterations < cfg.max_iter:
            howard = cfg.is_howard_pass(iterations)

            if backend == "device":
                v_new, policy_idx = self.vf_step(v0, policy_idx, howard)
                diff = float(self.max_abs_diff(v_new, v0))
            else:
                v_new, policy_idx = parallel_vf_step(
                    grids, v0, policy_idx, cfg.max_type, howard, n_jobs=n_jobs
                )
                diff = float(np.max(np.abs(v_new - v0)))

            v0 = v_new
            iterations += 1

            if iterations % log_every == 0:
                logger.debug(f"Iter {iterations}: diff={diff:.3e} howard={howard}")

            if not howard and diff < cfg.tol:
                converged = True
                break

        elapsed = time.time() - start_time
        if converged:
            logger.info(f"VFI converged in {iterations} passes ({elapsed:.2f}s). Diff: {diff:.2e}")
        else:
            logger.warning(f"VFI hit max_iter={cfg.max_iter} ({elapsed:.2f}s). Diff: {diff:.2e}")

        value, policy_idx = convert_to_numpy(v0, policy_idx)
        policy_idx = policy_idx.astype(np.int64)
        k_grid, = convert_to_numpy(self.k_grid)

        return VFISolution(
            value=value,
            policy_idx=policy_idx,
            policy_k=k_grid[policy_idx],
            iterations=iterations,
            diff=diff,
            converged=converged,
            elapsed=elapsed,
        )
