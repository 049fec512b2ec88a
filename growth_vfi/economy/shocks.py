"""
growth_vfi/economy/shocks.py

Discretization of the exogenous productivity process.

log(z') = mu + rho * log(z) + sigma * eps

The chain is built with Tauchen (1986). The last column of every row of the
transition matrix is set to one minus the sum of the other columns, so each
row is a probability distribution by construction rather than up to the
error of the CDF evaluations.
"""

from typing import Optional, Tuple

import numpy as np
import quantecon as qe
from scipy.stats import norm

from growth_vfi._defaults import DEFAULT_LAMBDA
from growth_vfi.economy.parameters import ShockParams


def tauchen(
    shock_params: ShockParams,
    nz: int,
    lam: float = DEFAULT_LAMBDA
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Discretizes the AR(1) productivity process using Tauchen's method.

    Args:
        shock_params (ShockParams): Contains mu, rho, sigma.
        nz (int): Number of grid points. nz == 1 collapses the process to its
            unconditional mean (no productivity risk).
        lam (float): Half-width of the grid in unconditional std-devs.

    Returns:
        Tuple[np.ndarray, np.ndarray]:
            - z_grid: (nz,) productivity levels (not logs), strictly increasing.
            - prob_matrix: (nz, nz) with prob_matrix[i, j] = Pr(z' = z_j | z = z_i).
    """
    if nz < 1:
        raise ValueError(f"nz must be >= 1. Got {nz}")

    mu, rho, sigma = shock_params.mu, shock_params.rho, shock_params.sigma
    mu_z = shock_params.unconditional_mean
    sigma_z = shock_params.unconditional_std

    if nz == 1:
        return np.array([np.exp(mu_z)]), np.ones((1, 1))

    # 1. Grid in logs, equally spaced over mu_z +/- lam * sigma_z
    log_z = np.linspace(mu_z - lam * sigma_z, mu_z + lam * sigma_z, nz)
    half_step = 0.5 * (log_z[1] - log_z[0])

    # 2. Conditional mean of log(z') for every origin: (nz, 1)
    cond_mean = (mu + rho * log_z)[:, None]

    # 3. CDF at the upper edge of every bin except the last: (nz, nz - 1)
    upper = norm.cdf((log_z[None, :-1] - cond_mean + half_step) / sigma)

    prob_matrix = np.empty((nz, nz))
    prob_matrix[:, 0] = upper[:, 0]
    # Interior bins: mass between the two midpoints around z_j
    prob_matrix[:, 1:-1] = upper[:, 1:] - upper[:, :-1]
    # Upper tail as complement
    prob_matrix[:, -1] = 1.0 - prob_matrix[:, :-1].sum(axis=1)

    return np.exp(log_z), prob_matrix


def ar1(
    shock_params: ShockParams,
    nz: int,
    lam: float,
    z_out: np.ndarray,
    p_out: np.ndarray
) -> None:
    """
    Writes the Tauchen grid and transition matrix into caller-owned buffers.

    Args:
        z_out: Buffer of length nz, overwritten with productivity levels.
        p_out: Buffer of length nz * nz, overwritten with the row-major
            transition matrix (p_out[i * nz + j] = Pr(z_j | z_i)).
    """
    if z_out.size != nz or p_out.size != nz * nz:
        raise ValueError(
            f"Buffers must have sizes ({nz}, {nz * nz}). Got ({z_out.size}, {p_out.size})"
        )
    z_grid, prob_matrix = tauchen(shock_params, nz, lam)
    z_out[...] = z_grid.reshape(z_out.shape)
    p_out[...] = prob_matrix.reshape(p_out.shape)


def _markov_matrix(prob_matrix: np.ndarray) -> np.ndarray:
    # The complement column can round to -1e-17 where the upper tail is empty
    return np.clip(prob_matrix, 0.0, 1.0)


def to_markov_chain(z_grid: np.ndarray, prob_matrix: np.ndarray) -> qe.MarkovChain:
    """Wraps the discretized process as a quantecon MarkovChain over log(z)."""
    return qe.MarkovChain(_markov_matrix(prob_matrix), state_values=np.log(z_grid))


def stationary_distribution(prob_matrix: np.ndarray) -> np.ndarray:
    """
    Ergodic distribution of the productivity chain.

    The Tauchen chain is irreducible for sigma > 0, so quantecon returns a
    single distribution.
    """
    mc = qe.MarkovChain(_markov_matrix(prob_matrix))
    return mc.stationary_distributions[0]


def simulate_productivity_indices(
    prob_matrix: np.ndarray,
    ts_length: int,
    init: Optional[int] = None,
    seed: Optional[int] = None
) -> np.ndarray:
    """
    Draws a path of productivity indices from the discretized chain.

    Args:
        prob_matrix: (nz, nz) transition matrix.
        ts_length: Number of periods to simulate.
        init: Initial index. If None, quantecon draws it at random.
        seed: Seed for the random state.

    Returns:
        (ts_length,) integer array of productivity indices.
    """
    mc = qe.MarkovChain(_markov_matrix(prob_matrix))
    return mc.simulate_indices(ts_length, init=init, random_state=seed)
