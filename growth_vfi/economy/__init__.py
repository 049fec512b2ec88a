"""
growth_vfi/economy/__init__.py

Public API for economic model primitives.
"""

from growth_vfi.economy.parameters import (
    EconomicParams,
    ShockParams,
    convert_to_tf,
    convert_to_numpy,
)

from growth_vfi.economy.shocks import (
    tauchen,
    ar1,
    to_markov_chain,
    stationary_distribution,
    simulate_productivity_indices,
)

from growth_vfi.economy.logic import (
    production_function,
    available_resources,
    crra_utility,
    steady_state_value,
)

__all__ = [
    # Parameters
    "EconomicParams",
    "ShockParams",
    "convert_to_tf",
    "convert_to_numpy",
    # Shocks
    "tauchen",
    "ar1",
    "to_markov_chain",
    "stationary_distribution",
    "simulate_productivity_indices",
    # Primitives
    "production_function",
    "available_resources",
    "crra_utility",
    "steady_state_value",
]
