"""
growth_vfi/ddp/__init__.py

Public API for DDP (Discrete Dynamic Programming) solvers.
"""

from growth_vfi.ddp.ddp_config import DDPGridConfig, load_parameter_file, write_parameter_file
from growth_vfi.ddp.ddp_growth import GrowthModelDDP, VFISolution
from growth_vfi.ddp.kernels import HostGrids, state_update, parallel_vf_step
from growth_vfi.ddp.search import binary_val, binary_val_tf
from growth_vfi.ddp.simulation import run_parameter_sweep, policy_fixed_points, simulate_path

__all__ = [
    "DDPGridConfig",
    "load_parameter_file",
    "write_parameter_file",
    "GrowthModelDDP",
    "VFISolution",
    "HostGrids",
    "state_update",
    "parallel_vf_step",
    "binary_val",
    "binary_val_tf",
    "run_parameter_sweep",
    "policy_fixed_points",
    "simulate_path",
]
