"""
growth_vfi

Value Function Iteration for the stochastic neoclassical growth model.

Subpackages:
    economy: Parameters, productivity process, economic primitives
    ddp: Grids, Bellman kernels and the VFI solver
    utils: Parallel map and logging setup
"""

__version__ = "0.1.0"
