"""
growth_vfi/utils/

Utilities shared by the solvers.

Modules:
    parallel: Data-parallel map over index ranges (joblib)
    logging_config: Console/file logging setup for solver runs
"""

from growth_vfi.utils.parallel import parallel_map, parallel_map_fake
from growth_vfi.utils.logging_config import (
    setup_logging,
    disable_logging,
    reset_logging,
    get_current_log_level,
)

__all__ = [
    "parallel_map",
    "parallel_map_fake",
    "setup_logging",
    "disable_logging",
    "reset_logging",
    "get_current_log_level",
]
