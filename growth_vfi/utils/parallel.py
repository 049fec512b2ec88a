"""
growth_vfi/utils/parallel.py

Data-parallel map over a range of indices.

Usage:
    from growth_vfi.utils.parallel import parallel_map
    results = parallel_map(lambda i: i ** 2, 100, n_jobs=4)
"""

import multiprocessing
from typing import Any, Callable, List, Optional

from joblib import Parallel, delayed


def parallel_map_fake(fn: Callable[[int], Any], count: int) -> List[Any]:
    """
    Apply fn to 0, ..., count - 1 in an ordinary single-threaded loop.

    Exists so that parallelism can be switched off with the same call
    signature as parallel_map.
    """
    return [fn(i) for i in range(count)]


def parallel_map(
    fn: Callable[[int], Any],
    count: int,
    n_jobs: Optional[int] = None,
    prefer: str = "threads"
) -> List[Any]:
    """
    Apply a pure per-index function to 0, ..., count - 1 using joblib.

    fn must not mutate shared state: indices are processed in no particular
    order. Results are returned in index order, and only once every task has
    finished.

    Args:
        fn: Function of a single integer index.
        count: Number of indices.
        n_jobs: Number of workers. Defaults to the smaller of count and the
            number of available cores. 1 runs in the calling thread.
        prefer: joblib backend hint, "threads" or "processes".

    Returns:
        List of fn(i) for i in range(count).
    """
    if n_jobs is None:
        n_jobs = min(count, multiprocessing.cpu_count())

    if n_jobs == 1 or count <= 1:
        return parallel_map_fake(fn, count)

    return Parallel(n_jobs=n_jobs, prefer=prefer)(
        delayed(fn)(i) for i in range(count)
    )
