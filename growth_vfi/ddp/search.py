"""
growth_vfi/ddp/search.py

Monotone search used to bound the feasible choices of next-period capital.

binary_val is the per-state (host) version; binary_val_tf runs the same
search for a whole tensor of queries at once on the device.
"""

import numpy as np
import tensorflow as tf


def binary_val(x: float, grid: np.ndarray) -> int:
    """
    Location of a value in a monotonically increasing grid.

    Returns the smallest index i with grid[i] >= x. Queries below the grid
    return 0 and queries above it return len(grid) - 1; neither is an error.

    Args:
        x: Value to locate.
        grid: Increasing 1D array.

    Returns:
        Index into grid.
    """
    n = len(grid)
    if x < grid[0]:
        return 0
    if x > grid[n - 1]:
        return n - 1

    lo, hi = 0, n - 1
    # The loop never tests grid[0] as a midpoint
    if grid[lo] == x:
        return lo
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if grid[mid] == x:
            return mid
        elif grid[mid] > x:
            hi = mid
        else:
            lo = mid
    return hi


def binary_val_tf(x: tf.Tensor, grid: tf.Tensor) -> tf.Tensor:
    """
    Vectorized binary_val over any shape of queries.

    Args:
        x: Tensor of query values.
        grid: Increasing 1D tensor of the same dtype.

    Returns:
        int32 tensor shaped like x.
    """
    n = tf.shape(grid)[0]
    flat = tf.reshape(x, [1, -1])
    idx = tf.searchsorted(grid[tf.newaxis, :], flat, side="left", out_type=tf.int32)
    idx = tf.minimum(idx, n - 1)
    return tf.reshape(idx, tf.shape(x))


def feasible_upper_index(ydepk: float, k_grid: np.ndarray) -> int:
    """
    Largest capital index that keeps consumption non-negative.

    Floored at 0, so a state whose resources fall below the whole grid is
    still offered the lowest grid point.
    """
    khi = binary_val(ydepk, k_grid)
    if k_grid[khi] > ydepk:
        khi -= 1
    return max(khi, 0)


def feasible_upper_index_tf(ydepk: tf.Tensor, k_grid: tf.Tensor) -> tf.Tensor:
    """Vectorized feasible_upper_index."""
    khi = binary_val_tf(ydepk, k_grid)
    khi = tf.where(tf.gather(k_grid, khi) > ydepk, khi - 1, khi)
    return tf.maximum(khi, 0)
