import pytest
import numpy as np
import tensorflow as tf

from growth_vfi.ddp.search import (
    binary_val,
    binary_val_tf,
    feasible_upper_index,
    feasible_upper_index_tf,
)


@pytest.fixture
def grid():
    return np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0])


# --- 1. binary_val ---

def test_out_of_range_clamps(grid):
    """Queries outside the grid are clamped, not errors."""
    assert binary_val(-10.0, grid) == 0
    assert binary_val(0.999, grid) == 0
    assert binary_val(7.001, grid) == len(grid) - 1
    assert binary_val(1e9, grid) == len(grid) - 1


@pytest.mark.parametrize("idx", range(7))
def test_exact_hits(grid, idx):
    """A query equal to a grid point returns that point's index, ends included."""
    assert binary_val(grid[idx], grid) == idx


@pytest.mark.parametrize("x, expected", [
    (1.5, 1),
    (2.0001, 2),
    (3.9999, 3),
    (6.5, 6),
])
def test_between_points_returns_upper(grid, x, expected):
    assert binary_val(x, grid) == expected


def test_matches_searchsorted():
    """Smallest i with grid[i] >= x, for random queries and uneven grids."""
    rng = np.random.default_rng(0)
    for n in (2, 3, 10, 257):
        grid = np.sort(rng.uniform(0.0, 10.0, n))
        queries = np.concatenate([rng.uniform(grid[0], grid[-1], 50), grid])
        for x in queries:
            expected = min(np.searchsorted(grid, x, side="left"), n - 1)
            assert binary_val(x, grid) == expected


def test_tf_matches_scalar():
    rng = np.random.default_rng(1)
    grid = np.sort(rng.uniform(0.0, 10.0, 37))
    queries = np.concatenate([
        rng.uniform(-1.0, 11.0, 60),
        grid[[0, 5, 36]],
    ]).reshape(3, 21)

    result = binary_val_tf(tf.constant(queries), tf.constant(grid)).numpy()

    assert result.shape == queries.shape
    assert result.dtype == np.int32
    expected = np.vectorize(lambda x: binary_val(x, grid))(queries)
    np.testing.assert_array_equal(result, expected)


# --- 2. Feasible Bracket ---

@pytest.mark.parametrize("ydepk, expected", [
    (4.0, 3),     # Exact hit: consume zero at K[3]
    (4.5, 3),     # Between points: step back below resources
    (100.0, 6),   # Richer than the whole grid
    (1.0, 0),
    (0.5, 0),     # Poorer than the whole grid: floored at 0
])
def test_feasible_upper_index(grid, ydepk, expected):
    assert feasible_upper_index(ydepk, grid) == expected


def test_feasible_upper_index_never_overspends(grid):
    for ydepk in np.linspace(1.0, 8.0, 41):
        khi = feasible_upper_index(ydepk, grid)
        assert grid[khi] <= ydepk
        if khi + 1 < len(grid):
            assert grid[khi + 1] > ydepk


def test_feasible_upper_index_tf_matches_scalar(grid):
    ydepk = np.array([[0.5, 1.0, 4.0], [4.5, 6.999, 100.0]])

    result = feasible_upper_index_tf(tf.constant(ydepk), tf.constant(grid)).numpy()

    expected = np.vectorize(lambda y: feasible_upper_index(y, grid))(ydepk)
    np.testing.assert_array_equal(result, expected)
