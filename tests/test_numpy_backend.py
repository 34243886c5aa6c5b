"""Tests for mandelbrot/_numpy_backend.py: vectorized escape counts.

Verifies that the vectorized and banded loops agree with the scalar
escape_time.escape_iteration implementation.
"""

import numpy as np
import pytest

from escape_time import ViewWindow, escape_iteration
from mandelbrot._numpy_backend import (
    NumpyBackend, escape_counts_banded, escape_counts_vectorized,
)
from mandelbrot.compute import build_complex_grid


def _scalar_counts(z0, c, max_iterations):
    counts = np.empty(z0.shape, dtype=np.int32)
    for index in np.ndindex(z0.shape):
        n = escape_iteration(complex(z0[index]), complex(c[index]), max_iterations)
        counts[index] = -1 if n is None else n
    return counts


class TestEscapeCountsVectorized:
    """Cross-validate the vectorized loop against the scalar loop."""

    def test_known_points(self):
        c = np.array([0.0, 1.0, -2.0, 3.0, -1.0 + 1.0j], dtype=np.complex128)
        z0 = np.zeros_like(c)
        counts = escape_counts_vectorized(z0, c, 100)
        expected = [
            escape_iteration(0j, complex(ci), 100) for ci in c
        ]
        assert counts.tolist() == [-1 if n is None else n for n in expected]

    def test_c_equal_one_escapes_at_three(self):
        counts = escape_counts_vectorized(
            np.zeros(1, dtype=np.complex128), np.ones(1, dtype=np.complex128), 10,
        )
        assert counts[0] == 3

    def test_matches_scalar_on_grid(self):
        grid = build_complex_grid(ViewWindow(), 32, 24)
        counts = escape_counts_vectorized(np.zeros_like(grid), grid, 80)
        np.testing.assert_array_equal(
            counts, _scalar_counts(np.zeros_like(grid), grid, 80),
        )

    def test_julia_grid_matches_scalar(self):
        grid = build_complex_grid(ViewWindow(-1.5, 1.5, -1.0, 1.0), 20, 14)
        c = np.full_like(grid, 0.285 + 0.01j)
        counts = escape_counts_vectorized(grid, c, 60)
        np.testing.assert_array_equal(counts, _scalar_counts(grid, c, 60))

    def test_preserves_shape_and_dtype(self):
        z0 = np.zeros((3, 5), dtype=np.complex128)
        counts = escape_counts_vectorized(z0, z0 + 0.5, 10)
        assert counts.shape == (3, 5)
        assert counts.dtype == np.int32

    def test_does_not_mutate_inputs(self):
        z0 = np.zeros(4, dtype=np.complex128)
        c = np.array([0.1, 0.5, 1.0, 3.0], dtype=np.complex128)
        escape_counts_vectorized(z0, c, 20)
        assert np.all(z0 == 0)


class TestEscapeCountsBanded:
    """Banded evaluation must equal a single vectorized pass."""

    @pytest.mark.parametrize("n_workers", [1, 2, 3, 8, 64])
    def test_matches_single_pass(self, n_workers):
        grid = build_complex_grid(ViewWindow(), 30, 17)
        z0 = np.zeros_like(grid)
        expected = escape_counts_vectorized(z0, grid, 50)
        counts = escape_counts_banded(z0, grid, 50, n_workers)
        np.testing.assert_array_equal(counts, expected)


class TestNumpyBackend:
    """Test the backend wrapper."""

    def test_default_worker_count(self):
        assert NumpyBackend().n_workers >= 1

    def test_worker_count_floor(self):
        assert NumpyBackend(n_workers=0).n_workers == 1

    def test_escape_counts(self):
        grid = build_complex_grid(ViewWindow(), 12, 8)
        counts = NumpyBackend(n_workers=2).escape_counts(np.zeros_like(grid), grid, 40)
        assert counts.shape == (8, 12)
        assert counts[0, 0] == 0
