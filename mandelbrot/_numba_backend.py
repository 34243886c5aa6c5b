"""Numba JIT-compiled backend for escape-time computation.

Every pixel is an independent prange work item, so the loop spreads across
Numba's thread pool with one thread per core. Importing this module fails
without numba installed; get_default_backend() then picks the NumPy
backend instead.
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit, prange

from escape_time import ESCAPE_RADIUS


@njit(parallel=True, cache=True)
def _escape_counts_numba(z0, c, max_iterations, escape_radius):
    """Numba-compiled parallel escape-time loop over a flat point array.

    Iterates real and imaginary parts separately and tests the modulus
    with hypot, matching the scalar complex arithmetic.

    Returns an int32 array of first escape iterations, -1 for none.
    """
    n_points = z0.shape[0]
    counts = np.full(n_points, -1, dtype=np.int32)

    for i in prange(n_points):
        zr = z0[i].real
        zi = z0[i].imag
        cr = c[i].real
        ci = c[i].imag
        for n in range(max_iterations + 1):
            if math.hypot(zr, zi) > escape_radius:
                counts[i] = n
                break
            zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci

    return counts


class NumbaBackend:
    """Numba JIT-compiled parallel compute backend."""

    def escape_counts(
        self,
        z0: np.ndarray,
        c: np.ndarray,
        max_iterations: int,
    ) -> np.ndarray:
        """Escape iteration for every point; -1 where none within the cap."""
        shape = z0.shape
        flat_z0 = np.ascontiguousarray(z0, dtype=np.complex128).ravel()
        flat_c = np.ascontiguousarray(
            np.broadcast_to(np.asarray(c, dtype=np.complex128), shape),
        ).ravel()
        counts = _escape_counts_numba(
            flat_z0, flat_c, int(max_iterations), ESCAPE_RADIUS,
        )
        return counts.reshape(shape)

    @staticmethod
    def warmup() -> None:
        """Trigger JIT compilation with a tiny problem."""
        z0 = np.zeros(4, dtype=np.complex128)
        c = np.array([0.0, 0.5, 1.0, 3.0], dtype=np.complex128)
        _escape_counts_numba(z0, c, 5, ESCAPE_RADIUS)
