"""NumPy vectorized escape-time backend.

All still-iterating points of a band advance through each iteration
simultaneously. Escaped points are compacted out of the working arrays, so
late iterations only touch the points that are still bounded.

The canvas is split into horizontal bands that run on a thread pool sized
to the CPU count (NumPy releases the GIL inside its array kernels). Each
band writes a disjoint slice of the output grid, so no locking is needed.
"""

from __future__ import annotations

import os
from multiprocessing.pool import ThreadPool

import numpy as np

from escape_time import ESCAPE_RADIUS


class NumpyBackend:
    """Pure NumPy vectorized escape-time compute backend."""

    def __init__(self, n_workers: int | None = None):
        if n_workers is None:
            n_workers = os.cpu_count() or 1
        self.n_workers = max(1, n_workers)

    def escape_counts(
        self,
        z0: np.ndarray,
        c: np.ndarray,
        max_iterations: int,
    ) -> np.ndarray:
        """Escape iteration for every point; -1 where none within the cap."""
        return escape_counts_banded(z0, c, max_iterations, self.n_workers)


def escape_counts_vectorized(
    z0: np.ndarray,
    c: np.ndarray,
    max_iterations: int,
) -> np.ndarray:
    """Escape iteration for an arbitrary-shaped block of points.

    Checks |z_n| > 2 for n = 0 .. max_iterations inclusive, then
    advances z_{n+1} = z_n^2 + c for the points still bounded.

    Real and imaginary parts are iterated as separate float64 arrays and
    the modulus is taken with hypot, the same operations Python's complex
    arithmetic performs, so counts match escape_time.escape_iteration.

    Returns:
        int32 array with the shape of z0.
    """
    shape = z0.shape
    z0 = np.asarray(z0, dtype=np.complex128).ravel()
    cs = np.broadcast_to(np.asarray(c, dtype=np.complex128), shape).ravel()
    zr = z0.real.copy()
    zi = z0.imag.copy()
    cr = cs.real.copy()
    ci = cs.imag.copy()
    counts = np.full(zr.size, -1, dtype=np.int32)
    index = np.arange(zr.size)

    with np.errstate(over="ignore", invalid="ignore"):
        for n in range(max_iterations + 1):
            escaped = np.hypot(zr, zi) > ESCAPE_RADIUS
            if escaped.any():
                counts[index[escaped]] = n
                bounded = ~escaped
                index = index[bounded]
                zr, zi = zr[bounded], zi[bounded]
                cr, ci = cr[bounded], ci[bounded]
            if index.size == 0:
                break
            zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci

    return counts.reshape(shape)


def escape_counts_banded(
    z0: np.ndarray,
    c: np.ndarray,
    max_iterations: int,
    n_workers: int,
) -> np.ndarray:
    """Split a (H, W) grid into row bands and evaluate them in parallel.

    Args:
        z0: (H, W) complex128 starting values.
        c: (H, W) complex128 constants.
        max_iterations: Last iteration index checked (inclusive).
        n_workers: Thread count; 1 runs the bands sequentially.

    Returns:
        (H, W) int32 escape counts.
    """
    height = z0.shape[0]
    counts = np.empty(z0.shape, dtype=np.int32)
    bands = [b for b in np.array_split(np.arange(height), n_workers) if b.size]

    def run_band(rows: np.ndarray) -> tuple[slice, np.ndarray]:
        band = slice(int(rows[0]), int(rows[-1]) + 1)
        return band, escape_counts_vectorized(z0[band], c[band], max_iterations)

    if n_workers <= 1 or len(bands) <= 1:
        for rows in bands:
            band, result = run_band(rows)
            counts[band] = result
        return counts

    with ThreadPool(min(n_workers, len(bands))) as pool:
        for band, result in pool.imap_unordered(run_band, bands):
            counts[band] = result

    return counts
