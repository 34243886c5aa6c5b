"""Fractal compute: ComputeBackend Protocol, complex grid builder, render pass.

The ComputeBackend Protocol abstracts the batch escape-time contract.
Two backends are auto-selected via try/except ImportError:
  Numba > NumPy
"""

from __future__ import annotations

import logging
import time
from typing import Protocol

import numpy as np

from escape_time import (
    JULIA_ITERATION_DIVISOR, FractalMode, ViewWindow, julia_reference,
)
from mandelbrot.coloring import colorize

logger = logging.getLogger(__name__)


class ComputeBackend(Protocol):
    """Protocol for pluggable escape-time compute backends."""

    def escape_counts(
        self,
        z0: np.ndarray,
        c: np.ndarray,
        max_iterations: int,
    ) -> np.ndarray:
        """Iterate z -> z^2 + c for every point of the grid.

        Args:
            z0: (H, W) complex128 starting values.
            c: (H, W) complex128 constants.
            max_iterations: Last iteration index checked (inclusive).

        Returns:
            (H, W) int32 array holding the first n with |z_n| > 2,
            or -1 where no escape happened.
        """
        ...


def build_complex_grid(window: ViewWindow, width: int, height: int) -> np.ndarray:
    """Map every canvas pixel to the complex plane.

    Uses the same arithmetic as escape_time.pixel_to_complex so the grid is
    bit-for-bit identical to the scalar mapping.

    Returns:
        (height, width) complex128 array; row index is y, column index is x.
    """
    xs = np.arange(width, dtype=np.float64)
    ys = np.arange(height, dtype=np.float64)
    re = window.x_min + (window.x_max - window.x_min) * (xs / width)
    im = window.y_min + (window.y_max - window.y_min) * (ys / height)

    grid = np.empty((height, width), dtype=np.complex128)
    grid.real = re[np.newaxis, :]
    grid.imag = im[:, np.newaxis]
    return grid


def render_pass(state, width: int, height: int, backend: ComputeBackend) -> np.ndarray:
    """Compute the color of every pixel for one state snapshot.

    All-or-nothing: the returned buffer is complete and read-only. Nothing
    is published until the caller installs it.

    Returns:
        (height, width, 4) uint8 RGBA pixel buffer.
    """
    t0 = time.perf_counter()
    grid = build_complex_grid(state.window, width, height)

    if state.mode is FractalMode.JULIA:
        c = julia_reference(state, width, height)
        if c is None:
            counts = np.full((height, width), -1, dtype=np.int32)
        else:
            counts = backend.escape_counts(
                grid, np.full_like(grid, c),
                state.max_iterations // JULIA_ITERATION_DIVISOR,
            )
    else:
        counts = backend.escape_counts(
            np.zeros_like(grid), grid, state.max_iterations,
        )

    t1 = time.perf_counter()
    buffer = colorize(counts, state.max_iterations, state.color_algorithm)
    buffer.flags.writeable = False

    logger.debug(
        "Render pass %dx%d (%s, %d iterations): compute %.1f ms, color %.1f ms",
        width, height, state.mode.value, state.max_iterations,
        (t1 - t0) * 1000, (time.perf_counter() - t1) * 1000,
    )
    return buffer


def get_default_backend() -> ComputeBackend:
    """Auto-select the best available compute backend.

    Priority: Numba > NumPy.
    """
    try:
        from mandelbrot._numba_backend import NumbaBackend
        logger.info("Using Numba compute backend")
        return NumbaBackend()
    except ImportError:
        pass

    from mandelbrot._numpy_backend import NumpyBackend
    logger.info("Using NumPy compute backend")
    return NumpyBackend()


BACKEND_NAMES = ("auto", "numba", "numpy")


def get_backend(name: str = "auto") -> ComputeBackend:
    """Return the backend registered under name.

    Raises:
        ImportError: numba was requested but is not installed.
        ValueError: name is not one of BACKEND_NAMES.
    """
    if name == "auto":
        return get_default_backend()
    if name == "numba":
        from mandelbrot._numba_backend import NumbaBackend
        return NumbaBackend()
    if name == "numpy":
        from mandelbrot._numpy_backend import NumpyBackend
        return NumpyBackend()
    raise ValueError(f"Unknown backend: {name!r}")
