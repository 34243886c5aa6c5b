"""Fractal engine: command/query surface over the render state.

The engine owns the current RenderState snapshot, the dirty flag and the
last completed pixel buffer. Input handlers mutate it only through the
command methods; renderers and overlays read it through the queries.

Render passes are split into begin_pass() / complete_pass() so a pass can
run on another thread against an immutable snapshot. A command issued while
a pass is in flight keeps the engine dirty; the finished buffer is still
installed and the change shows up on the next pass.
"""

from __future__ import annotations

import logging

import numpy as np

from escape_time import FractalMode, julia_reference
from mandelbrot.coloring import ColorAlgorithm
from mandelbrot.compute import ComputeBackend, render_pass
from mandelbrot.state import (
    RenderState,
    with_adjusted_iterations,
    with_max_iterations,
    with_next_color,
    with_reference_pixel,
    with_toggled_mode,
    with_window,
)
from mandelbrot.zoom import zoom_window

logger = logging.getLogger(__name__)


class FractalEngine:
    """Mandelbrot/Julia explorer state machine for a fixed-size canvas."""

    def __init__(
        self,
        width: int,
        height: int,
        initial_state: RenderState | None = None,
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas must be non-empty, got {width}x{height}")
        self._width = width
        self._height = height
        self._state = initial_state if initial_state is not None else RenderState()
        self._dirty = True
        self._generation = 0
        self._pass_generation: int | None = None
        self._buffer: np.ndarray | None = None

    def _apply(self, state: RenderState, *, dirty: bool = True) -> None:
        self._state = state
        if dirty:
            self._dirty = True
            self._generation += 1

    # -- Commands --

    def zoom(self, point_a, point_b, zoom_out: bool) -> bool:
        """Zoom on the rectangle spanned by two screen points.

        Returns False (and leaves the state untouched) for a degenerate
        selection or when the window would exceed double precision.
        """
        window = zoom_window(
            self._state.window, point_a, point_b, zoom_out,
            self._width, self._height,
        )
        if window is None:
            logger.debug("Ignoring zoom between %s and %s", point_a, point_b)
            return False
        self._apply(with_window(self._state, window))
        logger.debug("Zoom %s -> %s", "out" if zoom_out else "in", window)
        return True

    def set_max_iterations(self, max_iterations: int) -> None:
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        self._apply(with_max_iterations(self._state, max_iterations))

    def adjust_max_iterations(self, delta: int) -> None:
        """Add delta to the iteration cap. The caller keeps the result >= 1."""
        self._apply(with_adjusted_iterations(self._state, delta))

    def toggle_mode(self) -> None:
        self._apply(with_toggled_mode(self._state))
        logger.info("Switched to %s mode", self._state.mode.value)

    def cycle_color(self) -> None:
        self._apply(with_next_color(self._state))

    def reset(self) -> None:
        """Restore the default view window and render state."""
        self._apply(RenderState())

    def set_reference_point(self, x: int, y: int) -> None:
        """Record the pointer pixel that selects the Julia constant.

        The pixel is kept as-is and mapped through whatever window is
        current when a pass renders. Only marks the engine dirty while in
        Julia mode.
        """
        self._apply(
            with_reference_pixel(self._state, x, y),
            dirty=self._state.mode is FractalMode.JULIA,
        )

    # -- Queries --

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def state(self) -> RenderState:
        """Current immutable snapshot."""
        return self._state

    def bounds(self) -> tuple[float, float, float, float]:
        """(x_min, x_max, y_min, y_max) of the current window."""
        return self._state.window.as_tuple()

    def max_iterations(self) -> int:
        return self._state.max_iterations

    def color_algorithm(self) -> ColorAlgorithm:
        return self._state.color_algorithm

    def mode(self) -> FractalMode:
        return self._state.mode

    def julia_reference(self) -> complex | None:
        """Julia constant under the current window, or None."""
        return julia_reference(self._state, self._width, self._height)

    def reference_pixel(self) -> tuple[int, int] | None:
        return self._state.reference_pixel

    def is_dirty(self) -> bool:
        return self._dirty

    def pixel_buffer(self) -> np.ndarray | None:
        """Last completed (height, width, 4) RGBA buffer, or None."""
        return self._buffer

    # -- Render passes --

    def begin_pass(self) -> RenderState:
        """Snapshot the state for a render pass."""
        self._pass_generation = self._generation
        return self._state

    def complete_pass(self, snapshot: RenderState, buffer: np.ndarray) -> None:
        """Install the buffer produced for snapshot.

        The dirty flag clears only if no pixel-affecting command arrived
        since begin_pass().
        """
        expected = (self._height, self._width, 4)
        if buffer.shape != expected:
            raise ValueError(
                f"Pixel buffer shape {buffer.shape} does not match {expected}"
            )
        if buffer.flags.writeable:
            buffer.flags.writeable = False

        self._buffer = buffer
        logger.debug(
            "Installed %dx%d buffer (%s, %d iterations)",
            self._width, self._height,
            snapshot.mode.value, snapshot.max_iterations,
        )
        if self._pass_generation == self._generation:
            self._dirty = False
        else:
            logger.debug("State changed during render pass, staying dirty")
        self._pass_generation = None

    def render(self, backend: ComputeBackend) -> np.ndarray:
        """Run a full render pass synchronously and install the result."""
        snapshot = self.begin_pass()
        buffer = render_pass(snapshot, self._width, self._height, backend)
        self.complete_pass(snapshot, buffer)
        return buffer
