"""Render state snapshot and the pure commands that replace it.

RenderState is immutable. Every command is a function from the current
snapshot to a new one; the engine swaps snapshots, so the render pass and
the overlay always read a consistent state without locks.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from escape_time import FractalMode, ViewWindow
from mandelbrot.coloring import ColorAlgorithm


# Canvas size used by the explorer window and the export CLI
DEFAULT_WIDTH = 1366
DEFAULT_HEIGHT = 768

DEFAULT_MAX_ITERATIONS = 500

# Iteration preset bound to the "low iterations" command
LOW_ITERATIONS = 5

# Smallest step used by the increase/decrease iteration commands
MIN_ITERATION_STEP = 2


@dataclass(frozen=True)
class RenderState:
    """Everything besides canvas size that determines a pixel's color.

    The Julia constant comes from reference_pixel when one is recorded:
    the pixel is mapped through the current window at render time, so it
    follows the view across zooms. julia_constant is a fixed c used only
    when no pixel has been recorded.
    """

    window: ViewWindow = field(default_factory=ViewWindow)
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    color_algorithm: ColorAlgorithm = ColorAlgorithm.DEFAULT
    mode: FractalMode = FractalMode.MANDELBROT
    reference_pixel: tuple[int, int] | None = None
    julia_constant: complex | None = None


def with_window(state: RenderState, window: ViewWindow) -> RenderState:
    return replace(state, window=window)


def with_max_iterations(state: RenderState, max_iterations: int) -> RenderState:
    return replace(state, max_iterations=max_iterations)


def with_adjusted_iterations(state: RenderState, delta: int) -> RenderState:
    """Add delta to the iteration cap. No floor is applied."""
    return replace(state, max_iterations=state.max_iterations + delta)


def with_toggled_mode(state: RenderState) -> RenderState:
    if state.mode is FractalMode.MANDELBROT:
        return replace(state, mode=FractalMode.JULIA)
    return replace(state, mode=FractalMode.MANDELBROT)


def with_next_color(state: RenderState) -> RenderState:
    return replace(state, color_algorithm=state.color_algorithm.next())


def with_reference_pixel(state: RenderState, x: int, y: int) -> RenderState:
    return replace(state, reference_pixel=(x, y))


def iteration_step(max_iterations: int) -> int:
    """Step for the increase/decrease commands: a tenth, at least 2."""
    return max(MIN_ITERATION_STEP, max_iterations // 10)


def clamp_iteration_delta(max_iterations: int, delta: int) -> int:
    """Shrink a negative delta so the resulting cap stays >= 1."""
    return max(delta, 1 - max_iterations)
