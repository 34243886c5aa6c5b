"""Escape-time core: view window, pixel mapping and per-pixel iteration.

Scalar reference implementation of the Mandelbrot and Julia escape-time
rules. The batch backends in mandelbrot/ must agree with these functions
pixel for pixel (see tests/test_compute.py for cross-validation).
"""

import math
from dataclasses import dataclass
from enum import Enum

# |z| beyond this radius is guaranteed to diverge
ESCAPE_RADIUS = 2.0

# Julia renders run on a tenth of the Mandelbrot iteration budget
JULIA_ITERATION_DIVISOR = 10

BACKGROUND = (0, 0, 0, 255)


class FractalMode(Enum):
    """Which escape-time rule colors the canvas."""

    MANDELBROT = "Mandelbrot"
    JULIA = "Julia"


@dataclass(frozen=True)
class ViewWindow:
    """Rectangular region of the complex plane mapped onto the canvas."""

    x_min: float = -2.0
    x_max: float = 1.0
    y_min: float = -1.0
    y_max: float = 1.0

    @property
    def span_x(self) -> float:
        return self.x_max - self.x_min

    @property
    def span_y(self) -> float:
        return self.y_max - self.y_min

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.x_min, self.x_max, self.y_min, self.y_max

    def is_valid(self) -> bool:
        """True when all bounds are finite and both spans are positive."""
        return (
            all(math.isfinite(v) for v in self.as_tuple())
            and self.x_min < self.x_max
            and self.y_min < self.y_max
        )


def pixel_to_complex(x, y, window, width, height):
    """Map a pixel coordinate to its point in the complex plane.

    Pixel (0, 0) maps to (x_min, y_min); y grows downward on screen and
    toward y_max in the plane.
    """
    re = window.x_min + (window.x_max - window.x_min) * (x / width)
    im = window.y_min + (window.y_max - window.y_min) * (y / height)
    return complex(re, im)


def complex_to_pixel(point, window, width, height):
    """Inverse of pixel_to_complex. Returns fractional (x, y)."""
    x = (point.real - window.x_min) / (window.x_max - window.x_min) * width
    y = (point.imag - window.y_min) / (window.y_max - window.y_min) * height
    return x, y


def escape_iteration(z0, c, cap):
    """Return the first n in [0, cap] with |z_n| > 2, or None.

    z_{n+1} = z_n^2 + c, starting from z0.
    """
    z = z0
    for n in range(cap + 1):
        if abs(z) > ESCAPE_RADIUS:
            return n
        z = z * z + c
    return None


def julia_reference(state, width, height):
    """Julia constant c for a state on a width x height canvas, or None.

    A recorded reference pixel is mapped through the state's current
    window, so c moves with the view when zooming. Without one, the
    state's fixed julia_constant (possibly None) is returned.
    """
    if state.reference_pixel is not None:
        x, y = state.reference_pixel
        return pixel_to_complex(x, y, state.window, width, height)
    return state.julia_constant


def evaluate_pixel(x, y, state, width, height):
    """Compute the RGBA color of one pixel under the state's mode.

    Pure function of (pixel, state); safe to call for any pixel in any
    order.
    """
    point = pixel_to_complex(x, y, state.window, width, height)

    if state.mode is FractalMode.JULIA:
        c = julia_reference(state, width, height)
        if c is None:
            return BACKGROUND
        n = escape_iteration(
            point, c, state.max_iterations // JULIA_ITERATION_DIVISOR,
        )
    else:
        n = escape_iteration(0j, point, state.max_iterations)

    if n is None:
        return BACKGROUND
    return state.color_algorithm.color(n / state.max_iterations)
