"""Tests for mandelbrot/compute.py: complex grid, render pass, backend selection.

The render pass is cross-validated against the scalar evaluator in
escape_time.py pixel by pixel.
"""

import numpy as np
import pytest

from escape_time import (
    BACKGROUND, FractalMode, ViewWindow, evaluate_pixel, pixel_to_complex,
)
from mandelbrot._numpy_backend import NumpyBackend
from mandelbrot.coloring import ColorAlgorithm
from mandelbrot.compute import (
    BACKEND_NAMES, build_complex_grid, get_backend, get_default_backend,
    render_pass,
)
from mandelbrot.state import RenderState


def _scalar_buffer(state, width, height):
    buffer = np.empty((height, width, 4), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            buffer[y, x] = evaluate_pixel(x, y, state, width, height)
    return buffer


class TestBuildComplexGrid:
    """Test the pixel grid mapping."""

    def test_shape_and_dtype(self):
        grid = build_complex_grid(ViewWindow(), 7, 5)
        assert grid.shape == (5, 7)
        assert grid.dtype == np.complex128

    def test_matches_scalar_mapping(self):
        window = ViewWindow(-0.8, -0.7, 0.05, 0.12)
        width, height = 13, 9
        grid = build_complex_grid(window, width, height)
        for y in range(height):
            for x in range(width):
                assert grid[y, x] == pixel_to_complex(x, y, window, width, height)

    def test_corner(self):
        grid = build_complex_grid(ViewWindow(), 4, 4)
        assert grid[0, 0] == complex(-2.0, -1.0)


class TestRenderPass:
    """Test full render passes against the scalar evaluator."""

    def test_default_4x4_corner_pixel(self):
        """Pixel (0, 0) maps to -2 - 1i, outside the radius before iterating."""
        for algorithm in ColorAlgorithm:
            state = RenderState(color_algorithm=algorithm)
            buffer = render_pass(state, 4, 4, NumpyBackend(n_workers=1))
            assert tuple(buffer[0, 0]) == algorithm.color(0.0)

    def test_output_is_read_only(self):
        buffer = render_pass(RenderState(), 8, 6, NumpyBackend(n_workers=1))
        assert buffer.shape == (6, 8, 4)
        assert not buffer.flags.writeable

    @pytest.mark.parametrize("algorithm", list(ColorAlgorithm))
    def test_mandelbrot_matches_scalar(self, algorithm):
        state = RenderState(max_iterations=60, color_algorithm=algorithm)
        buffer = render_pass(state, 24, 16, NumpyBackend(n_workers=2))
        np.testing.assert_array_equal(buffer, _scalar_buffer(state, 24, 16))

    def test_zoomed_mandelbrot_matches_scalar(self):
        state = RenderState(
            window=ViewWindow(-0.76, -0.72, 0.08, 0.12), max_iterations=200,
        )
        buffer = render_pass(state, 20, 20, NumpyBackend(n_workers=3))
        np.testing.assert_array_equal(buffer, _scalar_buffer(state, 20, 20))

    def test_julia_matches_scalar(self):
        state = RenderState(
            window=ViewWindow(-1.5, 1.5, -1.0, 1.0), max_iterations=300,
            mode=FractalMode.JULIA, julia_constant=-0.8 + 0.156j,
            color_algorithm=ColorAlgorithm.LCH,
        )
        buffer = render_pass(state, 24, 16, NumpyBackend(n_workers=2))
        np.testing.assert_array_equal(buffer, _scalar_buffer(state, 24, 16))

    def test_julia_without_reference_is_background(self):
        state = RenderState(mode=FractalMode.JULIA)
        buffer = render_pass(state, 8, 6, NumpyBackend(n_workers=1))
        assert np.all(buffer == np.array(BACKGROUND, dtype=np.uint8))

    def test_julia_cap_is_not_a_truncation(self):
        """c = 0.2504 escapes from 0 only after ~150 steps: background at cap 50."""
        state = RenderState(
            window=ViewWindow(-1.0, 1.0, -1.0, 1.0), max_iterations=500,
            mode=FractalMode.JULIA, julia_constant=0.2504 + 0j,
        )
        buffer = render_pass(state, 10, 10, NumpyBackend(n_workers=1))
        assert tuple(buffer[5, 5]) == BACKGROUND

    def test_julia_reference_pixel_maps_through_window(self):
        """Pixel (6, 4) of a zoomed 24x16 window renders as its mapped constant."""
        window = ViewWindow(-1.0, 0.5, -0.6, 0.4)
        backend = NumpyBackend(n_workers=2)
        by_pixel = RenderState(
            window=window, mode=FractalMode.JULIA, reference_pixel=(6, 4),
        )
        by_constant = RenderState(
            window=window, mode=FractalMode.JULIA,
            julia_constant=pixel_to_complex(6, 4, window, 24, 16),
        )
        np.testing.assert_array_equal(
            render_pass(by_pixel, 24, 16, backend),
            render_pass(by_constant, 24, 16, backend),
        )
        np.testing.assert_array_equal(
            render_pass(by_pixel, 24, 16, backend),
            _scalar_buffer(by_pixel, 24, 16),
        )


class TestBackendSelection:
    """Test backend lookup."""

    def test_default_backend_has_escape_counts(self):
        backend = get_default_backend()
        assert hasattr(backend, 'escape_counts')

    def test_numpy_by_name(self):
        assert isinstance(get_backend("numpy"), NumpyBackend)

    def test_auto_in_names(self):
        assert "auto" in BACKEND_NAMES

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            get_backend("cuda")
