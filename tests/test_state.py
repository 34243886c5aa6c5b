"""Tests for mandelbrot/state.py: RenderState snapshot and pure commands."""

import pytest

from escape_time import FractalMode, ViewWindow
from mandelbrot.coloring import ColorAlgorithm
from mandelbrot.state import (
    DEFAULT_HEIGHT, DEFAULT_MAX_ITERATIONS, DEFAULT_WIDTH, RenderState,
    clamp_iteration_delta, iteration_step, with_adjusted_iterations,
    with_max_iterations, with_next_color, with_reference_pixel,
    with_toggled_mode, with_window,
)


class TestRenderState:
    """Test RenderState frozen dataclass."""

    def test_defaults(self):
        state = RenderState()
        assert state.window == ViewWindow()
        assert state.max_iterations == DEFAULT_MAX_ITERATIONS == 500
        assert state.color_algorithm is ColorAlgorithm.DEFAULT
        assert state.mode is FractalMode.MANDELBROT
        assert state.reference_pixel is None
        assert state.julia_constant is None

    def test_immutable(self):
        state = RenderState()
        with pytest.raises(AttributeError):
            state.max_iterations = 10

    def test_equal_snapshots(self):
        assert RenderState() == RenderState()

    def test_canvas_defaults(self):
        assert (DEFAULT_WIDTH, DEFAULT_HEIGHT) == (1366, 768)


class TestCommands:
    """Commands return a new snapshot and leave the old one untouched."""

    def test_with_window(self):
        state = RenderState()
        window = ViewWindow(-1.0, 0.0, -0.5, 0.5)
        new = with_window(state, window)
        assert new.window is window
        assert state.window == ViewWindow()

    def test_with_max_iterations(self):
        assert with_max_iterations(RenderState(), 5).max_iterations == 5

    def test_with_adjusted_iterations(self):
        state = with_adjusted_iterations(RenderState(), 50)
        assert state.max_iterations == 550

    def test_adjusted_iterations_has_no_floor(self):
        state = with_adjusted_iterations(RenderState(max_iterations=5), -10)
        assert state.max_iterations == -5

    def test_toggle_mode_round_trip(self):
        state = RenderState()
        julia = with_toggled_mode(state)
        assert julia.mode is FractalMode.JULIA
        assert with_toggled_mode(julia).mode is FractalMode.MANDELBROT

    def test_next_color(self):
        state = with_next_color(RenderState())
        assert state.color_algorithm is ColorAlgorithm.LCH

    def test_with_reference_pixel(self):
        state = with_reference_pixel(RenderState(), 3, 4)
        assert state.reference_pixel == (3, 4)
        assert state.julia_constant is None
        assert state.mode is FractalMode.MANDELBROT

    def test_commands_preserve_other_fields(self):
        state = RenderState(
            max_iterations=42, color_algorithm=ColorAlgorithm.HSL,
            mode=FractalMode.JULIA, julia_constant=0.3j,
        )
        new = with_window(state, ViewWindow(0.0, 1.0, 0.0, 1.0))
        assert new.max_iterations == 42
        assert new.color_algorithm is ColorAlgorithm.HSL
        assert new.mode is FractalMode.JULIA
        assert new.julia_constant == 0.3j


class TestIterationStep:
    """Test the increase/decrease step helpers."""

    @pytest.mark.parametrize("n, expected", [
        (500, 50), (100, 10), (29, 2), (10, 2), (5, 2), (1, 2),
    ])
    def test_step(self, n, expected):
        assert iteration_step(n) == expected

    def test_clamp_keeps_cap_positive(self):
        assert clamp_iteration_delta(2, -2) == -1
        assert clamp_iteration_delta(1, -2) == 0

    def test_clamp_leaves_safe_delta(self):
        assert clamp_iteration_delta(500, -50) == -50
        assert clamp_iteration_delta(5, 2) == 2
