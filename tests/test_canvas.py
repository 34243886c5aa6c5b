"""Tests for mandelbrot/canvas.py: overlay text and key bindings."""

from PyQt6.QtCore import Qt

from escape_time import FractalMode, ViewWindow
from mandelbrot.canvas import KEY_BINDINGS, overlay_lines
from mandelbrot.coloring import ColorAlgorithm
from mandelbrot.controls import (
    CMD_CYCLE_COLOR, CMD_FEWER_ITERATIONS, CMD_LOW_ITERATIONS,
    CMD_MORE_ITERATIONS, CMD_RESET, CMD_TOGGLE_INFO, CMD_TOGGLE_MODE,
)
from mandelbrot.state import RenderState


class TestOverlayLines:
    """Test the info overlay content."""

    def test_default_state(self):
        assert overlay_lines(RenderState(), 300, 200) == [
            "X -2.0 -> 1.0",
            "Y -1.0 -> 1.0",
            "Iters: 500, Color: Default",
        ]

    def test_color_name(self):
        lines = overlay_lines(RenderState(color_algorithm=ColorAlgorithm.LCH), 300, 200)
        assert lines[2] == "Iters: 500, Color: LCH"

    def test_julia_without_reference(self):
        lines = overlay_lines(RenderState(mode=FractalMode.JULIA), 300, 200)
        assert len(lines) == 4
        assert lines[3] == "Julia: move the pointer to pick c"

    def test_julia_constant_shown(self):
        state = RenderState(mode=FractalMode.JULIA, julia_constant=-0.8 + 0.156j)
        assert overlay_lines(state, 300, 200)[3] == "Julia: c = -0.800000 +0.156000i"

    def test_julia_reference_pixel_mapped(self):
        state = RenderState(mode=FractalMode.JULIA, reference_pixel=(0, 0))
        assert overlay_lines(state, 300, 200)[3] == "Julia: c = -2.000000 -1.000000i"

    def test_julia_reference_pixel_follows_window(self):
        state = RenderState(
            window=ViewWindow(-1.25, 0.25, -0.5, 0.5),
            mode=FractalMode.JULIA, reference_pixel=(0, 0),
        )
        assert overlay_lines(state, 100, 100)[3] == "Julia: c = -1.250000 -0.500000i"


class TestKeyBindings:
    """Test keyboard shortcut table."""

    def test_bindings(self):
        assert KEY_BINDINGS == {
            Qt.Key.Key_Q: CMD_MORE_ITERATIONS,
            Qt.Key.Key_A: CMD_FEWER_ITERATIONS,
            Qt.Key.Key_L: CMD_LOW_ITERATIONS,
            Qt.Key.Key_J: CMD_TOGGLE_MODE,
            Qt.Key.Key_R: CMD_RESET,
            Qt.Key.Key_C: CMD_CYCLE_COLOR,
            Qt.Key.Key_I: CMD_TOGGLE_INFO,
        }
