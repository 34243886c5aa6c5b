"""Fractal canvas: pixel buffer display with drag-to-zoom and info overlay.

Displays the last completed pixel buffer at 1:1 scale. Dragging with the
left button zooms in on the selection, dragging with the right button
zooms out. Pointer motion is reported so the view can update the Julia
reference point. Keyboard shortcuts are translated to command names and
emitted; the view applies them to the engine.
"""

from __future__ import annotations

import numpy as np
from PyQt6.QtCore import Qt, QRectF, pyqtSignal
from PyQt6.QtGui import QPainter, QColor, QPen, QFont, QFontMetrics
from PyQt6.QtWidgets import QWidget

from escape_time import (
    FractalMode, complex_to_pixel, julia_reference, pixel_to_complex,
)
from mandelbrot.coloring import rgba_to_qimage
from mandelbrot.controls import (
    CMD_CYCLE_COLOR, CMD_FEWER_ITERATIONS, CMD_LOW_ITERATIONS,
    CMD_MORE_ITERATIONS, CMD_QUIT, CMD_RESET, CMD_TOGGLE_INFO,
    CMD_TOGGLE_MODE,
)
from mandelbrot.state import RenderState


KEY_BINDINGS = {
    Qt.Key.Key_Q: CMD_MORE_ITERATIONS,
    Qt.Key.Key_A: CMD_FEWER_ITERATIONS,
    Qt.Key.Key_L: CMD_LOW_ITERATIONS,
    Qt.Key.Key_J: CMD_TOGGLE_MODE,
    Qt.Key.Key_R: CMD_RESET,
    Qt.Key.Key_C: CMD_CYCLE_COLOR,
    Qt.Key.Key_I: CMD_TOGGLE_INFO,
}

# Selection rectangle
SELECTION_OUTLINE = QColor(255, 0, 0)
SELECTION_FILL = QColor(0, 0, 0, 50)

# Info overlay
OVERLAY_PADDING = 5
OVERLAY_BACKGROUND = QColor(0, 0, 0, 150)
OVERLAY_TEXT = QColor(255, 255, 255)

# Julia reference marker
MARKER_SIZE = 5


def overlay_lines(state: RenderState, width: int, height: int) -> list[str]:
    """Text lines for the info overlay on a width x height canvas."""
    x_min, x_max, y_min, y_max = state.window.as_tuple()
    lines = [
        f"X {x_min} -> {x_max}",
        f"Y {y_min} -> {y_max}",
        f"Iters: {state.max_iterations}, Color: {state.color_algorithm.value}",
    ]
    if state.mode is FractalMode.JULIA:
        ref = julia_reference(state, width, height)
        if ref is None:
            lines.append("Julia: move the pointer to pick c")
        else:
            lines.append(f"Julia: c = {ref.real:.6f} {ref.imag:+.6f}i")
    return lines


class FractalCanvas(QWidget):
    """Widget that displays the pixel buffer and handles zoom interactions."""

    # (x, y) press point, (x, y) release point, zoom_out
    zoom_requested = pyqtSignal(object, object, bool)
    pointer_moved = pyqtSignal(int, int)
    command_requested = pyqtSignal(str)

    def __init__(self, width: int, height: int, parent=None):
        super().__init__(parent)
        self._canvas_width = width
        self._canvas_height = height
        self.setFixedSize(width, height)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setCursor(Qt.CursorShape.CrossCursor)

        # Display state
        self._current_image = None
        self._state: RenderState | None = None
        self._show_info = False

        # Rectangle selection state
        self._selecting = False
        self._select_zoom_out = False
        self._select_anchor: tuple[int, int] | None = None
        self._select_rect: QRectF | None = None

        # Hover tracking
        self._hover_point: complex | None = None

    # -- Public interface --

    def display(self, buffer: np.ndarray) -> None:
        """Show a completed (H, W, 4) RGBA pixel buffer."""
        self._current_image = rgba_to_qimage(buffer)
        self.update()

    def set_state(self, state: RenderState) -> None:
        """Update the snapshot used for the overlay and hover readout."""
        self._state = state
        self.update()

    @property
    def show_info(self) -> bool:
        return self._show_info

    def set_show_info(self, show: bool) -> None:
        self._show_info = show
        self.update()

    @property
    def hover_point(self) -> complex | None:
        """Complex coordinate under the pointer, if known."""
        return self._hover_point

    # -- Helpers --

    def _clamp_to_canvas(self, x: float, y: float) -> tuple[int, int]:
        cx = min(max(int(x), 0), self._canvas_width - 1)
        cy = min(max(int(y), 0), self._canvas_height - 1)
        return cx, cy

    def _draw_overlay(self, painter: QPainter) -> None:
        """Draw the translucent info box in the top-left corner."""
        lines = overlay_lines(
            self._state, self._canvas_width, self._canvas_height,
        )
        font = QFont("Monospace", 11)
        font.setStyleHint(QFont.StyleHint.TypeWriter)
        painter.setFont(font)
        fm = QFontMetrics(font)

        line_height = fm.height()
        max_width = max(fm.horizontalAdvance(line) for line in lines)
        background = QRectF(
            0, 0,
            max_width + OVERLAY_PADDING * 2,
            line_height * len(lines) + OVERLAY_PADDING * 2,
        )
        painter.fillRect(background, OVERLAY_BACKGROUND)

        painter.setPen(OVERLAY_TEXT)
        for i, line in enumerate(lines):
            baseline = OVERLAY_PADDING + line_height * i + fm.ascent()
            painter.drawText(OVERLAY_PADDING, int(baseline), line)

    def _draw_reference_marker(self, painter: QPainter) -> None:
        """Mark the Julia constant's position on the canvas."""
        ref = julia_reference(
            self._state, self._canvas_width, self._canvas_height,
        )
        if ref is None:
            return
        px, py = complex_to_pixel(
            ref, self._state.window, self._canvas_width, self._canvas_height,
        )
        if not (0 <= px < self._canvas_width and 0 <= py < self._canvas_height):
            return
        pen = QPen(QColor(255, 255, 255, 200))
        pen.setWidth(1)
        painter.setPen(pen)
        ipx, ipy = round(px), round(py)
        painter.drawLine(ipx - MARKER_SIZE, ipy, ipx + MARKER_SIZE, ipy)
        painter.drawLine(ipx, ipy - MARKER_SIZE, ipx, ipy + MARKER_SIZE)

    # -- Qt events --

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, False)
        painter.fillRect(self.rect(), QColor(0, 0, 0))

        if self._current_image is None:
            painter.setPen(QColor(100, 100, 120))
            painter.drawText(
                self.rect(),
                Qt.AlignmentFlag.AlignCenter,
                "Rendering...",
            )
            painter.end()
            return

        painter.drawImage(0, 0, self._current_image)

        if (self._state is not None
                and self._state.mode is FractalMode.JULIA
                and not self._selecting):
            self._draw_reference_marker(painter)

        # Selection rectangle (while dragging)
        if self._selecting and self._select_rect is not None:
            painter.setPen(QPen(SELECTION_OUTLINE))
            painter.setBrush(SELECTION_FILL)
            painter.drawRect(self._select_rect)

        if self._show_info and self._state is not None:
            self._draw_overlay(painter)

        painter.end()

    def mousePressEvent(self, event):
        button = event.button()
        if button not in (Qt.MouseButton.LeftButton, Qt.MouseButton.RightButton):
            return
        pos = event.position()
        self._selecting = True
        self._select_zoom_out = button == Qt.MouseButton.RightButton
        self._select_anchor = self._clamp_to_canvas(pos.x(), pos.y())
        self._select_rect = None

    def mouseMoveEvent(self, event):
        pos = event.position()
        x, y = self._clamp_to_canvas(pos.x(), pos.y())

        if self._state is not None:
            self._hover_point = pixel_to_complex(
                x, y, self._state.window,
                self._canvas_width, self._canvas_height,
            )
        self.pointer_moved.emit(x, y)

        if self._selecting and self._select_anchor is not None:
            ax, ay = self._select_anchor
            self._select_rect = QRectF(
                min(ax, x), min(ay, y), abs(x - ax) + 1, abs(y - ay) + 1,
            )
            self.update()

    def mouseReleaseEvent(self, event):
        button = event.button()
        if not self._selecting or button not in (
            Qt.MouseButton.LeftButton, Qt.MouseButton.RightButton,
        ):
            return

        pos = event.position()
        release = self._clamp_to_canvas(pos.x(), pos.y())
        anchor = self._select_anchor
        zoom_out = self._select_zoom_out

        self._selecting = False
        self._select_anchor = None
        self._select_rect = None
        self.update()

        if anchor is not None:
            self.zoom_requested.emit(anchor, release, zoom_out)

    def wheelEvent(self, event):
        # Zooming is done by rectangle selection only.
        event.ignore()

    def keyPressEvent(self, event):
        key = event.key()

        if key == Qt.Key.Key_Escape:
            if self._selecting:
                # Cancel rectangle selection
                self._selecting = False
                self._select_anchor = None
                self._select_rect = None
                self.update()
            else:
                self.command_requested.emit(CMD_QUIT)
            return

        command = KEY_BINDINGS.get(key)
        if command is None:
            super().keyPressEvent(event)
            return
        self.command_requested.emit(command)
