"""App window: hosts the fractal view and a status bar.

The status bar shows the complex coordinate under the pointer, the last
render time and the active compute backend.
"""

import logging

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QMainWindow, QStatusBar, QLabel

from mandelbrot.view import FractalView

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Mandelbrot Explorer"

# Status label refresh interval
STATUS_REFRESH_MS = 100


class AppWindow(QMainWindow):
    """Top-level explorer window."""

    def __init__(self, width: int, height: int, backend=None):
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.fractal_view = FractalView(width, height, backend=backend)
        self.setCentralWidget(self.fractal_view)

        # --- Status bar ---
        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)

        self._coord_label = QLabel()
        self._render_label = QLabel()
        self._backend_label = QLabel()

        backend_name = type(self.fractal_view.backend).__name__
        self._backend_label.setText(f"  Backend: {backend_name}  ")

        self._status_bar.addWidget(self._coord_label)
        self._status_bar.addWidget(self._render_label)
        self._status_bar.addWidget(self._backend_label)

        self._status_timer = QTimer(self)
        self._status_timer.setInterval(STATUS_REFRESH_MS)
        self._status_timer.timeout.connect(self._update_status)
        self._status_timer.start()

        logger.info("Explorer window %dx%d, backend %s", width, height, backend_name)

    def _update_status(self):
        """Refresh the hover coordinate and render status labels."""
        point = self.fractal_view.canvas.hover_point
        if point is not None:
            self._coord_label.setText(
                f"  re={point.real:.6g}  im={point.imag:.6g}  "
            )

        if self.fractal_view.is_rendering:
            self._render_label.setText("  Rendering...  ")
        elif self.fractal_view.last_render_ms is not None:
            self._render_label.setText(
                f"  Last pass: {self.fractal_view.last_render_ms:.0f} ms  "
            )

    def closeEvent(self, event):
        self._status_timer.stop()
        self.fractal_view.shutdown()
        super().closeEvent(event)
