"""Render worker: QThread running one full render pass in the background.

The worker computes a pass for an immutable state snapshot and hands the
finished buffer back through a signal. Passes are never cancelled; the
view keeps showing the previous buffer until render_complete arrives.
"""

from __future__ import annotations

import logging
import time

from PyQt6.QtCore import QThread, pyqtSignal

from mandelbrot.compute import ComputeBackend, render_pass
from mandelbrot.state import RenderState

logger = logging.getLogger(__name__)


class RenderWorker(QThread):
    """Background worker for a single render pass."""

    # snapshot (RenderState), buffer (np.ndarray), elapsed_ms (float)
    render_complete = pyqtSignal(object, object, float)
    render_failed = pyqtSignal(object)  # snapshot

    def __init__(
        self,
        snapshot: RenderState,
        width: int,
        height: int,
        backend: ComputeBackend,
    ):
        super().__init__()
        self._snapshot = snapshot
        self._width = width
        self._height = height
        self._backend = backend

    def run(self) -> None:
        t0 = time.perf_counter()
        try:
            buffer = render_pass(
                self._snapshot, self._width, self._height, self._backend,
            )
        except Exception:
            logger.exception(
                "Render pass failed for %dx%d canvas", self._width, self._height,
            )
            self.render_failed.emit(self._snapshot)
            return

        elapsed_ms = (time.perf_counter() - t0) * 1000
        self.render_complete.emit(self._snapshot, buffer, elapsed_ms)
