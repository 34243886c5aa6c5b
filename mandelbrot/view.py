"""Fractal view: orchestrates engine, canvas, controls and render worker.

This is the main coordinator of the explorer. It:
- Applies canvas and control commands to the engine
- Polls the engine's dirty flag on a frame timer
- Launches one RenderWorker per pass on an immutable state snapshot
- Installs completed buffers in the engine and hands them to the canvas

Only one pass runs at a time and passes are never cancelled: the canvas
keeps showing the previous buffer until the next pass completes.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QWidget, QHBoxLayout

from mandelbrot.canvas import FractalCanvas
from mandelbrot.compute import ComputeBackend, get_default_backend
from mandelbrot.controls import (
    CMD_CYCLE_COLOR, CMD_FEWER_ITERATIONS, CMD_LOW_ITERATIONS,
    CMD_MORE_ITERATIONS, CMD_QUIT, CMD_RESET, CMD_TOGGLE_INFO,
    CMD_TOGGLE_MODE, FractalControls,
)
from mandelbrot.engine import FractalEngine
from mandelbrot.state import LOW_ITERATIONS, clamp_iteration_delta, iteration_step
from mandelbrot.worker import RenderWorker

logger = logging.getLogger(__name__)

# Frame timer interval; each tick starts a pass if the engine is dirty
FRAME_TICK_MS = 16


class FractalView(QWidget):
    """Complete explorer: canvas + controls + background rendering."""

    def __init__(
        self,
        width: int,
        height: int,
        backend: ComputeBackend | None = None,
        parent=None,
    ):
        super().__init__(parent)

        self._backend = backend if backend is not None else get_default_backend()
        self.engine = FractalEngine(width, height)

        self.canvas = FractalCanvas(width, height)
        self.controls = FractalControls()

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.canvas)
        layout.addWidget(self.controls)

        # Worker state
        self._worker: RenderWorker | None = None
        self._failed_snapshot = None
        self.last_render_ms: float | None = None

        # Wire signals
        self.canvas.zoom_requested.connect(self._on_zoom_requested)
        self.canvas.pointer_moved.connect(self._on_pointer_moved)
        self.canvas.command_requested.connect(self.apply_command)
        self.controls.command_requested.connect(self.apply_command)

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(FRAME_TICK_MS)
        self._frame_timer.timeout.connect(self._on_frame_tick)
        self._frame_timer.start()

        self._sync_widgets()
        self.canvas.setFocus()

    @property
    def backend(self) -> ComputeBackend:
        return self._backend

    @property
    def is_rendering(self) -> bool:
        return self._worker is not None

    # -- Commands --

    def apply_command(self, command: str) -> None:
        """Apply a named command from the keyboard or the control panel."""
        engine = self.engine
        if command == CMD_MORE_ITERATIONS:
            engine.adjust_max_iterations(iteration_step(engine.max_iterations()))
        elif command == CMD_FEWER_ITERATIONS:
            current = engine.max_iterations()
            delta = clamp_iteration_delta(current, -iteration_step(current))
            engine.adjust_max_iterations(delta)
        elif command == CMD_LOW_ITERATIONS:
            engine.set_max_iterations(LOW_ITERATIONS)
        elif command == CMD_TOGGLE_MODE:
            engine.toggle_mode()
        elif command == CMD_CYCLE_COLOR:
            engine.cycle_color()
        elif command == CMD_RESET:
            engine.reset()
        elif command == CMD_TOGGLE_INFO:
            self.canvas.set_show_info(not self.canvas.show_info)
            self.controls.set_info_checked(self.canvas.show_info)
        elif command == CMD_QUIT:
            self.window().close()
            return
        else:
            logger.warning("Unknown command %r", command)
            return
        self._sync_widgets()

    def _on_zoom_requested(self, press, release, zoom_out: bool) -> None:
        if self.engine.zoom(press, release, zoom_out):
            self._sync_widgets()

    def _on_pointer_moved(self, x: int, y: int) -> None:
        self.engine.set_reference_point(x, y)
        self.canvas.set_state(self.engine.state)

    def _sync_widgets(self) -> None:
        state = self.engine.state
        self.canvas.set_state(state)
        self.controls.update_state(state)

    # -- Render pipeline --

    def _on_frame_tick(self) -> None:
        """Start a pass if the engine is dirty and no pass is in flight."""
        if self._worker is not None or not self.engine.is_dirty():
            return
        if self.engine.state is self._failed_snapshot:
            return

        snapshot = self.engine.begin_pass()
        self._worker = RenderWorker(
            snapshot, self.engine.width, self.engine.height, self._backend,
        )
        self._worker.render_complete.connect(self._on_render_complete)
        self._worker.render_failed.connect(self._on_render_failed)
        self._worker.finished.connect(self._on_worker_finished)
        self._worker.start()

    def _on_render_complete(self, snapshot, buffer, elapsed_ms: float) -> None:
        self.engine.complete_pass(snapshot, buffer)
        self.last_render_ms = elapsed_ms
        self.canvas.display(buffer)
        logger.debug("Render pass finished in %.1f ms", elapsed_ms)

    def _on_render_failed(self, snapshot) -> None:
        # Keep the previous buffer and do not retry the same snapshot;
        # the next command produces a new snapshot and a fresh attempt.
        logger.warning(
            "Keeping previous frame after failed pass (%d iterations)",
            snapshot.max_iterations,
        )
        self._failed_snapshot = snapshot

    def _on_worker_finished(self) -> None:
        """Worker thread has exited; release it so the next pass can start."""
        sender = self.sender()
        if sender is self._worker:
            self._worker = None
        if sender is not None:
            sender.deleteLater()

    def shutdown(self) -> None:
        """Stop the frame timer and wait for an in-flight pass."""
        self._frame_timer.stop()
        if self._worker is not None:
            self._worker.wait(5000)
