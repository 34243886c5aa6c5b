"""Entry point for the Mandelbrot Explorer application.

Opens a fixed-size canvas over the complex plane:
- Drag to zoom in (left button) or out (right button)
- J switches between the Mandelbrot set and the Julia set of the
  point under the pointer
"""

import argparse
import logging
import sys

from PyQt6.QtWidgets import QApplication

from app_window import AppWindow
from mandelbrot.compute import BACKEND_NAMES, get_backend
from mandelbrot.state import DEFAULT_HEIGHT, DEFAULT_WIDTH


def build_parser():
    parser = argparse.ArgumentParser(
        description="Interactive Mandelbrot and Julia set explorer.",
    )
    parser.add_argument(
        "--width", type=int, default=DEFAULT_WIDTH,
        help=f"Canvas width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height", type=int, default=DEFAULT_HEIGHT,
        help=f"Canvas height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--backend", choices=BACKEND_NAMES, default="auto",
        help="Compute backend (default: auto)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging, including per-pass render timings.",
    )
    return parser


def main():
    parser = build_parser()
    args, qt_args = parser.parse_known_args()
    if args.width <= 0 or args.height <= 0:
        parser.error("canvas dimensions must be positive")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    app = QApplication([sys.argv[0]] + qt_args)
    backend = get_backend(args.backend)
    window = AppWindow(args.width, args.height, backend=backend)
    window.show()

    # Numba JIT warmup in background (if that backend is active)
    _warmup_numba(backend)

    sys.exit(app.exec())


def _warmup_numba(backend):
    """Trigger Numba JIT compilation in background if Numba is in use."""
    if type(backend).__name__ != "NumbaBackend":
        return

    from PyQt6.QtCore import QThread

    class WarmupThread(QThread):
        def run(self):
            backend.warmup()
            logging.getLogger(__name__).info("Numba JIT warmup complete")

    # Store reference to prevent GC
    _warmup_numba._thread = WarmupThread()
    _warmup_numba._thread.start()


if __name__ == "__main__":
    main()
