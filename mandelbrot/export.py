"""Headless export: render one frame of the explorer to an image file.

Standalone script (not part of the GUI) that builds an engine from the
command line, runs a single synchronous render pass and saves the pixel
buffer through QImage.

Usage:
    python -m mandelbrot.export --output out.png [--width W] [--height H]
        [--max-iterations N] [--color NAME] [--julia RE IM]
        [--bounds XMIN XMAX YMIN YMAX] [--backend NAME]
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from PyQt6.QtGui import QImage

from escape_time import FractalMode, ViewWindow
from mandelbrot.coloring import ColorAlgorithm, rgba_to_qimage
from mandelbrot.compute import BACKEND_NAMES, get_backend
from mandelbrot.engine import FractalEngine
from mandelbrot.state import (
    DEFAULT_HEIGHT, DEFAULT_MAX_ITERATIONS, DEFAULT_WIDTH, RenderState,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a Mandelbrot or Julia set frame to an image file.",
    )
    parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Output image path; the format follows the suffix (e.g. .png)",
    )
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=DEFAULT_MAX_ITERATIONS,
        help=f"Iteration cap (default: {DEFAULT_MAX_ITERATIONS})",
    )
    parser.add_argument(
        "--color",
        choices=[algorithm.value for algorithm in ColorAlgorithm],
        default=ColorAlgorithm.DEFAULT.value,
    )
    parser.add_argument(
        "--julia",
        type=float,
        nargs=2,
        metavar=("RE", "IM"),
        default=None,
        help="Render the Julia set of c = RE + IM*i instead of the Mandelbrot set",
    )
    parser.add_argument(
        "--bounds",
        type=float,
        nargs=4,
        metavar=("XMIN", "XMAX", "YMIN", "YMAX"),
        default=None,
        help="View window in the complex plane (default: -2 1 -1 1)",
    )
    parser.add_argument(
        "--backend",
        choices=BACKEND_NAMES,
        default="auto",
        help="Compute backend (default: auto)",
    )
    return parser


def state_from_args(args: argparse.Namespace) -> RenderState:
    """Build the render snapshot described by parsed arguments.

    Raises:
        ValueError: Invalid bounds or iteration count.
    """
    if args.max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {args.max_iterations}")

    window = ViewWindow()
    if args.bounds is not None:
        window = ViewWindow(*args.bounds)
        if not window.is_valid():
            raise ValueError(f"Invalid bounds: {args.bounds}")

    mode = FractalMode.MANDELBROT
    constant = None
    if args.julia is not None:
        mode = FractalMode.JULIA
        constant = complex(*args.julia)

    return RenderState(
        window=window,
        max_iterations=args.max_iterations,
        color_algorithm=ColorAlgorithm.from_name(args.color),
        mode=mode,
        julia_constant=constant,
    )


def render_image(args: argparse.Namespace) -> QImage:
    """Render the frame described by args and return it as a QImage."""
    engine = FractalEngine(args.width, args.height, state_from_args(args))
    backend = get_backend(args.backend)

    t0 = time.monotonic()
    buffer = engine.render(backend)
    logger.info(
        "Rendered %dx%d %s frame in %.2f s",
        args.width, args.height, engine.mode().value, time.monotonic() - t0,
    )
    return rgba_to_qimage(buffer)


def main(argv=None) -> int:
    """CLI entry point for headless export."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        image = render_image(args)
    except ValueError as exc:
        parser.error(str(exc))

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if not image.save(str(output_path)):
        logger.error("Could not write image to %s", output_path)
        return 1

    logger.info("Saved %s", output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
