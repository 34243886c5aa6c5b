"""Zoom transform: selection rectangle + zoom direction -> new view window.

The scale factor comes from the selection's width alone and applies to
both axes, so the window keeps its aspect ratio. Zooming in shrinks the
span to the selected fraction of the canvas; zooming out grows it by
2 - fraction, approaching 2x for a near-zero selection.
"""

from __future__ import annotations

from dataclasses import dataclass

from escape_time import ViewWindow


@dataclass(frozen=True)
class SelectionRect:
    """Axis-aligned screen rectangle in whole canvas pixels.

    Width and height count pixels inclusively, so the rectangle spanning
    columns 25 through 74 is 50 pixels wide.
    """

    left: int
    top: int
    width: int
    height: int

    @property
    def center(self) -> tuple[int, int]:
        """Center pixel, rounded down on even sizes."""
        return self.left + self.width // 2, self.top + self.height // 2


def selection_rect(point_a, point_b) -> SelectionRect | None:
    """Rectangle enclosing two (x, y) screen points.

    Returns None when the points share a row or a column: such a drag
    selects no area and is not a zoom.
    """
    ax, ay = (int(v) for v in point_a)
    bx, by = (int(v) for v in point_b)
    if ax == bx or ay == by:
        return None
    return SelectionRect(
        min(ax, bx), min(ay, by), abs(bx - ax) + 1, abs(by - ay) + 1,
    )


def zoom_scale(rect_width: float, canvas_width: int, zoom_out: bool) -> float:
    """Factor applied to the window spans."""
    fraction = rect_width / canvas_width
    if zoom_out:
        return 2.0 - fraction
    return fraction


def zoom_window(
    window: ViewWindow,
    point_a,
    point_b,
    zoom_out: bool,
    width: int,
    height: int,
) -> ViewWindow | None:
    """Compute the view window after zooming on a selection.

    The new center is the selection center's fractional position within
    the canvas, blended into the current window independently per axis.

    Returns:
        The new ViewWindow, or None when the selection is degenerate or
        the result is not a valid window (precision limit reached).
    """
    rect = selection_rect(point_a, point_b)
    if rect is None:
        return None

    scale = zoom_scale(rect.width, width, zoom_out)
    center_px, center_py = rect.center

    span_x = window.span_x
    span_y = window.span_y
    new_center_x = window.x_min + span_x * (center_px / width)
    new_center_y = window.y_min + span_y * (center_py / height)

    new_window = ViewWindow(
        x_min=new_center_x - span_x * scale * 0.5,
        x_max=new_center_x + span_x * scale * 0.5,
        y_min=new_center_y - span_y * scale * 0.5,
        y_max=new_center_y + span_y * scale * 0.5,
    )
    if not new_window.is_valid():
        return None
    return new_window
