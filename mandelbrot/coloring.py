"""Color mapping pipeline: iteration ratio to RGBA, escape counts to buffer.

Five color algorithms map a normalized iteration ratio in [0, 1] to RGBA
bytes. Every algorithm is vectorized over numpy arrays so a whole escape
count grid is colored in one call; the scalar ColorAlgorithm.color() runs
the same code on a one-element array.
"""

from __future__ import annotations

import math
from enum import Enum

import numpy as np
from PyQt6.QtGui import QImage

from escape_time import BACKGROUND


# CIE D65 reference white (2 degree observer)
D65_WHITE = (0.95047, 1.0, 1.08883)

# Linear XYZ -> linear sRGB
XYZ_TO_SRGB = np.array([
    [3.2404542, -1.5371385, -0.4985314],
    [-0.9692660, 1.8760108, 0.0415560],
    [0.0556434, -0.2040259, 1.0572252],
], dtype=np.float64)

_LAB_DELTA = 6.0 / 29.0


class ColorAlgorithm(Enum):
    """Selectable ratio -> color algorithms, cycled in declaration order."""

    DEFAULT = "Default"
    LCH = "LCH"
    HSV = "HSV"
    HSL = "HSL"
    GRAYSCALE = "Grayscale"

    def next(self) -> ColorAlgorithm:
        members = list(ColorAlgorithm)
        return members[(members.index(self) + 1) % len(members)]

    def colorize_ratios(self, ratios: np.ndarray) -> np.ndarray:
        """Map an array of ratios to a (..., 4) uint8 RGBA array."""
        ratios = np.asarray(ratios, dtype=np.float64)
        return _ALGORITHMS[self](ratios)

    def color(self, ratio: float) -> tuple[int, int, int, int]:
        """Map a single ratio to an (r, g, b, a) tuple."""
        rgba = self.colorize_ratios(np.array([ratio], dtype=np.float64))[0]
        return tuple(int(v) for v in rgba)

    @classmethod
    def from_name(cls, name: str) -> ColorAlgorithm:
        """Look up an algorithm by display name, case-insensitively."""
        for member in cls:
            if member.value.lower() == name.lower():
                return member
        raise ValueError(f"Unknown color algorithm: {name!r}")


# ---------------------------------------------------------------------------
# Channel helpers
# ---------------------------------------------------------------------------

def _pack_rgba(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Pack unit-range float channels into opaque RGBA bytes.

    Channels are clipped to [0, 1] and truncated after scaling by 255.
    """
    rgba = np.empty(r.shape + (4,), dtype=np.uint8)
    rgba[..., 0] = (np.clip(r, 0.0, 1.0) * 255.0).astype(np.uint8)
    rgba[..., 1] = (np.clip(g, 0.0, 1.0) * 255.0).astype(np.uint8)
    rgba[..., 2] = (np.clip(b, 0.0, 1.0) * 255.0).astype(np.uint8)
    rgba[..., 3] = 255
    return rgba


def _ratio_hue(ratios: np.ndarray) -> np.ndarray:
    """Hue in degrees shared by the LCH, HSV and HSL algorithms."""
    return np.mod((ratios * 360.0) ** 1.5, 360.0)


def _chroma_to_rgb(
    hue: np.ndarray, chroma: np.ndarray, m: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Hexcone sector decomposition shared by HSV and HSL.

    hue in degrees, chroma and offset m in unit range.
    """
    h_sector = np.mod(hue, 360.0) / 60.0
    sector = h_sector.astype(np.int32) % 6
    x = chroma * (1.0 - np.abs(np.mod(h_sector, 2.0) - 1.0))
    zero = np.zeros_like(chroma)

    r = np.select(
        [sector == 0, sector == 1, sector == 2, sector == 3, sector == 4],
        [chroma, x, zero, zero, x], default=chroma,
    )
    g = np.select(
        [sector == 0, sector == 1, sector == 2, sector == 3, sector == 4],
        [x, chroma, chroma, x, zero], default=zero,
    )
    b = np.select(
        [sector == 0, sector == 1, sector == 2, sector == 3, sector == 4],
        [zero, zero, x, chroma, chroma], default=x,
    )
    return r + m, g + m, b + m


def hsv_to_rgb(hue, saturation, value):
    """HSV (hue in degrees, s and v nominally in [0, 1]) to RGB.

    Out-of-range s and v are not clamped; the channels overshoot the unit
    range accordingly.
    """
    hue = np.asarray(hue, dtype=np.float64)
    chroma = np.asarray(value * saturation, dtype=np.float64)
    m = np.asarray(value - chroma, dtype=np.float64)
    return _chroma_to_rgb(hue, chroma, m)


def hsl_to_rgb(hue, saturation, lightness):
    """HSL (hue in degrees, s and l nominally in [0, 1]) to RGB, unclamped."""
    hue = np.asarray(hue, dtype=np.float64)
    lightness = np.asarray(lightness, dtype=np.float64)
    chroma = (1.0 - np.abs(2.0 * lightness - 1.0)) * saturation
    m = lightness - chroma / 2.0
    return _chroma_to_rgb(hue, chroma, m)


def _lab_f_inv(t: np.ndarray) -> np.ndarray:
    return np.where(
        t > _LAB_DELTA,
        t ** 3,
        3.0 * _LAB_DELTA ** 2 * (t - 4.0 / 29.0),
    )


def _srgb_gamma(linear: np.ndarray) -> np.ndarray:
    linear = np.clip(linear, 0.0, 1.0)
    return np.where(
        linear <= 0.0031308,
        12.92 * linear,
        1.055 * linear ** (1.0 / 2.4) - 0.055,
    )


def lch_to_rgb(lightness, chroma, hue):
    """CIE LCh(ab) under D65 (L in [0, 100], hue in degrees) to sRGB.

    Out-of-gamut results are clipped channel-wise.
    """
    lightness = np.asarray(lightness, dtype=np.float64)
    hue_rad = np.radians(hue)
    a = chroma * np.cos(hue_rad)
    b = chroma * np.sin(hue_rad)

    fy = (lightness + 16.0) / 116.0
    fx = fy + a / 500.0
    fz = fy - b / 200.0

    xyz = np.stack([
        D65_WHITE[0] * _lab_f_inv(fx),
        D65_WHITE[1] * _lab_f_inv(fy),
        D65_WHITE[2] * _lab_f_inv(fz),
    ], axis=-1)
    linear = xyz @ XYZ_TO_SRGB.T
    srgb = _srgb_gamma(linear)
    return srgb[..., 0], srgb[..., 1], srgb[..., 2]


# ---------------------------------------------------------------------------
# Algorithms
# ---------------------------------------------------------------------------

def grayscale_colors(ratios: np.ndarray) -> np.ndarray:
    """Binary threshold: black for ratios above 0.99, white otherwise."""
    rgba = np.full(ratios.shape + (4,), 255, dtype=np.uint8)
    rgba[ratios > 0.99, :3] = 0
    return rgba


def default_colors(ratios: np.ndarray) -> np.ndarray:
    """Raw channel bytes: R from a stretched ratio, G fixed, B linear."""
    rgba = np.empty(ratios.shape + (4,), dtype=np.uint8)
    red = np.mod((ratios * 360.0) ** 1.5, 255.0)
    rgba[..., 0] = np.clip(red, 0.0, 255.0).astype(np.uint8)
    rgba[..., 1] = 100
    rgba[..., 2] = np.clip(ratios * 255.0, 0.0, 255.0).astype(np.uint8)
    rgba[..., 3] = 255
    return rgba


def lch_colors(ratios: np.ndarray) -> np.ndarray:
    v = 1.0 - np.cos(math.pi * ratios) ** 2
    lightness = 75.0 - 75.0 * v
    chroma = 28.0 + 75.0 - 75.0 * v
    return _pack_rgba(*lch_to_rgb(lightness, chroma, _ratio_hue(ratios)))


def hsv_colors(ratios: np.ndarray) -> np.ndarray:
    # s = 100, v = r * 100 on a unit scale; _pack_rgba clips the overshoot
    return _pack_rgba(*hsv_to_rgb(_ratio_hue(ratios), 100.0, ratios * 100.0))


def hsl_colors(ratios: np.ndarray) -> np.ndarray:
    # s = 50, l = r * 100 on a unit scale; _pack_rgba clips the overshoot
    return _pack_rgba(*hsl_to_rgb(_ratio_hue(ratios), 50.0, ratios * 100.0))


_ALGORITHMS = {
    ColorAlgorithm.DEFAULT: default_colors,
    ColorAlgorithm.LCH: lch_colors,
    ColorAlgorithm.HSV: hsv_colors,
    ColorAlgorithm.HSL: hsl_colors,
    ColorAlgorithm.GRAYSCALE: grayscale_colors,
}


# ---------------------------------------------------------------------------
# Buffers
# ---------------------------------------------------------------------------

def colorize(
    counts: np.ndarray,
    max_iterations: int,
    algorithm: ColorAlgorithm,
) -> np.ndarray:
    """Map an escape count grid to an RGBA pixel buffer.

    Args:
        counts: (H, W) int array; -1 marks points that never escaped.
        max_iterations: Normalizer for the iteration ratio.
        algorithm: Color algorithm applied to escaped points.

    Returns:
        (H, W, 4) uint8 RGBA array, background where counts < 0.
    """
    escaped = counts >= 0
    ratios = np.where(escaped, counts, 0) / max_iterations
    rgba = algorithm.colorize_ratios(ratios)
    rgba[~escaped] = BACKGROUND
    return rgba


def rgba_to_qimage(rgba: np.ndarray) -> QImage:
    """Create a QImage over an RGBA pixel buffer with GC safety.

    Args:
        rgba: (H, W, 4) uint8 RGBA array. Read-only buffers are copied.

    Returns:
        QImage with Format_RGBA8888. The numpy array is attached to the
        QImage as _numpy_ref to prevent garbage collection.
    """
    h, w = rgba.shape[:2]
    data = np.require(rgba, dtype=np.uint8, requirements=["C", "W"])
    image = QImage(data.data, w, h, 4 * w, QImage.Format.Format_RGBA8888)
    image._numpy_ref = data
    return image
