"""
RGB <-> HSV conversions on 8-bit channel values.
"""

import math
from typing import Sequence, Tuple

HSV = Tuple[float, float, float]
RGB = Tuple[int, int, int]


def normalize_hue(hue: float) -> float:
    """Wrap a hue angle into [0, 360)."""
    hue = hue % 360.0
    if hue >= 360.0:
        return 0.0
    return hue


def rgb_to_hsv(r: int, g: int, b: int) -> HSV:
    """
    Convert 8-bit RGB to HSV.

    Args:
        r, g, b: Channel values in 0-255

    Returns:
        (hue in [0, 360), saturation in [0, 1], value in [0, 1])
    """
    rp = r / 255.0
    gp = g / 255.0
    bp = b / 255.0

    c_max = max(rp, gp, bp)
    c_min = min(rp, gp, bp)
    delta = c_max - c_min

    # Red is checked before green before blue when channels tie
    if delta == 0:
        h = 0.0
    elif c_max == rp:
        h = 60.0 * (((gp - bp) / delta) % 6.0)
    elif c_max == gp:
        h = 60.0 * ((bp - rp) / delta + 2.0)
    else:
        h = 60.0 * ((rp - gp) / delta + 4.0)

    s = 0.0 if c_max == 0 else delta / c_max

    return normalize_hue(h), s, c_max


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """
    Convert HSV back to 8-bit RGB.

    Hue is not validated. Anything outside [0, 360) lands in the last
    sector; use normalize_hue() first if the hue may be out of range.
    """
    c = v * s
    sector = h / 60.0
    x = c * (1.0 - abs(math.fmod(sector, 2.0) - 1.0))
    m = v - c

    if 0.0 <= sector < 1.0:
        r, g, b = c, x, 0.0
    elif 1.0 <= sector < 2.0:
        r, g, b = x, c, 0.0
    elif 2.0 <= sector < 3.0:
        r, g, b = 0.0, c, x
    elif 3.0 <= sector < 4.0:
        r, g, b = 0.0, x, c
    elif 4.0 <= sector < 5.0:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    return _to_byte(r + m), _to_byte(g + m), _to_byte(b + m)


def saturate(color: Sequence[int], factor: float = 2.0) -> Tuple[int, ...]:
    """Scale a color's HSV saturation by factor, capped at 1. Extra channels pass through."""
    h, s, v = rgb_to_hsv(color[0], color[1], color[2])
    rgb = hsv_to_rgb(h, min(s * factor, 1.0), v)
    return rgb + tuple(color[3:])


def _to_byte(channel: float) -> int:
    return min(max(int(channel * 255.0), 0), 255)
