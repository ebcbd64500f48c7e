"""
Color Math Module

Handles:
- Hex <-> RGB conversion ("#rrggbb" strings used for face shading)
- Percentage-based lighten/darken, channel by channel
- Perceived brightness (BT.601 luma weights) for single colors and images

Shading arithmetic is integer-exact so that rendered output is reproducible:
    darken(c, p)  = floor(c * (100 - p) / 100)
    lighten(c, p) = min(255, floor(c * (100 + p) / 100))
"""

from typing import Tuple
import math
import numpy as np
from numba import njit, prange

RGB = Tuple[int, int, int]

# BT.601 luma weights
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114


def _clamp_channel(value: float) -> int:
    return max(0, min(255, int(value)))


def hex_to_rgb(hex_color: str) -> RGB:
    """
    Parse a "#rrggbb" (or "rrggbb", or short "#rgb") string.

    Args:
        hex_color: Hex color string, case-insensitive

    Returns:
        (r, g, b) tuple of ints
    """
    value = hex_color.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    try:
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    except ValueError:
        raise ValueError(f"Invalid hex color: {hex_color!r}") from None


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Format an RGB triple as a lowercase "#rrggbb" string."""
    return "#{:02x}{:02x}{:02x}".format(
        _clamp_channel(r), _clamp_channel(g), _clamp_channel(b)
    )


def darken_channel(c: int, percent: float) -> int:
    return _clamp_channel(math.floor(c * (100 - percent) / 100))


def lighten_channel(c: int, percent: float) -> int:
    return _clamp_channel(min(255, math.floor(c * (100 + percent) / 100)))


def darken_rgb(color: RGB, percent: float) -> RGB:
    """Darken each channel by a percentage."""
    return tuple(darken_channel(c, percent) for c in color)


def lighten_rgb(color: RGB, percent: float) -> RGB:
    """Lighten each channel by a percentage, saturating at 255."""
    return tuple(lighten_channel(c, percent) for c in color)


def darken(hex_color: str, percent: float) -> str:
    """
    Darken a hex color.

    Args:
        hex_color: Base color, e.g. "#C8640A"
        percent: Darkening percentage (20 = 80% of each channel)

    Returns:
        Darkened color as "#rrggbb"
    """
    return rgb_to_hex(*darken_rgb(hex_to_rgb(hex_color), percent))


def lighten(hex_color: str, percent: float) -> str:
    """
    Lighten a hex color.

    Args:
        hex_color: Base color, e.g. "#C8640A"
        percent: Lightening percentage (15 = 115% of each channel)

    Returns:
        Lightened color as "#rrggbb"
    """
    return rgb_to_hex(*lighten_rgb(hex_to_rgb(hex_color), percent))


def brightness(r: int, g: int, b: int) -> float:
    """
    Perceived brightness of a color normalized to [0, 1].

    Formula: (0.299*R + 0.587*G + 0.114*B) / 255
    """
    return (LUMA_R * r + LUMA_G * g + LUMA_B * b) / 255.0


@njit(cache=True, parallel=True)
def brightness_map(rgb: np.ndarray) -> np.ndarray:
    """
    Per-pixel brightness of an image.

    Args:
        rgb: Array of shape (H, W, 3) with uint8 values

    Returns:
        float64 array of shape (H, W) with values in [0, 1]
    """
    h = rgb.shape[0]
    w = rgb.shape[1]
    result = np.empty((h, w), dtype=np.float64)

    for y in prange(h):
        for x in range(w):
            r = float(rgb[y, x, 0])
            g = float(rgb[y, x, 1])
            b = float(rgb[y, x, 2])
            result[y, x] = (0.299 * r + 0.587 * g + 0.114 * b) / 255.0

    return result
