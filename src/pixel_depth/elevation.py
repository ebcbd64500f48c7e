"""
Elevation Mapping Module

Assigns every pixel a discrete elevation tier from its color, its background
membership and its position relative to two rectangular regions.

Rules, evaluated in this exact order:
1. Transparent pixel (alpha == 0)           -> 0
2. Background color                         -> 0
3. Dark pixel inside the focus region       -> peak (L3)
4. Dark pixel inside the center region      -> mid  (L2)
5. Dark pixel anywhere else                 -> low  (L1)
6. Bright pixel                             -> mid  (L2)

A pixel is dark when its normalized brightness is below the configured
threshold. With the default configuration the focus and center regions
coincide, so rule 4 never fires; the order is kept as is.
"""

import logging
from typing import Dict, Optional
import numpy as np
from numba import njit

from .background import BackgroundColorSet, BackgroundDetector
from .color import brightness_map
from .config import ElevationConfig
from .ingestion import PixelBuffer

logger = logging.getLogger(__name__)


@njit(cache=True)
def _assign_tiers(
    luma: np.ndarray,
    opacity: np.ndarray,
    background: np.ndarray,
    focus: np.ndarray,
    center: np.ndarray,
    threshold: float,
    low: int,
    mid: int,
    peak: int
) -> np.ndarray:
    """
    Tier kernel.

    Args:
        luma: (H, W) normalized brightness
        opacity: (H, W) alpha values (255 for images without alpha)
        background: (H, W) background membership mask
        focus: Inclusive focus bounds (x0, x1, y0, y1)
        center: Inclusive center bounds (x0, x1, y0, y1)
        threshold: Darkness threshold
        low, mid, peak: Tier heights

    Returns:
        int32 array of shape (H, W)
    """
    h = luma.shape[0]
    w = luma.shape[1]
    tiers = np.zeros((h, w), dtype=np.int32)

    for y in range(h):
        in_focus_y = focus[2] <= y and y <= focus[3]
        in_center_y = center[2] <= y and y <= center[3]

        for x in range(w):
            if opacity[y, x] == 0:
                continue
            if background[y, x]:
                continue

            is_dark = luma[y, x] < threshold

            if is_dark and in_focus_y and focus[0] <= x and x <= focus[1]:
                tiers[y, x] = peak
            elif is_dark and in_center_y and center[0] <= x and x <= center[1]:
                tiers[y, x] = mid
            elif is_dark:
                tiers[y, x] = low
            else:
                tiers[y, x] = mid

    return tiers


class ElevationMap:
    """
    Read-only grid of elevation tiers, one entry per pixel.

    Stored row-major as an (H, W) array; tier(x, y) is O(1).
    """

    def __init__(self, tiers: np.ndarray):
        self._tiers = np.array(tiers, dtype=np.int32, copy=True)
        self._tiers.setflags(write=False)

    @property
    def width(self) -> int:
        return self._tiers.shape[1]

    @property
    def height(self) -> int:
        return self._tiers.shape[0]

    @property
    def grid(self) -> np.ndarray:
        """The (H, W) tier array (read-only)."""
        return self._tiers

    def tier(self, x: int, y: int) -> int:
        """Tier of the pixel at column x, row y."""
        return int(self._tiers[y, x])

    def __eq__(self, other) -> bool:
        if not isinstance(other, ElevationMap):
            return NotImplemented
        return np.array_equal(self._tiers, other._tiers)

    @property
    def max_tier(self) -> int:
        return int(self._tiers.max()) if self._tiers.size else 0

    def histogram(self) -> Dict[int, int]:
        """Pixel count per tier value."""
        values, counts = np.unique(self._tiers, return_counts=True)
        return {int(v): int(c) for v, c in zip(values, counts)}

    def tobytes(self) -> bytes:
        """Serialized grid, used to compare maps byte for byte."""
        return self._tiers.tobytes()


class ElevationMapper:
    """
    Computes the ElevationMap of an image.

    Attributes:
        config: Tier heights, darkness threshold and region bounds
    """

    def __init__(self, config: Optional[ElevationConfig] = None):
        self.config = config or ElevationConfig()

    def map(
        self,
        pixels: PixelBuffer,
        background: Optional[BackgroundColorSet] = None
    ) -> ElevationMap:
        """
        Assign a tier to every pixel.

        Args:
            pixels: Source image
            background: Background colors (detected from the image if None)

        Returns:
            ElevationMap of shape (H, W)
        """
        if background is None:
            background = BackgroundDetector().detect(pixels)

        cfg = self.config
        focus = np.array(cfg.focus.to_pixels(pixels.width, pixels.height), dtype=np.int64)
        center = np.array(cfg.center.to_pixels(pixels.width, pixels.height), dtype=np.int64)

        tiers = _assign_tiers(
            brightness_map(np.ascontiguousarray(pixels.rgb)),
            np.ascontiguousarray(pixels.opacity()),
            background.mask(pixels),
            focus,
            center,
            float(cfg.brightness_threshold),
            int(cfg.low),
            int(cfg.mid),
            int(cfg.peak),
        )

        elevation = ElevationMap(tiers)
        logger.debug("Tier histogram: %s", elevation.histogram())
        return elevation
