"""
Pipeline Configuration

All tunables of the depth pipeline live in immutable dataclasses that are
passed explicitly into each stage:
- Region: fractional rectangle inside the image
- ElevationConfig: tier heights, darkness threshold, center/focus regions
- RenderConfig: projection angle, extrusion depth, padding, face shading
"""

from dataclasses import dataclass, field
from typing import Tuple
import math


# Tier heights
TIER_FLAT = 0
TIER_LOW = 7
TIER_MID = 10
TIER_PEAK = 15

# Shown when the caller has no owner to display
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEFAULT_IDENTIFIER = "0"


@dataclass(frozen=True)
class Region:
    """
    Axis-aligned rectangle expressed as fractions of the image size.

    Bounds resolve to pixels with floor(size * fraction) and are inclusive
    on both ends.
    """

    x_start: float = 0.33
    x_end: float = 0.66
    y_start: float = 0.40
    y_end: float = 0.80

    def __post_init__(self):
        for name in ("x_start", "x_end", "y_start", "y_end"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Region.{name} must be within [0, 1], got {value}")
        if self.x_start > self.x_end or self.y_start > self.y_end:
            raise ValueError("Region start fractions must not exceed end fractions")

    def to_pixels(self, width: int, height: int) -> Tuple[int, int, int, int]:
        """
        Resolve the region against an image size.

        Returns:
            (x0, x1, y0, y1) inclusive pixel bounds
        """
        return (
            int(math.floor(width * self.x_start)),
            int(math.floor(width * self.x_end)),
            int(math.floor(height * self.y_start)),
            int(math.floor(height * self.y_end)),
        )


@dataclass(frozen=True)
class ElevationConfig:
    """
    Parameters for tier assignment.

    Attributes:
        low: Tier of dark pixels outside both regions (L1)
        mid: Tier of bright pixels and dark pixels in the center region (L2)
        peak: Tier of dark pixels in the focus region (L3)
        brightness_threshold: Normalized brightness below which a pixel is dark
        center: Center region
        focus: Focus region, checked before the center region
    """

    low: int = TIER_LOW
    mid: int = TIER_MID
    peak: int = TIER_PEAK
    brightness_threshold: float = 0.2
    center: Region = field(default_factory=Region)
    focus: Region = field(default_factory=Region)

    def __post_init__(self):
        if min(self.low, self.mid, self.peak) < 0:
            raise ValueError("Tier heights must be non-negative")
        if not 0.0 <= self.brightness_threshold <= 1.0:
            raise ValueError("brightness_threshold must be within [0, 1]")

    @property
    def max_tier(self) -> int:
        """Highest tier any pixel can receive."""
        return max(self.low, self.mid, self.peak)


@dataclass(frozen=True)
class RenderConfig:
    """
    Parameters for the side-view depth raster.

    Attributes:
        side_view_angle: Projection angle in degrees
        extrusion_depth: Canvas pixels of elevation per tier unit
        padding: Blank margin around the projected grid
        background: Canvas fill color
        top_lighten: Percentage the top face is lightened
        right_darken: Percentage the right face is darkened
        left_darken: Percentage the left face is darkened
        logo_height_fraction: Logo height relative to the canvas height
        text_margin: Distance of overlays from the canvas edges
        shadow_offset: Drop shadow offset of overlay text
    """

    side_view_angle: float = 45.0
    extrusion_depth: float = 5.0
    padding: int = 60
    background: Tuple[int, int, int] = (255, 255, 255)
    top_lighten: float = 15
    right_darken: float = 20
    left_darken: float = 35
    logo_height_fraction: float = 0.10
    text_margin: int = 10
    shadow_offset: int = 2

    def __post_init__(self):
        if self.padding < 0:
            raise ValueError("padding must be non-negative")
        if self.extrusion_depth < 0:
            raise ValueError("extrusion_depth must be non-negative")
        if not 0.0 < self.logo_height_fraction <= 1.0:
            raise ValueError("logo_height_fraction must be within (0, 1]")

    @property
    def angle_radians(self) -> float:
        return math.radians(self.side_view_angle)

    def vertical_slack(self, max_tier: int) -> int:
        """Extra canvas rows reserved above the grid for the tallest column."""
        rise = max_tier * self.extrusion_depth * math.sin(self.angle_radians)
        return max(0, int(math.ceil(rise)))
