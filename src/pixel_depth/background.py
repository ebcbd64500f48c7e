"""
Background Detection Module

Pixel art is usually drawn on a flat backdrop that runs off the image edges.
A color is treated as background when the exact same RGB value is found on at
least two different borders (top, bottom, left, right). Corner pixels sit on
two borders at once and therefore vote for both.

No tolerance is applied: (10, 10, 10) and (10, 10, 11) are different colors.
"""

from collections import defaultdict
import logging
from typing import Dict, FrozenSet, Iterable, Iterator, Set, Tuple
import numpy as np

from .ingestion import PixelBuffer

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

SIDES = ("top", "bottom", "left", "right")


def pack_rgb(rgb: np.ndarray) -> np.ndarray:
    """
    Pack RGB triples into single integers (r << 16 | g << 8 | b).

    Args:
        rgb: Array of shape (..., 3)

    Returns:
        int32 array of shape (...)
    """
    rgb = rgb.astype(np.int32)
    return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]


class BackgroundColorSet:
    """
    Immutable set of exact background colors.

    Supports membership tests for single colors and a vectorized mask
    over a whole image.
    """

    def __init__(self, colors: Iterable[RGB] = ()):
        self._colors: FrozenSet[RGB] = frozenset(
            (int(r), int(g), int(b)) for r, g, b in colors
        )

    def __contains__(self, color) -> bool:
        r, g, b = color[:3]
        return (int(r), int(g), int(b)) in self._colors

    def __iter__(self) -> Iterator[RGB]:
        return iter(sorted(self._colors))

    def __len__(self) -> int:
        return len(self._colors)

    def __eq__(self, other) -> bool:
        if isinstance(other, BackgroundColorSet):
            return self._colors == other._colors
        if isinstance(other, (set, frozenset)):
            return self._colors == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._colors)

    def __repr__(self) -> str:
        return f"BackgroundColorSet({sorted(self._colors)})"

    @property
    def colors(self) -> FrozenSet[RGB]:
        return self._colors

    def mask(self, pixels: PixelBuffer) -> np.ndarray:
        """
        Mark every pixel whose RGB is a background color.

        Args:
            pixels: Source image

        Returns:
            Boolean array of shape (H, W)
        """
        if not self._colors:
            return np.zeros((pixels.height, pixels.width), dtype=bool)

        keys = np.array(
            [(r << 16) | (g << 8) | b for r, g, b in self._colors], dtype=np.int32
        )
        return np.isin(pack_rgb(pixels.rgb), keys)


class BackgroundDetector:
    """
    Classifies border colors as background.

    Attributes:
        min_sides: Number of distinct borders a color must touch (default 2)
    """

    def __init__(self, min_sides: int = 2):
        if not 1 <= min_sides <= len(SIDES):
            raise ValueError(f"min_sides must be within [1, {len(SIDES)}]")
        self.min_sides = min_sides

    @staticmethod
    def border_lines(pixels: PixelBuffer) -> Dict[str, np.ndarray]:
        """
        The four border lines of an image as (N, 3) RGB arrays.

        On a single-row or single-column image, opposite borders are the
        same pixels.
        """
        rgb = pixels.rgb
        return {
            "top": rgb[0, :, :],
            "bottom": rgb[pixels.height - 1, :, :],
            "left": rgb[:, 0, :],
            "right": rgb[:, pixels.width - 1, :],
        }

    def side_map(self, pixels: PixelBuffer) -> Dict[RGB, Set[str]]:
        """
        Record which borders each color was observed on.

        Returns:
            Mapping of RGB color -> set of side names
        """
        seen: Dict[RGB, Set[str]] = defaultdict(set)

        for side, line in self.border_lines(pixels).items():
            for key in np.unique(pack_rgb(line)):
                key = int(key)
                color = ((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)
                seen[color].add(side)

        return dict(seen)

    def detect(self, pixels: PixelBuffer) -> BackgroundColorSet:
        """
        Find the background colors of an image.

        Args:
            pixels: Source image

        Returns:
            BackgroundColorSet of colors touching >= min_sides borders
        """
        sides = self.side_map(pixels)
        background = BackgroundColorSet(
            color for color, touched in sides.items() if len(touched) >= self.min_sides
        )
        logger.debug("Detected %d background colors out of %d border colors",
                     len(background), len(sides))
        return background
