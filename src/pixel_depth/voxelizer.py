"""
Voxel Data Structures and Brightness Voxelization

This module provides:
- Voxel: a unit-footprint box with position, size and color
- VoxelModelBuilder: the mesh-mode pipeline, one voxel per opaque pixel
  with height proportional to brightness

This pipeline is deliberately simple: no background suppression and no
region weighting. Tiered elevation lives in elevation.py.
"""

from dataclasses import dataclass
import logging
from typing import Dict, List, Tuple
import numpy as np

from .color import brightness_map
from .ingestion import PixelBuffer

logger = logging.getLogger(__name__)

# Floor for voxel heights so black pixels still produce visible geometry
MIN_HEIGHT = 0.1


@dataclass(frozen=True)
class Voxel:
    """
    A rectangular solid standing on the grid.

    Attributes:
        position: (x, y, z) of the minimum corner
        size: (width, depth, height)
        color: (r, g, b), 0-255
    """

    position: Tuple[float, float, float]
    size: Tuple[float, float, float]
    color: Tuple[int, int, int]

    @property
    def height(self) -> float:
        return self.size[2]

    def to_dict(self) -> Dict[str, list]:
        """Plain representation used for client-side previews."""
        return {
            "position": list(self.position),
            "size": list(self.size),
            "color": list(self.color),
        }


class VoxelModelBuilder:
    """
    Converts an image into brightness-height voxels.

    Attributes:
        min_height: Lower bound for voxel heights
    """

    def __init__(self, min_height: float = MIN_HEIGHT):
        self.min_height = min_height

    def build(self, pixels: PixelBuffer) -> List[Voxel]:
        """
        Emit one voxel per non-transparent pixel.

        Pixels are visited column by column (x outer, y inner).

        Args:
            pixels: Source image

        Returns:
            List of voxels in emission order
        """
        luma = brightness_map(np.ascontiguousarray(pixels.rgb))
        opacity = pixels.opacity()
        rgb = pixels.rgb

        voxels = []
        for x in range(pixels.width):
            for y in range(pixels.height):
                if opacity[y, x] == 0:
                    continue

                height = max(self.min_height, float(luma[y, x]))
                r, g, b = rgb[y, x]
                voxels.append(Voxel(
                    position=(x, y, 0),
                    size=(1, 1, height),
                    color=(int(r), int(g), int(b)),
                ))

        logger.debug("Built %d voxels from %dx%d image",
                     len(voxels), pixels.width, pixels.height)
        return voxels


def preview_data(voxels: List[Voxel]) -> List[Dict[str, list]]:
    """Simplified voxel list for a 3D preview widget."""
    return [voxel.to_dict() for voxel in voxels]
