"""
Side-View Projection Mathematics

The depth raster fakes a third dimension by sliding elevated content up and
to the right:

    screen_x = x + z * cos(theta)
    screen_y = y - z * sin(theta)

Coordinate system: image space, +X right, +Y down, +Z toward the viewer
(elevation). Pixel (x, y) occupies the unit cell [x, x+1] x [y, y+1].
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple
import math

Point2D = Tuple[float, float]


@dataclass
class SideViewProjection:
    """
    Oblique projection used by the elevation renderer.

    Attributes:
        angle: Projection angle in degrees (45 = equal rise and shift)
        origin_x: Screen x of world x = 0
        origin_y: Screen y of world y = 0
    """

    angle: float = 45.0
    origin_x: float = 0.0
    origin_y: float = 0.0
    px: float = field(init=False)
    py: float = field(init=False)

    def __post_init__(self):
        """Precompute projection factors."""
        theta = math.radians(self.angle)
        self.px = math.cos(theta)
        self.py = math.sin(theta)

    def project(self, x: float, y: float, z: float) -> Point2D:
        """
        Project a world point to the screen.

        Args:
            x, y: Grid coordinates
            z: Elevation

        Returns:
            (screen_x, screen_y)
        """
        return (
            self.origin_x + x + z * self.px,
            self.origin_y + y - z * self.py,
        )

    def cell_corners(self, x: int, y: int, elevation: float) -> Dict[str, Point2D]:
        """
        Projected corners of the unit cell at (x, y) extruded to `elevation`.

        Corner names: "back" is the y edge, "front" the y+1 edge, "right"
        the x+1 edge; the suffix says whether the point lies on the ground
        or at the top of the column.
        """
        p = self.project
        return {
            "back_bottom": p(x, y, 0),
            "right_back_bottom": p(x + 1, y, 0),
            "right_front_bottom": p(x + 1, y + 1, 0),
            "front_bottom": p(x, y + 1, 0),
            "back_top": p(x, y, elevation),
            "right_back_top": p(x + 1, y, elevation),
            "right_front_top": p(x + 1, y + 1, elevation),
            "front_top": p(x, y + 1, elevation),
        }

    def top_face(self, corners: Dict[str, Point2D]) -> List[Point2D]:
        return [
            corners["back_top"],
            corners["right_back_top"],
            corners["right_front_top"],
            corners["front_top"],
        ]

    def right_face(self, corners: Dict[str, Point2D]) -> List[Point2D]:
        """Side along the y+1 edge, from the front corner to the right corner."""
        return [
            corners["front_bottom"],
            corners["front_top"],
            corners["right_front_top"],
            corners["right_front_bottom"],
        ]

    def left_face(self, corners: Dict[str, Point2D]) -> List[Point2D]:
        """Side along the x edge, from the front corner to the back corner."""
        return [
            corners["front_bottom"],
            corners["front_top"],
            corners["back_top"],
            corners["back_bottom"],
        ]

    def base_face(self, corners: Dict[str, Point2D]) -> List[Point2D]:
        """The unshaded unit quad at ground level."""
        return [
            corners["back_bottom"],
            corners["right_back_bottom"],
            corners["right_front_bottom"],
            corners["front_bottom"],
        ]
