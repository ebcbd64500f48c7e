"""
Elevation Renderer

Turns a pixel grid and its elevation tiers into a shaded 2D raster that
looks like the sprite was extruded toward the viewer.

Pipeline per pixel (row-major, top row first, left to right):
1. Skip fully transparent pixels
2. elevation = tier * extrusion_depth
3. If elevated, paint the top (lightened), right (darkened) and left
   (darkened more) faces of the column
4. Paint the unshaded ground quad in the pixel's own color

There is no depth sort. Later rows overwrite earlier ones, which matches
the visual layering because the projection only moves content up and right.
Changing the scan order produces artifacts on shared edges.
"""

from dataclasses import dataclass, field
from io import BytesIO
import logging
from typing import List, Optional
import numpy as np
from PIL import Image, ImageDraw

from .background import BackgroundColorSet
from .color import darken, lighten, rgb_to_hex
from .config import DEFAULT_IDENTIFIER, ElevationConfig, RenderConfig, ZERO_ADDRESS
from .elevation import ElevationMap
from .ingestion import PixelBuffer
from .errors import InvalidImageError
from .overlay import OverlayPainter
from .projection import SideViewProjection

logger = logging.getLogger(__name__)


@dataclass
class RenderedImage:
    """
    Encoded output of the elevation renderer.

    Attributes:
        data: PNG bytes
        width: Canvas width in pixels
        height: Canvas height in pixels
        warnings: Overlay elements that were skipped
    """

    data: bytes
    width: int
    height: int
    warnings: List[str] = field(default_factory=list)

    def to_image(self) -> Image.Image:
        """Decode the PNG back into a Pillow image."""
        img = Image.open(BytesIO(self.data))
        img.load()
        return img


class ElevationRenderer:
    """
    Side-view extrusion renderer.

    Attributes:
        config: Projection, padding and shading settings
        elevation_config: Tier settings (the peak tier sizes the canvas)
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        elevation_config: Optional[ElevationConfig] = None
    ):
        self.config = config or RenderConfig()
        self.elevation_config = elevation_config or ElevationConfig()

    def canvas_size(self, width: int, height: int, max_tier: int = 0) -> tuple:
        """
        Canvas dimensions for a width x height grid.

        Args:
            width, height: Grid size
            max_tier: Highest tier actually present, if above the configured peak

        Returns:
            (canvas_width, canvas_height, vertical_slack)
        """
        pad = self.config.padding
        slack = self.config.vertical_slack(max(self.elevation_config.max_tier, max_tier))
        return (width + 2 * pad, height + 2 * pad + slack, slack)

    def paint(
        self,
        pixels: PixelBuffer,
        elevation: ElevationMap
    ) -> Image.Image:
        """
        Rasterize the extruded grid without overlays.

        Args:
            pixels: Source image
            elevation: Tiers of the same size as the image

        Returns:
            RGB canvas
        """
        if (elevation.width, elevation.height) != pixels.size:
            raise InvalidImageError(
                f"Elevation map {elevation.width}x{elevation.height} does not match "
                f"image {pixels.width}x{pixels.height}"
            )

        cfg = self.config
        canvas_w, canvas_h, slack = self.canvas_size(
            pixels.width, pixels.height, elevation.max_tier
        )
        canvas = Image.new("RGB", (canvas_w, canvas_h), tuple(cfg.background))
        draw = ImageDraw.Draw(canvas)

        projection = SideViewProjection(
            angle=cfg.side_view_angle,
            origin_x=cfg.padding,
            origin_y=cfg.padding + slack,
        )

        opacity = pixels.opacity()
        rgb = pixels.rgb
        tiers = elevation.grid
        elevated = 0

        for y in range(pixels.height):
            for x in range(pixels.width):
                if opacity[y, x] == 0:
                    continue

                base = rgb_to_hex(*(int(c) for c in rgb[y, x]))
                z = int(tiers[y, x]) * cfg.extrusion_depth
                corners = projection.cell_corners(x, y, z)

                if z > 0:
                    draw.polygon(projection.top_face(corners),
                                 fill=lighten(base, cfg.top_lighten))
                    draw.polygon(projection.right_face(corners),
                                 fill=darken(base, cfg.right_darken))
                    draw.polygon(projection.left_face(corners),
                                 fill=darken(base, cfg.left_darken))
                    elevated += 1

                draw.polygon(projection.base_face(corners), fill=base)

        logger.debug("Painted %dx%d canvas, %d elevated cells", canvas_w, canvas_h, elevated)
        return canvas

    def render(
        self,
        pixels: PixelBuffer,
        elevation: ElevationMap,
        background: Optional[BackgroundColorSet] = None,
        identifier: Optional[str] = DEFAULT_IDENTIFIER,
        owner_label: Optional[str] = ZERO_ADDRESS,
        logo: Optional[Image.Image] = None
    ) -> RenderedImage:
        """
        Rasterize, decorate and encode a depth image.

        Args:
            pixels: Source image
            elevation: Tiers of the same size as the image
            background: Background colors of the image, already folded
                into `elevation` as tier 0
            identifier: Text shown as "#<identifier>" (None to omit)
            owner_label: Text shown at the bottom (None to omit)
            logo: Decoded logo image, or None

        Returns:
            RenderedImage with PNG bytes
        """
        if background is not None:
            logger.debug("Rendering with %d background colors", len(background))
        canvas = self.paint(pixels, elevation)

        painter = OverlayPainter(self.config)
        painter.apply(canvas, identifier, owner_label, logo)

        buffer = BytesIO()
        canvas.save(buffer, format="PNG")

        return RenderedImage(
            data=buffer.getvalue(),
            width=canvas.width,
            height=canvas.height,
            warnings=list(painter.warnings),
        )


def render_to_array(
    pixels: PixelBuffer,
    elevation: ElevationMap,
    config: Optional[RenderConfig] = None,
    elevation_config: Optional[ElevationConfig] = None
) -> np.ndarray:
    """Rasterize without overlays and return an (H, W, 3) uint8 array."""
    renderer = ElevationRenderer(config, elevation_config)
    return np.asarray(renderer.paint(pixels, elevation), dtype=np.uint8)
