"""
Pixel Depth
===========

Deterministic conversion of pixel art into pseudo-3D "depth" output.

Two modes are provided:
- Mesh: every opaque pixel becomes a unit voxel whose height follows its
  brightness, exported as Wavefront OBJ text
- Depth raster: background colors are detected from the image borders,
  pixels receive elevation tiers from darkness and position, and the grid
  is drawn as a shaded side-view extrusion with logo, identifier and owner
  overlays (PNG)

Key Features:
- Exact, bit-reproducible output for a given input
- Border-vote background detection with no color tolerance
- Numba-compiled tier assignment
- Overlay failures degrade to warnings instead of aborting a render

Example Usage:
    from pixel_depth import render_depth_image, build_mesh

    png = render_depth_image(open("punk.png", "rb").read(), "42", "alice.eth")
    obj = build_mesh(open("punk.png", "rb").read())
"""

__version__ = "1.0.0"
__author__ = "Pixel Depth Team"

from .background import BackgroundColorSet, BackgroundDetector
from .color import brightness, darken, hex_to_rgb, lighten, rgb_to_hex
from .config import ElevationConfig, Region, RenderConfig, ZERO_ADDRESS
from .elevation import ElevationMap, ElevationMapper
from .errors import InvalidImageError, OverlayWarning, PixelDepthError
from .exporters import OBJExporter
from .generator import (
    BatchProcessor,
    DepthConverter,
    MeshResult,
    build_mesh,
    convert_to_mesh,
    render_depth,
    render_depth_image,
)
from .ingestion import PixelBuffer
from .overlay import find_logo
from .projection import SideViewProjection
from .renderer import ElevationRenderer, RenderedImage
from .voxelizer import Voxel, VoxelModelBuilder

__all__ = [
    "BackgroundColorSet",
    "BackgroundDetector",
    "BatchProcessor",
    "DepthConverter",
    "ElevationConfig",
    "ElevationMap",
    "ElevationMapper",
    "ElevationRenderer",
    "InvalidImageError",
    "MeshResult",
    "OBJExporter",
    "OverlayWarning",
    "PixelBuffer",
    "PixelDepthError",
    "Region",
    "RenderConfig",
    "RenderedImage",
    "SideViewProjection",
    "Voxel",
    "VoxelModelBuilder",
    "ZERO_ADDRESS",
    "brightness",
    "build_mesh",
    "convert_to_mesh",
    "darken",
    "find_logo",
    "hex_to_rgb",
    "lighten",
    "render_depth",
    "render_depth_image",
    "rgb_to_hex",
]
