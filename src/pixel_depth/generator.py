"""
Conversion Entry Points

This is the primary interface for the pixel depth pipelines:

Mesh mode:
    image -> PixelBuffer -> VoxelModelBuilder -> OBJExporter -> OBJ text

Depth mode:
    image -> PixelBuffer -> BackgroundDetector -> ElevationMapper
          -> ElevationRenderer (+ logo, identifier, owner label) -> PNG bytes

Example Usage:
    converter = DepthConverter()
    converter.load_image("punk.png")
    converter.export_png("punk-depth.png", identifier="42", owner_label="alice.eth")
    converter.export_obj("punk.obj")
"""

from dataclasses import dataclass, field
from pathlib import Path
import logging
from typing import Dict, List, Optional, Union
import numpy as np
from PIL import Image

from .background import BackgroundColorSet, BackgroundDetector
from .config import DEFAULT_IDENTIFIER, ElevationConfig, RenderConfig, ZERO_ADDRESS
from .elevation import ElevationMap, ElevationMapper
from .exporters import OBJExporter
from .ingestion import PixelBuffer
from .renderer import ElevationRenderer, RenderedImage
from .voxelizer import Voxel, VoxelModelBuilder, preview_data

logger = logging.getLogger(__name__)

ImageSource = Union[PixelBuffer, bytes, str, Path, np.ndarray, Image.Image]

IMAGE_PATTERNS = ("*.png", "*.gif", "*.bmp", "*.jpg", "*.jpeg", "*.webp")


def as_pixels(source: ImageSource) -> PixelBuffer:
    """
    Coerce any supported image source into a PixelBuffer.

    Args:
        source: PixelBuffer, encoded bytes, file path, numpy array or PIL image
    """
    if isinstance(source, PixelBuffer):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        return PixelBuffer.from_bytes(bytes(source))
    if isinstance(source, (str, Path)):
        return PixelBuffer.from_path(source)
    if isinstance(source, np.ndarray):
        return PixelBuffer.from_array(source)
    if isinstance(source, Image.Image):
        return PixelBuffer.from_image(source)
    raise TypeError(f"Unsupported image source: {type(source).__name__}")


@dataclass
class MeshResult:
    """
    Mesh-mode conversion output.

    Attributes:
        data: OBJ text
        dimensions: {"width": W, "height": H} of the source image
        preview: Per-voxel position/size/color dicts for a 3D viewer
        format: Always "obj"
    """

    data: str
    dimensions: Dict[str, int]
    preview: List[Dict[str, list]] = field(default_factory=list)
    format: str = "obj"

    def to_dict(self) -> dict:
        return {
            "format": self.format,
            "data": self.data,
            "dimensions": dict(self.dimensions),
            "previewData": self.preview,
        }


def build_voxels(source: ImageSource) -> List[Voxel]:
    """Brightness voxels of an image (mode A geometry)."""
    return VoxelModelBuilder().build(as_pixels(source))


def build_mesh(source: ImageSource, include_colors: bool = False) -> str:
    """
    Mesh mode: convert an image into OBJ mesh text.

    Args:
        source: Image to convert
        include_colors: Emit extended vertex colors

    Returns:
        OBJ document

    Raises:
        InvalidImageError: the image is empty or cannot be decoded
    """
    voxels = build_voxels(source)
    return OBJExporter(include_colors=include_colors).to_string(voxels)


def convert_to_mesh(source: ImageSource, include_colors: bool = False) -> MeshResult:
    """
    Mesh mode with preview data and image dimensions.

    Returns:
        MeshResult
    """
    pixels = as_pixels(source)
    voxels = VoxelModelBuilder().build(pixels)

    return MeshResult(
        data=OBJExporter(include_colors=include_colors).to_string(voxels),
        dimensions={"width": pixels.width, "height": pixels.height},
        preview=preview_data(voxels),
    )


def render_depth(
    source: ImageSource,
    identifier: Optional[str] = DEFAULT_IDENTIFIER,
    owner_label: Optional[str] = ZERO_ADDRESS,
    logo: Optional[Image.Image] = None,
    elevation_config: Optional[ElevationConfig] = None,
    render_config: Optional[RenderConfig] = None
) -> RenderedImage:
    """
    Depth mode returning the full RenderedImage (bytes, size, overlay warnings).

    See render_depth_image for the arguments.
    """
    pixels = as_pixels(source)
    background = BackgroundDetector().detect(pixels)
    elevation = ElevationMapper(elevation_config).map(pixels, background)

    renderer = ElevationRenderer(render_config, elevation_config)
    return renderer.render(
        pixels,
        elevation,
        background,
        identifier=identifier,
        owner_label=owner_label,
        logo=logo,
    )


def render_depth_image(
    source: ImageSource,
    identifier: Optional[str] = DEFAULT_IDENTIFIER,
    owner_label: Optional[str] = ZERO_ADDRESS,
    logo: Optional[Image.Image] = None,
    elevation_config: Optional[ElevationConfig] = None,
    render_config: Optional[RenderConfig] = None
) -> bytes:
    """
    Depth mode: render a shaded side-view depth image.

    Args:
        source: Image to convert
        identifier: Shown as "#<identifier>" at the top right ("0" if empty)
        owner_label: Shown at the bottom (zero address if empty)
        logo: Pre-loaded logo image, or None
        elevation_config: Tier settings
        render_config: Projection and shading settings

    Returns:
        PNG bytes

    Raises:
        InvalidImageError: the image is empty or cannot be decoded
    """
    return render_depth(
        source,
        identifier=identifier or DEFAULT_IDENTIFIER,
        owner_label=owner_label or ZERO_ADDRESS,
        logo=logo,
        elevation_config=elevation_config,
        render_config=render_config,
    ).data


class DepthConverter:
    """
    High-level interface for both conversion modes.

    Keeps the decoded image and intermediate results of the last load so
    they can be inspected or exported in several formats.

    Attributes:
        elevation_config: Tier settings
        render_config: Projection and shading settings
    """

    def __init__(
        self,
        elevation_config: Optional[ElevationConfig] = None,
        render_config: Optional[RenderConfig] = None
    ):
        self.elevation_config = elevation_config or ElevationConfig()
        self.render_config = render_config or RenderConfig()

        self._pixels: Optional[PixelBuffer] = None
        self._background: Optional[BackgroundColorSet] = None
        self._elevation: Optional[ElevationMap] = None
        self._voxels: Optional[List[Voxel]] = None

    def _reset(self, pixels: PixelBuffer) -> "DepthConverter":
        self._pixels = pixels
        self._background = None
        self._elevation = None
        self._voxels = None
        return self

    def load_image(self, image_path: Union[str, Path]) -> "DepthConverter":
        """
        Load an image file.

        Returns:
            self for method chaining
        """
        return self._reset(PixelBuffer.from_path(image_path))

    def load_bytes(self, data: bytes) -> "DepthConverter":
        """Load encoded image bytes (e.g. an uploaded file)."""
        return self._reset(PixelBuffer.from_bytes(data))

    def load_array(self, array: np.ndarray) -> "DepthConverter":
        """Load an (H, W, 3) or (H, W, 4) numpy array."""
        return self._reset(PixelBuffer.from_array(array))

    @property
    def pixels(self) -> PixelBuffer:
        if self._pixels is None:
            raise RuntimeError("No image loaded. Call load_image() first.")
        return self._pixels

    @property
    def background(self) -> BackgroundColorSet:
        if self._background is None:
            self._background = BackgroundDetector().detect(self.pixels)
        return self._background

    @property
    def elevation(self) -> ElevationMap:
        if self._elevation is None:
            mapper = ElevationMapper(self.elevation_config)
            self._elevation = mapper.map(self.pixels, self.background)
        return self._elevation

    @property
    def voxels(self) -> List[Voxel]:
        if self._voxels is None:
            self._voxels = VoxelModelBuilder().build(self.pixels)
        return self._voxels

    def to_mesh(self, include_colors: bool = False) -> str:
        """OBJ text of the loaded image."""
        return OBJExporter(include_colors=include_colors).to_string(self.voxels)

    def to_depth_image(
        self,
        identifier: Optional[str] = DEFAULT_IDENTIFIER,
        owner_label: Optional[str] = ZERO_ADDRESS,
        logo: Optional[Image.Image] = None
    ) -> RenderedImage:
        """Depth raster of the loaded image."""
        renderer = ElevationRenderer(self.render_config, self.elevation_config)
        return renderer.render(
            self.pixels,
            self.elevation,
            self.background,
            identifier=identifier or DEFAULT_IDENTIFIER,
            owner_label=owner_label or ZERO_ADDRESS,
            logo=logo,
        )

    def export_obj(self, output_path: Union[str, Path], include_colors: bool = False):
        """
        Export the mesh to an OBJ file.

        Args:
            output_path: Output file path
            include_colors: Include vertex colors (extended format)
        """
        OBJExporter(include_colors=include_colors).export(self.voxels, output_path)

    def export_png(
        self,
        output_path: Union[str, Path],
        identifier: Optional[str] = DEFAULT_IDENTIFIER,
        owner_label: Optional[str] = ZERO_ADDRESS,
        logo: Optional[Image.Image] = None
    ) -> RenderedImage:
        """
        Export the depth raster to a PNG file.

        Returns:
            The RenderedImage that was written
        """
        rendered = self.to_depth_image(identifier, owner_label, logo)
        Path(output_path).write_bytes(rendered.data)
        return rendered

    def preview(self) -> dict:
        """
        Get a summary of the current state.

        Returns:
            Dictionary with current state information
        """
        info = {"image_loaded": self._pixels is not None}

        if self._pixels is not None:
            info["image_size"] = self._pixels.size
            info["channels"] = self._pixels.channels
        if self._background is not None:
            info["background_colors"] = sorted(self._background.colors)
        if self._elevation is not None:
            info["tier_histogram"] = self._elevation.histogram()
        if self._voxels is not None:
            info["voxel_count"] = len(self._voxels)

        return info


class BatchProcessor:
    """
    Batch conversion of every image in a directory.

    Use this for processing whole collections with consistent settings.
    """

    def __init__(self, **converter_kwargs):
        """
        Args:
            **converter_kwargs: Arguments passed to DepthConverter
        """
        self.converter_kwargs = converter_kwargs

    def process_directory(
        self,
        input_dir: Union[str, Path],
        output_dir: Union[str, Path],
        mode: str = "depth",
        pattern: Optional[str] = None,
        identifier: Optional[str] = None,
        owner_label: Optional[str] = None,
        logo: Optional[Image.Image] = None,
        include_colors: bool = False
    ) -> List[str]:
        """
        Convert all images in a directory.

        Args:
            input_dir: Input directory
            output_dir: Output directory (created if missing)
            mode: "depth" for PNG rasters, "mesh" for OBJ files
            pattern: Glob pattern (default: common image extensions)
            identifier: Identifier for every image (file stem if None)
            owner_label: Owner label for every image
            logo: Logo drawn on every depth image
            include_colors: Vertex colors for mesh output

        Returns:
            List of output file paths
        """
        if mode not in ("depth", "mesh"):
            raise ValueError(f"Unknown mode: {mode}")

        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        patterns = (pattern,) if pattern else IMAGE_PATTERNS
        paths = sorted({p for pat in patterns for p in input_dir.glob(pat)})

        outputs = []
        for image_path in paths:
            converter = DepthConverter(**self.converter_kwargs)
            converter.load_image(image_path)

            if mode == "mesh":
                output_path = output_dir / f"{image_path.stem}.obj"
                converter.export_obj(output_path, include_colors=include_colors)
            else:
                output_path = output_dir / f"{image_path.stem}-depth.png"
                converter.export_png(
                    output_path,
                    identifier=identifier or image_path.stem,
                    owner_label=owner_label,
                    logo=logo,
                )

            logger.info("Converted %s -> %s", image_path, output_path)
            outputs.append(str(output_path))

        return outputs
