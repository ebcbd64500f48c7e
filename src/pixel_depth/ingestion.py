"""
Image Ingestion Module

This module handles:
- Decoding image bytes or files with Pillow into numpy sample arrays
- Channel normalization (RGB stays 3-channel, anything with alpha becomes RGBA)
- Validation of the decoded buffer (non-zero size, 3 or 4 channels)

The resulting PixelBuffer is read-only and owned by one conversion.
"""

from io import BytesIO
from pathlib import Path
import logging
from typing import Optional, Tuple, Union
import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import InvalidImageError

logger = logging.getLogger(__name__)

# Pillow modes that carry transparency information
_ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa", "La"}


class PixelBuffer:
    """
    Read-only view over decoded image samples.

    Samples are stored as a (H, W, C) uint8 array with C in {3, 4}.
    Coordinates follow image convention: x to the right, y downward.
    """

    def __init__(self, samples: np.ndarray):
        """
        Wrap an already decoded sample array.

        Args:
            samples: uint8 array of shape (H, W, 3) or (H, W, 4)
        """
        if samples.ndim != 3:
            raise InvalidImageError(
                f"Expected an (H, W, C) sample array, got shape {samples.shape}",
                details={"shape": samples.shape},
            )
        height, width, channels = samples.shape
        if width == 0 or height == 0:
            raise InvalidImageError(
                f"Image has zero size ({width}x{height})",
                details={"width": width, "height": height},
            )
        if channels not in (3, 4):
            raise InvalidImageError(
                f"Unsupported channel count: {channels}",
                details={"channels": channels},
            )

        self._samples = np.array(samples, dtype=np.uint8, copy=True)
        self._samples.setflags(write=False)

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        """
        Build a buffer from a Pillow image.

        Images with any form of transparency become RGBA, everything else RGB.
        """
        if img.width == 0 or img.height == 0:
            raise InvalidImageError(
                f"Image has zero size ({img.width}x{img.height})",
                details={"width": img.width, "height": img.height},
            )

        has_alpha = img.mode in _ALPHA_MODES or "transparency" in img.info
        target = "RGBA" if has_alpha else "RGB"
        if img.mode != target:
            img = img.convert(target)

        return cls(np.asarray(img, dtype=np.uint8))

    @classmethod
    def from_bytes(cls, data: bytes) -> "PixelBuffer":
        """
        Decode an encoded image (PNG, GIF, JPEG, ...).

        Args:
            data: Encoded image bytes

        Returns:
            Decoded PixelBuffer
        """
        if not data:
            raise InvalidImageError("Image buffer is empty")
        try:
            with Image.open(BytesIO(data)) as img:
                img.load()
                buffer = cls.from_image(img)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
            raise InvalidImageError(f"Could not decode image: {e}") from e

        logger.debug("Decoded %dx%d image with %d channels",
                     buffer.width, buffer.height, buffer.channels)
        return buffer

    @classmethod
    def from_path(cls, image_path: Union[str, Path]) -> "PixelBuffer":
        """
        Load and decode an image file.

        Args:
            image_path: Path to the image (PNG recommended)
        """
        image_path = Path(image_path)
        if not image_path.exists():
            raise InvalidImageError(
                f"Image not found: {image_path}", details={"path": str(image_path)}
            )
        return cls.from_bytes(image_path.read_bytes())

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from a numpy array.

        Args:
            array: (H, W) grayscale, (H, W, 3) RGB or (H, W, 4) RGBA array
        """
        array = np.asarray(array)
        if array.dtype != np.uint8 and array.size:
            if not np.isfinite(array).all() or array.min() < 0 or array.max() > 255:
                raise InvalidImageError(
                    f"Sample values must lie in [0, 255], got [{array.min()}, {array.max()}]",
                    details={"dtype": str(array.dtype)},
                )
        if array.ndim == 2:
            array = np.stack([array, array, array], axis=-1)
        return cls(array.astype(np.uint8))

    @property
    def width(self) -> int:
        return self._samples.shape[1]

    @property
    def height(self) -> int:
        return self._samples.shape[0]

    @property
    def channels(self) -> int:
        return self._samples.shape[2]

    @property
    def size(self) -> Tuple[int, int]:
        """Image size as (width, height)."""
        return (self.width, self.height)

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @property
    def samples(self) -> np.ndarray:
        """The raw (H, W, C) sample array (read-only)."""
        return self._samples

    @property
    def rgb(self) -> np.ndarray:
        """Color channels as an (H, W, 3) array (read-only view)."""
        return self._samples[:, :, :3]

    @property
    def alpha(self) -> Optional[np.ndarray]:
        """Alpha channel as an (H, W) array, or None for RGB images."""
        if not self.has_alpha:
            return None
        return self._samples[:, :, 3]

    def opacity(self) -> np.ndarray:
        """
        Alpha channel with RGB images treated as fully opaque.

        Returns:
            uint8 array of shape (H, W)
        """
        if self.has_alpha:
            return self._samples[:, :, 3]
        return np.full((self.height, self.width), 255, dtype=np.uint8)

    def sample(self, x: int, y: int, channel: int) -> int:
        """
        Read one channel of one pixel.

        Args:
            x: Column, 0 <= x < width
            y: Row, 0 <= y < height
            channel: 0=R, 1=G, 2=B, 3=A (RGBA only)
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        if not 0 <= channel < self.channels:
            raise IndexError(f"Channel {channel} out of range [0, {self.channels})")
        return int(self._samples[y, x, channel])

    def to_image(self) -> Image.Image:
        """Convert back to a Pillow image."""
        return Image.fromarray(np.ascontiguousarray(self._samples))
