"""
Exception and Warning Types

Two failure classes exist in the conversion pipeline:
- InvalidImageError: the source image cannot be converted at all (fatal)
- OverlayWarning: a decoration (logo, identifier, owner label) could not be
  drawn; the render carries on without it
"""

from typing import Dict, Optional


class PixelDepthError(Exception):
    """Base exception for the pixel_depth package."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidImageError(PixelDepthError, ValueError):
    """Raised for zero-sized, undecodable or unsupported source images."""


class OverlayWarning(UserWarning):
    """Emitted when an overlay element is skipped during rendering."""
