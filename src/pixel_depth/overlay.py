"""
Overlay rendering for depth images.

Decorations drawn on top of the projected grid, in this order:
- Logo: scaled to a fraction of the canvas height, anchored top-left
- Identifier: "#<id>" right-aligned at the top, with a drop shadow
- Owner label: centered at the bottom in white, with a drop shadow

Every element is optional. A failure while drawing one of them is logged,
reported as an OverlayWarning and skipped; it never aborts the render.
Identifier and label strings are drawn verbatim as text.
"""

from pathlib import Path
import logging
from typing import Callable, Iterable, List, Optional, Tuple, Union
import warnings

from PIL import Image, ImageDraw, ImageFont

from .config import RenderConfig
from .errors import OverlayWarning

logger = logging.getLogger(__name__)

IDENTIFIER_COLOR = (34, 34, 34)
IDENTIFIER_SHADOW = (170, 170, 170)
LABEL_COLOR = (255, 255, 255)
LABEL_SHADOW = (0, 0, 0)

# Font candidates tried before Pillow's bundled font
FONT_NAMES = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf")


def record_overlay_warning(collected: Optional[List[str]], message: str):
    """
    Report a skipped overlay element.

    The message is logged, emitted as an OverlayWarning and appended to
    `collected` when a list is given.
    """
    logger.warning(message)
    warnings.warn(message, OverlayWarning, stacklevel=3)
    if collected is not None:
        collected.append(message)


def find_logo(
    candidates: Iterable[Union[str, Path]],
    collected: Optional[List[str]] = None
) -> Optional[Image.Image]:
    """
    Load the first readable logo among candidate paths.

    Args:
        candidates: Paths probed in order
        collected: Optional list receiving warning messages

    Returns:
        Decoded RGBA logo, or None if no candidate could be read
    """
    tried = []
    for candidate in candidates:
        path = Path(candidate)
        tried.append(str(path))
        if not path.is_file():
            continue
        try:
            with Image.open(path) as img:
                img.load()
                logger.debug("Loaded logo from %s", path)
                return img.convert("RGBA")
        except OSError as e:
            logger.debug("Unreadable logo candidate %s: %s", path, e)

    record_overlay_warning(collected, f"Logo not found in any of: {', '.join(tried) or '(none)'}")
    return None


def load_font(size: int) -> ImageFont.ImageFont:
    """Load a bold TrueType font, falling back to Pillow's bundled font."""
    for name in FONT_NAMES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _text_size(draw: ImageDraw.ImageDraw, text: str, font) -> Tuple[int, int]:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    return right - left, bottom - top


def _draw_shadowed_text(
    draw: ImageDraw.ImageDraw,
    position: Tuple[float, float],
    text: str,
    font,
    fill: Tuple[int, int, int],
    shadow: Tuple[int, int, int],
    offset: int
):
    x, y = position
    draw.text((x + offset, y + offset), text, font=font, fill=shadow)
    draw.text((x, y), text, font=font, fill=fill)


class OverlayPainter:
    """
    Draws the logo, identifier and owner label onto a canvas.

    Attributes:
        config: Render settings (margins, logo size, shadow offset)
        warnings: Messages of overlay elements that were skipped
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()
        self.warnings: List[str] = []

    def font_size(self, canvas: Image.Image) -> int:
        return max(12, canvas.height // 18)

    def _guarded(self, name: str, step: Callable[[], None]):
        """Run one overlay step, downgrading any failure to a warning."""
        try:
            step()
        except Exception as e:
            record_overlay_warning(self.warnings, f"Skipped {name} overlay: {e}")

    def draw_logo(self, canvas: Image.Image, logo: Image.Image):
        """Paste the logo top-left, scaled to the configured canvas fraction."""
        target_h = max(1, int(round(canvas.height * self.config.logo_height_fraction)))
        target_w = max(1, int(round(logo.width * target_h / logo.height)))

        scaled = logo.convert("RGBA").resize((target_w, target_h), Image.Resampling.LANCZOS)
        margin = self.config.text_margin
        canvas.paste(scaled, (margin, margin), scaled)

    def draw_identifier(self, canvas: Image.Image, identifier: str):
        """Draw "#<identifier>" right-aligned along the top edge."""
        draw = ImageDraw.Draw(canvas)
        font = load_font(self.font_size(canvas))
        text = f"#{identifier}"

        text_w, _ = _text_size(draw, text, font)
        margin = self.config.text_margin
        position = (canvas.width - margin - text_w, margin)

        _draw_shadowed_text(draw, position, text, font, IDENTIFIER_COLOR,
                            IDENTIFIER_SHADOW, self.config.shadow_offset)

    def draw_owner_label(self, canvas: Image.Image, label: str):
        """Draw the owner label centered along the bottom edge."""
        draw = ImageDraw.Draw(canvas)
        font = load_font(max(10, self.font_size(canvas) * 2 // 3))

        text_w, text_h = _text_size(draw, label, font)
        margin = self.config.text_margin
        position = ((canvas.width - text_w) / 2, canvas.height - margin - text_h * 1.5)

        _draw_shadowed_text(draw, position, label, font, LABEL_COLOR,
                            LABEL_SHADOW, self.config.shadow_offset)

    def apply(
        self,
        canvas: Image.Image,
        identifier: Optional[str],
        owner_label: Optional[str],
        logo: Optional[Image.Image] = None
    ) -> Image.Image:
        """
        Draw all overlays in order.

        Args:
            canvas: RGB canvas, modified in place
            identifier: Identifier text (drawn as "#<identifier>"), or None
            owner_label: Owner text, or None
            logo: Decoded logo, or None

        Returns:
            The same canvas
        """
        if logo is not None:
            self._guarded("logo", lambda: self.draw_logo(canvas, logo))
        if identifier is not None:
            self._guarded("identifier", lambda: self.draw_identifier(canvas, str(identifier)))
        if owner_label is not None:
            self._guarded("owner label", lambda: self.draw_owner_label(canvas, str(owner_label)))

        return canvas
