"""Synthetic debug tile rendering to PNG."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from typing import Tuple

from PIL import Image, ImageDraw, ImageFont

from debug_tiles.config import settings
from debug_tiles.errors import TileEncodeError, TileRenderError
from debug_tiles.logging_utils import log_event
from debug_tiles.render.vector import Path, Rasterizer, rect, rounded_rect

LOGGER = logging.getLogger(__name__)

TILE_SIZE = 256
FILL_COLOR = (210, 105, 30)  # chocolate
BORDER_COLOR = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)
LABEL_COLOR = (255, 255, 255)
LABEL_ORIGIN = (3, 2)  # top-left of the first glyph, unscaled
FALLBACK_GLYPH = "?"


@dataclass(frozen=True, slots=True)
class TileCoordinate:
    """An XYZ tile address. Values are rendered as-is, no range checks."""

    z: int
    x: int
    y: int
    scale: int = 1

    @property
    def label(self) -> str:
        return f"{self.z}/{self.x}/{self.y}"


@lru_cache(maxsize=1)
def _font() -> ImageFont.ImageFont:
    return ImageFont.load_default_imagefont()


@lru_cache(maxsize=None)
def _has_glyph(ch: str) -> bool:
    """The built-in bitmap font covers Latin-1 characters that have an advance."""
    try:
        ch.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return _font().getlength(ch) > 0


@lru_cache(maxsize=None)
def _glyph(ch: str) -> Tuple[Image.Image, int]:
    """Return (alpha mask, advance) for a single character of the bitmap font."""
    font = _font()
    _, _, right, bottom = font.getbbox(ch)
    mask = Image.new("L", (max(int(right), 1), max(int(bottom), 1)), 0)
    ImageDraw.Draw(mask).text((0, 0), ch, fill=255, font=font)
    return mask, int(font.getlength(ch))


def _check_scale(scale: int) -> None:
    if isinstance(scale, bool) or not isinstance(scale, int):
        raise TileRenderError(f"scale must be an integer, got {scale!r}")
    if scale < 1 or scale > settings.max_scale:
        raise TileRenderError(f"scale must be between 1 and {settings.max_scale}, got {scale}")


def _draw_frame(im: Image.Image, size: int) -> None:
    """Fill the rectangle frame and the rounded inner rectangle."""
    side = float(size)
    inset = side / 16
    radius = inset * 2

    path = Path()
    rect(path, 1, 1, side - 2, side - 2)
    rounded_rect(path, inset, inset, side - inset - inset, side - inset - inset, radius)

    ra = Rasterizer(size, size)
    ra.fill(path)
    ra.draw(im, FILL_COLOR)


def _draw_label(im: Image.Image, label: str) -> None:
    """Draw ``label`` left to right in white, one glyph at a time."""
    pen_x, top = LABEL_ORIGIN
    for ch in label:
        if pen_x >= im.width:
            break
        if not _has_glyph(ch):
            log_event(
                LOGGER,
                "tile.glyph_fallback",
                "Label character has no glyph in the font",
                level="warning",
                char=repr(ch),
                label=label,
            )
            ch = FALLBACK_GLYPH
        mask, advance = _glyph(ch)
        glyph = Image.new("RGBA", mask.size, LABEL_COLOR + (255,))
        glyph.putalpha(mask)
        im.alpha_composite(glyph, dest=(pen_x, top))
        pen_x += advance


def render_tile(label: str, scale: int = 1) -> Image.Image:
    """Render a labeled debug tile.

    Args:
        label: Text drawn in the top-left corner. Long labels run off the edge.
        scale: Integer multiplier of the 256px tile side, bounded by
            ``settings.max_scale``.

    Returns:
        RGBA image of side ``256 * scale``.

    Raises:
        TileRenderError: If ``scale`` is not an integer in range.
    """
    _check_scale(scale)
    size = TILE_SIZE * scale

    # 1px white border with transparent inside
    im = Image.new("RGBA", (size, size), BORDER_COLOR)
    im.paste(TRANSPARENT, (1, 1, size - 1, size - 1))

    _draw_frame(im, size)
    _draw_label(im, label)
    return im


def encode_png(im: Image.Image) -> bytes:
    """Serialize an image to PNG bytes.

    Raises:
        TileEncodeError: If Pillow fails to encode the image.
    """
    buffer = BytesIO()
    try:
        im.save(buffer, format="PNG")
    except (OSError, ValueError) as exc:
        raise TileEncodeError(str(exc)) from exc
    return buffer.getvalue()


def render_tile_png(coord: TileCoordinate) -> bytes:
    """Render and encode the tile for ``coord``."""
    return encode_png(render_tile(coord.label, coord.scale))
