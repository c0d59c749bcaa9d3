"""Pillow helpers bridging image files and pixel buffers."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..core import CropInsets, PixelBuffer
from ..core.errors import InvalidFrameError
from ..core.spritesheet_packer import crop_rect
from . import file_tools

logger = logging.getLogger(__name__)


def load_image(path: Path) -> Image.Image:
    """Load an image safely as RGBA."""

    if not path.exists():
        raise InvalidFrameError(path, reason="File not found")
    try:
        with Image.open(path) as img:
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidFrameError(path, reason=str(exc)) from exc


def save_image(image: Image.Image, path: Path) -> Path:
    """Persist an image to disk."""

    file_tools.ensure_directory(path.parent)
    image.save(path)
    return path


def to_buffer(image: Image.Image) -> PixelBuffer:
    """Copy an image into a fresh RGBA pixel buffer."""

    rgba = image.convert("RGBA")
    return PixelBuffer(rgba.width, rgba.height, np.asarray(rgba, dtype=np.uint8).copy())


def to_image(buffer: PixelBuffer) -> Image.Image:
    return Image.fromarray(buffer.rgba.copy())


def load_buffer(path: Path) -> PixelBuffer:
    return to_buffer(load_image(path))


def decode_buffer(data: bytes, name: str = "<upload>") -> PixelBuffer:
    """Decode encoded image bytes (PNG, JPEG, ...) into a pixel buffer."""

    try:
        with Image.open(io.BytesIO(data)) as img:
            return to_buffer(img)
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidFrameError(Path(name), reason=str(exc)) from exc


def encode_png(image: Image.Image) -> bytes:
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


def crop_buffer(buffer: PixelBuffer, insets: Optional[CropInsets]) -> PixelBuffer:
    """Return a cropped copy; the input is returned as is when nothing is trimmed."""

    if insets is None or insets.is_empty or buffer.width == 0 or buffer.height == 0:
        return buffer
    rect = crop_rect(buffer.width, buffer.height, insets)
    region = buffer.rgba[rect.y : rect.y + rect.height, rect.x : rect.x + rect.width]
    return PixelBuffer(rect.width, rect.height, region.copy())


def to_mask(buffer: PixelBuffer) -> Image.Image:
    """Return an RGBA red-tinted view of the alpha channel."""

    alpha = Image.fromarray(buffer.alpha.copy())
    red = Image.new("L", alpha.size, 255)
    transparent = Image.new("L", alpha.size, 0)
    return Image.merge("RGBA", (red, transparent, transparent, alpha))


def composite_over(
    buffer: PixelBuffer,
    background: Optional[Image.Image] = None,
    color: Optional[Tuple[int, int, int, int]] = None,
) -> Image.Image:
    """Draw a keyed frame over a background image (stretched) or a solid color."""

    foreground = to_image(buffer)
    if background is not None:
        base = background.convert("RGBA").resize(foreground.size)
    else:
        base = Image.new("RGBA", foreground.size, color or (0, 0, 0, 0))
    return Image.alpha_composite(base, foreground)
