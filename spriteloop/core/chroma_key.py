"""Chroma key compositing on RGBA pixel buffers."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from . import ChromaKeySettings, FeatherDirection, KeyColor, PixelBuffer
from .separable_filter import blur_2d, erode_2d

logger = logging.getLogger(__name__)

# Largest Euclidean distance between two RGB colors, sqrt(3 * 255**2).
MAX_TOLERANCE = 442.0


def clamp_tolerance(tolerance: float) -> float:
    return min(max(float(tolerance), 0.0), MAX_TOLERANCE)


def build_key_mask(rgba: np.ndarray, colors: Sequence[KeyColor], tolerance: float) -> np.ndarray:
    """Return a hard mask: 0 where a pixel is within tolerance of any key color, else 255."""

    rgb = rgba[..., :3].astype(np.float64)
    min_distance = np.full(rgb.shape[:2], np.inf)
    for color in colors:
        delta = rgb - np.array(color.as_tuple(), dtype=np.float64)
        distance = np.sqrt(np.sum(delta * delta, axis=-1))
        np.minimum(min_distance, distance, out=min_distance)
    return np.where(min_distance <= clamp_tolerance(tolerance), 0, 255).astype(np.uint8)


def combine_alpha(choked: np.ndarray, smoothed: np.ndarray, direction: FeatherDirection) -> np.ndarray:
    """Merge the choked core and the blurred edge.

    Feathering toward the subject keeps the choked core fully opaque and only
    adds opacity outward; toward the background the smoothed mask is used as
    is, so the edge fades on both sides.
    """

    if FeatherDirection(direction) is FeatherDirection.SUBJECT:
        return np.maximum(choked, smoothed)
    return smoothed


def refine_mask(mask: np.ndarray, settings: ChromaKeySettings) -> np.ndarray:
    """Choke, feather, smooth and combine a hard key mask."""

    choked = erode_2d(mask, settings.choke)
    feathered = blur_2d(choked, settings.feather)
    smoothed = blur_2d(feathered, settings.smoothing)
    return combine_alpha(choked, smoothed, settings.feather_direction)


def apply_chroma_key(buffer: PixelBuffer, settings: ChromaKeySettings) -> PixelBuffer:
    """Rewrite the alpha channel of ``buffer`` in place and return it.

    RGB bytes are never touched. With no key colors, or an empty buffer, the
    buffer is returned unmodified.
    """

    if not settings.colors:
        return buffer
    if buffer.width == 0 or buffer.height == 0:
        return buffer

    logger.debug(
        "Keying %sx%s buffer against %s color(s), tolerance=%s",
        buffer.width,
        buffer.height,
        len(settings.colors),
        settings.tolerance,
    )
    rgba = buffer.rgba
    mask = build_key_mask(rgba, settings.colors, settings.tolerance)
    rgba[..., 3] = refine_mask(mask, settings)
    return buffer
