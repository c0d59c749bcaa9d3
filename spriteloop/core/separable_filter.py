"""Separable box blur and erosion over 2-D alpha masks.

Both filters share one windowed pass: each output sample combines the
``2r + 1`` samples centred on it, with positions past either end reading the
nearest edge sample. No padding wider than the array itself is built, so
memory use does not grow with the radius. Running the pass over rows and then
over the columns of the row-filtered result approximates the 2-D window in
linear time.
"""

from __future__ import annotations

import math
from typing import Callable

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

WindowCombine = Callable[[np.ndarray, int], np.ndarray]

# Largest feather, choke or smoothing radius accepted from user input.
MAX_RADIUS = 256


def normalize_radius(radius: float) -> int:
    """Truncate a user radius to a non-negative integer half-width."""

    if radius is None or radius <= 0:
        return 0
    return int(math.floor(radius))


def _window_mean(values: np.ndarray, radius: int) -> np.ndarray:
    # Prefix sums over the unpadded samples; out-of-range window positions are
    # counted as extra copies of the first or last sample.
    length = values.shape[-1]
    sums = np.cumsum(values, axis=-1, dtype=np.int64)
    zeros = np.zeros(sums.shape[:-1] + (1,), dtype=np.int64)
    sums = np.concatenate([zeros, sums], axis=-1)

    index = np.arange(length)
    lo = np.maximum(index - radius, 0)
    hi = np.minimum(index + radius + 1, length)
    before = np.maximum(radius - index, 0)
    after = np.maximum(index + radius - (length - 1), 0)

    totals = (
        sums[..., hi]
        - sums[..., lo]
        + before * values[..., :1].astype(np.int64)
        + after * values[..., -1:].astype(np.int64)
    )
    return np.floor(totals / (2 * radius + 1) + 0.5).astype(np.uint8)


def _window_min(values: np.ndarray, radius: int) -> np.ndarray:
    # Edge copies never change a minimum, so any radius past the array
    # length behaves like length - 1.
    radius = min(radius, values.shape[-1] - 1)
    if radius == 0:
        return values
    pad = [(0, 0)] * (values.ndim - 1) + [(radius, radius)]
    padded = np.pad(values, pad, mode="edge")
    return sliding_window_view(padded, 2 * radius + 1, axis=-1).min(axis=-1).astype(np.uint8)


def _window_pass(values: np.ndarray, radius: int, axis: int, combine: WindowCombine) -> np.ndarray:
    """Apply ``combine`` over a sliding window along ``axis`` with edge replication."""

    if radius == 0 or values.size == 0:
        return values
    moved = np.moveaxis(values, axis, -1)
    return np.moveaxis(combine(moved, radius), -1, axis)


def box_blur_1d(values: np.ndarray, radius: float) -> np.ndarray:
    """Box-average a 1-D array; radius 0 returns the input unchanged."""

    return _window_pass(np.asarray(values, dtype=np.uint8), normalize_radius(radius), 0, _window_mean)


def erode_1d(values: np.ndarray, radius: float) -> np.ndarray:
    """Window minimum of a 1-D array; radius 0 returns the input unchanged."""

    return _window_pass(np.asarray(values, dtype=np.uint8), normalize_radius(radius), 0, _window_min)


def _separable(mask: np.ndarray, radius: float, combine: WindowCombine) -> np.ndarray:
    r = normalize_radius(radius)
    rows = _window_pass(mask, r, 1, combine)
    return _window_pass(rows, r, 0, combine)


def blur_2d(mask: np.ndarray, radius: float) -> np.ndarray:
    """Box blur a ``(height, width)`` mask: rows first, then columns."""

    return _separable(mask, radius, _window_mean)


def erode_2d(mask: np.ndarray, radius: float) -> np.ndarray:
    """Erode a ``(height, width)`` mask: rows first, then columns."""

    return _separable(mask, radius, _window_min)
