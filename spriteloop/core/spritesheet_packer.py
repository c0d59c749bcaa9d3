"""Grid layout for packing equally sized frames into one sheet."""

from __future__ import annotations

import math
from typing import Optional

from . import CropInsets, Rect, SpriteSheetLayout


def resolve_grid(frame_count: int, columns: Optional[int], rows: Optional[int]) -> tuple[int, int]:
    """Compute the grid handed to the packer; unset or zero values are derived."""

    count = max(frame_count, 1)
    cols = int(columns) if columns and columns > 0 else count
    cols = max(1, cols)
    if rows and rows > 0:
        return cols, max(1, int(rows))
    return cols, max(1, math.ceil(count / cols))


def calculate_layout(
    frame_width: int,
    frame_height: int,
    frame_count: int,
    columns: float,
    rows: float,
    padding: float,
) -> SpriteSheetLayout:
    """Place ``frame_count`` frames row-major on a padded grid.

    ``rows`` is a minimum: the grid grows downward rather than dropping
    frames. Padding only separates cells, the outer border gets none.
    """

    safe_columns = max(1, math.floor(columns))
    safe_rows = max(1, math.floor(rows))
    safe_padding = max(0, math.floor(padding))
    effective_rows = max(safe_rows, math.ceil(frame_count / safe_columns))

    sheet_width = safe_columns * frame_width + (safe_columns - 1) * safe_padding
    sheet_height = effective_rows * frame_height + (effective_rows - 1) * safe_padding

    cells = []
    for index in range(frame_count):
        col = index % safe_columns
        row = index // safe_columns
        cells.append(
            Rect(
                x=col * (frame_width + safe_padding),
                y=row * (frame_height + safe_padding),
                width=frame_width,
                height=frame_height,
            )
        )

    return SpriteSheetLayout(
        sheet_width=sheet_width,
        sheet_height=sheet_height,
        cells=cells,
        columns=safe_columns,
        rows=effective_rows,
    )


def crop_rect(width: int, height: int, insets: CropInsets) -> Rect:
    """Region left after trimming ``insets``; never smaller than 1x1."""

    left = min(max(insets.left, 0), max(0, width - 1))
    right = min(max(insets.right, 0), max(0, width - 1 - left))
    top = min(max(insets.top, 0), max(0, height - 1))
    bottom = min(max(insets.bottom, 0), max(0, height - 1 - top))
    return Rect(
        x=int(left),
        y=int(top),
        width=max(1, int(width - left - right)),
        height=max(1, int(height - top - bottom)),
    )
