"""Export keyed frames as PNG files, a packed spritesheet or an animated GIF."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from PIL import Image

from . import PixelBuffer, SpriteSheetLayout
from .errors import ProcessingError, ValidationError
from .spritesheet_packer import calculate_layout, resolve_grid
from ..utils import file_tools, image_tools

logger = logging.getLogger(__name__)

DEFAULT_GIF_FPS = 12


def export_frames(buffers: Iterable[PixelBuffer], output_dir: Path) -> list[Path]:
    """Write each frame as ``frame_0001.png``, ``frame_0002.png``, ..."""

    file_tools.ensure_directory(output_dir)
    written = []
    for index, buffer in enumerate(buffers):
        path = output_dir / file_tools.export_frame_name(index)
        written.append(_save(image_tools.to_image(buffer), path))
    logger.info("Wrote %s frame(s) to %s", len(written), output_dir)
    return written


def build_spritesheet(
    buffers: Sequence[PixelBuffer],
    columns: Optional[int],
    rows: Optional[int],
    padding: int = 0,
    background: Optional[Tuple[int, int, int, int]] = None,
) -> Tuple[Image.Image, SpriteSheetLayout]:
    """Paste frames into their grid cells; the first frame sets the cell size."""

    if not buffers:
        raise ValidationError("No frames provided to pack.")

    frame_width, frame_height = buffers[0].size
    grid_columns, grid_rows = resolve_grid(len(buffers), columns, rows)
    layout = calculate_layout(frame_width, frame_height, len(buffers), grid_columns, grid_rows, padding)
    sheet = Image.new("RGBA", (layout.sheet_width, layout.sheet_height), background or (0, 0, 0, 0))

    for index, (buffer, cell) in enumerate(zip(buffers, layout.cells)):
        if buffer.size != (frame_width, frame_height):
            logger.warning(
                "Frame %s is %sx%s, expected %sx%s; pasting without resizing",
                index,
                buffer.width,
                buffer.height,
                frame_width,
                frame_height,
            )
        sheet.paste(image_tools.to_image(buffer), (cell.x, cell.y))
    return sheet, layout


def export_spritesheet(
    buffers: Sequence[PixelBuffer],
    output_path: Path,
    columns: Optional[int] = None,
    rows: Optional[int] = None,
    padding: int = 0,
    background: Optional[Tuple[int, int, int, int]] = None,
) -> Tuple[Path, SpriteSheetLayout]:
    """Pack frames into one PNG and persist it."""

    output_path = output_path.with_suffix(".png")
    sheet, layout = build_spritesheet(buffers, columns, rows, padding, background)
    _save(sheet, output_path)
    logger.info(
        "Wrote %sx%s spritesheet (%s frames, %sx%s grid) to %s",
        layout.sheet_width,
        layout.sheet_height,
        len(layout.cells),
        layout.columns,
        layout.rows,
        output_path,
    )
    return output_path, layout


def export_gif(buffers: Iterable[PixelBuffer], output_path: Path, fps: float = DEFAULT_GIF_FPS) -> Path:
    """Encode frames as a looping animated GIF."""

    if fps <= 0:
        raise ValidationError("GIF FPS must be greater than zero")
    frames = [image_tools.to_image(buffer) for buffer in buffers]
    if not frames:
        raise ValidationError("No frames provided for the animation.")

    output_path = output_path.with_suffix(".gif")
    file_tools.ensure_directory(output_path.parent)
    duration = max(1, round(1000 / fps))
    try:
        frames[0].save(
            output_path,
            save_all=True,
            append_images=frames[1:],
            duration=duration,
            loop=0,
            disposal=2,
        )
    except OSError as exc:
        raise ProcessingError(f"Failed to write GIF {output_path}: {exc}") from exc
    logger.info("Wrote %s-frame GIF at %s fps to %s", len(frames), fps, output_path)
    return output_path


def _save(image: Image.Image, path: Path) -> Path:
    try:
        return image_tools.save_image(image, path)
    except OSError as exc:
        raise ProcessingError(f"Failed to write {path}: {exc}") from exc
