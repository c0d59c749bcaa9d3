"""Validation helpers for user inputs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from ..core import CropInsets, KeyColor
from ..core.chroma_key import MAX_TOLERANCE
from ..core.errors import InvalidFrameError, ValidationError
from ..core.separable_filter import MAX_RADIUS
from .file_tools import IMAGE_EXTENSIONS


def validate_frame_path(path: Path | str | None) -> Path:
    """Ensure a frame image exists and has a supported extension."""

    if path is None or str(path).strip() in ("", "."):
        raise InvalidFrameError(Path("<unset>"), reason="No path provided")
    path = Path(path)
    if not path.exists():
        raise InvalidFrameError(path, reason="File not found")
    if path.suffix.lower() not in IMAGE_EXTENSIONS:
        raise InvalidFrameError(path, reason="Unsupported format")
    return path


def parse_key_color(value: str) -> KeyColor:
    """Parse 'R,G,B', 'R,G,B,A' (alpha ignored) or '#RRGGBB'."""

    text = (value or "").strip()
    if not text:
        raise ValidationError("Key color must not be empty")
    if text.startswith("#"):
        hex_digits = text[1:]
        if len(hex_digits) != 6:
            raise ValidationError("Hex key color must look like #RRGGBB")
        try:
            return KeyColor(int(hex_digits[0:2], 16), int(hex_digits[2:4], 16), int(hex_digits[4:6], 16))
        except ValueError as exc:
            raise ValidationError(f"Invalid hex key color: {value}") from exc

    parts = [p.strip() for p in text.split(",")]
    if len(parts) not in (3, 4):
        raise ValidationError("Key color must be R,G,B or #RRGGBB")
    try:
        numbers = [int(p) for p in parts]
    except ValueError as exc:
        raise ValidationError("Key color must be numeric R,G,B") from exc
    return KeyColor(*numbers[:3])


def parse_color_tuple(value: str | None) -> Optional[tuple[int, int, int, int]]:
    """Parse an RGBA color string like '255,0,0,255'."""

    if value is None or value.strip() == "":
        return None
    parts = [p.strip() for p in value.split(",")]
    if len(parts) not in (3, 4):
        raise ValidationError("Background color must be R,G,B[,A]")
    try:
        numbers = [int(p) for p in parts]
    except ValueError as exc:
        raise ValidationError("Background color must be numeric R,G,B[,A]") from exc
    if len(numbers) == 3:
        numbers.append(255)
    if any(n < 0 or n > 255 for n in numbers):
        raise ValidationError("Background color values must be between 0 and 255")
    return tuple(numbers)  # type: ignore


def validate_tolerance(value: float, field: str = "Tolerance") -> float:
    """Ensure tolerance is within the RGB distance range."""

    if value < 0 or value > MAX_TOLERANCE:
        raise ValidationError(f"{field} must be between 0 and {MAX_TOLERANCE:g}")
    return value


def validate_radius(value: float, field: str) -> float:
    if value < 0 or value > MAX_RADIUS:
        raise ValidationError(f"{field} must be between 0 and {MAX_RADIUS}")
    return value


def validate_grid(columns: Optional[int], rows: Optional[int], padding: int = 0) -> None:
    """Grid values may be unset or zero (derived), never negative."""

    if columns is not None and columns < 0:
        raise ValidationError("Columns must be zero or greater")
    if rows is not None and rows < 0:
        raise ValidationError("Rows must be zero or greater")
    if padding < 0:
        raise ValidationError("Padding must be zero or greater")


def validate_fps(value: float, field: str = "FPS") -> float:
    if value <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return value


def parse_crop(values: Optional[Sequence[int]]) -> CropInsets:
    """Build crop insets from TOP RIGHT BOTTOM LEFT."""

    if not values:
        return CropInsets()
    if len(values) != 4:
        raise ValidationError("Crop needs four values: top right bottom left")
    if any(v < 0 for v in values):
        raise ValidationError("Crop values must be zero or greater")
    top, right, bottom, left = (int(v) for v in values)
    return CropInsets(top=top, right=right, bottom=bottom, left=left)
