"""Core data model for chroma-keying and spritesheet packing."""

__all__ = [
    "PixelBuffer",
    "KeyColor",
    "FeatherDirection",
    "ChromaKeySettings",
    "CropInsets",
    "Rect",
    "SpriteSheetLayout",
    "MarkedFrame",
]

from dataclasses import astuple, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import numpy as np

from .errors import BufferShapeError, ValidationError


@dataclass(eq=False)
class PixelBuffer:
    """An RGBA frame held in memory.

    ``pixels`` is a flat, row-major ``uint8`` array of ``width * height * 4``
    bytes. Consumers that rewrite the alpha channel do so in place; callers
    needing the original must ``copy()`` first.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise BufferShapeError(f"Negative buffer dimensions {self.width}x{self.height}")
        if isinstance(self.pixels, (bytes, bytearray, memoryview)):
            self.pixels = np.frombuffer(self.pixels, dtype=np.uint8).copy()
        else:
            self.pixels = np.asarray(self.pixels, dtype=np.uint8)
        expected = self.width * self.height * 4
        if self.pixels.size != expected:
            raise BufferShapeError(
                f"Buffer of {self.width}x{self.height} needs {expected} bytes, got {self.pixels.size}"
            )
        self.pixels = self.pixels.reshape(-1)

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        return cls(width, height, np.zeros(width * height * 4, dtype=np.uint8))

    @property
    def rgba(self) -> np.ndarray:
        """A ``(height, width, 4)`` view sharing memory with ``pixels``."""

        return self.pixels.reshape(self.height, self.width, 4)

    @property
    def alpha(self) -> np.ndarray:
        return self.rgba[..., 3]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.pixels.copy())


@dataclass(frozen=True)
class KeyColor:
    """An RGB color to remove."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if isinstance(channel, bool) or not isinstance(channel, (int, np.integer)):
                raise ValidationError("Key color channels must be integers")
            if channel < 0 or channel > 255:
                raise ValidationError("Key color values must be between 0 and 255")

    @classmethod
    def coerce(cls, value: Any) -> "KeyColor":
        """Accept a KeyColor or an R,G,B[,A] sequence (alpha ignored)."""

        if isinstance(value, KeyColor):
            return value
        if isinstance(value, (list, tuple)) and len(value) in (3, 4):
            try:
                return cls(int(value[0]), int(value[1]), int(value[2]))
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"Key color must be numeric R,G,B: {value!r}") from exc
        raise ValidationError(f"Cannot interpret {value!r} as a key color")

    def as_tuple(self) -> tuple[int, int, int]:
        return self.r, self.g, self.b


class FeatherDirection(str, Enum):
    """Which side of the keyed edge the feathering may eat into."""

    BACKGROUND = "background"
    SUBJECT = "subject"


@dataclass(frozen=True)
class ChromaKeySettings:
    """User-tunable chroma key parameters."""

    colors: tuple[KeyColor, ...] = ()
    tolerance: float = 40.0
    feather: float = 4.0
    choke: float = 0.0
    smoothing: float = 0.0
    feather_direction: FeatherDirection = FeatherDirection.BACKGROUND

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", tuple(KeyColor.coerce(c) for c in self.colors))
        try:
            direction = FeatherDirection(self.feather_direction)
        except ValueError as exc:
            raise ValidationError(f"Unknown feather direction: {self.feather_direction!r}") from exc
        object.__setattr__(self, "feather_direction", direction)
        for name in ("tolerance", "feather", "choke", "smoothing"):
            object.__setattr__(self, name, float(getattr(self, name)))

    def fingerprint(self) -> tuple:
        """Hashable value equal iff every field is equal (color order matters)."""

        return astuple(self)


@dataclass(frozen=True)
class CropInsets:
    """Pixels trimmed from each edge of a processed frame."""

    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.top or self.right or self.bottom or self.left)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int


@dataclass
class SpriteSheetLayout:
    """Sheet size and one placement per input frame, in input order."""

    sheet_width: int
    sheet_height: int
    cells: list[Rect] = field(default_factory=list)
    columns: int = 1
    rows: int = 1


@dataclass
class MarkedFrame:
    """A frame the user picked from the source video."""

    key: int
    time: float
    frame_index: int
    path: Optional[Path] = None
