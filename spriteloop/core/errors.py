"""Domain-specific exceptions for chroma keying and export."""

from pathlib import Path


class SpriteLoopError(Exception):
    """Base class for every error raised by this package."""


class BufferShapeError(SpriteLoopError, ValueError):
    """Raised when a pixel buffer's byte count does not match its dimensions."""


class ValidationError(SpriteLoopError, ValueError):
    """Raised when user-provided settings fail validation."""


class InvalidFrameError(SpriteLoopError, ValueError):
    """Raised when a frame image is missing or cannot be decoded."""

    def __init__(self, path: Path, reason: str | None = None):
        message = f"Invalid frame image: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path


class ProcessingError(SpriteLoopError, RuntimeError):
    """Raised when the pipeline fails unexpectedly."""
