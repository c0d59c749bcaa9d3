"""Filesystem helpers."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".bmp"}


def ensure_directory(path: Path) -> Path:
    """Create a directory if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)
    return path


def export_frame_name(index: int) -> str:
    """1-based, zero-padded name used for exported frames."""

    return f"frame_{index + 1:04d}.png"


def extracted_frame_name(key: int) -> str:
    """File name requested from the extractor for a marked frame."""

    return f"frame_{key}.png"


def list_files_with_extensions(root: Path, extensions: set[str]) -> list[Path]:
    """Return sorted list of files in root with given extensions."""

    if not root.exists():
        return []
    files = [p for p in root.iterdir() if p.is_file() and p.suffix.lower() in extensions]
    return sorted(files)


def expand_frame_inputs(paths: list[Path]) -> list[Path]:
    """Expand directories into their sorted image files, keeping file arguments in order."""

    expanded: list[Path] = []
    for path in paths:
        if path.is_dir():
            expanded.extend(list_files_with_extensions(path, IMAGE_EXTENSIONS))
        else:
            expanded.append(path)
    return expanded
