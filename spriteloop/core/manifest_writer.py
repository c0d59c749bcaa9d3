"""Manifest writing logic."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from . import MarkedFrame, SpriteSheetLayout
from .errors import ProcessingError
from ..utils import file_tools

logger = logging.getLogger(__name__)


def build_manifest(
    layout: SpriteSheetLayout,
    frames: Sequence[Optional[MarkedFrame]],
    sheet_path: Path,
    padding: int = 0,
) -> dict:
    """Describe where each frame landed on the sheet."""

    frames_payload = {}
    for index, cell in enumerate(layout.cells):
        frame = frames[index] if index < len(frames) else None
        frames_payload[file_tools.export_frame_name(index).removesuffix(".png")] = {
            "x": cell.x,
            "y": cell.y,
            "width": cell.width,
            "height": cell.height,
            "timestamp": frame.time if frame else None,
        }

    return {
        "frames": frames_payload,
        "meta": {
            "columns": layout.columns,
            "rows": layout.rows,
            "padding": padding,
            "size": {"width": layout.sheet_width, "height": layout.sheet_height},
            "spritesheet": sheet_path.name,
        },
    }


def write_manifest(
    layout: SpriteSheetLayout,
    frames: Sequence[Optional[MarkedFrame]],
    sheet_path: Path,
    padding: int = 0,
    manifest_path: Optional[Path] = None,
) -> Path:
    """Create a JSON manifest describing frame coordinates."""

    manifest_path = (manifest_path or sheet_path).with_suffix(".json")
    file_tools.ensure_directory(manifest_path.parent)
    manifest = build_manifest(layout, frames, sheet_path, padding)
    try:
        manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    except OSError as exc:
        raise ProcessingError(f"Failed to write manifest {manifest_path}: {exc}") from exc
    logger.info("Wrote manifest to %s", manifest_path)
    return manifest_path
