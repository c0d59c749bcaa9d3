"""Marked-frame selection and the ordered working set used for preview and export."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Callable, Iterator, Optional

from . import ChromaKeySettings, CropInsets, MarkedFrame, PixelBuffer
from .errors import ProcessingError, ValidationError
from .frame_cache import ProcessedFrameCache
from ..utils import file_tools, image_tools

logger = logging.getLogger(__name__)

# Collaborator that decodes the frame at ``timestamp`` into ``file_name`` and returns its path.
FrameExtractor = Callable[[float, str], Path]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def frame_key(timestamp: float) -> int:
    """Millisecond key identifying a marked frame."""

    return _round_half_up(timestamp * 1000)


def compute_mark_indices(
    in_point: float,
    out_point: float,
    fps: float,
    step: float,
    max_frame: int,
) -> list[int]:
    """Frame indices to mark every ``step`` frames between the in and out points.

    The end frame is always included even when the step does not land on it.
    """

    if fps <= 0:
        raise ValidationError("FPS must be greater than zero")
    if out_point < in_point:
        return []
    stride = max(1, math.floor(step))
    start = max(0, _round_half_up(in_point * fps))
    end = min(_round_half_up(out_point * fps), max_frame)
    if start > max_frame or end < start:
        return []
    indices = list(range(start, end + 1, stride))
    if indices[-1] != end:
        indices.append(end)
    return indices


class FrameWorkingSet:
    """Ordered frames the user has marked, backed by a processed-frame cache."""

    def __init__(self, cache: Optional[ProcessedFrameCache] = None) -> None:
        self.cache = cache if cache is not None else ProcessedFrameCache()
        self._frames: list[MarkedFrame] = []

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[MarkedFrame]:
        return iter(list(self._frames))

    @property
    def keys(self) -> list[int]:
        return [frame.key for frame in self._frames]

    def add(self, frame: MarkedFrame) -> bool:
        """Append a frame unless one with the same key is already marked."""

        if any(existing.key == frame.key for existing in self._frames):
            return False
        self._frames.append(frame)
        return True

    def remove(self, key: int) -> None:
        self._frames = [frame for frame in self._frames if frame.key != key]
        self.cache.evict(key)

    def clear(self) -> None:
        for frame in self._frames:
            self.cache.evict(frame.key)
        self._frames = []

    def reorder(self, from_key: int, to_key: int) -> None:
        """Move the frame ``from_key`` into the position held by ``to_key``."""

        if from_key == to_key:
            return
        keys = self.keys
        if from_key not in keys or to_key not in keys:
            return
        from_index = keys.index(from_key)
        to_index = keys.index(to_key)
        moved = self._frames.pop(from_index)
        self._frames.insert(to_index, moved)

    def mark_range(
        self,
        in_point: float,
        out_point: float,
        fps: float,
        step: float,
        max_frame: int,
        extract: FrameExtractor,
    ) -> list[MarkedFrame]:
        """Mark every ``step``-th frame in the range, extracting each new one."""

        added: list[MarkedFrame] = []
        for frame_index in compute_mark_indices(in_point, out_point, fps, step, max_frame):
            timestamp = frame_index / fps
            key = frame_key(timestamp)
            if key in self.keys:
                continue
            try:
                path = extract(timestamp, file_tools.extracted_frame_name(key))
            except Exception as exc:
                raise ProcessingError(f"Failed to extract frame at {timestamp:.3f}s: {exc}") from exc
            frame = MarkedFrame(key=key, time=timestamp, frame_index=frame_index, path=Path(path))
            self._frames.append(frame)
            added.append(frame)
        logger.info("Marked %s new frame(s) between %.3fs and %.3fs", len(added), in_point, out_point)
        return added

    def processed(self, frame: MarkedFrame, settings: ChromaKeySettings) -> PixelBuffer:
        """Keyed buffer for one frame, shared with the cache; do not mutate it."""

        if frame.path is None:
            raise ValidationError(f"Frame {frame.key} has no image file")
        return self.cache.get_or_process(frame.key, settings, lambda: image_tools.load_buffer(frame.path))

    def processed_frames(
        self,
        settings: ChromaKeySettings,
        crop: Optional[CropInsets] = None,
    ) -> Iterator[PixelBuffer]:
        """Yield cropped keyed frames in working-set order."""

        for frame in list(self._frames):
            yield image_tools.crop_buffer(self.processed(frame, settings), crop)
