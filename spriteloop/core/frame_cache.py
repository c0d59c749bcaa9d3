"""Memoization of chroma-keyed frames keyed by frame identity and settings."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Hashable, Optional

from . import ChromaKeySettings, PixelBuffer
from .chroma_key import apply_chroma_key

logger = logging.getLogger(__name__)


class ProcessedFrameCache:
    """Explicit ``(frame_id, fingerprint) -> PixelBuffer`` mapping.

    The whole mapping is discarded when the settings fingerprint changes;
    entries for a single frame are dropped with ``evict`` when the frame
    leaves the working set. All methods are safe to call from several
    threads.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[Hashable, Hashable], PixelBuffer] = {}
        self._fingerprint: Optional[Hashable] = None
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, frame_id: Hashable) -> bool:
        with self._lock:
            return any(key[0] == frame_id for key in self._entries)

    def get(self, frame_id: Hashable, fingerprint: Hashable) -> Optional[PixelBuffer]:
        with self._lock:
            return self._entries.get((frame_id, fingerprint))

    def put(self, frame_id: Hashable, fingerprint: Hashable, buffer: PixelBuffer) -> None:
        with self._lock:
            self._entries[(frame_id, fingerprint)] = buffer

    def invalidate_all(self) -> None:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        if dropped:
            logger.info("Discarded %s processed frame(s) after settings change", dropped)

    def evict(self, frame_id: Hashable) -> int:
        """Drop every entry for ``frame_id``; returns how many were removed."""

        with self._lock:
            stale = [key for key in self._entries if key[0] == frame_id]
            for key in stale:
                del self._entries[key]
        logger.debug("Evicted %s entr(ies) for frame %s", len(stale), frame_id)
        return len(stale)

    def sync_fingerprint(self, fingerprint: Hashable) -> bool:
        """Make ``fingerprint`` current, discarding everything if it changed."""

        with self._lock:
            if fingerprint == self._fingerprint:
                return False
            self._fingerprint = fingerprint
            self.invalidate_all()
            return True

    def get_or_process(
        self,
        frame_id: Hashable,
        settings: ChromaKeySettings,
        load: Callable[[], PixelBuffer],
    ) -> PixelBuffer:
        """Return the keyed frame, computing it from ``load()`` on a miss.

        The buffer returned by ``load`` is keyed in place and becomes the
        cached value; callers must not mutate what they get back.
        """

        fingerprint = settings.fingerprint()
        with self._lock:
            self.sync_fingerprint(fingerprint)
            cached = self._entries.get((frame_id, fingerprint))
        if cached is not None:
            logger.debug("Cache hit for frame %s", frame_id)
            return cached

        logger.debug("Cache miss for frame %s", frame_id)
        processed = apply_chroma_key(load(), settings)
        with self._lock:
            if self._fingerprint == fingerprint:
                self._entries[(frame_id, fingerprint)] = processed
        return processed
