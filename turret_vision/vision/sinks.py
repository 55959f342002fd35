"""
turret_vision/vision/sinks.py
Consumers of detector output: motion handlers and image streamers.

Both receive data synchronously from the detection loop, so a slow consumer
slows capture down. Images passed to a streamer are the detector's working
buffers: they are only valid for the duration of the call and are
overwritten on the next cycle. Copy them if they need to outlive the call
(or enable ``copy_outputs`` in the pipeline config).
"""

from __future__ import annotations

from datetime import datetime
from threading import RLock
from typing import Any, Dict, Optional, Protocol

import cv2
import numpy as np

from ..core.logging import get_logger
from ..schemas.motion import MotionRegion

logger = get_logger("sinks")


# ============================================================================
# Interfaces
# ============================================================================

class MotionHandler(Protocol):
    """Called with the selected region whenever motion is detected."""

    def __call__(self, region: MotionRegion) -> None:
        ...


class Streamer(Protocol):
    """Receives the three images produced on every cycle."""

    def stream_frame(self, img: np.ndarray) -> None:
        ...

    def stream_delta(self, img: np.ndarray) -> None:
        ...

    def stream_thresh(self, img: np.ndarray) -> None:
        ...


# ============================================================================
# Streamers
# ============================================================================

class NullStreamer:
    """Discards every image."""

    def stream_frame(self, img: np.ndarray) -> None:
        pass

    def stream_delta(self, img: np.ndarray) -> None:
        pass

    def stream_thresh(self, img: np.ndarray) -> None:
        pass


class WindowStreamer:
    """
    Shows each image type in its own HighGUI window.

    Windows are created lazily on the first image. The event queue is pumped
    once per cycle, after the threshold image.
    """

    FRAME_WINDOW = "frame"
    DELTA_WINDOW = "delta"
    THRESH_WINDOW = "threshold"

    def __init__(self, width: int = 800, height: int = 600):
        self.width = width
        self.height = height
        self._opened = set()

    def _show(self, name: str, img: np.ndarray) -> None:
        if name not in self._opened:
            cv2.namedWindow(name, cv2.WINDOW_NORMAL)
            cv2.resizeWindow(name, self.width, self.height)
            self._opened.add(name)
        cv2.imshow(name, img)

    def stream_frame(self, img: np.ndarray) -> None:
        self._show(self.FRAME_WINDOW, img)

    def stream_delta(self, img: np.ndarray) -> None:
        self._show(self.DELTA_WINDOW, img)

    def stream_thresh(self, img: np.ndarray) -> None:
        self._show(self.THRESH_WINDOW, img)
        cv2.waitKey(1)

    def close(self) -> None:
        for name in list(self._opened):
            try:
                cv2.destroyWindow(name)
            except cv2.error as e:
                logger.warning("window_close_failed", window=name, error=str(e))
            self._opened.discard(name)


# ============================================================================
# Motion Handlers
# ============================================================================

class LoggingMotionHandler:
    """Logs every region; stands in for the turret when none is attached."""

    def __call__(self, region: MotionRegion) -> None:
        logger.info(
            "motion_detected",
            x=region.x,
            y=region.y,
            width=region.width,
            height=region.height,
            area=region.area,
            center=region.center,
        )


class MotionLog:
    """
    Thread-safe record of the latest detection.

    Usable as a motion handler; forwards each region to ``downstream`` after
    recording it.
    """

    def __init__(self, downstream: Optional[MotionHandler] = None):
        self.downstream = downstream
        self._lock = RLock()
        self._last_region: Optional[MotionRegion] = None
        self._last_seen: Optional[datetime] = None
        self._detections = 0

    def __call__(self, region: MotionRegion) -> None:
        with self._lock:
            self._last_region = region
            self._last_seen = datetime.utcnow()
            self._detections += 1
        if self.downstream is not None:
            self.downstream(region)

    @property
    def last_region(self) -> Optional[MotionRegion]:
        with self._lock:
            return self._last_region

    @property
    def detections(self) -> int:
        with self._lock:
            return self._detections

    def snapshot(self) -> Dict[str, Any]:
        """Serialize to dictionary for API responses."""
        with self._lock:
            return {
                "detections": self._detections,
                "last_region": self._last_region.model_dump() if self._last_region else None,
                "last_seen": self._last_seen.isoformat() if self._last_seen else None,
            }


__all__ = [
    "MotionHandler",
    "Streamer",
    "NullStreamer",
    "WindowStreamer",
    "LoggingMotionHandler",
    "MotionLog",
]
