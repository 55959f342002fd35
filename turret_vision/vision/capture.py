# turret_vision/vision/capture.py
from typing import Optional, Protocol, Tuple

import cv2
import numpy as np

from ..core.exceptions import CaptureDeviceException
from ..core.logging import get_logger

logger = get_logger("capture")


class CaptureSource(Protocol):
    """Anything that yields frames the way ``cv2.VideoCapture`` does."""

    def read(self, image: Optional[np.ndarray] = None) -> Tuple[bool, Optional[np.ndarray]]:
        ...

    def release(self) -> None:
        ...


class OpenCVCapture:
    """Camera device opened through ``cv2.VideoCapture``."""

    def __init__(self, cap: cv2.VideoCapture, device_id: int):
        self.cap = cap
        self.device_id = device_id
        self._released = False

    @classmethod
    def open(cls, device_id: int = 0) -> "OpenCVCapture":
        if device_id < 0:
            raise CaptureDeviceException(device_id, "invalid device index")

        try:
            cap = cv2.VideoCapture(device_id)
        except cv2.error as e:
            raise CaptureDeviceException(device_id, str(e)) from e

        if not cap.isOpened():
            cap.release()
            raise CaptureDeviceException(device_id)

        logger.info("capture_device_opened", device_id=device_id)
        return cls(cap, device_id)

    def read(self, image: Optional[np.ndarray] = None) -> Tuple[bool, Optional[np.ndarray]]:
        """Read the next frame, into ``image`` when it has the right shape."""
        if self._released:
            return False, None
        if image is None:
            return self.cap.read()
        return self.cap.read(image)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self.cap.release()
        logger.info("capture_device_released", device_id=self.device_id)


__all__ = ["CaptureSource", "OpenCVCapture"]
