"""
turret_vision/vision/preprocessing.py
Frame normalization ahead of background differencing
"""

from typing import Optional

import cv2
import numpy as np

from ..schemas.motion import PipelineConfig


class FramePreprocessor:
    """
    Turns raw color frames into blurred grayscale frames of a fixed size.

    Every frame goes through the same steps so that the background and the
    working frames always have identical dimensions:

    1. resize to the canonical resolution (linear interpolation)
    2. mirror horizontally (front-facing capture)
    3. BGR -> single channel intensity
    4. Gaussian blur with reflected borders to suppress sensor noise

    All methods accept an optional ``out`` array which is written in place
    when its shape and dtype match.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def normalize(self, raw: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Resize (and mirror) a raw color frame to the canonical size."""
        out = cv2.resize(
            raw, self.config.frame_size, dst=out, interpolation=cv2.INTER_LINEAR
        )
        if self.config.mirror:
            out = cv2.flip(out, 1, dst=out)
        return out

    def grayscale(self, frame: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Convert a canonical color frame into the blurred grayscale form."""
        out = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY, dst=out)
        k = self.config.blur_kernel
        return cv2.GaussianBlur(
            out, (k, k), 0, dst=out, borderType=cv2.BORDER_REFLECT_101
        )

    def process(self, raw: np.ndarray) -> np.ndarray:
        """Full preprocessing of a raw frame into a new grayscale array."""
        return self.grayscale(self.normalize(raw))


__all__ = ["FramePreprocessor"]
