"""
turret_vision/vision/background.py
Static reference frame for background subtraction
"""

import numpy as np

from .preprocessing import FramePreprocessor


class BackgroundModel:
    """
    Single grayscale reference frame.

    The array is copied and marked read-only on construction, so the model
    cannot drift while the detector runs. Re-baselining means building a new
    model.
    """

    def __init__(self, gray: np.ndarray):
        if gray.ndim != 2:
            raise ValueError(f"background must be single channel, got shape {gray.shape}")
        frame = np.array(gray, dtype=np.uint8, copy=True)
        frame.setflags(write=False)
        self._frame = frame

    @classmethod
    def capture(cls, raw: np.ndarray, preprocessor: FramePreprocessor) -> "BackgroundModel":
        """Preprocess a raw frame and keep it as the baseline."""
        return cls(preprocessor.process(raw))

    @property
    def frame(self) -> np.ndarray:
        return self._frame

    @property
    def shape(self) -> tuple:
        return self._frame.shape

    def matches(self, gray: np.ndarray) -> bool:
        """True if ``gray`` can be differenced against this background"""
        return gray.shape == self._frame.shape


__all__ = ["BackgroundModel"]
