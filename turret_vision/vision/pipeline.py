"""
turret_vision/vision/pipeline.py
Per-frame background subtraction and contour selection
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional, Sequence

import cv2
import numpy as np

from ..core.logging import get_logger
from ..schemas.motion import CycleResult, MotionRegion, PipelineConfig
from .background import BackgroundModel
from .preprocessing import FramePreprocessor

logger = get_logger("pipeline")

# BGR
RECT_COLOR = (0, 255, 0)
TEXT_COLOR = (255, 0, 0)
STATUS_POINT = (10, 20)
STATUS_TEXT = "Motion detected"


@dataclass
class PipelineBuffers:
    """Working buffers reused across cycles."""
    frame: Optional[np.ndarray]
    gray: Optional[np.ndarray]
    delta: Optional[np.ndarray]
    thresh: Optional[np.ndarray]
    scratch: Optional[np.ndarray]
    kernel: Optional[np.ndarray]

    @classmethod
    def allocate(cls, config: PipelineConfig) -> "PipelineBuffers":
        h, w = config.height, config.width
        k = config.dilation_kernel
        return cls(
            frame=np.zeros((h, w, 3), dtype=np.uint8),
            gray=np.zeros((h, w), dtype=np.uint8),
            delta=np.zeros((h, w), dtype=np.uint8),
            thresh=np.zeros((h, w), dtype=np.uint8),
            scratch=np.zeros((h, w), dtype=np.uint8),
            kernel=cv2.getStructuringElement(cv2.MORPH_RECT, (k, k)),
        )

    @property
    def released(self) -> bool:
        return self.frame is None

    def release(self) -> None:
        for f in fields(self):
            setattr(self, f.name, None)


def best_contour(contours: Sequence[np.ndarray], min_area: float) -> Optional[np.ndarray]:
    """
    Return the contour with the largest area, provided that area is strictly
    greater than ``min_area``. On ties the first one enumerated wins.
    """
    best = None
    best_area = min_area
    for cnt in contours:
        area = cv2.contourArea(cnt)
        if area > best_area:
            best_area = area
            best = cnt
    return best


def annotate(frame: np.ndarray, region: MotionRegion) -> None:
    """Draw the detection rectangle and status label onto ``frame``."""
    x1, y1, x2, y2 = region.to_xyxy()
    cv2.rectangle(frame, (x1, y1), (x2, y2), RECT_COLOR, 2)
    cv2.putText(
        frame, STATUS_TEXT, STATUS_POINT, cv2.FONT_HERSHEY_PLAIN, 1.2, TEXT_COLOR, 2
    )


class MotionPipeline:
    """
    Background subtraction pipeline.

    Each call to :meth:`process` diffs the next frame against the background,
    thresholds and dilates the difference, and reports the bounding box of
    the biggest external contour above ``min_area``. The arrays in the
    returned :class:`CycleResult` are the pipeline's own buffers; they are
    overwritten by the next call.
    """

    def __init__(
        self,
        background: BackgroundModel,
        min_area: float,
        config: Optional[PipelineConfig] = None,
        preprocessor: Optional[FramePreprocessor] = None,
    ):
        self.config = config or PipelineConfig()
        self.preprocessor = preprocessor or FramePreprocessor(self.config)
        self.min_area = min_area
        self.background = background
        self.buffers = PipelineBuffers.allocate(self.config)

        if not background.matches(self.buffers.gray):
            raise ValueError(
                f"background shape {background.shape} does not match "
                f"working shape {self.buffers.gray.shape}"
            )

    def process(self, raw: np.ndarray) -> CycleResult:
        b = self.buffers
        cut = self.config.threshold

        b.frame = self.preprocessor.normalize(raw, out=b.frame)
        b.gray = self.preprocessor.grayscale(b.frame, out=b.gray)
        b.delta = cv2.absdiff(self.background.frame, b.gray, dst=b.delta)
        # THRESH_BINARY keeps values strictly above the cut
        _, b.thresh = cv2.threshold(b.delta, cut - 1, 255, cv2.THRESH_BINARY, dst=b.thresh)
        b.thresh = cv2.dilate(b.thresh, b.kernel, dst=b.thresh)

        np.copyto(b.scratch, b.thresh)
        contours, _ = cv2.findContours(b.scratch, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        region = None
        cnt = best_contour(contours, self.min_area)
        if cnt is not None:
            region = MotionRegion.from_rect(cv2.boundingRect(cnt))
            annotate(b.frame, region)

        return CycleResult(frame=b.frame, delta=b.delta, thresh=b.thresh, region=region)

    def rebaseline(self) -> None:
        """Replace the background with the latest grayscale frame."""
        self.background = BackgroundModel(self.buffers.gray)
        logger.info("background_rebaselined")

    def release(self) -> None:
        self.buffers.release()


__all__ = [
    "MotionPipeline",
    "PipelineBuffers",
    "best_contour",
    "annotate",
]
