"""Motion detection pipeline and detection loop."""

from .background import BackgroundModel
from .capture import CaptureSource, OpenCVCapture
from .detector import MotionDetector, DetectorState, StopReason, DEFAULT_MIN_AREA
from .pipeline import MotionPipeline, best_contour
from .preprocessing import FramePreprocessor
from .sinks import (
    LoggingMotionHandler,
    MotionHandler,
    MotionLog,
    NullStreamer,
    Streamer,
    WindowStreamer,
)

__all__ = [
    "BackgroundModel",
    "CaptureSource",
    "OpenCVCapture",
    "MotionDetector",
    "DetectorState",
    "StopReason",
    "DEFAULT_MIN_AREA",
    "MotionPipeline",
    "best_contour",
    "FramePreprocessor",
    "LoggingMotionHandler",
    "MotionHandler",
    "MotionLog",
    "NullStreamer",
    "Streamer",
    "WindowStreamer",
]
