from typing import Optional

from .config import settings
from ..vision.detector import MotionDetector
from ..vision.sinks import MotionHandler, NullStreamer, Streamer, WindowStreamer


def build_streamer(windows: Optional[bool] = None) -> Streamer:
    """
    Display windows when enabled in Settings (or forced by ``windows``),
    otherwise a streamer that drops every image.
    """
    if windows is None:
        windows = settings.STREAM_WINDOWS
    if windows:
        return WindowStreamer(settings.WINDOW_WIDTH, settings.WINDOW_HEIGHT)
    return NullStreamer()


def build_detector(
    handler: Optional[MotionHandler] = None,
    streamer: Optional[Streamer] = None,
    device_id: Optional[int] = None,
    min_area: Optional[float] = None,
    **config_overrides,
) -> MotionDetector:
    """
    Create a MotionDetector from Settings. Explicit arguments win over the
    configured values; ``config_overrides`` patch the pipeline config.
    """
    config = settings.pipeline_config()
    if config_overrides:
        config = config.model_copy(update=config_overrides)

    return MotionDetector(
        device_id=settings.CAMERA_DEVICE if device_id is None else device_id,
        min_area=settings.MOTION_MIN_AREA if min_area is None else min_area,
        handler=handler,
        streamer=streamer or build_streamer(),
        config=config,
        metrics_enabled=settings.METRICS_ENABLED,
    )
