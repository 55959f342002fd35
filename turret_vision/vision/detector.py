"""
turret_vision/vision/detector.py
Detection loop: reads frames, runs the motion pipeline, dispatches results
"""

from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Callable, Optional

import numpy as np

from ..core.exceptions import (
    DetectorClosedException,
    FrameReadException,
    InvalidParametersException,
    ResourceReleaseException,
)
from ..core.logging import get_logger, LogContext
from ..metrics.registry import mark_detector_running, track_cycle, track_release_failure
from ..schemas.motion import PipelineConfig
from .background import BackgroundModel
from .capture import CaptureSource, OpenCVCapture
from .pipeline import MotionPipeline
from .preprocessing import FramePreprocessor
from .sinks import LoggingMotionHandler, MotionHandler, NullStreamer, Streamer

logger = get_logger("detector")

DEFAULT_MIN_AREA = 7000.0

CaptureFactory = Callable[[int], CaptureSource]


class DetectorState(Enum):
    """Lifecycle states of the detection loop."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class StopReason(str, Enum):
    CANCELLED = "cancelled"
    END_OF_STREAM = "end_of_stream"
    ERROR = "error"


class MotionDetector:
    """
    Detects motion on a video device.

    Construction opens the device and captures the first frame as the
    background; failing either raises and leaves nothing open. :meth:`run`
    then processes frames until it is cancelled or a read fails, calling
    ``handler`` with the biggest moving region and ``streamer`` with the
    frame, delta and threshold images of every cycle. When the loop ends all
    resources are released.

    Usage:
        detector = MotionDetector(0, 7000, handler=turret.aim)
        worker = threading.Thread(target=detector.run, daemon=True)
        worker.start()
        ...
        detector.stop()
        worker.join()
    """

    def __init__(
        self,
        device_id: int = 0,
        min_area: float = DEFAULT_MIN_AREA,
        handler: Optional[MotionHandler] = None,
        streamer: Optional[Streamer] = None,
        config: Optional[PipelineConfig] = None,
        capture_factory: Optional[CaptureFactory] = None,
        metrics_enabled: bool = True,
    ):
        if min_area < 0:
            raise InvalidParametersException("min_area", "must not be negative")

        self.device_id = device_id
        self.min_area = float(min_area)
        self.config = config or PipelineConfig()
        self.handler = handler or LoggingMotionHandler()
        self.streamer = streamer or NullStreamer()
        self.metrics_enabled = metrics_enabled

        self.state = DetectorState.IDLE
        self.stop_reason: Optional[StopReason] = None
        self.frames_processed = 0
        self.detections = 0
        self._cancel = threading.Event()
        self._closed = False

        factory = capture_factory or OpenCVCapture.open
        self.video = factory(device_id)

        try:
            ok, raw = self.video.read()
            if not ok or raw is None:
                raise FrameReadException(device_id)

            preprocessor = FramePreprocessor(self.config)
            background = BackgroundModel.capture(raw, preprocessor)
            self.pipeline = MotionPipeline(background, self.min_area, self.config, preprocessor)
        except Exception:
            self.video.release()
            raise

        self._raw: Optional[np.ndarray] = raw

        logger.info(
            "detector_initialized",
            device_id=device_id,
            min_area=self.min_area,
            frame_size=self.config.frame_size,
            source_shape=raw.shape,
        )

    # --- lifecycle -----------------------------------------------------------
    @property
    def closed(self) -> bool:
        return self._closed

    def stop(self) -> None:
        """Ask the loop to stop before its next cycle."""
        self._cancel.set()

    def _cancelled(self, cancel: Optional[threading.Event]) -> bool:
        return self._cancel.is_set() or (cancel is not None and cancel.is_set())

    def run(self, cancel: Optional[threading.Event] = None) -> StopReason:
        """
        Run the detection loop until cancelled or the source is exhausted.

        Cancellation (``stop()`` or the ``cancel`` event) is checked at the
        top of every iteration, never mid-cycle. Both ways of stopping are
        normal and are returned as the stop reason. All resources are
        released before returning.
        """
        if self._closed:
            raise DetectorClosedException()
        if self.state is DetectorState.RUNNING:
            raise RuntimeError("detector is already running")

        self.state = DetectorState.RUNNING
        reason = StopReason.ERROR

        with LogContext(device_id=self.device_id):
            logger.info("detection_loop_started", min_area=self.min_area)
            if self.metrics_enabled:
                mark_detector_running(self.device_id, True)
            try:
                while True:
                    if self._cancelled(cancel):
                        reason = StopReason.CANCELLED
                        break
                    if not self.scan():
                        reason = StopReason.END_OF_STREAM
                        break
            finally:
                self.stop_reason = reason
                if self.metrics_enabled:
                    mark_detector_running(self.device_id, False)
                self._teardown()
                logger.info(
                    "detection_loop_stopped",
                    reason=reason.value,
                    frames_processed=self.frames_processed,
                    detections=self.detections,
                )

        return reason

    # --- per-cycle work ------------------------------------------------------
    def scan(self) -> bool:
        """
        Process the next frame. Returns False when no frame could be read,
        in which case no sink is called.
        """
        if self._closed:
            raise DetectorClosedException()
        ok, raw = self.video.read(self._raw)
        if not ok or raw is None:
            logger.info("frame_read_failed", frames_processed=self.frames_processed)
            return False
        self._raw = raw

        started = time.perf_counter()
        result = self.pipeline.process(raw)
        self.frames_processed += 1

        if result.region is not None:
            self.detections += 1
            self.handler(result.region)

        frame, delta, thresh = result.frame, result.delta, result.thresh
        if self.config.copy_outputs:
            frame, delta, thresh = frame.copy(), delta.copy(), thresh.copy()

        self.streamer.stream_frame(frame)
        self.streamer.stream_delta(delta)
        self.streamer.stream_thresh(thresh)

        refresh = self.config.background_refresh_frames
        if refresh and self.frames_processed % refresh == 0:
            self.pipeline.rebaseline()

        if self.metrics_enabled:
            track_cycle(self.device_id, time.perf_counter() - started, result.motion_detected)

        logger.debug(
            "frame_processed",
            frame_number=self.frames_processed,
            motion=result.motion_detected,
        )
        return True

    # --- cleanup -------------------------------------------------------------
    def _drop_raw(self) -> None:
        self._raw = None

    def close(self) -> None:
        """
        Release the capture source and every working buffer.

        Safe to call more than once; only the first call does anything. All
        releases are attempted; if any failed, the first failure is raised
        as ResourceReleaseException afterwards.
        """
        if self._closed:
            return
        if self.state is DetectorState.RUNNING:
            raise RuntimeError("detector is running; call stop() and wait for run() to return")

        self._closed = True
        self._cancel.set()

        failures = []
        for resource, release in (
            ("capture", self.video.release),
            ("pipeline_buffers", self.pipeline.release),
            ("raw_frame", self._drop_raw),
        ):
            try:
                release()
            except Exception as e:
                # Best effort: keep releasing the rest
                failures.append((resource, e))
                logger.error("resource_release_failed", resource=resource, error=str(e))
                if self.metrics_enabled:
                    track_release_failure(resource)

        self.state = DetectorState.STOPPED
        logger.info("detector_closed", device_id=self.device_id, failures=len(failures))

        if failures:
            resource, error = failures[0]
            raise ResourceReleaseException(resource, str(error), failures=len(failures)) from error

    def _teardown(self) -> None:
        self.state = DetectorState.STOPPED
        try:
            self.close()
        except ResourceReleaseException as e:
            logger.warning("detector_teardown_incomplete", **e.to_dict())

    def __enter__(self) -> "MotionDetector":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


__all__ = ["MotionDetector", "DetectorState", "StopReason", "DEFAULT_MIN_AREA"]
