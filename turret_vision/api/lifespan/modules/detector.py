"""Detection loop lifecycle component."""
import asyncio
import threading
from typing import Callable, Optional

from ..base import BaseLifecycleComponent, ComponentState
from ..health_registry import HealthRegistry, get_health_registry
from ....core.exceptions import TurretVisionException
from ....vision.detector import MotionDetector, StopReason
from ....vision.sinks import LoggingMotionHandler, MotionHandler, MotionLog

DetectorFactory = Callable[[MotionHandler], MotionDetector]


def _default_factory(handler: MotionHandler) -> MotionDetector:
    from ....core.container import build_detector
    return build_detector(handler=handler)


class DetectorComponent(BaseLifecycleComponent):
    """
    Runs the motion detector next to the API event loop.

    Responsibilities:
    - Open the capture device and capture the background on startup
    - Run the detection loop in a dedicated daemon thread
    - Record every detection in a MotionLog for the API
    - Cancel the loop and release the device on shutdown
    """

    name = "MotionDetector"
    shutdown_timeout = 10

    def __init__(
        self,
        detector_factory: Optional[DetectorFactory] = None,
        motion_log: Optional[MotionLog] = None,
        health_registry: Optional[HealthRegistry] = None,
    ):
        super().__init__()
        self.detector_factory = detector_factory or _default_factory
        self.motion_log = motion_log or MotionLog(LoggingMotionHandler())
        self.health = health_registry or get_health_registry()
        self.detector: Optional[MotionDetector] = None
        self._thread: Optional[threading.Thread] = None

    async def startup(self) -> None:
        """Open the detector and start the loop thread."""
        self.transition(ComponentState.INITIALIZING)
        self.safe_log("opening_detector")

        try:
            self.detector = self.detector_factory(self.motion_log)
        except TurretVisionException as e:
            self.transition(ComponentState.FAILED, error=e.message)
            self.health.mark_failed(self.name, e.message, error_code=e.error_code)
            self.log_error("detector_open_failed", e)
            raise

        self.metadata.update({
            "device_id": self.detector.device_id,
            "min_area": self.detector.min_area,
            "frame_size": list(self.detector.config.frame_size),
        })

        self._thread = threading.Thread(
            target=self._run_loop, name="motion-detector", daemon=True
        )
        self.transition(ComponentState.READY)
        self.health.mark_healthy(self.name, **self.metadata)
        self._thread.start()

        self.safe_log("detector_started", **self.metadata)

    def _run_loop(self) -> None:
        try:
            reason = self.detector.run()
        except Exception as e:
            self.transition(ComponentState.FAILED, error=str(e))
            self.health.mark_failed(self.name, str(e))
            self.log_error("detection_loop_crashed", e)
            return

        if reason is StopReason.END_OF_STREAM:
            self.transition(ComponentState.DEGRADED)
            self.health.mark_degraded(self.name, "capture source exhausted")
        self.safe_log("detection_loop_exited", reason=reason.value)

    async def shutdown(self) -> None:
        """Cancel the loop, wait for it and release the detector."""
        if self.detector is None or self.state == ComponentState.STOPPED:
            return

        self.transition(ComponentState.STOPPING)
        self.safe_log("stopping_detector")
        self.detector.stop()

        if self._thread is not None:
            await asyncio.to_thread(self._thread.join, self.shutdown_timeout)
            if self._thread.is_alive():
                self._logger.warning(
                    "detection_thread_still_running",
                    component=self.name,
                    timeout=self.shutdown_timeout,
                )
                return

        try:
            self.detector.close()
        except TurretVisionException as e:
            # Log but don't raise - best effort shutdown
            self.log_error("detector_close_error", e)

        self.transition(ComponentState.STOPPED)
        self.health.mark_degraded(self.name, "stopped")
        self.safe_log("detector_stopped")

    async def health_check(self) -> bool:
        alive = self._thread is not None and self._thread.is_alive()
        return alive and await super().health_check()

    def get_metrics(self) -> dict:
        base_metrics = super().get_metrics()
        if self.detector is not None:
            base_metrics["detector"] = {
                "state": self.detector.state.value,
                "frames_processed": self.detector.frames_processed,
                "detections": self.detector.detections,
                "stop_reason": self.detector.stop_reason.value if self.detector.stop_reason else None,
            }
        return base_metrics
