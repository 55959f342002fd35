"""
turret_vision/api/lifespan/manager.py
Lifespan manager for FastAPI.

Responsibilities:
1. Open the capture device and start the detection loop on startup
2. Cancel the loop and release the device on shutdown
"""

from contextlib import asynccontextmanager
from typing import Optional

from ...core.logging import get_logger

from ...core.config import settings
from ...vision.sinks import LoggingMotionHandler, MotionLog
from .modules.detector import DetectorComponent, DetectorFactory

logger = get_logger("lifespan")


def build_lifespan(detector_factory: Optional[DetectorFactory] = None):
    """
    Create a FastAPI lifespan that runs a DetectorComponent.

    ``detector_factory`` receives the motion handler and returns an open
    MotionDetector; by default it is built from Settings.
    """

    @asynccontextmanager
    async def lifespan(app):
        logger.info(
            "application_starting",
            app_name=settings.APP_NAME,
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT
        )

        motion_log = MotionLog(LoggingMotionHandler())
        component = DetectorComponent(detector_factory=detector_factory, motion_log=motion_log)

        try:
            await component.startup()
        except Exception as e:
            logger.error("failed_to_start_detector", error=str(e), exc_info=True)
            raise  # Fail fast if the camera can't be opened

        app.state.detector_component = component
        app.state.motion_log = motion_log

        logger.info("startup_completed_successfully")

        yield

        logger.info("application_shutting_down")
        await component.shutdown()
        logger.info("shutdown_completed")

    return lifespan


lifespan = build_lifespan()


__all__ = ["build_lifespan", "lifespan"]
