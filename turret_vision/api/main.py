"""
turret_vision/api/main.py
FastAPI application entry point.

Architecture:
- Thin main.py (just app creation)
- Lifespan opens the camera and runs the detection loop in a thread
- REST endpoints for health, metrics and the latest detection
"""

from typing import Optional

from fastapi import FastAPI

from ..core.config import settings
from ..core.logging import setup_logging, get_logger
from .lifespan.manager import build_lifespan
from .lifespan.modules.detector import DetectorFactory
from .routes import health, metrics, motion

# Setup logging first
setup_logging()
logger = get_logger("main")


# ============================================================================
# Create Application
# ============================================================================

def create_app(detector_factory: Optional[DetectorFactory] = None) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        detector_factory: Builds the MotionDetector from a motion handler.
            Defaults to the camera configured in Settings.

    Returns:
        Configured FastAPI app
    """
    logger.info(
        "creating_app",
        name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Motion detection service for the tracking turret",
        lifespan=build_lifespan(detector_factory),
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(motion.router, prefix="/api/v1", tags=["Motion"])
    if settings.METRICS_ENABLED:
        app.include_router(metrics.router)

    @app.get("/", tags=["Root"])
    async def root():
        """Service info endpoint"""
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "endpoints": {
                "health": "/api/v1/health",
                "motion": "/api/v1/motion",
                "metrics": "/metrics",
                "detector_metrics": "/metrics/detector",
            }
        }

    logger.info("app_created_successfully")
    return app


# Create app instance
app = create_app()


# ============================================================================
# Exports
# ============================================================================

__all__ = ["app", "create_app"]
