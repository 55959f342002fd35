"""Health check endpoints for monitoring and observability."""
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from typing import Dict, Any

from ..lifespan.health_registry import get_health_registry, HealthStatus

router = APIRouter(prefix="/api/v1/health", tags=["health"])

@router.get("", response_model=Dict[str, Any], summary="System health check")
@router.get("/", include_in_schema=False)
async def health_check(request: Request):
    """
    Component health summary.

    Status Codes:
    - 200: All components healthy (or none registered yet)
    - 503: One or more components unhealthy or degraded
    """
    health_summary = get_health_registry().get_health_summary()

    component = getattr(request.app.state, "detector_component", None)
    if component is not None:
        health_summary["detector"] = component.get_metrics()

    status_code = status.HTTP_200_OK
    if health_summary["overall_status"] in ("degraded", "unhealthy"):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(status_code=status_code, content=health_summary)


@router.get("/live", summary="Liveness probe")
async def liveness():
    """Returns 200 while the process is running."""
    return {"status": "alive", "probe": "liveness"}


@router.get("/ready", summary="Readiness probe")
async def readiness(request: Request):
    """200 only when the detection loop is running."""
    overall_status = get_health_registry().get_overall_status()

    component = getattr(request.app.state, "detector_component", None)
    if component is not None:
        ready = await component.health_check()
    else:
        ready = overall_status == HealthStatus.HEALTHY

    if ready:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "ready", "probe": "readiness"}
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "not_ready",
            "probe": "readiness",
            "reason": overall_status.value
        }
    )
