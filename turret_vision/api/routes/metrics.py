"""
turret_vision/api/routes/metrics.py
Prometheus scrape endpoint plus a JSON view of the detector counters.
"""

from fastapi import APIRouter, HTTPException, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST
from ...metrics.registry import render_prometheus_metrics

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def metrics():
    """Prometheus scrape endpoint."""
    data = render_prometheus_metrics()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@router.get("/metrics/detector")
async def detector_metrics(request: Request):
    """Lifecycle state and loop counters of the running detector."""
    component = getattr(request.app.state, "detector_component", None)
    if component is None:
        raise HTTPException(status_code=503, detail="detector not started")
    return component.get_metrics()
