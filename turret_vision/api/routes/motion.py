from fastapi import APIRouter, HTTPException, Request, status

router = APIRouter(prefix="/motion", tags=["Motion"])


@router.get("")
async def latest_motion(request: Request):
    """Last detected region and detection counters."""
    motion_log = getattr(request.app.state, "motion_log", None)
    if motion_log is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Detector is not running",
        )

    snapshot = motion_log.snapshot()
    component = request.app.state.detector_component
    if component.detector is not None:
        snapshot["frames_processed"] = component.detector.frames_processed
        snapshot["detector_state"] = component.detector.state.value
    return snapshot
