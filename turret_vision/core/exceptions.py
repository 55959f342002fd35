"""
turret_vision/core/exceptions.py
Custom exceptions for the motion detector
"""

from typing import Optional


class TurretVisionException(Exception):
    """Base exception for all turret vision errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging/response"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# ============================================================================
# Construction Exceptions
# ============================================================================

class CaptureDeviceException(TurretVisionException):
    """Capture device could not be opened"""

    def __init__(self, device_id: int, reason: str = "device not accessible"):
        super().__init__(
            message=f"Could not open capture device {device_id}: {reason}",
            error_code="CAPTURE_DEVICE_UNAVAILABLE",
            details={"device_id": device_id, "reason": reason}
        )


class FrameReadException(TurretVisionException):
    """First frame could not be read from the capture device"""

    def __init__(self, device_id: int):
        super().__init__(
            message=f"Could not read first video frame from device {device_id}",
            error_code="FIRST_FRAME_READ_FAILED",
            details={"device_id": device_id}
        )


class InvalidParametersException(TurretVisionException):
    """Invalid construction parameters"""

    def __init__(self, parameter: str, reason: str):
        super().__init__(
            message=f"Invalid parameter '{parameter}': {reason}",
            error_code="INVALID_PARAMETERS",
            details={"parameter": parameter, "reason": reason}
        )


# ============================================================================
# Lifecycle Exceptions
# ============================================================================

class DetectorClosedException(TurretVisionException):
    """Detector was used after its resources were released"""

    def __init__(self):
        super().__init__(
            message="Detector is closed and cannot run again",
            error_code="DETECTOR_CLOSED",
        )


class ResourceReleaseException(TurretVisionException):
    """Releasing an owned resource failed"""

    def __init__(self, resource: str, reason: str, failures: int = 1):
        super().__init__(
            message=f"Failed to release {resource}: {reason}",
            error_code="RESOURCE_RELEASE_FAILED",
            details={"resource": resource, "reason": reason, "failures": failures}
        )


# ============================================================================
# Export
# ============================================================================

__all__ = [
    "TurretVisionException",
    "CaptureDeviceException",
    "FrameReadException",
    "InvalidParametersException",
    "DetectorClosedException",
    "ResourceReleaseException",
]
