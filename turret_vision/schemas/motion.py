"""
turret_vision/schemas/motion.py
Data objects shared by the motion pipeline and its consumers
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, Field, ConfigDict, field_validator


# ============================================================================
# Motion Region
# ============================================================================

class MotionRegion(BaseModel):
    """Axis-aligned rectangle around the most significant moving blob"""
    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=0, description="Top-left X coordinate")
    y: int = Field(..., ge=0, description="Top-left Y coordinate")
    width: int = Field(..., ge=0, description="Rectangle width")
    height: int = Field(..., ge=0, description="Rectangle height")

    @classmethod
    def from_rect(cls, rect: Tuple[int, int, int, int]) -> "MotionRegion":
        """Build from an OpenCV (x, y, w, h) tuple"""
        x, y, w, h = rect
        return cls(x=int(x), y=int(y), width=int(w), height=int(h))

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def center(self) -> tuple[float, float]:
        """Rectangle center point"""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_xywh(self) -> List[int]:
        """Convert to [x, y, width, height] format"""
        return [self.x, self.y, self.width, self.height]

    def to_xyxy(self) -> List[int]:
        """Convert to [x1, y1, x2, y2] format"""
        return [self.x, self.y, self.x + self.width, self.y + self.height]


# ============================================================================
# Pipeline Configuration
# ============================================================================

class PipelineConfig(BaseModel):
    """
    Immutable parameters of the motion pipeline.

    Defaults reproduce the fixed policy of the detector: 500x500 canonical
    frames, 21x21 Gaussian blur, threshold 50, 3x3 dilation, mirrored input.
    """
    model_config = ConfigDict(frozen=True)

    frame_size: Tuple[int, int] = Field(default=(500, 500), description="Canonical (width, height)")
    blur_kernel: int = Field(default=21, ge=1)
    threshold: int = Field(default=50, ge=1, le=255)
    dilation_kernel: int = Field(default=3, ge=1)
    mirror: bool = True
    background_refresh_frames: int = Field(default=0, ge=0)
    copy_outputs: bool = False

    @field_validator("frame_size")
    def validate_frame_size(cls, v):
        if v[0] <= 0 or v[1] <= 0:
            raise ValueError(f"frame size must be positive, got {v}")
        return v

    @field_validator("blur_kernel", "dilation_kernel")
    def validate_odd_kernel(cls, v):
        if v % 2 == 0:
            raise ValueError(f"kernel size must be odd, got {v}")
        return v

    @property
    def width(self) -> int:
        return self.frame_size[0]

    @property
    def height(self) -> int:
        return self.frame_size[1]


# ============================================================================
# Cycle Result
# ============================================================================

@dataclass
class CycleResult:
    """
    Outputs of one pipeline cycle.

    The arrays are the pipeline's working buffers and are overwritten on the
    next cycle.
    """
    frame: np.ndarray
    delta: np.ndarray
    thresh: np.ndarray
    region: Optional[MotionRegion] = None

    @property
    def motion_detected(self) -> bool:
        return self.region is not None


# ============================================================================
# Export
# ============================================================================

__all__ = ["MotionRegion", "PipelineConfig", "CycleResult"]
