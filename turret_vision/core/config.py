"""
turret_vision/core/config.py
Configuration management using Pydantic Settings
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional, Literal

from ..schemas.motion import PipelineConfig


class Settings(BaseSettings):
    """
    Turret Vision Configuration
    Environment variables can override these defaults
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ========================================================================
    # Application Settings
    # ========================================================================
    APP_NAME: str = "Turret-Vision"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False

    # ========================================================================
    # Capture Settings
    # ========================================================================
    CAMERA_DEVICE: int = Field(default=0, ge=0)
    MOTION_MIN_AREA: float = Field(default=7000.0, ge=0.0)  # canonical-frame pixels

    # ========================================================================
    # Motion Pipeline Settings
    # ========================================================================
    FRAME_SIZE: int = Field(default=500, ge=16, le=4096)
    BLUR_KERNEL: int = Field(default=21, ge=1)
    MOTION_THRESHOLD: int = Field(default=50, ge=1, le=255)
    DILATION_KERNEL: int = Field(default=3, ge=1)
    MIRROR_FRAMES: bool = True  # front-facing camera
    BACKGROUND_REFRESH_FRAMES: int = Field(default=0, ge=0)  # 0 = never re-baseline
    COPY_SINK_OUTPUTS: bool = False

    # ========================================================================
    # Display Settings
    # ========================================================================
    STREAM_WINDOWS: bool = False
    WINDOW_WIDTH: int = 800
    WINDOW_HEIGHT: int = 600

    # ========================================================================
    # Logging Settings
    # ========================================================================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "console"

    # ========================================================================
    # API Settings
    # ========================================================================
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8001

    # ========================================================================
    # Monitoring Settings
    # ========================================================================
    METRICS_ENABLED: bool = True

    # ========================================================================
    # Validators
    # ========================================================================

    @field_validator("BLUR_KERNEL", "DILATION_KERNEL")
    def validate_odd_kernel(cls, v):
        """Kernel sizes must be odd so they have a center pixel"""
        if v % 2 == 0:
            raise ValueError(f"kernel size must be odd, got {v}")
        return v

    # ========================================================================
    # Derived Configuration
    # ========================================================================

    def pipeline_config(self) -> PipelineConfig:
        """Build the immutable pipeline configuration"""
        return PipelineConfig(
            frame_size=(self.FRAME_SIZE, self.FRAME_SIZE),
            blur_kernel=self.BLUR_KERNEL,
            threshold=self.MOTION_THRESHOLD,
            dilation_kernel=self.DILATION_KERNEL,
            mirror=self.MIRROR_FRAMES,
            background_refresh_frames=self.BACKGROUND_REFRESH_FRAMES,
            copy_outputs=self.COPY_SINK_OUTPUTS,
        )


# ============================================================================
# Singleton Pattern - Global Settings Instance
# ============================================================================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create settings instance (Singleton)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# Convenience export
settings = get_settings()


# ============================================================================
# Export
# ============================================================================

__all__ = ["Settings", "get_settings", "settings"]
