"""
Lifecycle management for the detector service.
Manages component startup, health tracking, and graceful shutdown.
"""

from .base import BaseLifecycleComponent, ComponentState
from .health_registry import HealthRegistry, ComponentHealth, HealthStatus, get_health_registry
from .manager import build_lifespan, lifespan


__all__ = [
    "build_lifespan",
    "lifespan",
    "BaseLifecycleComponent",
    "ComponentState",
    "HealthRegistry",
    "ComponentHealth",
    "HealthStatus",
    "get_health_registry",
]
