"""Base classes and enums for lifecycle components."""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime

from ...core.logging import get_logger


class ComponentState(Enum):
    """Lifecycle states for managed components."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DEGRADED = "degraded"
    FAILED = "failed"
    STOPPING = "stopping"
    STOPPED = "stopped"


class BaseLifecycleComponent(ABC):
    """
    Abstract base class for all lifecycle-managed components.

    Each component represents a discrete subsystem requiring
    initialization and cleanup (capture devices, background workers, etc.).
    """

    # Override these in subclasses
    name: str = "UnnamedComponent"
    shutdown_timeout: int = 10  # seconds

    def __init__(self):
        self.state = ComponentState.UNINITIALIZED
        self.started_at: Optional[datetime] = None
        self.stopped_at: Optional[datetime] = None
        self.error: Optional[str] = None
        self.metadata: Dict[str, Any] = {}
        self._logger = get_logger(f"component.{self.name}")

    @abstractmethod
    async def startup(self) -> None:
        """
        Initialize the component.

        Raise on failure; the caller decides whether that is fatal.
        """

    @abstractmethod
    async def shutdown(self) -> None:
        """
        Clean up the component.

        Must be idempotent and must not raise (log errors instead).
        """

    def transition(self, state: ComponentState, error: Optional[str] = None) -> None:
        """Move to ``state``, stamping start/stop times and logging the change."""
        previous = self.state
        self.state = state
        if error is not None:
            self.error = error
        if state == ComponentState.READY and self.started_at is None:
            self.started_at = datetime.utcnow()
        elif state in (ComponentState.STOPPED, ComponentState.FAILED, ComponentState.DEGRADED):
            self.stopped_at = self.stopped_at or datetime.utcnow()
        self._logger.debug(
            "component_state_changed",
            component=self.name,
            previous=previous.value,
            state=state.value,
        )

    async def health_check(self) -> bool:
        """Default implementation checks if state is READY."""
        return self.state == ComponentState.READY

    def get_metrics(self) -> Dict[str, Any]:
        """Return component-specific metrics."""
        uptime = None
        if self.started_at:
            end = self.stopped_at or datetime.utcnow()
            uptime = (end - self.started_at).total_seconds()

        return {
            "state": self.state.value,
            "uptime_seconds": uptime,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "error": self.error,
            "metadata": self.metadata,
        }

    def safe_log(self, event: str, **kwargs):
        """Helper for structured logging."""
        self._logger.info(event, component=self.name, **kwargs)

    def log_error(self, event: str, error: Exception, **kwargs):
        """Helper for error logging with full context."""
        self._logger.error(
            event,
            component=self.name,
            error=str(error),
            error_type=type(error).__name__,
            **kwargs,
            exc_info=True
        )
