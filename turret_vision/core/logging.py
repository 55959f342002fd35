"""
turret_vision/core/logging.py
Structured logging setup using structlog
"""

import logging
import sys
from typing import Optional
import structlog
from structlog.stdlib import BoundLogger
from .config import settings

ROOT_LOGGER = "turret_vision"

_configured = False


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> BoundLogger:
    """
    Configure structlog on top of stdlib logging.

    ``level`` and ``fmt`` default to LOG_LEVEL / LOG_FORMAT from Settings.
    Calling it again only changes the level; the processor chain is set once.
    """
    global _configured

    level = (level or settings.LOG_LEVEL).upper()
    fmt = fmt or settings.LOG_FORMAT

    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger(ROOT_LOGGER).setLevel(getattr(logging, level))

    if not _configured:
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
        ]
        if fmt == "json":
            processors += [
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(),
            ]
        else:
            processors += [
                structlog.processors.format_exc_info,
                structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
            ]

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _configured = True

    logger = structlog.get_logger(ROOT_LOGGER)
    logger.info("logging_configured", level=level, format=fmt)
    return logger


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """
    Get a logger instance

    Args:
        name: Logger name (e.g., "detector", "pipeline")
    """
    if name:
        return structlog.get_logger(f"{ROOT_LOGGER}.{name}")
    return structlog.get_logger(ROOT_LOGGER)


class LogContext:
    """
    Binds key/values to every log line emitted in this thread until exit.

    Usage:
        with LogContext(device_id=0):
            logger.info("detection_loop_started")
    """

    def __init__(self, **kwargs):
        self.context = kwargs

    def __enter__(self):
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        structlog.contextvars.unbind_contextvars(*self.context)
        return False


__all__ = ["setup_logging", "get_logger", "LogContext"]
