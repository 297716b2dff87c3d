"""Structured logging setup with structlog and analysis run IDs.

Supports two output modes:
- "json": Machine-readable JSON lines (for production/Docker)
- "console": Human-readable colored output (for development)

An analysis run ID is injected via contextvars into every log entry
emitted during a multi-instrument scoring pass, so the per-pair lines
of one pass can be grouped together.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar

import structlog

_analysis_run_id: ContextVar[str] = ContextVar("analysis_run_id", default="")


def new_run_id() -> str:
    """Generate a short identifier for one analysis pass."""
    return uuid.uuid4().hex[:12]


def set_run_id(run_id: str) -> None:
    """Set the analysis run ID for the current context."""
    _analysis_run_id.set(run_id)


def get_run_id() -> str:
    """Get the analysis run ID for the current context."""
    return _analysis_run_id.get()


def _add_run_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Inject analysis_run_id into every log entry."""
    run_id = get_run_id()
    if run_id:
        event_dict["analysis_run_id"] = run_id
    return event_dict


def setup_logging(level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Output format - "json" for production, "console" for dev.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_run_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named structlog logger."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
