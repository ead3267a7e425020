"""Structured logging configuration using structlog."""

import logging
import sys
import uuid
from typing import Any

import structlog

from exam_lifecycle.config import Settings

SERVICE_NAME = "exam-lifecycle"
REQUEST_ID_HEADER = "X-Request-ID"


def _processors(json_format: bool) -> list[structlog.types.Processor]:
    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        return [*shared, structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [*shared, structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging(settings: Settings) -> None:
    """Configure stdlib logging and structlog from settings.

    LOG_FORMAT=json emits one JSON object per line; anything else uses the
    coloured console renderer.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )

    structlog.configure(
        processors=_processors(settings.log_format.lower() == "json"),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=SERVICE_NAME)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None = None, **kwargs: Any) -> str:
    """Bind a request id (generated when absent) to subsequent log entries."""
    request_id = request_id or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(request_id=request_id, **kwargs)
    return request_id


def clear_request_context() -> None:
    """Drop per-request context, keeping the service name."""
    structlog.contextvars.unbind_contextvars("request_id", "method", "path")
