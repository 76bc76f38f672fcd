"""
Structured logging for the life OS backend.

structlog sits on top of the stdlib logging module so uvicorn and psycopg
records land in the same stream. Events are key/value pairs:

    logger.info("Contact tier recomputed", contact_id=contact_id, tier="close")

The request-id middleware binds ``request_id`` into the contextvars, so it
is attached to every event emitted while a request is being handled.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory

QUIET_LOGGERS = ("psycopg.pool", "uvicorn.access")


def _drop_none_values(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in event_dict.items() if value is not None}


def setup_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_output: One JSON object per line; False renders for a terminal
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _drop_none_values,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_request(
    method: str, path: str, status_code: int, duration_ms: float, request_id: str | None = None
) -> None:
    """One summary event per HTTP request; 4xx and 5xx are logged as warnings."""
    logger = get_logger("lifeos.http")
    fields = {
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms,
        "request_id": request_id,
    }

    if status_code >= 400:
        logger.warning("HTTP request failed", **fields)
    else:
        logger.info("HTTP request completed", **fields)
