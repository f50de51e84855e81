"""structlog setup for the API process."""

import logging
import sys
from typing import Any

import structlog

# Chatty third-party loggers, lowered to WARNING unless DEBUG is requested
_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "asyncio")

_REQUEST_KEYS = ("request_id", "user_id", "method", "path")


def _drop_color_message(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    # uvicorn duplicates every message with ANSI codes under this key
    event_dict.pop("color_message", None)
    return event_dict


def _renderer(json_format: bool) -> list[structlog.types.Processor]:
    if json_format:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    service_name: str = "bitcoin-rmf-review",
) -> None:
    """
    Route stdlib and structlog output through one renderer.

    Args:
        level: Log level name, e.g. INFO or DEBUG
        json_format: JSON lines when True, human-readable console output otherwise
        service_name: Bound as ``service`` on every event
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level, force=True)
    if numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _drop_color_message,
            *_renderer(json_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(request_id: str, **kwargs: Any) -> None:
    """Attach request identifiers to every event logged while handling it."""
    structlog.contextvars.bind_contextvars(request_id=request_id, **kwargs)


def bind_user_context(user_id: str) -> None:
    """Tag the rest of the request's events with the authenticated actor."""
    structlog.contextvars.bind_contextvars(user_id=user_id)


def clear_request_context() -> None:
    structlog.contextvars.unbind_contextvars(*_REQUEST_KEYS)
