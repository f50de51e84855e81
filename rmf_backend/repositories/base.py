"""Shared repository plumbing.

Every repository method that touches the database is wrapped with
``translate_store_errors`` so callers only ever see ``StoreError`` for
backing store failures.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rmf_backend.exceptions import StoreError
from rmf_backend.logging_config import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# Upper bound for list endpoints
MAX_QUERY_LIMIT = 500


def _sanitize_error_for_logging(error: Exception) -> str:
    """Describe a driver error without leaking SQL or connection strings."""
    error_type = type(error).__name__
    safe_messages = {
        "OperationalError": "Database operational error",
        "IntegrityError": "Data integrity constraint violation",
        "ProgrammingError": "Query execution error",
        "InterfaceError": "Database connection failed",
        "TimeoutError": "Operation timed out",
    }
    return safe_messages.get(error_type, f"Error of type {error_type}")


def translate_store_errors(
    operation: str,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator converting SQLAlchemy failures into StoreError."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(
                    "store_operation_failed",
                    operation=operation,
                    error=_sanitize_error_for_logging(e),
                )
                raise StoreError(operation, e) from e

        return wrapper

    return decorator


def clamp_limit(limit: int | None, default: int = 50) -> int:
    """Clamp a requested page size into 1..MAX_QUERY_LIMIT."""
    if limit is None or limit < 1:
        return default
    return min(limit, MAX_QUERY_LIMIT)


class BaseRepository:
    """Base class holding the request-scoped session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
