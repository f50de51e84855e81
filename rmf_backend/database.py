"""Async engine and request-scoped sessions over asyncpg.

The engine is created lazily on first use so importing the app never opens a
connection. Each request gets one ``AsyncSession``; routes commit explicitly
and anything left uncommitted is rolled back when the request ends.
"""

from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from rmf_backend.config import get_settings
from rmf_backend.logging_config import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None

_DRIVER_PREFIXES = ("postgres://", "postgresql://")


def get_database_url() -> str:
    """DATABASE_URL rewritten to the asyncpg dialect if it names a bare scheme."""
    url = get_settings().database_url
    for prefix in _DRIVER_PREFIXES:
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            get_database_url(),
            echo=settings.database_echo,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_recycle=settings.database_pool_recycle,
            pool_pre_ping=True,
            connect_args={"server_settings": {"application_name": settings.service_name}},
        )
        logger.info("database_engine_created", pool_size=settings.database_pool_size)
    return _engine


def _session_factory() -> async_sessionmaker[AsyncSession]:
    global _sessions
    if _sessions is None:
        _sessions = async_sessionmaker(get_engine(), expire_on_commit=False, autoflush=False)
    return _sessions


async def ping(session: AsyncSession) -> bool:
    """True when the database answers a trivial query on this session."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("database_ping_failed", error=type(e).__name__)
        return False
    return True


async def init_db() -> None:
    """Fail startup early if the database is unreachable."""
    async with _session_factory()() as session:
        if not await ping(session):
            raise RuntimeError("Database is not reachable")
    logger.info("database_connection_verified")


async def close_db() -> None:
    global _engine, _sessions
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _sessions = None
    logger.info("database_connections_closed")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding the request's session."""
    async with _session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
