"""Bitcoin RMF community review FastAPI application."""

import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession

from rmf_backend import __version__
from rmf_backend.config import get_settings
from rmf_backend.database import close_db, get_db, init_db, ping
from rmf_backend.exceptions import ReviewError, review_error_handler
from rmf_backend.logging_config import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging, init DB on startup, cleanup on shutdown."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        service_name=settings.service_name,
    )

    logger.info("starting_database_init")
    await init_db()

    logger.info("application_started", vote_threshold=settings.vote_threshold)
    yield

    logger.info("shutting_down")
    await close_db()
    logger.info("shutdown_complete")


app = FastAPI(
    title="Bitcoin RMF Review",
    description="Community review and voting for Bitcoin threat and FUD submissions",
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ReviewError, review_error_handler)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    bind_request_context(request_id, method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


# --- Routers ---
from rmf_backend.routes.admin import router as admin_router  # noqa: E402
from rmf_backend.routes.review import router as review_router  # noqa: E402
from rmf_backend.routes.submissions import router as submissions_router  # noqa: E402
from rmf_backend.routes.voting import router as voting_router  # noqa: E402

app.include_router(voting_router)
app.include_router(review_router)
app.include_router(submissions_router)
app.include_router(admin_router)


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus a database round trip."""
    database_ok = await ping(db)
    return {
        "status": "ok" if database_ok else "degraded",
        "service": get_settings().service_name,
        "version": __version__,
        "database": "ok" if database_ok else "unavailable",
    }
