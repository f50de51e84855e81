"""Domain exceptions for the community review service."""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from rmf_backend.logging_config import get_logger

logger = get_logger(__name__)


class ReviewError(Exception):
    """Base exception for review workflow errors."""

    def __init__(self, message: str, error_type: str = "review_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)


class UnauthenticatedError(ReviewError):
    """Raised when a request carries no usable identity."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "unauthenticated")


class ForbiddenError(ReviewError):
    """Raised when an authenticated actor may not perform the action."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, "forbidden")


class SelfVoteError(ForbiddenError):
    """Raised when an author votes on their own submission."""

    def __init__(self):
        super().__init__("You cannot vote on your own submission")


class InvalidStateError(ReviewError):
    """Raised when a submission is not in a voteable status."""

    def __init__(self, current_status: str):
        super().__init__(
            "Voting is only allowed on items under review",
            "invalid_state",
        )
        self.current_status = current_status


class TargetNotFoundError(ReviewError):
    """Raised when a vote target does not exist."""

    def __init__(self, target_type: str, target_id: Any):
        super().__init__(
            f"{target_type.capitalize()} with ID {target_id} not found",
            "not_found",
        )
        self.target_type = target_type
        self.target_id = target_id


class StoreError(ReviewError):
    """Raised when the backing store fails."""

    def __init__(self, operation: str, cause: Exception | None = None):
        super().__init__(f"Store operation failed: {operation}", "store_error")
        self.operation = operation
        self.cause = cause


STATUS_MAP = {
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "invalid_state": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "store_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_body(error: ReviewError) -> dict:
    """Build the problem-details style body for a ReviewError."""
    code = STATUS_MAP.get(error.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR)
    # Store failures never leak driver messages to clients
    detail = "Internal server error" if code >= 500 else error.message
    return {
        "detail": {
            "type": error.error_type,
            "title": error.error_type.replace("_", " ").title(),
            "status": code,
            "detail": detail,
        }
    }


async def review_error_handler(request: Request, exc: ReviewError) -> JSONResponse:
    """FastAPI exception handler converting ReviewError into JSON responses."""
    code = STATUS_MAP.get(exc.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error_type=exc.error_type,
            error=exc.message,
            cause=str(getattr(exc, "cause", None)),
        )
    else:
        logger.info(
            "request_rejected",
            path=request.url.path,
            error_type=exc.error_type,
            error=exc.message,
        )
    headers = {"WWW-Authenticate": "Bearer"} if code == 401 else None
    return JSONResponse(status_code=code, content=error_body(exc), headers=headers)
