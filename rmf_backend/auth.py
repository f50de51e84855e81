"""Session identity for community members and administrators.

Sessions are issued by the external identity provider as HS256 JWTs whose
``sub`` claim is the member's X account id. Administrators are configured by
id through ``ADMIN_IDS``.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, Request

from rmf_backend.config import Settings, get_settings
from rmf_backend.exceptions import ForbiddenError, UnauthenticatedError
from rmf_backend.logging_config import bind_user_context, get_logger

logger = get_logger(__name__)

SESSION_TOKEN_EXPIRE_MINUTES = 60


@dataclass(frozen=True)
class SessionUser:
    """The authenticated actor behind a request."""

    user_id: str
    username: str = ""
    name: str = ""
    is_admin: bool = False

    @property
    def display_name(self) -> str:
        return self.name or self.username or self.user_id


DEV_USER = SessionUser(user_id="dev-admin", username="dev", name="Dev Admin", is_admin=True)


def create_session_token(
    user_id: str,
    username: str = "",
    name: str = "",
    settings: Settings | None = None,
) -> str:
    """Create a session token. Used by tooling and tests; production tokens come from the identity provider."""
    settings = settings or get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=SESSION_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": user_id, "username": username, "name": name, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str, settings: Settings) -> dict:
    """Decode and validate a session token. Raises UnauthenticatedError on failure."""
    if not settings.jwt_secret_key:
        logger.error("jwt_secret_not_configured")
        raise UnauthenticatedError("Authentication is not configured")
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token expired")
    except jwt.InvalidTokenError:
        raise UnauthenticatedError("Invalid token")


def _user_from_request(request: Request, settings: Settings) -> SessionUser | None:
    if settings.dev_bypass_auth:
        return DEV_USER

    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None

    token = auth_header.removeprefix("Bearer ").strip()
    if not token:
        raise UnauthenticatedError("Empty token")

    payload = decode_session_token(token, settings)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthenticatedError("Invalid token payload")

    return SessionUser(
        user_id=str(user_id),
        username=payload.get("username") or "",
        name=payload.get("name") or "",
        is_admin=str(user_id) in settings.admin_id_set,
    )


async def get_current_user(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> SessionUser:
    """
    FastAPI dependency: the authenticated session user.

    Raises UnauthenticatedError when no identity is present.
    """
    user = _user_from_request(request, settings)
    if user is None:
        raise UnauthenticatedError()
    bind_user_context(user.user_id)
    return user


async def get_current_user_optional(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> SessionUser | None:
    """Optional session auth: returns SessionUser or None."""
    try:
        user = _user_from_request(request, settings)
    except UnauthenticatedError:
        return None
    if user is not None:
        bind_user_context(user.user_id)
    return user


async def require_admin(user: SessionUser = Depends(get_current_user)) -> SessionUser:
    """FastAPI dependency: the current user, who must be an administrator."""
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user
