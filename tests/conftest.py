"""Global pytest fixtures for the community review service.

This module provides shared fixtures for testing including:
- An in-memory store behind the repository interfaces
- A voting service wired to that store
- Session users and bearer tokens
- An HTTP client with dependency overrides
"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from rmf_backend.auth import SessionUser, create_session_token
from rmf_backend.config import Settings, get_settings
from rmf_backend.services.voting_service import VotingService
from tests.factories import (
    ADMIN_ID,
    AUTHOR_ID,
    InMemoryAuditRepository,
    InMemoryStore,
    InMemorySubmissionRepository,
    InMemoryVoteRepository,
    make_user,
)

TEST_THRESHOLD = 3


# ===========================================
# STORE AND SERVICE FIXTURES
# ===========================================


@pytest.fixture
def store() -> InMemoryStore:
    """Fresh in-memory store per test."""
    return InMemoryStore()


@pytest.fixture
def voting_service(store: InMemoryStore) -> VotingService:
    """Voting service over the in-memory store with threshold 3."""
    return VotingService(
        InMemorySubmissionRepository(store),
        InMemoryVoteRepository(store),
        InMemoryAuditRepository(store),
        threshold=TEST_THRESHOLD,
    )


@pytest.fixture
def author() -> SessionUser:
    return make_user(AUTHOR_ID, name="Author One")


@pytest.fixture
def pending_threat(store: InMemoryStore) -> UUID:
    """A threat under review, authored by AUTHOR_ID."""
    return store.add_submission("threat", status="under_review", submitted_by=AUTHOR_ID)


@pytest.fixture
def pending_fud(store: InMemoryStore) -> UUID:
    return store.add_submission(
        "fud", status="draft", submitted_by=AUTHOR_ID, title="Bitcoin wastes energy"
    )


# ===========================================
# HTTP CLIENT FIXTURES
# ===========================================


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        jwt_secret_key="test-secret-key-for-the-review-api",
        admin_ids=ADMIN_ID,
        vote_threshold=TEST_THRESHOLD,
        dev_bypass_auth=False,
    )


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Mock async session; routes only commit on it."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def auth_headers(test_settings: Settings):
    """Build bearer headers for a given user id."""

    def _headers(user_id: str, name: str = "") -> dict[str, str]:
        token = create_session_token(user_id, username=user_id, name=name, settings=test_settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def async_client(
    store: InMemoryStore,
    mock_db_session: AsyncMock,
    test_settings: Settings,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app, with storage swapped for the in-memory store."""
    from rmf_backend.database import get_db
    from rmf_backend.dependencies import (
        get_audit_repository,
        get_submission_repository,
        get_vote_repository,
    )
    from rmf_backend.main import app

    async def _db():
        yield mock_db_session

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_submission_repository] = lambda: InMemorySubmissionRepository(store)
    app.dependency_overrides[get_vote_repository] = lambda: InMemoryVoteRepository(store)
    app.dependency_overrides[get_audit_repository] = lambda: InMemoryAuditRepository(store)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
