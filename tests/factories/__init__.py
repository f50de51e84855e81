"""Test data factories and in-memory store doubles for the review service."""

from tests.factories.in_memory_store import (
    InMemoryAuditRepository,
    InMemoryStore,
    InMemorySubmissionRepository,
    InMemoryVoteRepository,
)
from tests.factories.user_factory import ADMIN_ID, AUTHOR_ID, make_user, make_voters

__all__ = [
    "ADMIN_ID",
    "AUTHOR_ID",
    "InMemoryAuditRepository",
    "InMemoryStore",
    "InMemorySubmissionRepository",
    "InMemoryVoteRepository",
    "make_user",
    "make_voters",
]
