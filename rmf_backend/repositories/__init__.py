"""Store access for submissions, votes and the audit log."""

from rmf_backend.repositories.audit_repository import AuditRepository
from rmf_backend.repositories.submission_repository import (
    SubmissionRecord,
    SubmissionRepository,
)
from rmf_backend.repositories.vote_repository import VoteRepository

__all__ = [
    "AuditRepository",
    "SubmissionRecord",
    "SubmissionRepository",
    "VoteRepository",
]
