"""FastAPI dependencies wiring the request session to repositories and services."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rmf_backend.config import Settings, get_settings
from rmf_backend.database import get_db
from rmf_backend.repositories import AuditRepository, SubmissionRepository, VoteRepository
from rmf_backend.services.voting_service import VotingService


def get_submission_repository(db: AsyncSession = Depends(get_db)) -> SubmissionRepository:
    return SubmissionRepository(db)


def get_vote_repository(db: AsyncSession = Depends(get_db)) -> VoteRepository:
    return VoteRepository(db)


def get_audit_repository(db: AsyncSession = Depends(get_db)) -> AuditRepository:
    return AuditRepository(db)


async def get_voting_service(
    submissions: SubmissionRepository = Depends(get_submission_repository),
    votes: VoteRepository = Depends(get_vote_repository),
    audit: AuditRepository = Depends(get_audit_repository),
    settings: Settings = Depends(get_settings),
) -> VotingService:
    """Voting service bound to this request's session and the configured threshold."""
    return VotingService(submissions, votes, audit, settings.vote_threshold)
