"""Vote ledger: one vote per (target, voter), overwritten on re-vote."""

from __future__ import annotations

from uuid import UUID

from rmf_backend.auth import SessionUser
from rmf_backend.exceptions import InvalidStateError, SelfVoteError, TargetNotFoundError
from rmf_backend.logging_config import get_logger
from rmf_backend.models import VOTEABLE_STATUSES
from rmf_backend.repositories.submission_repository import (
    SubmissionRecord,
    SubmissionRepository,
)
from rmf_backend.repositories.vote_repository import VoteRepository
from rmf_backend.services.tally_service import APPROVE, REJECT

logger = get_logger(__name__)


class VoteLedger:
    """Records votes after checking the target can take them."""

    def __init__(self, submissions: SubmissionRepository, votes: VoteRepository) -> None:
        self.submissions = submissions
        self.votes = votes

    async def check_voteable(
        self, target_type: str, target_id: UUID, voter_id: str
    ) -> SubmissionRecord:
        """
        Lock the target row and verify preconditions, in order:
        existence, voteable status, not the author's own submission.

        The lock is held until the caller's transaction ends, so a concurrent
        vote on the same target tallies only after this one is committed.
        """
        target = await self.submissions.get(target_type, target_id, for_update=True)
        if target is None:
            raise TargetNotFoundError(target_type, target_id)
        if target.status not in VOTEABLE_STATUSES:
            raise InvalidStateError(target.status)
        if target.submitted_by is not None and target.submitted_by == voter_id:
            raise SelfVoteError()
        return target

    async def record(
        self,
        target_type: str,
        target_id: UUID,
        voter: SessionUser,
        value: int,
    ) -> None:
        """Upsert the voter's row without status checks."""
        if value not in (APPROVE, REJECT):
            raise ValueError(f"vote value must be 1 or -1, got {value!r}")
        await self.votes.upsert(
            target_type,
            target_id,
            voter.user_id,
            value,
            voter_username=voter.username or None,
            voter_name=voter.name or None,
        )

    async def cast_vote(
        self,
        target_type: str,
        target_id: UUID,
        voter: SessionUser,
        value: int,
    ) -> SubmissionRecord:
        target = await self.check_voteable(target_type, target_id, voter.user_id)
        await self.record(target_type, target_id, voter, value)
        return target

    async def remove_vote(self, target_type: str, target_id: UUID, voter_id: str) -> bool:
        """Delete the voter's row. Returns False when there was nothing to delete."""
        deleted = await self.votes.delete(target_type, target_id, voter_id)
        logger.info(
            "vote_removed" if deleted else "vote_remove_noop",
            target_type=target_type,
            target_id=str(target_id),
            voter_id=voter_id,
        )
        return deleted
