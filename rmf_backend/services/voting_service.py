"""Voting workflow: ledger upsert, tally, then the threshold transition.

All three steps run on the caller's session, so the tally read and the
conditional status update share one database transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from rmf_backend.auth import SessionUser
from rmf_backend.logging_config import get_logger
from rmf_backend.repositories import (
    AuditRepository,
    SubmissionRecord,
    SubmissionRepository,
    VoteRepository,
)
from rmf_backend.services.tally_service import Tally, TallyEngine
from rmf_backend.services.transition_service import TransitionController
from rmf_backend.services.vote_ledger import VoteLedger

logger = get_logger(__name__)


@dataclass(frozen=True)
class VoteOutcome:
    tally: Tally
    new_status: str | None

    @property
    def net_score(self) -> int:
        return self.tally.net_score


@dataclass(frozen=True)
class AnnotatedSubmission:
    record: SubmissionRecord
    tally: Tally
    user_vote: int | None = None


class VotingService:
    """Entry point used by the HTTP layer."""

    def __init__(
        self,
        submissions: SubmissionRepository,
        votes: VoteRepository,
        audit: AuditRepository,
        threshold: int,
    ) -> None:
        self.threshold = threshold
        self.ledger = VoteLedger(submissions, votes)
        self.tallies = TallyEngine(votes)
        self.controller = TransitionController(submissions, audit, threshold)
        self.votes = votes

    async def submit_vote(
        self,
        target_type: str,
        target_id: UUID,
        voter: SessionUser,
        value: int,
    ) -> VoteOutcome:
        """Cast a vote and run the transition controller on the fresh tally."""
        await self.ledger.cast_vote(target_type, target_id, voter, value)
        tally = await self.tallies.tally(target_type, target_id)
        result = await self.controller.apply(target_type, target_id, tally)

        logger.info(
            "vote_cast",
            target_type=target_type,
            target_id=str(target_id),
            voter_id=voter.user_id,
            vote=value,
            net_score=tally.net_score,
            new_status=result.new_status,
        )
        return VoteOutcome(tally=tally, new_status=result.new_status)

    async def retract_vote(self, target_type: str, target_id: UUID, voter: SessionUser) -> bool:
        return await self.ledger.remove_vote(target_type, target_id, voter.user_id)

    async def tally_view(
        self,
        target_type: str,
        target_id: UUID,
        viewer: SessionUser | None = None,
    ) -> dict:
        tally = await self.tallies.tally(target_type, target_id)
        user_vote = None
        if viewer is not None:
            user_vote = await self.votes.get_value(target_type, target_id, viewer.user_id)
        return {
            "approvals": tally.approvals,
            "rejections": tally.rejections,
            "net_score": tally.net_score,
            "user_vote": user_vote,
            "threshold": self.threshold,
        }

    async def annotate(
        self,
        records: list[SubmissionRecord],
        viewer: SessionUser | None = None,
    ) -> list[AnnotatedSubmission]:
        """Attach tallies (and the viewer's own vote) to many submissions at once."""
        keys = [r.key for r in records]
        tallies = await self.tallies.tallies_for(keys)
        user_votes: dict = {}
        if viewer is not None:
            user_votes = await self.votes.values_by_voter(viewer.user_id, keys)
        return [
            AnnotatedSubmission(
                record=r,
                tally=tallies.get(r.key, Tally()),
                user_vote=user_votes.get(r.key),
            )
            for r in records
        ]
