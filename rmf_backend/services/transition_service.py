"""Transition controller for the submission review state machine.

A submission leaves ``draft``/``under_review`` exactly once under the voting
path. The status write is a compare-and-set::

    UPDATE <table> SET status = :new
    WHERE id = :id AND status IN ('draft', 'under_review')

When two requests cross the threshold at the same time only one update
affects a row. The other sees zero affected rows, writes no audit entry and
reports whatever status the winner left behind.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from rmf_backend.logging_config import get_logger
from rmf_backend.models import TERMINAL_STATUSES, WorkflowStatus
from rmf_backend.repositories.audit_repository import AuditRepository
from rmf_backend.repositories.submission_repository import SubmissionRepository
from rmf_backend.services.tally_service import Tally

logger = get_logger(__name__)

COMMUNITY_ACTOR_ID = "community"
COMMUNITY_ACTOR_NAME = "Community Vote"

TRANSITION_ACTIONS = {
    WorkflowStatus.published.value: "vote_publish",
    WorkflowStatus.archived.value: "vote_archive",
}


def decide_transition(net_score: int, threshold: int) -> str | None:
    """Target status implied by a net score, or None below the threshold."""
    if net_score >= threshold:
        return WorkflowStatus.published.value
    if net_score <= -threshold:
        return WorkflowStatus.archived.value
    return None


@dataclass(frozen=True)
class TransitionResult:
    """What the controller attempted and what the store holds afterwards."""

    attempted: str | None = None
    applied: bool = False
    status: str | None = None

    @property
    def new_status(self) -> str | None:
        """Terminal status to report to the caller, if any."""
        if self.attempted is None:
            return None
        return self.status if self.status in TERMINAL_STATUSES else None


class TransitionController:
    """Applies a tally against the threshold with a conditional status write."""

    def __init__(
        self,
        submissions: SubmissionRepository,
        audit: AuditRepository,
        threshold: int,
    ) -> None:
        self.submissions = submissions
        self.audit = audit
        self.threshold = threshold

    async def apply(self, target_type: str, target_id: UUID, tally: Tally) -> TransitionResult:
        target_status = decide_transition(tally.net_score, self.threshold)
        if target_status is None:
            return TransitionResult()

        applied = await self.submissions.set_status_if(target_type, target_id, target_status)
        if applied:
            await self.audit.append(
                entity_type=target_type,
                entity_id=target_id,
                action=TRANSITION_ACTIONS[target_status],
                user_id=COMMUNITY_ACTOR_ID,
                user_name=COMMUNITY_ACTOR_NAME,
                diff=tally.as_audit_diff(self.threshold),
            )
            logger.info(
                "vote_transition",
                target_type=target_type,
                target_id=str(target_id),
                status=target_status,
                net_score=tally.net_score,
            )

        # Report the stored status, not the one this tally implies
        current = await self.submissions.get_status(target_type, target_id)
        if not applied:
            logger.info(
                "vote_transition_skipped",
                target_type=target_type,
                target_id=str(target_id),
                attempted=target_status,
                current_status=current,
            )
        return TransitionResult(attempted=target_status, applied=applied, status=current)
