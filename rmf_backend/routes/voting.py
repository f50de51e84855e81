"""Voting endpoints: cast, retract and view community votes."""

from uuid import UUID

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rmf_backend.auth import SessionUser, get_current_user, get_current_user_optional
from rmf_backend.database import get_db
from rmf_backend.dependencies import get_voting_service
from rmf_backend.logging_config import get_logger
from rmf_backend.models import TargetType
from rmf_backend.schemas import (
    VoteDeleteResponse,
    VoteRequest,
    VoteResponse,
    VoteTallyResponse,
)
from rmf_backend.services.voting_service import VotingService

logger = get_logger(__name__)
router = APIRouter(prefix="/api/votes", tags=["voting"])


@router.post("", response_model=VoteResponse)
async def cast_vote(
    body: VoteRequest = Body(...),
    user: SessionUser = Depends(get_current_user),
    service: VotingService = Depends(get_voting_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Cast or change a vote on a pending threat or FUD narrative.

    One vote per user per item; voting again overwrites the previous value.
    Crossing the net-score threshold publishes or archives the item, and
    ``new_status`` reports the status the item actually ended up in.
    """
    outcome = await service.submit_vote(
        body.target_type, body.target_id, user, body.vote_value
    )
    await db.commit()
    return VoteResponse(
        vote_recorded=True,
        net_score=outcome.net_score,
        new_status=outcome.new_status,
    )


@router.get("/{target_type}/{target_id}", response_model=VoteTallyResponse)
async def get_vote_tally(
    target_type: TargetType,
    target_id: UUID,
    user: SessionUser | None = Depends(get_current_user_optional),
    service: VotingService = Depends(get_voting_service),
):
    """Current tally for an item, plus the caller's own vote when signed in."""
    view = await service.tally_view(target_type.value, target_id, user)
    return VoteTallyResponse(**view)


@router.delete("/{target_type}/{target_id}", response_model=VoteDeleteResponse)
async def retract_vote(
    target_type: TargetType,
    target_id: UUID,
    user: SessionUser = Depends(get_current_user),
    service: VotingService = Depends(get_voting_service),
    db: AsyncSession = Depends(get_db),
):
    """Remove the caller's vote. Removing a vote that does not exist is a no-op."""
    deleted = await service.retract_vote(target_type.value, target_id, user)
    await db.commit()
    return VoteDeleteResponse(deleted=deleted)
