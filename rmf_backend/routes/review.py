"""Community review queue."""

from fastapi import APIRouter, Depends

from rmf_backend.auth import SessionUser, get_current_user
from rmf_backend.dependencies import get_submission_repository, get_voting_service
from rmf_backend.repositories import SubmissionRepository
from rmf_backend.schemas import ReviewItem
from rmf_backend.services.voting_service import AnnotatedSubmission, VotingService

router = APIRouter(prefix="/api/review", tags=["review"])


def to_review_item(item: AnnotatedSubmission) -> ReviewItem:
    r = item.record
    return ReviewItem(
        id=r.id,
        type=r.target_type,
        name=r.title,
        status=r.status,
        submitted_by=r.submitted_by,
        submitted_by_name=r.submitted_by_name,
        created_at=r.created_at,
        approvals=item.tally.approvals,
        rejections=item.tally.rejections,
        net_score=item.tally.net_score,
        user_vote=item.user_vote,
    )


@router.get("", response_model=list[ReviewItem])
async def review_queue(
    user: SessionUser = Depends(get_current_user),
    submissions: SubmissionRepository = Depends(get_submission_repository),
    service: VotingService = Depends(get_voting_service),
):
    """Pending threats and FUD narratives, newest first, with tallies and the caller's vote."""
    records = await submissions.list_pending()
    return [to_review_item(a) for a in await service.annotate(records, user)]
