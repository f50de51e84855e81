"""Submission endpoints: proposals, public reads of published items and the caller's own list."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rmf_backend.auth import SessionUser, get_current_user
from rmf_backend.database import get_db
from rmf_backend.dependencies import (
    get_audit_repository,
    get_submission_repository,
    get_voting_service,
)
from rmf_backend.exceptions import TargetNotFoundError
from rmf_backend.logging_config import get_logger
from rmf_backend.models import VOTEABLE_STATUSES, FudCategory, TargetType, WorkflowStatus
from rmf_backend.repositories import AuditRepository, SubmissionRepository
from rmf_backend.schemas import (
    FudCreateRequest,
    FudResponse,
    SubmissionItem,
    ThreatCreateRequest,
    ThreatResponse,
)
from rmf_backend.services.scoring import RiskRating, severity_rating, severity_score
from rmf_backend.services.voting_service import VotingService

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["submissions"])


def _initial_status(user: SessionUser) -> str:
    # Administrators publish directly; everyone else goes through review
    return WorkflowStatus.published.value if user.is_admin else WorkflowStatus.draft.value


@router.post("/threats", response_model=ThreatResponse, status_code=201)
async def create_threat(
    body: ThreatCreateRequest,
    user: SessionUser = Depends(get_current_user),
    submissions: SubmissionRepository = Depends(get_submission_repository),
    audit: AuditRepository = Depends(get_audit_repository),
    db: AsyncSession = Depends(get_db),
):
    """Submit a threat. Severity is likelihood times impact."""
    score = severity_score(body.likelihood, body.impact)
    threat = await submissions.create(
        TargetType.threat.value,
        name=body.name,
        description=body.description,
        likelihood=body.likelihood,
        impact=body.impact,
        severity_score=score,
        risk_rating=severity_rating(score).value,
        status=_initial_status(user),
        submitted_by=user.user_id,
        submitted_by_name=user.display_name,
    )
    await audit.append(
        entity_type=TargetType.threat.value,
        entity_id=threat.id,
        action="create",
        user_id=user.user_id,
        user_name=user.display_name,
        diff={"name": body.name, "status": threat.status},
    )
    await db.commit()

    logger.info("threat_submitted", threat_id=str(threat.id), status=threat.status)
    return threat


@router.post("/fud", response_model=FudResponse, status_code=201)
async def create_fud(
    body: FudCreateRequest,
    user: SessionUser = Depends(get_current_user),
    submissions: SubmissionRepository = Depends(get_submission_repository),
    audit: AuditRepository = Depends(get_audit_repository),
    db: AsyncSession = Depends(get_db),
):
    """Submit a FUD narrative for community review."""
    fud = await submissions.create(
        TargetType.fud.value,
        narrative=body.narrative,
        category=body.category.value,
        validity_score=body.validity_score,
        status=_initial_status(user),
        submitted_by=user.user_id,
        submitted_by_name=user.display_name,
    )
    await audit.append(
        entity_type=TargetType.fud.value,
        entity_id=fud.id,
        action="create",
        user_id=user.user_id,
        user_name=user.display_name,
        diff={"narrative": body.narrative, "status": fud.status},
    )
    await db.commit()

    logger.info("fud_submitted", fud_id=str(fud.id), status=fud.status)
    return fud


@router.get("/threats", response_model=list[ThreatResponse])
async def list_threats(
    rating: RiskRating | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    submissions: SubmissionRepository = Depends(get_submission_repository),
):
    """Published threats, most severe first."""
    return await submissions.list_published(
        TargetType.threat.value,
        limit=limit,
        risk_rating=rating.value if rating else None,
    )


@router.get("/threats/{threat_id}", response_model=ThreatResponse)
async def get_threat(
    threat_id: UUID,
    submissions: SubmissionRepository = Depends(get_submission_repository),
):
    threat = await submissions.get_row(TargetType.threat.value, threat_id)
    if threat is None:
        raise TargetNotFoundError(TargetType.threat.value, threat_id)
    return threat


@router.get("/fud", response_model=list[FudResponse])
async def list_fud(
    category: FudCategory | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    submissions: SubmissionRepository = Depends(get_submission_repository),
):
    """Published FUD analyses, highest validity score first."""
    return await submissions.list_published(
        TargetType.fud.value,
        limit=limit,
        category=category.value if category else None,
    )


@router.get("/fud/{fud_id}", response_model=FudResponse)
async def get_fud(
    fud_id: UUID,
    submissions: SubmissionRepository = Depends(get_submission_repository),
):
    fud = await submissions.get_row(TargetType.fud.value, fud_id)
    if fud is None:
        raise TargetNotFoundError(TargetType.fud.value, fud_id)
    return fud


@router.get("/submissions", response_model=list[SubmissionItem])
async def list_my_submissions(
    user: SessionUser = Depends(get_current_user),
    submissions: SubmissionRepository = Depends(get_submission_repository),
    service: VotingService = Depends(get_voting_service),
):
    """The caller's own submissions, newest first. Pending ones carry their tally."""
    records = await submissions.list_by_author(user.user_id)
    pending = [r for r in records if r.status in VOTEABLE_STATUSES]
    tallies = {a.record.key: a.tally for a in await service.annotate(pending)}

    items = []
    for r in records:
        tally = tallies.get(r.key)
        items.append(
            SubmissionItem(
                id=r.id,
                type=r.target_type,
                name=r.title,
                status=r.status,
                created_at=r.created_at,
                approvals=tally.approvals if tally else None,
                rejections=tally.rejections if tally else None,
                net_score=tally.net_score if tally else None,
            )
        )
    return items
