"""Administrator endpoints: audit trail and pending submissions."""

from fastapi import APIRouter, Depends, Query

from rmf_backend.auth import SessionUser, require_admin
from rmf_backend.dependencies import (
    get_audit_repository,
    get_submission_repository,
    get_voting_service,
)
from rmf_backend.models import TargetType
from rmf_backend.repositories import AuditRepository, SubmissionRepository
from rmf_backend.routes.review import to_review_item
from rmf_backend.schemas import AuditLogResponse, PendingResponse
from rmf_backend.services.voting_service import VotingService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/audit-log", response_model=list[AuditLogResponse])
async def audit_log(
    entity_type: str | None = Query(None, max_length=50),
    limit: int = Query(50, ge=1, le=500),
    admin: SessionUser = Depends(require_admin),
    audit: AuditRepository = Depends(get_audit_repository),
):
    """Audit entries, newest first. Community transitions carry user_id 'community'."""
    return await audit.list_entries(entity_type=entity_type, limit=limit)


@router.get("/pending", response_model=PendingResponse)
async def pending(
    admin: SessionUser = Depends(require_admin),
    submissions: SubmissionRepository = Depends(get_submission_repository),
    service: VotingService = Depends(get_voting_service),
):
    records = await submissions.list_pending()
    items = [to_review_item(a) for a in await service.annotate(records)]
    threats = [i for i in items if i.type == TargetType.threat.value]
    fud = [i for i in items if i.type == TargetType.fud.value]
    return PendingResponse(threats=threats, fud=fud, total=len(items))
