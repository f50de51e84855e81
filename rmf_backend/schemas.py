"""Pydantic v2 request/response schemas for all endpoints."""

from datetime import datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rmf_backend.models import FudCategory

VoteValue = Literal[1, -1]


# ---------------------------------------------------------------------------
# Votes
# ---------------------------------------------------------------------------


class ThreatVoteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target_type: Literal["threat"]
    target_id: UUID
    vote_value: VoteValue


class FudVoteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target_type: Literal["fud"]
    target_id: UUID
    vote_value: VoteValue


VoteRequest = Annotated[
    Union[ThreatVoteRequest, FudVoteRequest],
    Field(discriminator="target_type"),
]


class VoteResponse(BaseModel):
    vote_recorded: bool = True
    net_score: int
    new_status: str | None = None


class VoteTallyResponse(BaseModel):
    approvals: int = 0
    rejections: int = 0
    net_score: int = 0
    user_vote: int | None = None
    threshold: int


class VoteDeleteResponse(BaseModel):
    deleted: bool


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


class ThreatCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1, max_length=10000)
    likelihood: int = Field(..., ge=1, le=5)
    impact: int = Field(..., ge=1, le=5)


class ThreatResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    likelihood: int
    impact: int
    severity_score: int
    risk_rating: str
    status: str
    submitted_by: str | None
    created_at: datetime | None = None


class FudCreateRequest(BaseModel):
    narrative: str = Field(..., min_length=1, max_length=2000)
    category: FudCategory
    validity_score: int = Field(default=0, ge=0, le=100)


class FudResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    narrative: str
    category: str
    validity_score: int
    status: str
    submitted_by: str | None
    created_at: datetime | None = None


class SubmissionItem(BaseModel):
    """One of the caller's own submissions."""

    id: UUID
    type: str
    name: str
    status: str
    created_at: datetime | None = None
    approvals: int | None = None
    rejections: int | None = None
    net_score: int | None = None


class ReviewItem(BaseModel):
    """A pending submission in the community review queue."""

    id: UUID
    type: str
    name: str
    status: str
    submitted_by: str | None
    submitted_by_name: str | None
    created_at: datetime | None = None
    approvals: int = 0
    rejections: int = 0
    net_score: int = 0
    user_vote: int | None = None


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    entity_type: str
    entity_id: UUID
    action: str
    user_id: str
    user_name: str | None
    diff: dict | None
    created_at: datetime


class PendingResponse(BaseModel):
    threats: list[ReviewItem]
    fud: list[ReviewItem]
    total: int
