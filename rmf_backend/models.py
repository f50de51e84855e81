"""SQLAlchemy ORM models for community submissions, votes and the audit log."""

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Index,
    SmallInteger,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import DateTime, Integer


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class WorkflowStatus(str, enum.Enum):
    draft = "draft"
    under_review = "under_review"
    published = "published"
    archived = "archived"


VOTEABLE_STATUSES = (WorkflowStatus.draft.value, WorkflowStatus.under_review.value)
TERMINAL_STATUSES = (WorkflowStatus.published.value, WorkflowStatus.archived.value)


class TargetType(str, enum.Enum):
    threat = "threat"
    fud = "fud"


class FudCategory(str, enum.Enum):
    quantum = "QUANTUM"
    regulation = "REGULATION"
    centralization = "CENTRALIZATION"
    energy = "ENERGY"
    scalability = "SCALABILITY"
    competition = "COMPETITION"
    security = "SECURITY"


_STATUS_CHECK = "status IN ('draft','under_review','published','archived')"


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


class Threat(Base):
    __tablename__ = "threats"
    __table_args__ = (
        Index("idx_threats_status", "status"),
        Index("idx_threats_submitted_by", "submitted_by"),
        CheckConstraint(_STATUS_CHECK, name="ck_threat_status"),
        CheckConstraint("likelihood BETWEEN 1 AND 5", name="ck_threat_likelihood"),
        CheckConstraint("impact BETWEEN 1 AND 5", name="ck_threat_impact"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    likelihood: Mapped[int] = mapped_column(Integer, nullable=False)
    impact: Mapped[int] = mapped_column(Integer, nullable=False)
    severity_score: Mapped[int] = mapped_column(Integer, nullable=False)
    risk_rating: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'draft'")
    )
    submitted_by: Mapped[str | None] = mapped_column(Text)
    submitted_by_name: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    @property
    def title(self) -> str:
        return self.name


class FudAnalysis(Base):
    __tablename__ = "fud_analyses"
    __table_args__ = (
        Index("idx_fud_status", "status"),
        Index("idx_fud_submitted_by", "submitted_by"),
        CheckConstraint(_STATUS_CHECK, name="ck_fud_status"),
        CheckConstraint(
            "validity_score BETWEEN 0 AND 100", name="ck_fud_validity_score"
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    narrative: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    validity_score: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    status: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'draft'")
    )
    submitted_by: Mapped[str | None] = mapped_column(Text)
    submitted_by_name: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    @property
    def title(self) -> str:
        return self.narrative


SUBMISSION_MODELS: dict[str, type[Threat] | type[FudAnalysis]] = {
    TargetType.threat.value: Threat,
    TargetType.fud.value: FudAnalysis,
}


# ---------------------------------------------------------------------------
# Votes
# ---------------------------------------------------------------------------


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("target_type", "target_id", "voter_id", name="uq_vote_target_voter"),
        Index("idx_votes_target", "target_type", "target_id"),
        CheckConstraint("vote_value IN (1, -1)", name="ck_vote_value"),
        CheckConstraint("target_type IN ('threat','fud')", name="ck_vote_target_type"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    target_type: Mapped[str] = mapped_column(Text, nullable=False)
    target_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    voter_id: Mapped[str] = mapped_column(Text, nullable=False)
    voter_username: Mapped[str | None] = mapped_column(Text)
    voter_name: Mapped[str | None] = mapped_column(Text)
    vote_value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------


class AuditLog(Base):
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_created", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    entity_type: Mapped[str] = mapped_column(Text, nullable=False)
    entity_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    action: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    user_name: Mapped[str | None] = mapped_column(Text)
    diff: Mapped[dict | None] = mapped_column(JSONB)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
