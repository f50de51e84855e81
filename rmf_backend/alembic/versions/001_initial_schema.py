"""Initial schema: submissions, votes and audit log.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUS_CHECK = "status IN ('draft','under_review','published','archived')"


def upgrade() -> None:
    # --- Threats ---
    op.create_table(
        "threats",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("likelihood", sa.Integer(), nullable=False),
        sa.Column("impact", sa.Integer(), nullable=False),
        sa.Column("severity_score", sa.Integer(), nullable=False),
        sa.Column("risk_rating", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("submitted_by", sa.Text()),
        sa.Column("submitted_by_name", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(STATUS_CHECK, name="ck_threat_status"),
        sa.CheckConstraint("likelihood BETWEEN 1 AND 5", name="ck_threat_likelihood"),
        sa.CheckConstraint("impact BETWEEN 1 AND 5", name="ck_threat_impact"),
    )
    op.create_index("idx_threats_status", "threats", ["status"])
    op.create_index("idx_threats_submitted_by", "threats", ["submitted_by"])

    # --- FUD analyses ---
    op.create_table(
        "fud_analyses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("narrative", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("validity_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("submitted_by", sa.Text()),
        sa.Column("submitted_by_name", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(STATUS_CHECK, name="ck_fud_status"),
        sa.CheckConstraint("validity_score BETWEEN 0 AND 100", name="ck_fud_validity_score"),
    )
    op.create_index("idx_fud_status", "fud_analyses", ["status"])
    op.create_index("idx_fud_submitted_by", "fud_analyses", ["submitted_by"])

    # --- Votes ---
    op.create_table(
        "votes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("target_type", sa.Text(), nullable=False),
        sa.Column("target_id", UUID(as_uuid=True), nullable=False),
        sa.Column("voter_id", sa.Text(), nullable=False),
        sa.Column("voter_username", sa.Text()),
        sa.Column("voter_name", sa.Text()),
        sa.Column("vote_value", sa.SmallInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("target_type", "target_id", "voter_id", name="uq_vote_target_voter"),
        sa.CheckConstraint("vote_value IN (1, -1)", name="ck_vote_value"),
        sa.CheckConstraint("target_type IN ('threat','fud')", name="ck_vote_target_type"),
    )
    op.create_index("idx_votes_target", "votes", ["target_type", "target_id"])

    # --- Audit log ---
    op.create_table(
        "audit_log",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("entity_type", sa.Text(), nullable=False),
        sa.Column("entity_id", UUID(as_uuid=True), nullable=False),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("user_name", sa.Text()),
        sa.Column("diff", JSONB()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("idx_audit_created", "audit_log", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("votes")
    op.drop_table("fud_analyses")
    op.drop_table("threats")
