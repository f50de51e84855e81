"""Submission lookups and guarded status transitions."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import Select, Update, func, select, update

from rmf_backend.models import (
    SUBMISSION_MODELS,
    VOTEABLE_STATUSES,
    FudAnalysis,
    Threat,
    WorkflowStatus,
)
from rmf_backend.repositories.base import BaseRepository, clamp_limit, translate_store_errors

# Column public listings rank published items by, highest first
PUBLISHED_RANKING = {
    "threat": "severity_score",
    "fud": "validity_score",
}


@dataclass(frozen=True)
class SubmissionRecord:
    """The slice of a submission the review workflow needs."""

    target_type: str
    id: UUID
    title: str
    status: str
    submitted_by: str | None
    submitted_by_name: str | None = None
    created_at: datetime | None = None

    @property
    def key(self) -> tuple[str, UUID]:
        return (self.target_type, self.id)


def _model_for(target_type: str) -> type[Threat] | type[FudAnalysis]:
    try:
        return SUBMISSION_MODELS[target_type]
    except KeyError:
        raise ValueError(f"Unknown target type: {target_type}") from None


def _record(target_type: str, row: Threat | FudAnalysis) -> SubmissionRecord:
    return SubmissionRecord(
        target_type=target_type,
        id=row.id,
        title=row.title,
        status=row.status,
        submitted_by=row.submitted_by,
        submitted_by_name=row.submitted_by_name,
        created_at=row.created_at,
    )


def build_submission_lookup(
    target_type: str, target_id: UUID, for_update: bool = False
) -> Select:
    """SELECT the submission row, optionally taking a row lock (FOR UPDATE)."""
    model = _model_for(target_type)
    query = select(model).where(model.id == target_id)
    if for_update:
        return query.with_for_update().execution_options(populate_existing=True)
    return query


def build_conditional_status_update(
    target_type: str,
    target_id: UUID,
    new_status: str,
    expected_statuses: Sequence[str] = VOTEABLE_STATUSES,
) -> Update:
    """UPDATE <table> SET status=:new WHERE id=:id AND status IN (:expected)."""
    model = _model_for(target_type)
    return (
        update(model)
        .where(model.id == target_id, model.status.in_(list(expected_statuses)))
        .values(status=new_status, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )


def build_published_query(target_type: str, limit: int = 100, **filters) -> Select:
    """Published rows of one type, best ranked first. ``None`` filters are ignored."""
    model = _model_for(target_type)
    query = select(model).where(model.status == WorkflowStatus.published.value)
    for column, value in filters.items():
        if value is not None:
            query = query.where(getattr(model, column) == value)
    rank = getattr(model, PUBLISHED_RANKING[target_type])
    return query.order_by(rank.desc(), model.created_at.desc()).limit(clamp_limit(limit, 100))


class SubmissionRepository(BaseRepository):
    """Reads and writes threats and FUD analyses as vote targets."""

    async def get(
        self, target_type: str, target_id: UUID, for_update: bool = False
    ) -> SubmissionRecord | None:
        """
        Load a submission as a vote target.

        With ``for_update`` the row stays locked until the transaction ends, so
        concurrent voters on the same target tally one after another.
        """
        row = await self.get_row(target_type, target_id, for_update=for_update)
        return _record(target_type, row) if row is not None else None

    @translate_store_errors("submission_get_row")
    async def get_row(
        self, target_type: str, target_id: UUID, for_update: bool = False
    ) -> Threat | FudAnalysis | None:
        result = await self.session.execute(
            build_submission_lookup(target_type, target_id, for_update=for_update)
        )
        return result.scalar_one_or_none()

    @translate_store_errors("submission_get_status")
    async def get_status(self, target_type: str, target_id: UUID) -> str | None:
        """Read the committed status column, bypassing any ORM identity map state."""
        model = _model_for(target_type)
        result = await self.session.execute(
            select(model.status).where(model.id == target_id)
        )
        return result.scalar_one_or_none()

    @translate_store_errors("submission_set_status_if")
    async def set_status_if(
        self,
        target_type: str,
        target_id: UUID,
        new_status: str,
        expected_statuses: Sequence[str] = VOTEABLE_STATUSES,
    ) -> bool:
        """Compare-and-set the status. Returns True only if this call changed the row."""
        stmt = build_conditional_status_update(
            target_type, target_id, new_status, expected_statuses
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    @translate_store_errors("submission_create")
    async def create(self, target_type: str, **fields) -> Threat | FudAnalysis:
        model = _model_for(target_type)
        row = model(**fields)
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return row

    @translate_store_errors("submission_list_pending")
    async def list_pending(
        self, target_types: Iterable[str] = tuple(SUBMISSION_MODELS)
    ) -> list[SubmissionRecord]:
        records: list[SubmissionRecord] = []
        for target_type in target_types:
            model = _model_for(target_type)
            result = await self.session.execute(
                select(model)
                .where(model.status.in_(VOTEABLE_STATUSES))
                .order_by(model.created_at.desc())
            )
            records.extend(_record(target_type, row) for row in result.scalars().all())
        return _newest_first(records)

    @translate_store_errors("submission_list_by_author")
    async def list_by_author(self, user_id: str) -> list[SubmissionRecord]:
        records: list[SubmissionRecord] = []
        for target_type, model in SUBMISSION_MODELS.items():
            result = await self.session.execute(
                select(model)
                .where(model.submitted_by == user_id)
                .order_by(model.created_at.desc())
            )
            records.extend(_record(target_type, row) for row in result.scalars().all())
        return _newest_first(records)

    @translate_store_errors("submission_list_published")
    async def list_published(
        self, target_type: str, limit: int = 100, **filters
    ) -> list[Threat | FudAnalysis]:
        result = await self.session.execute(build_published_query(target_type, limit, **filters))
        return list(result.scalars().all())


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _newest_first(records: list[SubmissionRecord]) -> list[SubmissionRecord]:
    return sorted(
        records,
        key=lambda r: r.created_at or _EPOCH,
        reverse=True,
    )
