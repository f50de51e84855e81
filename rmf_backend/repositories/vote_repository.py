"""Vote ledger storage: one row per (target_type, target_id, voter_id)."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.dialects.postgresql import Insert, insert

from rmf_backend.models import Vote
from rmf_backend.repositories.base import BaseRepository, translate_store_errors

TargetKey = tuple[str, UUID]


def build_vote_upsert(
    target_type: str,
    target_id: UUID,
    voter_id: str,
    vote_value: int,
    voter_username: str | None = None,
    voter_name: str | None = None,
) -> Insert:
    """INSERT ... ON CONFLICT (target_type, target_id, voter_id) DO UPDATE."""
    stmt = insert(Vote).values(
        target_type=target_type,
        target_id=target_id,
        voter_id=voter_id,
        voter_username=voter_username,
        voter_name=voter_name,
        vote_value=vote_value,
    )
    return stmt.on_conflict_do_update(
        constraint="uq_vote_target_voter",
        set_={
            "vote_value": stmt.excluded.vote_value,
            "voter_username": stmt.excluded.voter_username,
            "voter_name": stmt.excluded.voter_name,
            "updated_at": func.now(),
        },
    )


def _targets_clause(targets: Iterable[TargetKey]):
    return or_(
        *(
            and_(Vote.target_type == target_type, Vote.target_id == target_id)
            for target_type, target_id in targets
        )
    )


class VoteRepository(BaseRepository):
    """Upserts, deletes and counts ledger rows."""

    @translate_store_errors("vote_upsert")
    async def upsert(
        self,
        target_type: str,
        target_id: UUID,
        voter_id: str,
        vote_value: int,
        voter_username: str | None = None,
        voter_name: str | None = None,
    ) -> None:
        await self.session.execute(
            build_vote_upsert(
                target_type,
                target_id,
                voter_id,
                vote_value,
                voter_username=voter_username,
                voter_name=voter_name,
            )
        )

    @translate_store_errors("vote_delete")
    async def delete(self, target_type: str, target_id: UUID, voter_id: str) -> bool:
        result = await self.session.execute(
            delete(Vote).where(
                Vote.target_type == target_type,
                Vote.target_id == target_id,
                Vote.voter_id == voter_id,
            )
        )
        return result.rowcount > 0

    @translate_store_errors("vote_counts")
    async def counts(self, target_type: str, target_id: UUID) -> dict[int, int]:
        """Row counts keyed by vote value (1 and -1)."""
        result = await self.session.execute(
            select(Vote.vote_value, func.count())
            .where(Vote.target_type == target_type, Vote.target_id == target_id)
            .group_by(Vote.vote_value)
        )
        return {value: count for value, count in result.all()}

    @translate_store_errors("vote_get_value")
    async def get_value(
        self, target_type: str, target_id: UUID, voter_id: str
    ) -> int | None:
        result = await self.session.execute(
            select(Vote.vote_value).where(
                Vote.target_type == target_type,
                Vote.target_id == target_id,
                Vote.voter_id == voter_id,
            )
        )
        return result.scalar_one_or_none()

    @translate_store_errors("vote_counts_for")
    async def counts_for(self, targets: list[TargetKey]) -> dict[TargetKey, dict[int, int]]:
        """Batch variant of ``counts`` for many targets in one query."""
        if not targets:
            return {}
        result = await self.session.execute(
            select(Vote.target_type, Vote.target_id, Vote.vote_value, func.count())
            .where(_targets_clause(targets))
            .group_by(Vote.target_type, Vote.target_id, Vote.vote_value)
        )
        counts: dict[TargetKey, dict[int, int]] = {}
        for target_type, target_id, value, count in result.all():
            counts.setdefault((target_type, target_id), {})[value] = count
        return counts

    @translate_store_errors("vote_values_by_voter")
    async def values_by_voter(
        self, voter_id: str, targets: list[TargetKey]
    ) -> dict[TargetKey, int]:
        if not targets:
            return {}
        result = await self.session.execute(
            select(Vote.target_type, Vote.target_id, Vote.vote_value).where(
                Vote.voter_id == voter_id, _targets_clause(targets)
            )
        )
        return {
            (target_type, target_id): value
            for target_type, target_id, value in result.all()
        }
