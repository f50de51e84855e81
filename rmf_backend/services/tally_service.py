"""Tally engine: approvals, rejections and net score derived from the vote ledger."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from uuid import UUID

from rmf_backend.repositories.vote_repository import TargetKey, VoteRepository

APPROVE = 1
REJECT = -1


@dataclass(frozen=True)
class Tally:
    """Aggregate of the current ledger rows for one target."""

    approvals: int = 0
    rejections: int = 0

    @property
    def net_score(self) -> int:
        return self.approvals - self.rejections

    @classmethod
    def from_counts(cls, counts: Mapping[int, int]) -> Tally:
        return cls(
            approvals=counts.get(APPROVE, 0),
            rejections=counts.get(REJECT, 0),
        )

    def as_audit_diff(self, threshold: int) -> dict[str, int]:
        return {
            "approvals": self.approvals,
            "rejections": self.rejections,
            "net_score": self.net_score,
            "threshold": threshold,
        }


class TallyEngine:
    """Reads tallies straight from the ledger. Nothing is cached."""

    def __init__(self, votes: VoteRepository) -> None:
        self.votes = votes

    async def tally(self, target_type: str, target_id: UUID) -> Tally:
        return Tally.from_counts(await self.votes.counts(target_type, target_id))

    async def tallies_for(self, targets: list[TargetKey]) -> dict[TargetKey, Tally]:
        counts = await self.votes.counts_for(targets)
        return {key: Tally.from_counts(counts.get(key, {})) for key in targets}
