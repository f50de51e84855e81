"""Append-only audit log."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select

from rmf_backend.models import AuditLog
from rmf_backend.repositories.base import (
    BaseRepository,
    clamp_limit,
    translate_store_errors,
)


class AuditRepository(BaseRepository):
    """Writes and lists audit entries."""

    @translate_store_errors("audit_append")
    async def append(
        self,
        entity_type: str,
        entity_id: UUID,
        action: str,
        user_id: str,
        user_name: str | None = None,
        diff: dict[str, Any] | None = None,
    ) -> None:
        self.session.add(
            AuditLog(
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                user_id=user_id,
                user_name=user_name,
                diff=diff,
            )
        )
        await self.session.flush()

    @translate_store_errors("audit_list")
    async def list_entries(self, entity_type: str | None = None, limit: int = 50) -> list[AuditLog]:
        query = select(AuditLog).order_by(AuditLog.created_at.desc()).limit(clamp_limit(limit))
        if entity_type:
            query = query.where(AuditLog.entity_type == entity_type)
        result = await self.session.execute(query)
        return list(result.scalars().all())
