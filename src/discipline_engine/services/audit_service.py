"""Append-only audit trail for corrective action mutations."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from discipline_engine.models import AuditEvent

CORRECTIVE_ACTION_ENTITY = "corrective_action"


class AuditService:
    """Records audit events in the caller's transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        *,
        entity_id: UUID,
        action: str,
        actor_user_id: UUID | None,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
        entity_type: str = CORRECTIVE_ACTION_ENTITY,
    ) -> AuditEvent:
        """Add an audit event; it commits or rolls back with the mutation."""
        event = AuditEvent(
            actor_user_id=actor_user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            before_json=before,
            after_json=after,
        )
        self.session.add(event)
        await self.session.flush()
        return event

    async def list_for(
        self, entity_id: UUID, entity_type: str = CORRECTIVE_ACTION_ENTITY
    ) -> list[AuditEvent]:
        """Audit events for an entity, oldest first."""
        result = await self.session.execute(
            select(AuditEvent)
            .where(
                AuditEvent.entity_type == entity_type,
                AuditEvent.entity_id == entity_id,
            )
            .order_by(AuditEvent.created_at)
        )
        return list(result.scalars().all())
