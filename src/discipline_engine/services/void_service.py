"""Void processing: irreversible administrative nullification of an action."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from discipline_engine.config import Settings, get_settings
from discipline_engine.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from discipline_engine.models import CorrectiveAction, CorrectiveActionStatus, UserRole, utcnow
from discipline_engine.services.locking_service import claim_action
from discipline_engine.services.state_machine import ActionEvent, CorrectiveActionStateMachine

logger = logging.getLogger(__name__)

VOID_ROLES = frozenset({UserRole.ADMIN, UserRole.HR})


class VoidProcessor:
    """Voids corrective actions.

    A void writes status, reason, voider and timestamp in one conditional
    UPDATE. No point ledger is touched: point totals are recomputed from the
    action rows and skip voided actions.
    """

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()

    async def void(
        self,
        action_id: UUID,
        voiding_user_id: UUID,
        voiding_user_role: UserRole | str,
        reason: str | None,
    ) -> CorrectiveAction:
        """Void an action. Rejects a second void with ConflictError."""
        role_name = getattr(voiding_user_role, "value", voiding_user_role)
        if role_name not in {role.value for role in VOID_ROLES}:
            raise AuthorizationError(
                "Only administrators and HR can void corrective actions",
                {"role": role_name},
            )

        cleaned = (reason or "").strip()
        if not cleaned:
            raise ValidationError("A void reason is required")
        if len(cleaned) < self.settings.void_reason_min_length:
            raise ValidationError(
                f"A void reason of at least {self.settings.void_reason_min_length}"
                " characters is required",
                {"min_length": self.settings.void_reason_min_length},
            )

        sources = CorrectiveActionStateMachine.sources_for(ActionEvent.VOIDED)
        try:
            claim = await claim_action(
                self.session,
                action_id,
                sources,
                values={
                    "status": CorrectiveActionStatus.VOIDED.value,
                    "void_reason": cleaned,
                    "voided_by_id": voiding_user_id,
                    "voided_at": utcnow(),
                },
            )
        except IntegrityError as e:
            raise NotFoundError("User", voiding_user_id) from e
        if not claim.claimed:
            logger.warning("Rejected void of action %s in status %s", action_id, claim.action.status)
            raise ConflictError(
                "This corrective action is already voided",
                {"status": claim.action.status},
            )

        logger.info("Voided corrective action %s by %s", action_id, voiding_user_id)
        return claim.action
