"""Signature collection for corrective actions.

Each action holds at most one signature per signer type. Who may record a
signature of a given type is decided by the finite map
``SIGNER_ROLE_PERMISSIONS``; only the employee's own signature drives a status
transition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from discipline_engine.errors import AuthorizationError, ConflictError, ValidationError
from discipline_engine.models import (
    CorrectiveAction,
    CorrectiveActionSignature,
    CorrectiveActionStatus,
    SignerType,
    UserRole,
    utcnow,
)
from discipline_engine.services.locking_service import claim_action, load_action
from discipline_engine.services.state_machine import CorrectiveActionStateMachine

logger = logging.getLogger(__name__)

_STAFF_SUPERVISORS = frozenset(
    {
        UserRole.ADMIN,
        UserRole.HR,
        UserRole.DESIGNATED_MANAGER,
        UserRole.DESIGNATED_COORDINATOR,
    }
)

# signer type -> roles allowed to record that signature
SIGNER_ROLE_PERMISSIONS: dict[SignerType, frozenset[UserRole]] = {
    SignerType.EMPLOYEE: frozenset({UserRole.SUBJECT_EMPLOYEE}),
    SignerType.SUPERVISOR: _STAFF_SUPERVISORS,
    SignerType.WITNESS: _STAFF_SUPERVISORS | {UserRole.OPERATIONS, UserRole.LEAD_DSP},
    SignerType.HR: frozenset({UserRole.ADMIN, UserRole.HR}),
}

# Statuses in which a signature of each kind can still be added
_OPEN_FOR_EMPLOYEE = {CorrectiveActionStatus.PENDING_SIGNATURE}
_OPEN_FOR_STAFF = {
    CorrectiveActionStatus.PENDING_SIGNATURE,
    CorrectiveActionStatus.ACKNOWLEDGED,
    CorrectiveActionStatus.DISPUTED,
}


def is_role_permitted(signer_type: SignerType | str, role: UserRole | str) -> bool:
    """Check the permission map for a signer type and caller role."""
    try:
        caller_role = UserRole(role)
    except ValueError:
        return False
    return caller_role in SIGNER_ROLE_PERMISSIONS[SignerType(signer_type)]


@dataclass(frozen=True)
class SignatureStatus:
    """Which parties have signed an action."""

    status: str
    signed_at: dict[str, datetime | None]

    @property
    def has_employee_signature(self) -> bool:
        return self.signed_at.get(SignerType.EMPLOYEE.value) is not None


class SignatureCollector:
    """Adds signatures to corrective actions under role and uniqueness rules."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _authorize(
        self,
        action: CorrectiveAction,
        signer_type: SignerType,
        signer_id: UUID,
        caller_role: UserRole | str,
    ) -> None:
        if not is_role_permitted(signer_type, caller_role):
            role_name = getattr(caller_role, "value", caller_role)
            raise AuthorizationError(
                f"Role '{role_name}' cannot record a {signer_type.value} signature",
                {"signer_type": signer_type.value, "role": role_name},
            )
        if signer_type == SignerType.EMPLOYEE and signer_id != action.employee_id:
            raise AuthorizationError(
                "Employee signatures must come from the subject employee",
                {"signer_type": signer_type.value},
            )

    async def add_signature(
        self,
        action_id: UUID,
        signer_type: SignerType | str,
        signer_id: UUID,
        signature_data: str,
        caller_role: UserRole | str,
        *,
        dispute: bool = False,
        employee_comments: str | None = None,
        ip_address: str | None = None,
        device_info: str | None = None,
    ) -> CorrectiveAction:
        """Record a signature and apply the employee-signature transition.

        The row claim and the UNIQUE (action, signer_type) constraint make the
        existence check and insert atomic against concurrent callers.
        """
        try:
            kind = SignerType(signer_type)
        except ValueError:
            raise ValidationError(
                f"Invalid signer type '{signer_type}'", {"signer_type": str(signer_type)}
            )
        if not signature_data or not signature_data.strip():
            raise ValidationError("signature_data must not be empty")
        if kind != SignerType.EMPLOYEE and (dispute or employee_comments):
            raise ValidationError(
                "dispute and employee_comments are only accepted with the employee signature"
            )

        expected = _OPEN_FOR_EMPLOYEE if kind == SignerType.EMPLOYEE else _OPEN_FOR_STAFF
        claim = await claim_action(self.session, action_id, expected)
        action = claim.action

        if action.status == CorrectiveActionStatus.VOIDED:
            logger.warning("Rejected %s signature on voided action %s", kind.value, action_id)
            raise ConflictError(
                "Cannot sign a voided corrective action", {"status": action.status}
            )

        self._authorize(action, kind, signer_id, caller_role)

        if not claim.claimed or action.signature_for(kind) is not None:
            raise ConflictError(
                f"A {kind.value} signature already exists for this corrective action",
                {"signer_type": kind.value},
            )

        signature = CorrectiveActionSignature(
            signer_type=kind.value,
            signer_id=signer_id,
            signature_data=signature_data,
            ip_address=ip_address,
            device_info=device_info,
            signed_at=utcnow(),
        )
        action.signatures.append(signature)

        if kind == SignerType.EMPLOYEE:
            event = CorrectiveActionStateMachine.employee_signature_event(dispute)
            next_status = CorrectiveActionStateMachine.transition(action.status, event)
            action.status = next_status.value
            action.employee_comments = employee_comments or None
            action.updated_at = utcnow()

        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.warning(
                "Concurrent %s signature rejected on action %s", kind.value, action_id
            )
            raise ConflictError(
                f"A {kind.value} signature already exists for this corrective action",
                {"signer_type": kind.value},
            ) from e

        logger.info(
            "Recorded %s signature on corrective action %s (status %s)",
            kind.value,
            action_id,
            action.status,
        )
        return action

    async def signature_status(self, action_id: UUID) -> SignatureStatus:
        """Per signer type signing time (None when not yet signed)."""
        action = await load_action(self.session, action_id)
        signed = {kind.value: None for kind in SignerType}
        for signature in action.signatures:
            signed[signature.signer_type] = signature.signed_at
        return SignatureStatus(status=action.status, signed_at=signed)
