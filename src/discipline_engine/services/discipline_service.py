"""Discipline service - request/response orchestrator for corrective actions."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from discipline_engine.config import Settings, get_settings
from discipline_engine.errors import (
    AuthorizationError,
    ConflictError,
    DisciplineError,
    ValidationError,
)
from discipline_engine.models import (
    CorrectiveAction,
    CorrectiveActionStatus,
    SeverityLevel,
    SignerType,
    UserRole,
    ViolationCategory,
)
from discipline_engine.services.audit_service import AuditService
from discipline_engine.services.corrective_action_service import (
    ISSUER_ROLES,
    CorrectiveActionStore,
    DisciplineHistory,
)
from discipline_engine.services.requests import (
    CreateActionRequest,
    EditActionRequest,
    SignatureRequest,
    VoidActionRequest,
)
from discipline_engine.services.signature_service import SignatureCollector, SignatureStatus
from discipline_engine.services.void_service import VoidProcessor

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)


def _parse(model: type[RequestT], data: RequestT | Mapping[str, Any]) -> RequestT:
    """Validate request shape, translating pydantic errors to ValidationError."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ValidationError("; ".join(errors), {"errors": errors}) from e


class DisciplineService:
    """Composes catalog, store, signature collector and void processor.

    Operations:
    - create_action / edit_action / sign_action / void_action: each runs in
      one unit of work with its audit event; any error rolls everything back
    - get_action, get_employee_total_points and the history/status reads

    The service holds no state beyond its session.
    """

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()
        self.store = CorrectiveActionStore(session, self.settings)
        self.signatures = SignatureCollector(session)
        self.voids = VoidProcessor(session, self.settings)
        self.catalog = self.store.catalog
        self.audit = AuditService(session)

    @asynccontextmanager
    async def _unit_of_work(self) -> AsyncGenerator[None, None]:
        """Commit on success; roll back on any failure so nothing partial persists."""
        try:
            yield
            await self.session.commit()
        except DisciplineError as e:
            await self.session.rollback()
            logger.info("Rejected corrective action operation: %s (%s)", e.detail, e.code)
            raise
        except Exception:
            await self.session.rollback()
            logger.exception("Corrective action operation failed")
            raise

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_action(
        self, request: CreateActionRequest | Mapping[str, Any]
    ) -> CorrectiveAction:
        """Create a corrective action in pending_signature status."""
        req = _parse(CreateActionRequest, request)
        async with self._unit_of_work():
            action = await self.store.create(**req.model_dump())
            await self.audit.record(
                entity_id=action.corrective_action_id,
                action="create",
                actor_user_id=req.issuer_id,
                after=action.snapshot(),
            )
        return action

    async def edit_action(
        self,
        action_id: UUID,
        editor_id: UUID,
        editor_role: UserRole | str,
        patch: EditActionRequest | Mapping[str, Any],
    ) -> CorrectiveAction:
        """Patch fields of a pending action not yet signed by the employee."""
        req = _parse(EditActionRequest, patch)
        changes = req.to_patch()
        if not changes:
            raise ValidationError("Patch does not change any field")
        async with self._unit_of_work():
            action, before = await self.store.edit(action_id, editor_id, editor_role, changes)
            await self.audit.record(
                entity_id=action_id,
                action="update",
                actor_user_id=editor_id,
                before=before,
                after=action.snapshot(),
            )
        return action

    async def sign_action(
        self,
        action_id: UUID,
        signer_type: SignerType | str,
        signer_id: UUID,
        signature_data: str,
        caller_role: UserRole | str,
        dispute: bool = False,
        *,
        employee_comments: str | None = None,
        ip_address: str | None = None,
        device_info: str | None = None,
    ) -> CorrectiveAction:
        """Add a signature; an employee signature acknowledges or disputes."""
        req = _parse(
            SignatureRequest,
            {
                "signer_type": signer_type,
                "signer_id": signer_id,
                "signature_data": signature_data,
                "caller_role": getattr(caller_role, "value", caller_role),
                "dispute": dispute,
                "employee_comments": employee_comments,
                "ip_address": ip_address,
                "device_info": device_info,
            },
        )
        async with self._unit_of_work():
            action = await self.signatures.add_signature(
                action_id,
                req.signer_type,
                req.signer_id,
                req.signature_data,
                req.caller_role,
                dispute=req.dispute,
                employee_comments=req.employee_comments,
                ip_address=req.ip_address,
                device_info=req.device_info,
            )
            await self.audit.record(
                entity_id=action_id,
                action=f"sign:{req.signer_type.value}",
                actor_user_id=req.signer_id,
                after={
                    "status": action.status,
                    "signer_type": req.signer_type.value,
                    "dispute": req.dispute if req.signer_type == SignerType.EMPLOYEE else None,
                },
            )
        return action

    async def void_action(
        self,
        action_id: UUID,
        voiding_user_id: UUID,
        voiding_user_role: UserRole | str,
        reason: str,
    ) -> CorrectiveAction:
        """Irreversibly void an action."""
        req = _parse(VoidActionRequest, {"reason": reason})
        async with self._unit_of_work():
            action = await self.voids.void(
                action_id, voiding_user_id, voiding_user_role, req.reason
            )
            await self.audit.record(
                entity_id=action_id,
                action="void",
                actor_user_id=voiding_user_id,
                after={"status": action.status, "void_reason": action.void_reason},
            )
        return action

    async def prepare_signing_link(
        self,
        action_id: UUID,
        requester_id: UUID,
        requester_role: UserRole | str,
    ) -> CorrectiveAction:
        """Check that an employee signing link may be issued for an action."""
        role_name = getattr(requester_role, "value", requester_role)
        async with self._unit_of_work():
            action = await self.store.get_action(action_id)
            if (
                role_name not in {role.value for role in ISSUER_ROLES}
                and requester_id != action.issued_by_id
            ):
                raise AuthorizationError(
                    "Only staff who can issue corrective actions can request a signing link",
                    {"role": role_name},
                )
            if action.status != CorrectiveActionStatus.PENDING_SIGNATURE:
                raise ConflictError(
                    f"Corrective action is {action.status} and awaits no employee signature",
                    {"status": action.status},
                )
        return action

    # ------------------------------------------------------------------
    # Reads (each ends its read transaction)
    # ------------------------------------------------------------------

    async def get_action(self, action_id: UUID) -> CorrectiveAction:
        """Full snapshot including signatures."""
        async with self._unit_of_work():
            return await self.store.get_action(action_id)

    async def get_effective_points(self, action_id: UUID) -> int:
        """Effective points of one action."""
        async with self._unit_of_work():
            return await self.store.get_effective_points(action_id)

    async def get_employee_total_points(self, employee_id: UUID) -> int:
        """Cumulative points over all non-voided actions."""
        async with self._unit_of_work():
            return await self.store.get_employee_total_points(employee_id)

    async def get_current_points(self, employee_id: UUID) -> int:
        """Points within the rolling window."""
        async with self._unit_of_work():
            return await self.store.get_current_points(employee_id)

    async def get_discipline_history(
        self, employee_id: UUID, include_voided: bool = False
    ) -> DisciplineHistory:
        """Employee discipline history with stats."""
        async with self._unit_of_work():
            return await self.store.get_discipline_history(employee_id, include_voided)

    async def get_signature_status(self, action_id: UUID) -> SignatureStatus:
        """Which parties have signed."""
        async with self._unit_of_work():
            return await self.signatures.signature_status(action_id)

    async def get_category(self, category_id: UUID) -> ViolationCategory:
        """One violation category."""
        async with self._unit_of_work():
            return await self.catalog.get(category_id)

    async def list_categories(
        self,
    ) -> tuple[list[ViolationCategory], dict[SeverityLevel, list[ViolationCategory]]]:
        """Active categories, flat and grouped by severity."""
        async with self._unit_of_work():
            grouped = await self.catalog.grouped_by_severity()
        flat = [category for group in grouped.values() for category in group]
        return flat, grouped
