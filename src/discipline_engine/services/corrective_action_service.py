"""Corrective action store: creation, pre-signature edits and point queries."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from discipline_engine.config import Settings, get_settings
from discipline_engine.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from discipline_engine.models import (
    DEFAULT_CONSEQUENCES_TEXT,
    AppUser,
    CorrectiveAction,
    CorrectiveActionStatus,
    DisciplineLevel,
    Employee,
    House,
    SeverityLevel,
    SignerType,
    UserRole,
    utcnow,
)
from discipline_engine.services.locking_service import claim_action, load_action
from discipline_engine.services.state_machine import CorrectiveActionStateMachine
from discipline_engine.services.violation_catalog import ViolationCatalog

logger = logging.getLogger(__name__)

# Roles allowed to raise a corrective action
ISSUER_ROLES = frozenset(
    {
        UserRole.ADMIN,
        UserRole.HR,
        UserRole.DESIGNATED_MANAGER,
        UserRole.DESIGNATED_COORDINATOR,
    }
)

# Roles allowed to edit any pending action; the issuer may always edit their own
EDITOR_ROLES = frozenset({UserRole.ADMIN, UserRole.HR})

EDITABLE_FIELDS = frozenset(
    {
        "incident_description",
        "mitigating_circumstances",
        "discipline_level",
        "violation_date",
        "violation_time",
        "house_id",
        "points_adjusted",
        "adjustment_reason",
        "corrective_expectations",
        "consequences_text",
        "pip_scheduled",
        "pip_date",
    }
)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


@dataclass(frozen=True)
class DisciplineHistory:
    """An employee's corrective actions with summary statistics."""

    employee: Employee
    actions: list[CorrectiveAction]
    total_points: int
    current_points: int
    counts_by_status: dict[str, int] = field(default_factory=dict)
    counts_by_severity: dict[str, int] = field(default_factory=dict)


class CorrectiveActionStore:
    """Creation and validated mutation of corrective action records.

    Operations:
    - create: validate references and fields, copy category points, persist
    - edit: patch fields while the action is pending and unsigned by the employee
    - get_effective_points / get_employee_total_points: pure recomputation
    - get_discipline_history: per-employee listing with stats

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()
        self.catalog = ViolationCatalog(session)

    # ------------------------------------------------------------------
    # Reference resolution
    # ------------------------------------------------------------------

    async def _get_employee(self, employee_id: UUID) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def _get_user(self, user_id: UUID) -> AppUser:
        user = await self.session.get(AppUser, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def _check_house(self, house_id: UUID | None) -> None:
        if house_id is not None and await self.session.get(House, house_id) is None:
            raise NotFoundError("House", house_id)

    # ------------------------------------------------------------------
    # Field validation (shared by create and edit)
    # ------------------------------------------------------------------

    def _validate_fields(self, values: dict[str, Any]) -> None:
        """Validate the resulting field values of an action.

        Raises ValidationError listing every violated precondition.
        """
        errors: list[str] = []

        if _blank(values.get("incident_description")):
            errors.append("incident_description must not be empty")

        violation_date = values.get("violation_date")
        if not isinstance(violation_date, date):
            errors.append("violation_date is required")
        else:
            tolerance = timedelta(hours=self.settings.violation_date_tolerance_hours)
            latest_allowed = (utcnow() + tolerance).date()
            if violation_date > latest_allowed:
                errors.append(
                    f"violation_date {violation_date.isoformat()} is in the future"
                )

        violation_time = values.get("violation_time")
        if violation_time is not None and not isinstance(violation_time, time):
            errors.append("violation_time must be a time of day")

        try:
            DisciplineLevel(values.get("discipline_level"))
        except ValueError:
            errors.append(f"Invalid discipline_level '{values.get('discipline_level')}'")

        points_adjusted = values.get("points_adjusted")
        if points_adjusted is not None:
            if isinstance(points_adjusted, bool) or not isinstance(points_adjusted, int):
                errors.append("points_adjusted must be an integer")
            elif points_adjusted < 0:
                errors.append("points_adjusted must not be negative")
            if _blank(values.get("adjustment_reason")):
                errors.append("adjustment_reason is required when points are adjusted")

        expectations = values.get("corrective_expectations") or []
        if not isinstance(expectations, list) or any(
            not isinstance(item, str) or not item.strip() for item in expectations
        ):
            errors.append("corrective_expectations must be a list of non-empty strings")

        if not isinstance(values.get("pip_scheduled"), bool):
            errors.append("pip_scheduled must be true or false")
        elif values["pip_scheduled"] and values.get("pip_date") is None:
            errors.append("pip_date is required when a PIP is scheduled")

        if errors:
            raise ValidationError("; ".join(errors), {"errors": errors})

    # ------------------------------------------------------------------
    # Create / edit
    # ------------------------------------------------------------------

    async def create(
        self,
        *,
        employee_id: UUID,
        issuer_id: UUID,
        violation_category_id: UUID,
        violation_date: date,
        incident_description: str,
        discipline_level: DisciplineLevel | str,
        house_id: UUID | None = None,
        violation_time: time | None = None,
        mitigating_circumstances: str | None = None,
        points_override: int | None = None,
        adjustment_reason: str | None = None,
        corrective_expectations: list[str] | None = None,
        consequences_text: str | None = None,
        pip_scheduled: bool = False,
        pip_date: date | None = None,
    ) -> CorrectiveAction:
        """Create a corrective action in pending_signature status.

        points_assigned is copied from the category's default points; an
        override is stored separately in points_adjusted and needs a reason.
        """
        values: dict[str, Any] = {
            "incident_description": incident_description,
            "violation_date": violation_date,
            "violation_time": violation_time,
            "discipline_level": discipline_level,
            "points_adjusted": points_override,
            "adjustment_reason": adjustment_reason,
            "corrective_expectations": corrective_expectations or [],
            "pip_scheduled": pip_scheduled,
            "pip_date": pip_date,
        }
        self._validate_fields(values)

        await self._get_employee(employee_id)
        issuer = await self._get_user(issuer_id)
        if UserRole(issuer.role) not in ISSUER_ROLES:
            raise AuthorizationError(
                f"Role '{issuer.role}' cannot issue corrective actions",
                {"role": issuer.role},
            )
        await self._check_house(house_id)
        category = await self.catalog.get(violation_category_id)

        action = CorrectiveAction(
            employee_id=employee_id,
            issued_by_id=issuer_id,
            house_id=house_id,
            violation_category_id=category.violation_category_id,
            violation_date=violation_date,
            violation_time=violation_time,
            incident_description=incident_description.strip(),
            mitigating_circumstances=mitigating_circumstances or None,
            discipline_level=DisciplineLevel(discipline_level).value,
            points_assigned=category.default_points,
            points_adjusted=points_override,
            adjustment_reason=adjustment_reason.strip() if points_override is not None else None,
            corrective_expectations=list(corrective_expectations or []),
            consequences_text=consequences_text or DEFAULT_CONSEQUENCES_TEXT,
            pip_scheduled=pip_scheduled,
            pip_date=pip_date,
            status=CorrectiveActionStatus.PENDING_SIGNATURE.value,
        )
        self.session.add(action)
        await self.session.flush()

        logger.info(
            "Created corrective action %s for employee %s (%s, %d points)",
            action.corrective_action_id,
            employee_id,
            SeverityLevel(category.severity_level).value,
            action.effective_points,
        )
        return await load_action(self.session, action.corrective_action_id)

    async def edit(
        self,
        action_id: UUID,
        editor_id: UUID,
        editor_role: UserRole | str,
        patch: dict[str, Any],
    ) -> tuple[CorrectiveAction, dict[str, Any]]:
        """Apply a field patch to a pending, employee-unsigned action.

        Returns the updated action and the pre-edit snapshot.
        """
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Fields cannot be edited: {', '.join(sorted(unknown))}",
                {"fields": sorted(unknown)},
            )

        claim = await claim_action(
            self.session, action_id, CorrectiveActionStateMachine.EDITABLE
        )
        action = claim.action
        if not claim.claimed:
            raise ConflictError(
                f"Corrective action is {action.status} and can no longer be edited",
                {"status": action.status},
            )
        if action.signature_for(SignerType.EMPLOYEE) is not None:
            raise ConflictError(
                "Corrective action was signed by the employee and can no longer be edited",
                {"status": action.status},
            )

        role_name = getattr(editor_role, "value", editor_role)
        if role_name not in {role.value for role in EDITOR_ROLES} and editor_id != action.issued_by_id:
            raise AuthorizationError(
                "Only the issuer, HR or an administrator can edit this corrective action",
                {"role": role_name},
            )

        before = action.snapshot()
        changes = dict(patch)
        if "points_adjusted" in changes and changes["points_adjusted"] is None:
            changes["adjustment_reason"] = None

        merged = {
            name: changes.get(name, getattr(action, name)) for name in EDITABLE_FIELDS
        }
        self._validate_fields(merged)
        if "house_id" in changes:
            await self._check_house(changes["house_id"])

        for name, value in changes.items():
            if name == "discipline_level":
                value = DisciplineLevel(value).value
            elif name in ("incident_description", "adjustment_reason") and value is not None:
                value = value.strip()
            elif name == "corrective_expectations":
                value = list(value or [])
            setattr(action, name, value)
        action.updated_at = utcnow()
        await self.session.flush()

        logger.info(
            "Edited corrective action %s (%s)", action_id, ", ".join(sorted(changes))
        )
        return action, before

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_action(self, action_id: UUID) -> CorrectiveAction:
        """Full snapshot of an action including signatures."""
        return await load_action(self.session, action_id)

    async def get_effective_points(self, action_id: UUID) -> int:
        """Effective points of one action."""
        return (await self.get_action(action_id)).effective_points

    async def get_employee_total_points(
        self, employee_id: UUID, since: date | None = None
    ) -> int:
        """Sum of effective points over the employee's non-voided actions.

        Recomputed from the action rows on every call.
        """
        await self._get_employee(employee_id)
        query = select(
            func.coalesce(
                func.sum(
                    func.coalesce(
                        CorrectiveAction.points_adjusted,
                        CorrectiveAction.points_assigned,
                    )
                ),
                0,
            )
        ).where(
            CorrectiveAction.employee_id == employee_id,
            CorrectiveAction.status != CorrectiveActionStatus.VOIDED.value,
        )
        if since is not None:
            query = query.where(CorrectiveAction.violation_date >= since)
        total = await self.session.scalar(query)
        return int(total or 0)

    async def get_current_points(self, employee_id: UUID) -> int:
        """Points within the rolling window (violation date based)."""
        since = utcnow().date() - timedelta(days=self.settings.rolling_window_days)
        return await self.get_employee_total_points(employee_id, since=since)

    async def get_discipline_history(
        self, employee_id: UUID, include_voided: bool = False
    ) -> DisciplineHistory:
        """Employee's actions, newest violation first, with summary stats."""
        employee = await self._get_employee(employee_id)
        query = select(CorrectiveAction).where(CorrectiveAction.employee_id == employee_id)
        if not include_voided:
            query = query.where(
                CorrectiveAction.status != CorrectiveActionStatus.VOIDED.value
            )
        query = query.order_by(
            CorrectiveAction.violation_date.desc(), CorrectiveAction.created_at.desc()
        )
        result = await self.session.execute(query)
        actions = list(result.scalars().all())

        by_status = Counter(action.status for action in actions)
        by_severity = Counter(
            action.violation_category.severity_level for action in actions
        )
        return DisciplineHistory(
            employee=employee,
            actions=actions,
            total_points=sum(action.effective_points for action in actions),
            current_points=await self.get_current_points(employee_id),
            counts_by_status={s.value: by_status.get(s.value, 0) for s in CorrectiveActionStatus},
            counts_by_severity={s.value: by_severity.get(s.value, 0) for s in SeverityLevel},
        )
