"""Tests for voiding corrective actions."""

from uuid import uuid4

import pytest

from discipline_engine.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from discipline_engine.models import CorrectiveActionStatus, UserRole
from discipline_engine.services.audit_service import AuditService
from discipline_engine.services.discipline_service import DisciplineService

from tests.conftest import create_pending, make_settings


class TestVoidAction:
    """Voiding is irreversible and restricted to admin and HR."""

    @pytest.mark.parametrize("voider,role", [("admin", UserRole.ADMIN), ("hr", UserRole.HR)])
    async def test_void_pending(self, service, world, voider, role):
        action_id = await create_pending(service, world)
        user = getattr(world, voider)

        action = await service.void_action(action_id, user.user_id, role, "data entry error")

        assert action.status == CorrectiveActionStatus.VOIDED
        assert action.void_reason == "data entry error"
        assert action.voided_by_id == user.user_id
        assert action.voided_at is not None
        assert action.effective_points == 0

    async def test_void_ignores_adjusted_points(self, service, world):
        adjusted = await create_pending(
            service,
            world,
            points_override=3,
            adjustment_reason="mitigating circumstances considered",
        )
        await create_pending(service, world)
        employee_id = world.employee.employee_id
        assert await service.get_employee_total_points(employee_id) == 8

        action = await service.void_action(
            adjusted, world.admin.user_id, UserRole.ADMIN, "issued in error"
        )

        assert action.points_adjusted == 3
        assert action.effective_points == 0
        assert await service.get_effective_points(adjusted) == 0
        assert await service.get_employee_total_points(employee_id) == 5

    async def test_void_acknowledged_and_disputed(self, service, world):
        acknowledged = await create_pending(service, world)
        disputed = await create_pending(service, world)
        await service.sign_action(
            acknowledged, "employee", world.employee.employee_id, "sig", UserRole.SUBJECT_EMPLOYEE
        )
        await service.sign_action(
            disputed, "employee", world.employee.employee_id, "sig", UserRole.SUBJECT_EMPLOYEE, True
        )

        for action_id in (acknowledged, disputed):
            action = await service.void_action(
                action_id, world.hr.user_id, UserRole.HR, "issued in error"
            )
            assert action.status == CorrectiveActionStatus.VOIDED

    async def test_signatures_survive_void(self, service, world):
        action_id = await create_pending(service, world)
        await service.sign_action(
            action_id, "supervisor", world.manager.user_id, "sig", UserRole.DESIGNATED_MANAGER
        )

        action = await service.void_action(action_id, world.admin.user_id, UserRole.ADMIN, "dup")

        assert len(action.signatures) == 1

    async def test_reason_is_trimmed(self, service, world):
        action_id = await create_pending(service, world)
        action = await service.void_action(
            action_id, world.admin.user_id, UserRole.ADMIN, "  wrong employee  "
        )
        assert action.void_reason == "wrong employee"

    async def test_void_writes_audit_event(self, service, session, world):
        action_id = await create_pending(service, world)
        await service.void_action(action_id, world.admin.user_id, UserRole.ADMIN, "duplicate")

        events = await AuditService(session).list_for(action_id)

        assert events[-1].action == "void"
        assert events[-1].actor_user_id == world.admin.user_id
        assert events[-1].after_json == {"status": "voided", "void_reason": "duplicate"}

    @pytest.mark.parametrize(
        "role",
        [
            UserRole.DESIGNATED_MANAGER,
            UserRole.DESIGNATED_COORDINATOR,
            UserRole.OPERATIONS,
            UserRole.LEAD_DSP,
            UserRole.DSP,
            UserRole.FINANCE,
        ],
    )
    async def test_role_not_permitted(self, service, world, role):
        action_id = await create_pending(service, world)

        with pytest.raises(AuthorizationError):
            await service.void_action(action_id, world.manager.user_id, role, "please")

        action = await service.get_action(action_id)
        assert action.status == CorrectiveActionStatus.PENDING_SIGNATURE

    @pytest.mark.parametrize("reason", ["", "   "])
    async def test_reason_required(self, service, world, reason):
        action_id = await create_pending(service, world)

        with pytest.raises(ValidationError):
            await service.void_action(action_id, world.admin.user_id, UserRole.ADMIN, reason)

        action = await service.get_action(action_id)
        assert action.status == CorrectiveActionStatus.PENDING_SIGNATURE
        assert action.void_reason is None

    async def test_minimum_reason_length(self, session, world):
        service = DisciplineService(session, make_settings(void_reason_min_length=10))
        action_id = await create_pending(service, world)

        with pytest.raises(ValidationError) as exc_info:
            await service.void_action(action_id, world.admin.user_id, UserRole.ADMIN, "dup")
        assert exc_info.value.context == {"min_length": 10}

        action = await service.void_action(
            action_id, world.admin.user_id, UserRole.ADMIN, "duplicate of earlier record"
        )
        assert action.status == CorrectiveActionStatus.VOIDED

    async def test_second_void_conflicts(self, service, world):
        action_id = await create_pending(service, world)
        await service.void_action(action_id, world.admin.user_id, UserRole.ADMIN, "first")

        with pytest.raises(ConflictError) as exc_info:
            await service.void_action(action_id, world.hr.user_id, UserRole.HR, "second")
        assert "already voided" in exc_info.value.detail

        action = await service.get_action(action_id)
        assert action.void_reason == "first"
        assert action.voided_by_id == world.admin.user_id

    async def test_unknown_action(self, service, world):
        with pytest.raises(NotFoundError):
            await service.void_action(uuid4(), world.admin.user_id, UserRole.ADMIN, "dup")
