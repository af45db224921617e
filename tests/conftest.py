"""Pytest fixtures for discipline engine tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any
from uuid import UUID

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from discipline_engine.config import Settings
from discipline_engine.database import create_schema
from discipline_engine.models import (
    AppUser,
    DisciplineLevel,
    Employee,
    House,
    SeverityLevel,
    UserRole,
    ViolationCategory,
)
from discipline_engine.services.discipline_service import DisciplineService


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests; keyword arguments override single fields."""
    values: dict[str, Any] = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "host": "127.0.0.1",
        "port": 8000,
        "debug": False,
        "log_level": "DEBUG",
        "violation_date_tolerance_hours": 24,
        "rolling_window_days": 90,
        "void_reason_min_length": 1,
        "signing_secret": "test-signing-secret-0123456789abcdef",
        "signing_link_ttl_hours": 72,
    }
    values.update(overrides)
    return Settings(**values)


@dataclass
class World:
    """Reference rows every corrective action test needs."""

    employee: Employee
    other_employee: Employee
    admin: AppUser
    hr: AppUser
    manager: AppUser
    coordinator: AppUser
    operations: AppUser
    lead: AppUser
    dsp: AppUser
    house: House
    medication_error: ViolationCategory
    late_clock_in: ViolationCategory
    sleeping_overnight: ViolationCategory
    gross_misconduct: ViolationCategory
    retired: ViolationCategory


@pytest.fixture
def settings() -> Settings:
    """Default test settings."""
    return make_settings()


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine so separate sessions use separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'discipline.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def world(session_factory: async_sessionmaker[AsyncSession]) -> World:
    """Seed and commit employees, users, a house and violation categories."""
    async with session_factory() as session:
        world = World(
            employee=Employee(first_name="Dana", last_name="Reyes", position="DSP"),
            other_employee=Employee(first_name="Sam", last_name="Okafor", position="DSP"),
            admin=AppUser(name="Avery Admin", role=UserRole.ADMIN.value),
            hr=AppUser(name="Harper HR", role=UserRole.HR.value),
            manager=AppUser(name="Morgan Manager", role=UserRole.DESIGNATED_MANAGER.value),
            coordinator=AppUser(
                name="Casey Coordinator", role=UserRole.DESIGNATED_COORDINATOR.value
            ),
            operations=AppUser(name="Oakley Ops", role=UserRole.OPERATIONS.value),
            lead=AppUser(name="Logan Lead", role=UserRole.LEAD_DSP.value),
            dsp=AppUser(name="Drew DSP", role=UserRole.DSP.value),
            house=House(name="Maple House"),
            medication_error=ViolationCategory(
                category_name="Medication Error",
                severity_level=SeverityLevel.SERIOUS.value,
                default_points=5,
                display_order=1,
            ),
            late_clock_in=ViolationCategory(
                category_name="Clock-in 1-15 minutes late",
                severity_level=SeverityLevel.MINOR.value,
                default_points=1,
                display_order=1,
            ),
            sleeping_overnight=ViolationCategory(
                category_name="Sleeping on overnight awake shift",
                severity_level=SeverityLevel.CRITICAL.value,
                default_points=8,
                display_order=1,
            ),
            gross_misconduct=ViolationCategory(
                category_name="Gross misconduct",
                severity_level=SeverityLevel.IMMEDIATE_TERMINATION.value,
                default_points=0,
                display_order=1,
                description="Immediate suspension pending investigation",
            ),
            retired=ViolationCategory(
                category_name="Retired category",
                severity_level=SeverityLevel.MINOR.value,
                default_points=2,
                display_order=2,
                is_active=False,
            ),
        )
        session.add_all(list(vars(world).values()))
        await session.commit()
    return world


@pytest.fixture
async def service(
    session: AsyncSession, settings: Settings
) -> DisciplineService:
    """Discipline service on the per-test session."""
    return DisciplineService(session, settings)


def action_request(world: World, **overrides: Any) -> dict[str, Any]:
    """A valid create request for the world's employee, issued by the manager."""
    request: dict[str, Any] = {
        "employee_id": world.employee.employee_id,
        "issuer_id": world.manager.user_id,
        "violation_category_id": world.medication_error.violation_category_id,
        "violation_date": date.today() - timedelta(days=1),
        "incident_description": "Evening medications given 90 minutes late.",
        "discipline_level": DisciplineLevel.WRITTEN_WARNING,
        "house_id": world.house.house_id,
        "corrective_expectations": [
            "Administer medications within the scheduled window",
            "Review the eMAR at shift start",
        ],
    }
    request.update(overrides)
    return request


async def create_pending(service: DisciplineService, world: World, **overrides: Any) -> UUID:
    """Create an action and return its id."""
    action = await service.create_action(action_request(world, **overrides))
    return action.corrective_action_id
