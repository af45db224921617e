"""ORM models for the discipline engine."""

from discipline_engine.models.base import Base, TimestampMixin, utcnow
from discipline_engine.models.discipline import (
    DEFAULT_CONSEQUENCES_TEXT,
    AuditEvent,
    CorrectiveAction,
    CorrectiveActionSignature,
    ViolationCategory,
)
from discipline_engine.models.enums import (
    CorrectiveActionStatus,
    DisciplineLevel,
    SeverityLevel,
    SignerType,
    UserRole,
)
from discipline_engine.models.organization import AppUser, Employee, House

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "DEFAULT_CONSEQUENCES_TEXT",
    "AuditEvent",
    "CorrectiveAction",
    "CorrectiveActionSignature",
    "ViolationCategory",
    "CorrectiveActionStatus",
    "DisciplineLevel",
    "SeverityLevel",
    "SignerType",
    "UserRole",
    "AppUser",
    "Employee",
    "House",
]
