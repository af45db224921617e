"""Enumerations shared by the corrective action models and services."""

from __future__ import annotations

from enum import Enum


class SeverityLevel(str, Enum):
    """Violation severity tiers."""

    MINOR = "minor"
    MODERATE = "moderate"
    SERIOUS = "serious"
    CRITICAL = "critical"
    IMMEDIATE_TERMINATION = "immediate_termination"


class DisciplineLevel(str, Enum):
    """Organizational disciplinary step taken."""

    COACHING = "coaching"
    VERBAL_WARNING = "verbal_warning"
    WRITTEN_WARNING = "written_warning"
    FINAL_WARNING = "final_warning"
    PIP = "pip"
    TERMINATION = "termination"


class CorrectiveActionStatus(str, Enum):
    """Corrective action lifecycle states."""

    PENDING_SIGNATURE = "pending_signature"
    ACKNOWLEDGED = "acknowledged"
    DISPUTED = "disputed"
    VOIDED = "voided"


class SignerType(str, Enum):
    """Parties that can sign a corrective action."""

    EMPLOYEE = "employee"
    SUPERVISOR = "supervisor"
    WITNESS = "witness"
    HR = "hr"


class UserRole(str, Enum):
    """Caller roles.

    SUBJECT_EMPLOYEE is never stored on a user row. It is granted only to a
    caller presenting a verified signing link for their own action.
    """

    ADMIN = "admin"
    HR = "hr"
    DESIGNATED_MANAGER = "designated_manager"
    DESIGNATED_COORDINATOR = "designated_coordinator"
    OPERATIONS = "operations"
    FINANCE = "finance"
    LEAD_DSP = "lead_dsp"
    DSP = "dsp"
    SUBJECT_EMPLOYEE = "subject_employee"


def sql_in(column: str, enum_cls: type[Enum]) -> str:
    """Render a CHECK constraint body restricting a column to enum values."""
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"
