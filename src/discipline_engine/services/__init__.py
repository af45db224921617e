"""Discipline engine services."""

from discipline_engine.services.audit_service import AuditService
from discipline_engine.services.corrective_action_service import (
    CorrectiveActionStore,
    DisciplineHistory,
)
from discipline_engine.services.discipline_service import DisciplineService
from discipline_engine.services.signature_service import (
    SIGNER_ROLE_PERMISSIONS,
    SignatureCollector,
    SignatureStatus,
)
from discipline_engine.services.state_machine import (
    ActionEvent,
    CorrectiveActionStateMachine,
    InvalidTransitionError,
)
from discipline_engine.services.violation_catalog import ViolationCatalog
from discipline_engine.services.void_service import VoidProcessor

__all__ = [
    "AuditService",
    "CorrectiveActionStore",
    "DisciplineHistory",
    "DisciplineService",
    "SIGNER_ROLE_PERMISSIONS",
    "SignatureCollector",
    "SignatureStatus",
    "ActionEvent",
    "CorrectiveActionStateMachine",
    "InvalidTransitionError",
    "ViolationCatalog",
    "VoidProcessor",
]
