"""Corrective action state machine with an explicit transition table."""

from __future__ import annotations

from enum import Enum

from discipline_engine.errors import ConflictError
from discipline_engine.models.enums import CorrectiveActionStatus


class ActionEvent(str, Enum):
    """Events that can move a corrective action between states."""

    EMPLOYEE_ACKNOWLEDGED = "employee_acknowledged"
    EMPLOYEE_DISPUTED = "employee_disputed"
    VOIDED = "voided"


class InvalidTransitionError(ConflictError):
    """Raised when an event is not allowed from the current state."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, event: str, reason: str | None = None):
        self.from_status = from_status
        self.event = event
        self.reason = reason
        msg = f"Event '{event}' is not allowed from status '{from_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"from_status": from_status, "event": event})


class CorrectiveActionStateMachine:
    """State machine for corrective action status.

    Allowed transitions:
    - pending_signature --employee_acknowledged--> acknowledged
    - pending_signature --employee_disputed--> disputed
    - pending_signature / acknowledged / disputed --voided--> voided
    - voided is terminal
    """

    TRANSITIONS: dict[tuple[str, str], str] = {
        (
            CorrectiveActionStatus.PENDING_SIGNATURE,
            ActionEvent.EMPLOYEE_ACKNOWLEDGED,
        ): CorrectiveActionStatus.ACKNOWLEDGED,
        (
            CorrectiveActionStatus.PENDING_SIGNATURE,
            ActionEvent.EMPLOYEE_DISPUTED,
        ): CorrectiveActionStatus.DISPUTED,
        (
            CorrectiveActionStatus.PENDING_SIGNATURE,
            ActionEvent.VOIDED,
        ): CorrectiveActionStatus.VOIDED,
        (
            CorrectiveActionStatus.ACKNOWLEDGED,
            ActionEvent.VOIDED,
        ): CorrectiveActionStatus.VOIDED,
        (
            CorrectiveActionStatus.DISPUTED,
            ActionEvent.VOIDED,
        ): CorrectiveActionStatus.VOIDED,
    }

    TERMINAL = {CorrectiveActionStatus.VOIDED}

    # Statuses where the record's fields may still be edited
    EDITABLE = {CorrectiveActionStatus.PENDING_SIGNATURE}

    @classmethod
    def transition(cls, current: str, event: str) -> CorrectiveActionStatus:
        """Return the next status for ``event``, raising if not allowed."""
        current_status = CorrectiveActionStatus(current)
        action_event = ActionEvent(event)
        if current_status in cls.TERMINAL:
            raise InvalidTransitionError(
                current_status.value, action_event.value, "status is terminal"
            )
        next_status = cls.TRANSITIONS.get((current_status, action_event))
        if next_status is None:
            raise InvalidTransitionError(current_status.value, action_event.value)
        return CorrectiveActionStatus(next_status)

    @classmethod
    def can_transition(cls, current: str, event: str) -> bool:
        """Check if an event is allowed from a status."""
        return (CorrectiveActionStatus(current), ActionEvent(event)) in cls.TRANSITIONS

    @classmethod
    def employee_signature_event(cls, dispute: bool) -> ActionEvent:
        """Map the employee's dispute flag to its event."""
        if dispute:
            return ActionEvent.EMPLOYEE_DISPUTED
        return ActionEvent.EMPLOYEE_ACKNOWLEDGED

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        """Check if no further transitions are possible."""
        return CorrectiveActionStatus(status) in cls.TERMINAL

    @classmethod
    def is_editable(cls, status: str) -> bool:
        """Check if field edits are allowed in this status."""
        return CorrectiveActionStatus(status) in cls.EDITABLE

    @classmethod
    def sources_for(cls, event: str) -> list[CorrectiveActionStatus]:
        """Statuses from which ``event`` is allowed."""
        action_event = ActionEvent(event)
        return [
            CorrectiveActionStatus(source)
            for (source, evt) in cls.TRANSITIONS
            if evt == action_event
        ]

    @classmethod
    def get_next_statuses(cls, current: str) -> list[CorrectiveActionStatus]:
        """Get list of reachable statuses from current status."""
        current_status = CorrectiveActionStatus(current)
        return [
            CorrectiveActionStatus(target)
            for (source, _), target in cls.TRANSITIONS.items()
            if source == current_status
        ]
