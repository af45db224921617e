"""Tests for corrective action state machine."""

import pytest

from discipline_engine.errors import ConflictError
from discipline_engine.models import CorrectiveActionStatus
from discipline_engine.services.state_machine import (
    ActionEvent,
    CorrectiveActionStateMachine,
    InvalidTransitionError,
)


class TestCorrectiveActionStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        # pending → acknowledged
        assert CorrectiveActionStateMachine.transition(
            "pending_signature", "employee_acknowledged"
        ) == CorrectiveActionStatus.ACKNOWLEDGED

        # pending → disputed
        assert CorrectiveActionStateMachine.transition(
            "pending_signature", "employee_disputed"
        ) == CorrectiveActionStatus.DISPUTED

        # any non-terminal → voided
        for status in ("pending_signature", "acknowledged", "disputed"):
            assert CorrectiveActionStateMachine.transition(
                status, ActionEvent.VOIDED
            ) == CorrectiveActionStatus.VOIDED

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        # The employee signs once
        assert CorrectiveActionStateMachine.can_transition(
            "acknowledged", "employee_disputed"
        ) is False
        assert CorrectiveActionStateMachine.can_transition(
            "disputed", "employee_acknowledged"
        ) is False

        # Voided is terminal
        for event in ActionEvent:
            assert CorrectiveActionStateMachine.can_transition("voided", event) is False

    def test_transition_raises_for_terminal_status(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            CorrectiveActionStateMachine.transition("voided", "voided")

        assert exc_info.value.from_status == "voided"
        assert exc_info.value.event == "voided"
        assert "terminal" in exc_info.value.detail

    def test_invalid_transition_is_a_conflict(self):
        with pytest.raises(ConflictError) as exc_info:
            CorrectiveActionStateMachine.transition("acknowledged", "employee_acknowledged")

        assert exc_info.value.code == "INVALID_TRANSITION"
        assert exc_info.value.context == {
            "from_status": "acknowledged",
            "event": "employee_acknowledged",
        }

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            CorrectiveActionStateMachine.transition("closed", "voided")

    def test_employee_signature_event(self):
        """The dispute flag alone decides the employee event."""
        assert (
            CorrectiveActionStateMachine.employee_signature_event(False)
            == ActionEvent.EMPLOYEE_ACKNOWLEDGED
        )
        assert (
            CorrectiveActionStateMachine.employee_signature_event(True)
            == ActionEvent.EMPLOYEE_DISPUTED
        )

    def test_is_terminal(self):
        assert CorrectiveActionStateMachine.is_terminal("voided") is True
        assert CorrectiveActionStateMachine.is_terminal("pending_signature") is False
        assert CorrectiveActionStateMachine.is_terminal("acknowledged") is False

    def test_is_editable(self):
        assert CorrectiveActionStateMachine.is_editable("pending_signature") is True
        assert CorrectiveActionStateMachine.is_editable("acknowledged") is False
        assert CorrectiveActionStateMachine.is_editable("voided") is False

    def test_sources_for_void(self):
        assert set(CorrectiveActionStateMachine.sources_for(ActionEvent.VOIDED)) == {
            CorrectiveActionStatus.PENDING_SIGNATURE,
            CorrectiveActionStatus.ACKNOWLEDGED,
            CorrectiveActionStatus.DISPUTED,
        }

    def test_get_next_statuses(self):
        assert set(CorrectiveActionStateMachine.get_next_statuses("pending_signature")) == {
            CorrectiveActionStatus.ACKNOWLEDGED,
            CorrectiveActionStatus.DISPUTED,
            CorrectiveActionStatus.VOIDED,
        }
        assert CorrectiveActionStateMachine.get_next_statuses("acknowledged") == [
            CorrectiveActionStatus.VOIDED
        ]
        assert CorrectiveActionStateMachine.get_next_statuses("voided") == []
