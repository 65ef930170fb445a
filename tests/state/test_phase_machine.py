"""Tests for the per-invocation phase machine."""

from unittest.mock import patch

import pytest

from vault_app.errors.system_failures import PhaseTransitionError
from vault_app.state.machine import InvocationStateMachine
from vault_app.state.models import ALLOWED_TRANSITIONS, TERMINAL_PHASES, OrchestratorPhase


class TestInvocationStateMachine:
    """Test phase sequencing and transition logging."""

    def test_initial_state(self) -> None:
        machine = InvocationStateMachine("create")

        assert machine.phase == OrchestratorPhase.IDLE
        assert machine.history == []
        assert not machine.is_terminal
        assert len(machine.invocation_id) == 16

    def test_happy_path(self) -> None:
        """Test the full confirmed sequence."""
        machine = InvocationStateMachine("execute_trade", invocation_id="inv-1")
        sequence = [
            OrchestratorPhase.VALIDATING,
            OrchestratorPhase.BUILDING,
            OrchestratorPhase.EXTERNAL_SUBMIT,
            OrchestratorPhase.AWAITING_SIGNATURE,
            OrchestratorPhase.AWAITING_CONFIRMATION,
            OrchestratorPhase.CONFIRMED,
        ]

        for phase in sequence:
            machine.transition(phase, trigger="test")

        assert machine.is_terminal
        assert [record.to_phase for record in machine.history] == sequence
        assert machine.history[0].from_phase == OrchestratorPhase.IDLE

    def test_illegal_transition(self) -> None:
        """Test skipping phases raises."""
        machine = InvocationStateMachine("deposit")

        with pytest.raises(PhaseTransitionError) as exc_info:
            machine.transition(OrchestratorPhase.AWAITING_SIGNATURE, trigger="skip")

        assert exc_info.value.current_phase == "idle"
        assert exc_info.value.attempted_phase == "awaiting_signature"
        assert machine.phase == OrchestratorPhase.IDLE

    def test_terminal_phases_are_final(self) -> None:
        """Test nothing leaves a terminal phase."""
        for phase in TERMINAL_PHASES:
            assert ALLOWED_TRANSITIONS[phase] == frozenset()

        machine = InvocationStateMachine("deposit")
        machine.transition(OrchestratorPhase.VALIDATING, trigger="execute")
        machine.fail("validation_failed")

        with pytest.raises(PhaseTransitionError):
            machine.fail("again")

    def test_expired_only_from_confirmation(self) -> None:
        machine = InvocationStateMachine("deposit")
        machine.transition(OrchestratorPhase.VALIDATING, trigger="execute")

        with pytest.raises(PhaseTransitionError):
            machine.transition(OrchestratorPhase.EXPIRED, trigger="timeout")

    def test_transitions_logged(self) -> None:
        """Test every transition is logged with its trigger."""
        with patch('vault_app.state.machine.log_phase_transition') as mock_log:
            machine = InvocationStateMachine("join", invocation_id="inv-2")
            machine.transition(OrchestratorPhase.VALIDATING, trigger="execute", context={"k": 1})

        mock_log.assert_called_once()
        kwargs = mock_log.call_args.kwargs
        assert kwargs["invocation_id"] == "inv-2"
        assert kwargs["from_phase"] == "idle"
        assert kwargs["to_phase"] == "validating"
        assert kwargs["trigger"] == "execute"
        assert kwargs["context"] == {"k": 1}
