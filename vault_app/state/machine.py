"""Per-invocation phase machine with transition logging."""

import uuid
from typing import Any, Optional

from ..errors.system_failures import PhaseTransitionError
from ..logging.config import get_orchestrator_logger, log_phase_transition
from .models import ALLOWED_TRANSITIONS, TERMINAL_PHASES, OrchestratorPhase, PhaseTransition

phase_logger = get_orchestrator_logger(__name__)


class InvocationStateMachine:
    """Tracks and enforces the phase sequence of one orchestrator invocation."""

    def __init__(self, operation: str, invocation_id: Optional[str] = None):
        self.operation = operation
        self.invocation_id = invocation_id or uuid.uuid4().hex[:16]
        self.phase = OrchestratorPhase.IDLE
        self.history: list[PhaseTransition] = []

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def transition(
        self,
        to_phase: OrchestratorPhase,
        trigger: str,
        context: Optional[dict[str, Any]] = None
    ) -> PhaseTransition:
        """
        Move to the next phase.

        Raises:
            PhaseTransitionError: If the move is not allowed from the current phase
        """
        if to_phase not in ALLOWED_TRANSITIONS[self.phase]:
            raise PhaseTransitionError(
                f"Illegal phase transition {self.phase.value} -> {to_phase.value}",
                current_phase=self.phase.value,
                attempted_phase=to_phase.value
            )

        record = PhaseTransition(
            from_phase=self.phase,
            to_phase=to_phase,
            trigger=trigger,
            context=context
        )
        log_phase_transition(
            phase_logger,
            invocation_id=self.invocation_id,
            operation=self.operation,
            from_phase=self.phase.value,
            to_phase=to_phase.value,
            trigger=trigger,
            context=context
        )
        self.phase = to_phase
        self.history.append(record)
        return record

    def fail(self, trigger: str, context: Optional[dict[str, Any]] = None) -> PhaseTransition:
        """Move to Failed from any non-terminal phase."""
        return self.transition(OrchestratorPhase.FAILED, trigger, context)
