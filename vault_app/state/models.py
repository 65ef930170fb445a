"""
Phase models for a single orchestrator invocation.

Each invocation walks Idle -> Validating -> Building -> (ExternalSubmit) ->
AwaitingSignature -> AwaitingConfirmation and ends in exactly one terminal
phase.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Optional


class OrchestratorPhase(str, Enum):
    """Invocation phases."""
    IDLE = "idle"
    VALIDATING = "validating"
    BUILDING = "building"
    EXTERNAL_SUBMIT = "external_submit"
    AWAITING_SIGNATURE = "awaiting_signature"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"                 # Outcome unknown; caller must re-check
    FAILED = "failed"


TERMINAL_PHASES: frozenset[OrchestratorPhase] = frozenset({
    OrchestratorPhase.CONFIRMED,
    OrchestratorPhase.EXPIRED,
    OrchestratorPhase.FAILED,
})

ALLOWED_TRANSITIONS: dict[OrchestratorPhase, frozenset[OrchestratorPhase]] = {
    OrchestratorPhase.IDLE: frozenset({OrchestratorPhase.VALIDATING}),
    OrchestratorPhase.VALIDATING: frozenset({
        OrchestratorPhase.BUILDING,
        OrchestratorPhase.FAILED,
    }),
    OrchestratorPhase.BUILDING: frozenset({
        OrchestratorPhase.EXTERNAL_SUBMIT,
        OrchestratorPhase.AWAITING_SIGNATURE,
        OrchestratorPhase.FAILED,
    }),
    OrchestratorPhase.EXTERNAL_SUBMIT: frozenset({
        OrchestratorPhase.AWAITING_SIGNATURE,
        OrchestratorPhase.FAILED,
    }),
    OrchestratorPhase.AWAITING_SIGNATURE: frozenset({
        OrchestratorPhase.AWAITING_CONFIRMATION,
        OrchestratorPhase.FAILED,
    }),
    OrchestratorPhase.AWAITING_CONFIRMATION: frozenset({
        OrchestratorPhase.CONFIRMED,
        OrchestratorPhase.EXPIRED,
        OrchestratorPhase.FAILED,
    }),
    OrchestratorPhase.CONFIRMED: frozenset(),
    OrchestratorPhase.EXPIRED: frozenset(),
    OrchestratorPhase.FAILED: frozenset(),
}


@dataclass(frozen=True)
class PhaseTransition:
    """Record of one phase change."""
    from_phase: OrchestratorPhase
    to_phase: OrchestratorPhase
    trigger: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    context: Optional[dict[str, Any]] = None
