"""
System failure error classifications.

These exceptions represent internal defects or failures of external
collaborators. They are always surfaced to the caller and never silently
corrected.
"""

from typing import Any, Optional

from .taxonomy import ErrorKind, VaultAppError


class SystemFailureError(VaultAppError):
    """Base class for unrecoverable failures."""


class MalformedArgumentsError(SystemFailureError):
    """Transaction builder received arguments that do not fit the operation."""

    kind = ErrorKind.MALFORMED_ARGUMENTS

    def __init__(self, message: str, operation: Optional[str] = None,
                 expected_arity: Optional[int] = None,
                 received: Optional[list[Any]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.expected_arity = expected_arity
        self.received = received


class PhaseTransitionError(SystemFailureError):
    """Orchestrator attempted a transition its phase machine does not allow."""

    def __init__(self, message: str, current_phase: Optional[str] = None,
                 attempted_phase: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_phase = current_phase
        self.attempted_phase = attempted_phase


class VenueSubmissionError(SystemFailureError):
    """External trading venue did not accept the order."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 retryable: bool = False, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.retryable = retryable
        self.kind = ErrorKind.NETWORK_FAULT if retryable else ErrorKind.VENUE_REJECTED
