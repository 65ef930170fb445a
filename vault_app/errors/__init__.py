"""
Error taxonomy, exception hierarchy and raw failure classification.

This module provides the structured exception hierarchy used inside the
orchestration layer and the classifier that maps wallet, chain and venue
failures onto a fixed set of error kinds.
"""

from .classifier import ErrorClassifier, classify
from .input_errors import (
    ConfigurationMissingError,
    InputError,
    InputValidationError,
    OperationCancelledError,
)
from .recovery import NON_RETRYABLE_KINDS, is_retry_eligible, retry_operation
from .system_failures import (
    MalformedArgumentsError,
    PhaseTransitionError,
    SystemFailureError,
    VenueSubmissionError,
)
from .taxonomy import ClassifiedError, ErrorKind, VaultAppError

__all__ = [
    # Taxonomy
    "ClassifiedError",
    "ErrorKind",
    "VaultAppError",
    # Input Errors
    "InputError",
    "InputValidationError",
    "ConfigurationMissingError",
    "OperationCancelledError",
    # System Failures
    "SystemFailureError",
    "MalformedArgumentsError",
    "PhaseTransitionError",
    "VenueSubmissionError",
    # Classification and Recovery
    "ErrorClassifier",
    "classify",
    "NON_RETRYABLE_KINDS",
    "is_retry_eligible",
    "retry_operation",
]
