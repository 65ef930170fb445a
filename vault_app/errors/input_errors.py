"""
Input error classifications for caller-supplied data and local configuration.

These errors are resolved locally: none of them ever reaches the wallet or the
chain.
"""

from typing import Any, Optional

from .taxonomy import ErrorKind, VaultAppError


class InputError(VaultAppError):
    """Base class for failures detected before any chain interaction."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message, context=context)
        self.recoverable = True


class InputValidationError(InputError):
    """Caller input rejected by the input validator."""

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class ConfigurationMissingError(InputError):
    """A required out-of-band setting (e.g. venue credential) is absent."""

    kind = ErrorKind.CONFIGURATION_MISSING

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.setting = setting


class OperationCancelledError(InputError):
    """User cancelled the operation before it was handed to the wallet."""

    kind = ErrorKind.USER_CANCELLED

    def __init__(self, message: str = "Operation cancelled before signing",
                 phase: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.phase = phase
