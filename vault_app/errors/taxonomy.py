"""
Error taxonomy shared by every orchestration component.

Every terminal failure surfaced to the UI is expressed as one ErrorKind plus a
short human-readable message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Stable error kinds returned to callers."""
    VALIDATION_ERROR = "validation_error"
    MALFORMED_ARGUMENTS = "malformed_arguments"
    CONFIGURATION_MISSING = "configuration_missing"
    USER_REJECTED = "user_rejected"
    USER_CANCELLED = "user_cancelled"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    GAS_MISCONFIGURED = "gas_misconfigured"
    STALE_SEQUENCE = "stale_sequence"
    EXPIRED = "expired"
    CONTRACT_REJECTED = "contract_rejected"
    VENUE_REJECTED = "venue_rejected"
    NETWORK_FAULT = "network_fault"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedError:
    """Result of classifying a raw failure."""
    kind: ErrorKind
    message: str
    code: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, "code": self.code}


class VaultAppError(Exception):
    """Base class for errors raised inside the orchestration layer."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = False

    def to_classified(self) -> ClassifiedError:
        """Typed errors already know their kind; no text matching needed."""
        return ClassifiedError(kind=self.kind, message=self.message)
