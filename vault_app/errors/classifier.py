"""
Raw failure classification.

Maps wallet rejections, simulation failures, network faults and contract abort
codes onto the ErrorKind taxonomy. Matching is first-match-wins in a fixed
priority order: contract status codes, then generic substrings, then a
truncated fallback.
"""

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional

from .taxonomy import ClassifiedError, ErrorKind, VaultAppError

MAX_FALLBACK_MESSAGE_LENGTH = 100
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"

CONTRACT_ERROR_CODES: Mapping[int, str] = MappingProxyType({
    1001: "Vault not found",
    1002: "Insufficient balance",
    1003: "Not authorized to perform this action",
    1004: "Invalid amount (must be greater than 0)",
    1005: "Vault is currently paused",
    1006: "User is not a subscriber of this vault",
    1007: "User is already a subscriber of this vault",
    1008: "Vault already exists for this address",
})

# (needles, kind, message); needles are matched case-insensitively
SUBSTRING_RULES: tuple[tuple[tuple[str, ...], ErrorKind, str], ...] = (
    (("insufficient",),
     ErrorKind.INSUFFICIENT_FUNDS,
     "Insufficient balance for transaction fees"),
    (("max_gas_units_below_min_transaction_gas_units", "gas"),
     ErrorKind.GAS_MISCONFIGURED,
     "Gas configuration error. Please try again."),
    (("sequence_number_too_old", "sequence number"),
     ErrorKind.STALE_SEQUENCE,
     "Transaction sequence error. Please refresh and try again."),
    (("user_transaction_expired", "expired", "timed out", "timeout"),
     ErrorKind.EXPIRED,
     "Transaction expired. Please try again."),
    (("rejected", "denied", "user cancelled"),
     ErrorKind.USER_REJECTED,
     "Transaction was rejected by user"),
    (("network", "failed to fetch", "connection"),
     ErrorKind.NETWORK_FAULT,
     "Network error. Please check your connection."),
)

# A timeout before anything reached the chain is a transport failure, not an expiry
TIMEOUT_NEEDLES: tuple[str, ...] = ("timed out", "timeout")
WALLET_TIMEOUT_MESSAGE = "Wallet request timed out. Please try again."


def extract_error_text(raw_error: Any) -> str:
    """Best-effort text of a raw wallet, chain or venue failure."""
    if raw_error is None:
        return ""
    if isinstance(raw_error, str):
        return raw_error
    if isinstance(raw_error, Mapping):
        for key in ("message", "vm_status", "error"):
            value = raw_error.get(key)
            if value:
                return str(value)
        return str(dict(raw_error))
    message = getattr(raw_error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(raw_error)


def truncate_message(text: str, limit: int = MAX_FALLBACK_MESSAGE_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


class ErrorClassifier:
    """Classifies raw failures against immutable code and substring tables."""

    def __init__(
        self,
        error_codes: Mapping[int, str] = CONTRACT_ERROR_CODES,
        substring_rules: tuple[tuple[tuple[str, ...], ErrorKind, str], ...] = SUBSTRING_RULES,
    ):
        self.error_codes = error_codes
        self.substring_rules = substring_rules
        # Codes embedded in longer alphanumeric tokens (hex addresses) must not match
        self._code_patterns = tuple(
            (code, re.compile(rf"(?<![0-9A-Za-z]){code}(?![0-9A-Za-z])"))
            for code in sorted(error_codes)
        )

    def classify(self, raw_error: Any, submitted: bool = True) -> ClassifiedError:
        """
        Classify a raw failure.

        Args:
            raw_error: Exception, string, mapping or None
            submitted: False when the failure happened before the transaction
                left the wallet; timeouts are then reported as NetworkFault

        Returns:
            ClassifiedError with a short user-facing message
        """
        if isinstance(raw_error, VaultAppError):
            return raw_error.to_classified()

        text = extract_error_text(raw_error).strip()
        if not text:
            return ClassifiedError(kind=ErrorKind.UNKNOWN, message=UNKNOWN_ERROR_MESSAGE)

        matched = self.match_contract_code(text)
        if matched is not None:
            return matched

        lowered = text.lower()
        for needles, kind, message in self.substring_rules:
            if any(needle in lowered for needle in needles):
                if (kind == ErrorKind.EXPIRED and not submitted
                        and any(needle in lowered for needle in TIMEOUT_NEEDLES)):
                    return ClassifiedError(kind=ErrorKind.NETWORK_FAULT,
                                           message=WALLET_TIMEOUT_MESSAGE)
                return ClassifiedError(kind=kind, message=message)

        return ClassifiedError(kind=ErrorKind.UNKNOWN, message=truncate_message(text))

    def match_contract_code(self, text: str) -> Optional[ClassifiedError]:
        for code, pattern in self._code_patterns:
            if pattern.search(text):
                return ClassifiedError(
                    kind=ErrorKind.CONTRACT_REJECTED,
                    message=self.error_codes[code],
                    code=code,
                )
        return None


default_classifier = ErrorClassifier()


def classify(raw_error: Any, submitted: bool = True) -> ClassifiedError:
    """Classify with the default, process-wide tables."""
    return default_classifier.classify(raw_error, submitted=submitted)
