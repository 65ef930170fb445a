"""
Input validation for caller-supplied operation arguments.

This module provides pure predicates for address format, amount format and
self-reference checks, plus an OperationValidator that applies them per
operation and raises InputValidationError with a specific, user-facing reason.
"""

import re
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..errors.input_errors import InputValidationError
from ..models.transactions import (
    COUNTERPARTY_OPERATIONS,
    MAX_SIGNAL_VALUE,
    OPERATION_ARGUMENTS,
    ArgumentKind,
    OperationKind,
)
from ..utils.formats import (
    canonical_address,
    is_hex_address,
    parse_decimal,
    strip_address_prefix,
)

_UNSIGNED_INTEGER = re.compile(r"^\d+$")


def is_valid_address(value: Any) -> bool:
    """True iff value is 64 or 40 hex characters after an optional 0x prefix."""
    return is_hex_address(value)


def normalize_address(value: str) -> str:
    """
    Convert an address to canonical form: lower-case, 0x-prefixed.

    Raises:
        InputValidationError: If the address is not well-formed
    """
    if not is_valid_address(value):
        raise InputValidationError(
            "Enter a valid address (0x followed by 64 hex characters)",
            field="address",
            value=value
        )
    return canonical_address(value)


def is_distinct_from(candidate: Any, self_address: Any) -> bool:
    """Case-insensitive inequality, ignoring the optional 0x prefix."""
    if not isinstance(candidate, str) or not isinstance(self_address, str):
        return True
    return strip_address_prefix(candidate).lower() != strip_address_prefix(self_address).lower()


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse a decimal amount; None when it is not a finite number."""
    return parse_decimal(value)


def is_positive_amount(value: Any) -> bool:
    """True iff value parses as a finite decimal strictly greater than zero."""
    amount = parse_amount(value)
    return amount is not None and amount > 0


def has_supported_precision(value: Any, decimals: int) -> bool:
    """True iff the amount has no more fractional digits than decimals."""
    amount = parse_amount(value)
    if amount is None:
        return False
    exponent = amount.normalize().as_tuple().exponent
    return not isinstance(exponent, int) or -exponent <= decimals


def fits_base_units(value: Any, decimals: int) -> bool:
    """True iff the amount in base units stays within the unsigned 64-bit range."""
    amount = parse_amount(value)
    return amount is not None and amount.scaleb(decimals) <= MAX_SIGNAL_VALUE


def is_valid_signal(value: Any) -> bool:
    """True iff value is a whole number in the unsigned 64-bit range."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return 0 <= value <= MAX_SIGNAL_VALUE
    if isinstance(value, str) and _UNSIGNED_INTEGER.match(value.strip()):
        return int(value.strip()) <= MAX_SIGNAL_VALUE
    return False


def format_address(address: Optional[str], length: int = 4) -> str:
    """Shorten an address for display: 0x1234...abcd."""
    if not address:
        return ""
    if len(address) <= length * 2 + 2:
        return address
    return f"{address[:length + 2]}...{address[-length:]}"


def format_amount(amount: Any, decimals: int = 8) -> str:
    """Render an amount with at most `decimals` places and no trailing zeros."""
    parsed = parse_amount(amount)
    if parsed is None:
        return "0"
    text = f"{parsed:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


# User-facing input shape; execute_trade takes a decimal amount that is
# converted to an on-chain signal after validation.
INPUT_ARGUMENTS: dict[OperationKind, tuple[ArgumentKind, ...]] = {
    **OPERATION_ARGUMENTS,
    OperationKind.EXECUTE_TRADE: (ArgumentKind.AMOUNT,),
}

_SELF_REFERENCE_MESSAGES = {
    OperationKind.JOIN: "You cannot join your own vault",
    OperationKind.LEAVE: "You cannot leave your own vault",
    OperationKind.UPDATE_LEADER: "New leader must be a different address than the current leader",
}

_ADDRESS_MESSAGES = {
    OperationKind.UPDATE_LEADER: "Enter a valid new leader address (0x followed by 64 hex characters)",
}


class OperationValidator:
    """Validates caller input for a vault operation before anything is built."""

    def __init__(self, amount_decimals: int = 8):
        self.amount_decimals = amount_decimals

    def validate(
        self,
        operation: OperationKind,
        args: Sequence[Any],
        caller_address: Optional[str] = None
    ) -> None:
        """
        Validate operation arguments, stopping at the first failure.

        Arity is not checked here; a wrong argument count is an internal
        defect reported by the transaction builder.

        Args:
            operation: Operation being requested
            args: Caller-supplied arguments in on-chain order
            caller_address: Connected account, used for self-reference checks

        Raises:
            InputValidationError: With a specific reason for the first failure
        """
        schema = INPUT_ARGUMENTS[operation]

        for kind, value in zip(schema, args):
            if kind == ArgumentKind.ADDRESS:
                self._validate_address(operation, value, caller_address)
            elif kind == ArgumentKind.AMOUNT:
                self._validate_amount(value)
            elif kind == ArgumentKind.SIGNAL:
                self._validate_signal(value)

    def _validate_address(self, operation: OperationKind, value: Any,
                          caller_address: Optional[str]) -> None:
        if not is_valid_address(value):
            raise InputValidationError(
                _ADDRESS_MESSAGES.get(
                    operation, "Enter a valid leader address (0x followed by 64 hex characters)"
                ),
                field="address",
                value=value
            )

        if operation in COUNTERPARTY_OPERATIONS and not is_distinct_from(value, caller_address):
            raise InputValidationError(
                _SELF_REFERENCE_MESSAGES[operation],
                field="address",
                value=value
            )

    def _validate_amount(self, value: Any) -> None:
        if not is_positive_amount(value):
            raise InputValidationError(
                "Amount must be a positive number greater than 0",
                field="amount",
                value=value
            )

        if not has_supported_precision(value, self.amount_decimals):
            raise InputValidationError(
                f"Amount supports at most {self.amount_decimals} decimal places",
                field="amount",
                value=value
            )

        if not fits_base_units(value, self.amount_decimals):
            maximum = Decimal(MAX_SIGNAL_VALUE).scaleb(-self.amount_decimals)
            raise InputValidationError(
                f"Amount exceeds the maximum of {format_amount(maximum, self.amount_decimals)}",
                field="amount",
                value=value
            )

    def _validate_signal(self, value: Any) -> None:
        if not is_valid_signal(value):
            raise InputValidationError(
                f"Signal must be a whole number between 0 and {MAX_SIGNAL_VALUE}",
                field="signal",
                value=value
            )
