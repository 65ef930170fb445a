"""Address and decimal amount primitives shared by validation and building."""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

ADDRESS_PREFIX = "0x"
_HEX_ADDRESS = re.compile(r"^(?:[0-9a-fA-F]{64}|[0-9a-fA-F]{40})$")


def strip_address_prefix(value: str) -> str:
    """Remove an optional 0x/0X prefix."""
    if value[:2].lower() == ADDRESS_PREFIX:
        return value[2:]
    return value


def is_hex_address(value: Any) -> bool:
    """True iff value is 64 or 40 hex characters after an optional 0x prefix."""
    if not isinstance(value, str):
        return False
    return bool(_HEX_ADDRESS.match(strip_address_prefix(value)))


def canonical_address(value: str) -> str:
    """Lower-case, 0x-prefixed form. Caller must check is_hex_address first."""
    return ADDRESS_PREFIX + strip_address_prefix(value).lower()


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Parse a finite decimal from str, int or Decimal; None otherwise."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not amount.is_finite():
        return None
    return amount
