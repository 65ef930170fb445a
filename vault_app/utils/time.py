"""Wall-clock helpers used for transaction expiration and payload timestamps."""

from datetime import UTC, datetime
from typing import Optional


def now_epoch_seconds() -> int:
    """Current wall-clock time in whole epoch seconds."""
    return int(datetime.now(UTC).timestamp())


def expiration_timestamp(offset_seconds: int, now: Optional[int] = None) -> int:
    """Epoch second after which an unconfirmed transaction is no longer valid."""
    base = now_epoch_seconds() if now is None else now
    return base + offset_seconds
