"""
Optional bounded retry for orchestrator invocations.

Not part of the default path. Kinds that reflect deliberate user intent, local
input problems or a definitive chain answer are never retried.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Optional

import structlog

from ..models.transactions import TransactionResult, TransactionStatus
from .taxonomy import ErrorKind

logger = structlog.get_logger(__name__)

NON_RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset({
    ErrorKind.USER_REJECTED,
    ErrorKind.USER_CANCELLED,
    ErrorKind.VALIDATION_ERROR,
    ErrorKind.CONFIGURATION_MISSING,
    ErrorKind.MALFORMED_ARGUMENTS,
    ErrorKind.CONTRACT_REJECTED,
    ErrorKind.INSUFFICIENT_FUNDS,
    ErrorKind.VENUE_REJECTED,
    ErrorKind.EXPIRED,
})


def is_retry_eligible(kind: Optional[ErrorKind]) -> bool:
    """Check whether a failure kind may be retried automatically."""
    return kind is not None and kind not in NON_RETRYABLE_KINDS


async def retry_operation(
    action: Callable[[], Awaitable[TransactionResult]],
    max_attempts: int = 3,
    delay_seconds: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    should_retry: Optional[Callable[[TransactionResult], bool]] = None,
) -> TransactionResult:
    """
    Run an orchestrator invocation with bounded retry.

    Args:
        action: Zero-argument coroutine factory, e.g. a bound execute() call
        max_attempts: Total attempts including the first one
        delay_seconds: Linear backoff base; attempt n waits delay * n
        should_retry: Extra veto over a retry-eligible failure, e.g. when the
            attempt already had a side effect that must not be repeated

    Returns:
        The first non-retryable result, or the last result once attempts run out
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 0
    while True:
        attempt += 1
        result = await action()

        if result.status != TransactionStatus.FAILED:
            return result

        kind = result.error.kind if result.error else None
        if not is_retry_eligible(kind) or attempt >= max_attempts:
            return result
        if should_retry is not None and not should_retry(result):
            return result

        logger.warning(
            "Operation failed, retrying",
            operation=result.operation.value,
            attempt=attempt,
            max_attempts=max_attempts,
            error_kind=kind.value if kind else None,
            delay_seconds=delay_seconds * attempt,
        )
        await sleep(delay_seconds * attempt)
