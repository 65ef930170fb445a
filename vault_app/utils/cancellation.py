"""Cooperative cancellation for the pre-signature phases."""

import asyncio

from ..errors.input_errors import OperationCancelledError


class CancellationToken:
    """User-visible cancel switch checked before anything reaches the wallet."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self, phase: str) -> None:
        """
        Raise when cancellation was requested.

        Raises:
            OperationCancelledError: If cancel() has been called
        """
        if self.cancelled:
            raise OperationCancelledError(phase=phase)
