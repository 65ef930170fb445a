"""Pytest configuration and shared fixtures."""

import asyncio
from dataclasses import replace
from typing import Any, Optional

import pytest

from vault_app.config.defaults import DefaultConfig, VenueParams, get_default_config
from vault_app.errors.system_failures import VenueSubmissionError
from vault_app.models.trade import VenueOrder
from vault_app.models.transactions import (
    ChainTransactionState,
    ChainTransactionStatus,
    ContractCall,
    SubmittedTransaction,
)
from vault_app.trading.venue import BaseVenueClient
from vault_app.wallet.base import (
    Account,
    BaseChainClient,
    BaseWalletSession,
    ConnectionState,
)

LEADER_ADDRESS = "0x" + "a1" * 32
FOLLOWER_ADDRESS = "0x" + "b2" * 32
OTHER_ADDRESS = "0x" + "c3" * 32


class FakeWalletSession(BaseWalletSession):
    """In-memory wallet that records every call it is asked to sign."""

    def __init__(
        self,
        address: str = FOLLOWER_ADDRESS,
        state: ConnectionState = ConnectionState.CONNECTED,
        session_id: str = "session-1",
        error: Optional[Any] = None,
        tx_hash: str = "0xfeed",
    ):
        self._address = address
        self._state = state
        self._session_id = session_id
        self.error = error
        self.tx_hash = tx_hash
        self.calls: list[ContractCall] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def account(self) -> Optional[Account]:
        if self._state != ConnectionState.CONNECTED:
            return None
        return Account(address=self._address)

    async def connect(self) -> Account:
        self._state = ConnectionState.CONNECTED
        return Account(address=self._address)

    async def disconnect(self) -> None:
        self._state = ConnectionState.DISCONNECTED

    async def sign_and_submit(self, call: ContractCall) -> SubmittedTransaction:
        self.calls.append(call)
        if self.error is not None:
            raise self.error
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        return SubmittedTransaction(hash=f"{self.tx_hash}{len(self.calls)}")

    def settled(self) -> None:
        self.in_flight -= 1


class FakeChainClient(BaseChainClient):
    """Replays scripted statuses; the last one repeats."""

    def __init__(
        self,
        statuses: Optional[list[Any]] = None,
        wallet: Optional[FakeWalletSession] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.statuses = list(statuses or [ChainTransactionStatus(ChainTransactionState.SUCCESS)])
        self.wallet = wallet
        self.gate = gate
        self.polled: list[str] = []

    async def wait_for_transaction(self, transaction_hash: str) -> ChainTransactionStatus:
        self.polled.append(transaction_hash)
        if self.gate is not None:
            await self.gate.wait()

        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(status, Exception):
            raise status
        if status.is_terminal and self.wallet is not None:
            self.wallet.settled()
        return status


class FakeVenueClient(BaseVenueClient):
    """Venue that accepts every order unless told to fail."""

    def __init__(self, error: Optional[VenueSubmissionError] = None, order_id: str = "order-1"):
        self.error = error
        self.order_id = order_id
        self.orders: list[dict[str, Any]] = []
        self.closed = False

    async def create_order(self, order_spec: dict[str, Any]) -> VenueOrder:
        self.orders.append(order_spec)
        if self.error is not None:
            raise self.error
        return VenueOrder(order_id=self.order_id, raw={"orderId": self.order_id})

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    """Monotonic clock advanced only by the injected sleep."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


@pytest.fixture
def wallet() -> FakeWalletSession:
    """Connected wallet session for the follower account."""
    return FakeWalletSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def venue_config() -> DefaultConfig:
    """Default configuration with a venue credential present."""
    config = get_default_config()
    return replace(config, venue=VenueParams(api_key="test-venue-key"))
