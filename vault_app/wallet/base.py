"""Wallet session and chain confirmation boundaries consumed by the orchestrator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models.transactions import ChainTransactionStatus, ContractCall, SubmittedTransaction


class ConnectionState(str, Enum):
    """Wallet connection lifecycle."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class Account:
    """Connected wallet account."""
    address: str


class BaseWalletSession(ABC):
    """Opaque signing capability injected into the orchestrator."""

    @property
    @abstractmethod
    def session_id(self) -> str:
        """Stable identifier used to serialize chain-submitting operations."""

    @property
    @abstractmethod
    def state(self) -> ConnectionState:
        """Current connection state."""

    @property
    @abstractmethod
    def account(self) -> Optional[Account]:
        """Connected account, or None when disconnected."""

    @abstractmethod
    async def connect(self) -> Account:
        """Connect the wallet and return the active account."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect the wallet."""

    @abstractmethod
    async def sign_and_submit(self, call: ContractCall) -> SubmittedTransaction:
        """
        Ask the wallet to sign and submit a contract call.

        Raises:
            Exception: Wallet-specific failure (user rejection, simulation
                failure, network fault); classified by the orchestrator
        """


class BaseChainClient(ABC):
    """Chain confirmation boundary."""

    @abstractmethod
    async def wait_for_transaction(self, transaction_hash: str) -> ChainTransactionStatus:
        """Observe the current status of a submitted transaction."""
