"""
Transaction value objects for vault contract calls.

This module defines the immutable structures that flow from the gas policy
resolver and transaction builder into the wallet signing step, plus the
per-invocation result handed back to the UI.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Optional

from ..utils.time import expiration_timestamp

if TYPE_CHECKING:
    from ..errors.taxonomy import ClassifiedError
    from .trade import TradePayload


class OperationKind(str, Enum):
    """Closed set of vault operations exposed to the UI."""
    CREATE = "create"
    JOIN = "join"
    LEAVE = "leave"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    PUBLISH_SIGNAL = "publish_signal"
    EXECUTE_TRADE = "execute_trade"
    PAUSE = "pause"
    RESUME = "resume"
    UPDATE_LEADER = "update_leader"


class ArgumentKind(str, Enum):
    """Type of a single contract call argument."""
    ADDRESS = "address"
    AMOUNT = "amount"
    SIGNAL = "signal"


# Fixed, ordered on-chain argument shape per operation
OPERATION_ARGUMENTS: Mapping[OperationKind, tuple[ArgumentKind, ...]] = MappingProxyType({
    OperationKind.CREATE: (),
    OperationKind.JOIN: (ArgumentKind.ADDRESS,),
    OperationKind.LEAVE: (ArgumentKind.ADDRESS,),
    OperationKind.DEPOSIT: (ArgumentKind.AMOUNT,),
    OperationKind.WITHDRAW: (ArgumentKind.AMOUNT,),
    OperationKind.PUBLISH_SIGNAL: (ArgumentKind.SIGNAL,),
    OperationKind.EXECUTE_TRADE: (ArgumentKind.SIGNAL,),
    OperationKind.PAUSE: (),
    OperationKind.RESUME: (),
    OperationKind.UPDATE_LEADER: (ArgumentKind.ADDRESS,),
})

# Operations whose address argument must not be the caller
COUNTERPARTY_OPERATIONS: frozenset[OperationKind] = frozenset({
    OperationKind.JOIN,
    OperationKind.LEAVE,
    OperationKind.UPDATE_LEADER,
})

MAX_SIGNAL_VALUE = 2 ** 64 - 1


class Network(str, Enum):
    """Supported chain networks."""
    TESTNET = "testnet"
    MAINNET = "mainnet"
    DEVNET = "devnet"


class TransactionStatus(str, Enum):
    """Externally visible status of one orchestrator invocation."""
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class GasProfile:
    """Execution limits attached to a single transaction."""
    max_execution_units: int
    unit_price: int
    expiration_offset_seconds: int

    def to_dict(self) -> dict[str, int]:
        return {
            "max_execution_units": self.max_execution_units,
            "unit_price": self.unit_price,
            "expiration_offset_seconds": self.expiration_offset_seconds,
        }


@dataclass(frozen=True)
class GasResolution:
    """Resolved gas profile plus whether a safe default had to be substituted."""
    profile: GasProfile
    substituted: bool = False
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class ContractCall:
    """Fully specified entry-function call, ready for signing."""
    operation: OperationKind
    target_function: str
    arguments: tuple[Any, ...]
    gas_profile: GasProfile
    gas_substituted: bool = False
    gas_notes: tuple[str, ...] = ()

    def to_wallet_payload(self, now: Optional[int] = None) -> dict[str, Any]:
        """
        Render the call in the shape wallet extensions accept.

        Args:
            now: Wall-clock time in epoch seconds; defaults to the current time

        Returns:
            Entry-function payload with gas options and expiration timestamp
        """
        return {
            "data": {
                "function": self.target_function,
                "typeArguments": [],
                "functionArguments": [str(arg) for arg in self.arguments],
            },
            "options": {
                "maxGasAmount": self.gas_profile.max_execution_units,
                "gasUnitPrice": self.gas_profile.unit_price,
                "expireTimestamp": expiration_timestamp(self.gas_profile.expiration_offset_seconds, now),
            },
        }


@dataclass(frozen=True)
class SubmittedTransaction:
    """Wallet acknowledgement of a signed and submitted transaction."""
    hash: str


class ChainTransactionState(str, Enum):
    """Status reported by the chain confirmation boundary."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ChainTransactionStatus:
    """Single observation of an on-chain transaction."""
    state: ChainTransactionState
    vm_status: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state != ChainTransactionState.PENDING


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of one orchestrator invocation. Never persisted."""
    operation: OperationKind
    status: TransactionStatus
    phase: str
    transaction_hash: Optional[str] = None
    error: Optional["ClassifiedError"] = None
    gas_substituted: bool = False
    trade_payload: Optional["TradePayload"] = None
    venue_order_id: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == TransactionStatus.CONFIRMED

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation.value,
            "status": self.status.value,
            "phase": self.phase,
            "transaction_hash": self.transaction_hash,
            "error": self.error.to_dict() if self.error else None,
            "gas_substituted": self.gas_substituted,
            "trade_payload": self.trade_payload.to_dict() if self.trade_payload else None,
            "venue_order_id": self.venue_order_id,
            "metadata": dict(self.metadata),
        }
