"""Trade payload models for demo and production venue orders."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional


class TradeMode(str, Enum):
    """Whether trade payloads are mocked or sent to the live venue."""
    DEMO = "demo"
    PRODUCTION = "production"


class TradeSide(str, Enum):
    """User-facing trade direction."""
    BUY = "buy"
    SELL = "sell"


class OrderSide(str, Enum):
    """Two-valued order side understood by the venue."""
    LONG = "long"
    SHORT = "short"

    @classmethod
    def from_trade_side(cls, side: TradeSide) -> "OrderSide":
        return cls.LONG if side == TradeSide.BUY else cls.SHORT


@dataclass(frozen=True)
class TradePayload:
    """Order payload generated for one trade attempt."""
    market_identifier: str
    side: OrderSide
    size: float
    price: Optional[float]
    timestamp: int
    nonce: str
    signer_address: str
    mode: TradeMode
    collateral: float = 0.0
    venue_order_id: Optional[str] = None

    def to_order_spec(self) -> dict[str, Any]:
        """Venue order body (market order when price is None)."""
        return {
            "pair": self.market_identifier,
            "userAddress": self.signer_address,
            "sizeDelta": self.size,
            "collateralDelta": self.collateral,
            "isLong": self.side == OrderSide.LONG,
            "isIncrease": True,
            "price": self.price,
            "timestamp": self.timestamp,
            "nonce": self.nonce,
        }

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["side"] = self.side.value
        payload["mode"] = self.mode.value
        return payload


@dataclass(frozen=True)
class VenueOrder:
    """Acknowledgement returned by the trading venue."""
    order_id: str
    raw: Optional[dict[str, Any]] = None
