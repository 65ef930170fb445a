"""
Trade payload generation.

Produces the order payload that accompanies an on-chain execute_trade signal.
The mode is an explicit parameter on every call: demo payloads are mocked and
never touch the network; production payloads require a venue credential and
are submitted to the venue independently of the on-chain call.

The venue receives the amount as a float while the chain receives
amount * trade_signal_scale as an integer. The two are not reconciled.
"""

import secrets
import time
from collections.abc import Callable
from decimal import ROUND_DOWN, Decimal
from typing import Any, Optional, Union

from ..config.defaults import VenueParams
from ..errors.input_errors import ConfigurationMissingError
from ..models.trade import OrderSide, TradeMode, TradePayload, TradeSide, VenueOrder
from ..utils.formats import parse_decimal
from .venue import BaseVenueClient

DEMO_SIGNER_ADDRESS = "0x" + "0" * 64


def to_onchain_signal(amount: Decimal, scale: int = 100) -> int:
    """Scaled integer representation used for the on-chain trade signal."""
    return int((amount * scale).to_integral_value(rounding=ROUND_DOWN))


class TradePayloadGenerator:
    """Generates demo or production order payloads."""

    def __init__(
        self,
        venue: Optional[VenueParams] = None,
        venue_client: Optional[BaseVenueClient] = None,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = lambda: secrets.token_hex(8),
    ):
        self.venue = venue or VenueParams()
        self.venue_client = venue_client
        self.clock = clock
        self.nonce_factory = nonce_factory

    def generate_payload(
        self,
        amount: Union[Decimal, str],
        side: Union[TradeSide, str],
        mode: Union[TradeMode, str],
        signer_address: Optional[str] = None
    ) -> TradePayload:
        """
        Build the order payload for one trade attempt.

        Args:
            amount: Positive decimal trade amount
            side: buy or sell
            mode: demo or production
            signer_address: Connected account placing the trade

        Returns:
            TradePayload; demo payloads carry synthetic venue fields

        Raises:
            ConfigurationMissingError: Production mode without a venue credential
            ValueError: If the amount is not a positive decimal
        """
        mode = TradeMode(mode)
        order_side = OrderSide.from_trade_side(TradeSide(side))

        parsed = parse_decimal(amount)
        if parsed is None or parsed <= 0:
            raise ValueError(f"Trade amount must be a positive decimal, got {amount!r}")

        timestamp = int(self.clock() * 1000)
        nonce = self.nonce_factory()

        if mode == TradeMode.DEMO:
            return TradePayload(
                market_identifier=self.venue.market,
                side=order_side,
                size=float(parsed),
                price=self.venue.demo_price,
                timestamp=timestamp,
                nonce=nonce,
                signer_address=signer_address or DEMO_SIGNER_ADDRESS,
                mode=mode,
                collateral=self.venue.collateral,
                venue_order_id=f"demo-{nonce}",
            )

        self._require_venue()
        return TradePayload(
            market_identifier=self.venue.market,
            side=order_side,
            size=float(parsed),
            price=None,
            timestamp=timestamp,
            nonce=nonce,
            signer_address=signer_address or "",
            mode=mode,
            collateral=self.venue.collateral,
        )

    async def submit_externally(self, payload: TradePayload) -> VenueOrder:
        """
        Submit a production payload to the venue.

        Raises:
            ConfigurationMissingError: If no credential or client is configured
            VenueSubmissionError: If the venue refuses or cannot be reached
        """
        if payload.mode != TradeMode.PRODUCTION:
            raise ValueError("Demo payloads are never submitted to the venue")

        client = self._require_venue()
        return await client.create_order(self.order_spec(payload))

    @staticmethod
    def order_spec(payload: TradePayload) -> dict[str, Any]:
        return payload.to_order_spec()

    def _require_venue(self) -> BaseVenueClient:
        if not self.venue.api_key:
            raise ConfigurationMissingError(
                "Trading venue credential is not configured",
                setting="VAULT_VENUE_API_KEY"
            )
        if self.venue_client is None:
            raise ConfigurationMissingError(
                "Trading venue client is not configured",
                setting="venue_client"
            )
        return self.venue_client
