"""Unit tests for trade payload generation."""

from decimal import Decimal

import pytest

from conftest import FOLLOWER_ADDRESS, FakeVenueClient
from vault_app.config.defaults import VenueParams
from vault_app.errors.input_errors import ConfigurationMissingError
from vault_app.models.trade import OrderSide, TradeMode, TradeSide
from vault_app.trading.payload import (
    DEMO_SIGNER_ADDRESS,
    TradePayloadGenerator,
    to_onchain_signal,
)


def make_generator(api_key=None, client=None) -> TradePayloadGenerator:
    return TradePayloadGenerator(
        venue=VenueParams(api_key=api_key),
        venue_client=client,
        clock=lambda: 1_700_000_000.5,
        nonce_factory=lambda: "nonce-1",
    )


class TestOnchainSignal:
    """Test the scaled on-chain signal."""

    def test_scaling(self) -> None:
        assert to_onchain_signal(Decimal("1.5")) == 150
        assert to_onchain_signal(Decimal("1.239")) == 123
        assert to_onchain_signal(Decimal("0.001")) == 0
        assert to_onchain_signal(Decimal("2"), scale=1000) == 2000


class TestDemoPayloads:
    """Test mocked demo payloads."""

    def test_demo_payload_fields(self) -> None:
        payload = make_generator().generate_payload("0.25", TradeSide.BUY, TradeMode.DEMO, FOLLOWER_ADDRESS)

        assert payload.market_identifier == "BTC_USD"
        assert payload.side == OrderSide.LONG
        assert payload.size == 0.25
        assert payload.price == 50000.0
        assert payload.timestamp == 1_700_000_000_500
        assert payload.nonce == "nonce-1"
        assert payload.signer_address == FOLLOWER_ADDRESS
        assert payload.venue_order_id == "demo-nonce-1"

    def test_demo_without_signer(self) -> None:
        payload = make_generator().generate_payload("1", "sell", "demo")

        assert payload.side == OrderSide.SHORT
        assert payload.signer_address == DEMO_SIGNER_ADDRESS

    def test_demo_needs_no_credential(self) -> None:
        """Test demo mode works with no venue configured at all."""
        payload = make_generator().generate_payload("1", TradeSide.BUY, TradeMode.DEMO)
        assert payload.mode == TradeMode.DEMO

    @pytest.mark.parametrize("amount", ["0", "-1", "abc"])
    def test_invalid_amount(self, amount: str) -> None:
        with pytest.raises(ValueError):
            make_generator().generate_payload(amount, TradeSide.BUY, TradeMode.DEMO)

    @pytest.mark.asyncio
    async def test_demo_never_submitted(self) -> None:
        client = FakeVenueClient()
        generator = make_generator(api_key="key", client=client)
        payload = generator.generate_payload("1", TradeSide.BUY, TradeMode.DEMO)

        with pytest.raises(ValueError):
            await generator.submit_externally(payload)
        assert client.orders == []


class TestProductionPayloads:
    """Test live venue payloads."""

    def test_missing_credential(self) -> None:
        with pytest.raises(ConfigurationMissingError) as exc_info:
            make_generator().generate_payload("1", TradeSide.BUY, TradeMode.PRODUCTION)
        assert exc_info.value.setting == "VAULT_VENUE_API_KEY"

    def test_missing_client(self) -> None:
        with pytest.raises(ConfigurationMissingError):
            make_generator(api_key="key").generate_payload("1", TradeSide.BUY, TradeMode.PRODUCTION)

    def test_market_order_spec(self) -> None:
        """Test production payloads are market orders."""
        generator = make_generator(api_key="key", client=FakeVenueClient())

        payload = generator.generate_payload("2.5", TradeSide.SELL, TradeMode.PRODUCTION, FOLLOWER_ADDRESS)

        assert payload.price is None
        assert payload.venue_order_id is None
        assert payload.to_order_spec() == {
            "pair": "BTC_USD",
            "userAddress": FOLLOWER_ADDRESS,
            "sizeDelta": 2.5,
            "collateralDelta": 1.0,
            "isLong": False,
            "isIncrease": True,
            "price": None,
            "timestamp": 1_700_000_000_500,
            "nonce": "nonce-1",
        }

    @pytest.mark.asyncio
    async def test_submit_externally(self) -> None:
        client = FakeVenueClient(order_id="abc")
        generator = make_generator(api_key="key", client=client)
        payload = generator.generate_payload("1", TradeSide.BUY, TradeMode.PRODUCTION, FOLLOWER_ADDRESS)

        order = await generator.submit_externally(payload)

        assert order.order_id == "abc"
        assert client.orders[0]["isLong"] is True
