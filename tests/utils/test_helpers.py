"""Tests for shared utility helpers."""

import asyncio
from decimal import Decimal

import pytest

from vault_app.errors.input_errors import OperationCancelledError
from vault_app.errors.taxonomy import ErrorKind
from vault_app.models.trade import OrderSide, TradeMode, TradePayload, TradeSide
from vault_app.models.transactions import (
    ChainTransactionState,
    ChainTransactionStatus,
    OperationKind,
    TransactionResult,
    TransactionStatus,
)
from vault_app.utils.cancellation import CancellationToken
from vault_app.utils.formats import canonical_address, parse_decimal, strip_address_prefix
from vault_app.utils.time import expiration_timestamp, now_epoch_seconds


class TestFormats:
    """Test address and decimal primitives."""

    def test_strip_prefix(self) -> None:
        assert strip_address_prefix("0xabc") == "abc"
        assert strip_address_prefix("0Xabc") == "abc"
        assert strip_address_prefix("abc") == "abc"

    def test_canonical_address(self) -> None:
        assert canonical_address("ABCD") == "0xabcd"

    def test_parse_decimal(self) -> None:
        assert parse_decimal("1.50") == Decimal("1.50")
        assert parse_decimal(3) == Decimal(3)
        assert parse_decimal(Decimal("2")) == Decimal("2")
        assert parse_decimal(1.5) is None
        assert parse_decimal(True) is None
        assert parse_decimal("inf") is None


class TestTime:
    """Test wall-clock helpers."""

    def test_expiration_timestamp(self) -> None:
        assert expiration_timestamp(30, now=1_000) == 1_030
        assert expiration_timestamp(30) >= now_epoch_seconds() + 29


class TestCancellationToken:
    """Test cooperative cancellation."""

    def test_raise_if_cancelled(self) -> None:
        token = CancellationToken()
        token.raise_if_cancelled("validating")

        token.cancel()

        with pytest.raises(OperationCancelledError) as exc_info:
            token.raise_if_cancelled("validating")
        assert exc_info.value.phase == "validating"
        assert exc_info.value.kind == ErrorKind.USER_CANCELLED

    @pytest.mark.asyncio
    async def test_wait(self) -> None:
        token = CancellationToken()
        waiter = asyncio.ensure_future(token.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        token.cancel()
        await asyncio.wait_for(waiter, timeout=1)
        assert token.cancelled


class TestResultModels:
    """Test result value objects."""

    def test_chain_status_terminal(self) -> None:
        assert not ChainTransactionStatus(ChainTransactionState.PENDING).is_terminal
        assert ChainTransactionStatus(ChainTransactionState.FAILED, "abort").is_terminal

    def test_order_side_mapping(self) -> None:
        assert OrderSide.from_trade_side(TradeSide.BUY) == OrderSide.LONG
        assert OrderSide.from_trade_side(TradeSide.SELL) == OrderSide.SHORT

    def test_result_to_dict(self) -> None:
        payload = TradePayload(
            market_identifier="BTC_USD",
            side=OrderSide.LONG,
            size=1.0,
            price=50000.0,
            timestamp=1,
            nonce="n",
            signer_address="0x1",
            mode=TradeMode.DEMO,
            venue_order_id="demo-n",
        )
        result = TransactionResult(
            operation=OperationKind.EXECUTE_TRADE,
            status=TransactionStatus.CONFIRMED,
            phase="confirmed",
            transaction_hash="0xabc",
            trade_payload=payload,
            venue_order_id="demo-n",
        )

        data = result.to_dict()

        assert data["operation"] == "execute_trade"
        assert data["status"] == "confirmed"
        assert data["error"] is None
        assert data["trade_payload"]["side"] == "long"
        assert data["trade_payload"]["mode"] == "demo"
        assert result.succeeded
