"""Unit tests for the HTTP trading venue client."""

import asyncio
import json
from typing import Any, Optional

import aiohttp
import pytest

from vault_app.config.defaults import VenueParams
from vault_app.errors.input_errors import ConfigurationMissingError
from vault_app.errors.system_failures import VenueSubmissionError
from vault_app.errors.taxonomy import ErrorKind
from vault_app.trading.venue import HttpVenueClient

ORDER = {"pair": "BTC_USD", "sizeDelta": 1.0, "isLong": True}


class FakeResponse:
    def __init__(self, status: int, body: str):
        self.status = status
        self._body = body

    async def text(self) -> str:
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *args) -> None:
        return None


class FakeSession:
    """Stands in for aiohttp.ClientSession."""

    def __init__(self, status: int = 200, body: str = "", error: Optional[Exception] = None):
        self.status = status
        self.body = body
        self.error = error
        self.closed = False
        self.requests: list[tuple[str, Any]] = []

    def post(self, url: str, json: Any = None) -> FakeResponse:
        self.requests.append((url, json))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status, self.body)

    async def close(self) -> None:
        self.closed = True


def make_client(session: FakeSession) -> HttpVenueClient:
    client = HttpVenueClient(VenueParams(api_key="secret", base_url="https://venue.test/"))
    client._session = session
    return client


class TestHttpVenueClient:
    """Test suite for venue order submission."""

    def test_requires_credential(self) -> None:
        with pytest.raises(ConfigurationMissingError):
            HttpVenueClient(VenueParams())

    @pytest.mark.asyncio
    async def test_order_accepted(self) -> None:
        """Test a 2xx response with an order id."""
        session = FakeSession(200, json.dumps({"orderId": "ord-9"}))
        client = make_client(session)

        order = await client.create_order(ORDER)

        assert order.order_id == "ord-9"
        assert order.raw == {"orderId": "ord-9"}
        assert session.requests == [("https://venue.test/v1/trade", ORDER)]

    @pytest.mark.asyncio
    async def test_alternate_id_field(self) -> None:
        client = make_client(FakeSession(201, json.dumps({"id": 17})))
        order = await client.create_order(ORDER)
        assert order.order_id == "17"

    @pytest.mark.asyncio
    async def test_client_error_rejected(self) -> None:
        """Test 4xx responses are non-retryable rejections."""
        client = make_client(FakeSession(400, "insufficient collateral"))

        with pytest.raises(VenueSubmissionError) as exc_info:
            await client.create_order(ORDER)

        assert exc_info.value.status_code == 400
        assert not exc_info.value.retryable
        assert exc_info.value.kind == ErrorKind.VENUE_REJECTED
        assert "HTTP 400" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_server_error_retryable(self) -> None:
        client = make_client(FakeSession(503, "unavailable"))

        with pytest.raises(VenueSubmissionError) as exc_info:
            await client.create_order(ORDER)

        assert exc_info.value.retryable
        assert exc_info.value.kind == ErrorKind.NETWORK_FAULT

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("refused"),
        asyncio.TimeoutError(),
    ])
    async def test_transport_errors_retryable(self, error: Exception) -> None:
        client = make_client(FakeSession(error=error))

        with pytest.raises(VenueSubmissionError) as exc_info:
            await client.create_order(ORDER)

        assert exc_info.value.retryable

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["not json", json.dumps({"status": "ok"}), ""])
    async def test_unusable_success_body(self, body: str) -> None:
        client = make_client(FakeSession(200, body))

        with pytest.raises(VenueSubmissionError):
            await client.create_order(ORDER)

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        session = FakeSession()
        async with make_client(session) as client:
            pass

        assert session.closed
        assert client._session is None
