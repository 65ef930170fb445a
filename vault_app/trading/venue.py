"""External trading venue clients for production-mode orders."""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Optional

import aiohttp
import structlog

from ..config.defaults import VenueParams
from ..errors.input_errors import ConfigurationMissingError
from ..errors.system_failures import VenueSubmissionError
from ..models.trade import VenueOrder

logger = structlog.get_logger(__name__)


class BaseVenueClient(ABC):
    """Boundary to the external trading venue's order API."""

    @abstractmethod
    async def create_order(self, order_spec: dict[str, Any]) -> VenueOrder:
        """
        Place an order on the venue.

        Args:
            order_spec: Venue order body

        Returns:
            Venue acknowledgement carrying the order id

        Raises:
            VenueSubmissionError: If the venue does not accept the order
        """

    async def close(self) -> None:
        """Release network resources."""


class HttpVenueClient(BaseVenueClient):
    """Venue order API over HTTP with a bearer credential."""

    def __init__(self, config: VenueParams):
        if not config.api_key:
            raise ConfigurationMissingError(
                "Trading venue credential is not configured",
                setting="VAULT_VENUE_API_KEY"
            )
        self.config = config
        self.order_url = config.base_url.rstrip("/") + config.order_path
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                    "User-Agent": "vault-app/1.0",
                },
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            )
        return self._session

    async def create_order(self, order_spec: dict[str, Any]) -> VenueOrder:
        """Submit an order via HTTP POST."""
        session = await self._get_session()

        try:
            async with session.post(self.order_url, json=order_spec) as response:
                status = response.status
                body = await response.text()
        except asyncio.TimeoutError as e:
            logger.warning("Venue order request timed out", url=self.order_url)
            raise VenueSubmissionError(
                "Trading venue request timed out", retryable=True
            ) from e
        except aiohttp.ClientError as e:
            logger.warning("Venue order network error", url=self.order_url, error=str(e))
            raise VenueSubmissionError(
                f"Network error contacting trading venue: {e}", retryable=True
            ) from e

        if status >= 500:
            logger.warning("Venue order failed with server error", response_code=status)
            raise VenueSubmissionError(
                f"Trading venue unavailable: HTTP {status}",
                status_code=status,
                retryable=True
            )

        if not 200 <= status < 300:
            logger.warning(
                "Venue rejected order",
                response_code=status,
                response_data=body[:200]
            )
            raise VenueSubmissionError(
                f"Trading venue rejected the order: HTTP {status}: {body[:60]}",
                status_code=status
            )

        try:
            data = json.loads(body) if body else {}
        except ValueError as e:
            raise VenueSubmissionError(
                "Trading venue returned an unreadable response", status_code=status
            ) from e

        order_id = None
        if isinstance(data, dict):
            order_id = data.get("orderId") or data.get("order_id") or data.get("id")
        if not order_id:
            raise VenueSubmissionError(
                "Trading venue response did not include an order id", status_code=status
            )

        logger.info("Venue order placed", order_id=str(order_id), response_code=status)
        return VenueOrder(order_id=str(order_id), raw=data)

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "HttpVenueClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()
