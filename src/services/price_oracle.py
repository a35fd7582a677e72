"""
Live reference prices from the Jupiter Price API.

Symbols are resolved to Solana mint addresses, fetched in one request and
mapped back. USDC is pinned to 1.0. Any failure yields an empty mapping so
callers keep their current prices.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Protocol

import httpx

from src.core.constants import TOKEN_MINTS
from src.services.alerting_service import AlertType, send_warning_alert
from src.services.metrics_service import metrics_collector

logger = logging.getLogger(__name__)


class PriceOracleError(Exception):
    """Raised when the price API answers with something unusable."""


class JupiterPriceOracle:
    """
    Client for the Jupiter Price API v2.

    The HTTP client is created lazily unless one is injected; pass an
    ``httpx.AsyncClient`` with a mock transport in tests.
    """

    def __init__(
        self,
        api_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        mints: dict[str, str] | None = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.mints = dict(mints or TOKEN_MINTS)
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request(self, mint_ids: list[str]) -> dict[str, Any]:
        try:
            response = await self.client.get(self.api_url, params={"ids": ",".join(mint_ids)})
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise PriceOracleError(f"Jupiter API returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise PriceOracleError(f"Request failed: {e}") from e
        except ValueError as e:
            raise PriceOracleError(f"Invalid JSON: {e}") from e

    async def fetch_prices(self, tokens: list[str]) -> dict[str, Decimal]:
        """
        Fetch USD prices for ``tokens``.

        Returns:
            ``{symbol: price}`` for every symbol the API priced, or ``{}``
            when no symbol has a known mint or the request failed
        """
        symbols = [token.upper() for token in tokens]
        mint_ids = [self.mints[s] for s in symbols if s in self.mints]
        if not mint_ids:
            logger.warning("No known mint addresses for requested tokens")
            return {}

        try:
            payload = await self._request(mint_ids)
            data = payload.get("data") or {}
            prices: dict[str, Decimal] = {}
            for symbol in symbols:
                entry = data.get(self.mints.get(symbol, ""))
                if entry and entry.get("price") is not None:
                    prices[symbol] = Decimal(str(entry["price"]))
        except (PriceOracleError, ArithmeticError, AttributeError) as e:
            logger.error(f"Jupiter price fetch failed: {e}")
            return {}

        if "USDC" in symbols:
            prices["USDC"] = Decimal("1.0")

        logger.info("Jupiter prices: " + ", ".join(f"{k}=${v}" for k, v in prices.items()))
        return prices


class PriceTarget(Protocol):
    def supported_symbols(self) -> list[str]: ...

    def update_prices(self, prices: dict[str, Decimal]) -> dict[str, Any]: ...


class PriceFetcher(Protocol):
    async def fetch_prices(self, tokens: list[str]) -> dict[str, Decimal]: ...


class PriceRefresher:
    """Background task that periodically copies oracle prices into the floor."""

    def __init__(self, target: PriceTarget, oracle: PriceFetcher, interval_seconds: float = 60):
        self.target = target
        self.oracle = oracle
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    async def refresh_once(self) -> dict[str, Decimal]:
        prices = await self.oracle.fetch_prices(self.target.supported_symbols())
        if not prices:
            metrics_collector.record_price_refresh(success=False)
            send_warning_alert(
                alert_type=AlertType.PRICE_ORACLE_FAILURE,
                message="Price refresh returned no prices; keeping current table",
            )
            return {}
        # update_prices takes the floor lock; keep it off the event loop
        await asyncio.to_thread(self.target.update_prices, prices)
        metrics_collector.record_price_refresh(success=True)
        return prices

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh_once()
            except Exception as e:
                logger.error(f"Price refresh failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name="price-refresher")
            logger.info(f"Price refresher started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Price refresher stopped")
