from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ...errors import MalformedNumber, MissingField, UpstreamUnavailable
from ...settings import GazelleSettings
from ...units import DecimalValue
from ..http import request_json
from .base import BasePriceAdapter

logger = logging.getLogger(__name__)


class CoinMarketCapAdapter(BasePriceAdapter):
    """Adapter for the CoinMarketCap latest-quotes endpoint."""

    def __init__(self, config: GazelleSettings):
        super().__init__(config)
        self.api_url = config.price_api_url
        self.api_key = (
            config.price_api_key.get_secret_value() if config.price_api_key else None
        )
        self.max_age_seconds = config.price_max_age_seconds

    @property
    def adapter_name(self) -> str:
        return "coinmarketcap"

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _check_freshness(self, symbol: str, last_updated: Any) -> None:
        if self.max_age_seconds is None or last_updated is None:
            return
        try:
            updated_at = datetime.fromisoformat(str(last_updated).replace("Z", "+00:00"))
        except ValueError as e:
            raise MalformedNumber(last_updated, "last_updated") from e
        if updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)

        age = (self._now() - updated_at).total_seconds()
        if age > self.max_age_seconds:
            raise UpstreamUnavailable(
                self.adapter_name,
                f"stale quote for {symbol}: {age:.0f}s old (max {self.max_age_seconds}s)",
            )

    async def fetch_usd_price(self, symbol: str) -> DecimalValue:
        """Fetch the USD price of ``symbol``, fixed to 3 decimals.

        Raises:
            MissingField: If the symbol has no quote
            MalformedNumber: If the quoted price is not a positive number
            UpstreamUnavailable: On transport failure or a stale quote
        """
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-CMC_PRO_API_KEY"] = self.api_key

        body = await request_json(
            "GET",
            self.api_url,
            source=self.adapter_name,
            max_tries=self.config.http_max_tries,
            timeout=self.config.http_timeout,
            params={"symbol": symbol},
            headers=headers,
        )

        data = body.get("data") if isinstance(body, dict) else None
        entries = data.get(symbol) if isinstance(data, dict) else None
        if isinstance(entries, dict):
            entries = [entries]
        if not entries:
            raise MissingField(f"data.{symbol}")

        quote = entries[0].get("quote", {}).get("USD") if isinstance(entries[0], dict) else None
        if not isinstance(quote, dict) or quote.get("price") is None:
            raise MissingField(f"data.{symbol}[0].quote.USD.price")

        self._check_freshness(symbol, quote.get("last_updated"))

        price = DecimalValue.from_float(quote["price"])
        if price.is_negative() or price.is_zero():
            raise MalformedNumber(quote["price"], f"{symbol} price")

        logger.debug("CoinMarketCap price for %s: %s", symbol, price)
        return price
