from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Iterable

from ...settings import GazelleSettings
from ...units import DecimalValue

logger = logging.getLogger(__name__)


class BasePriceAdapter(ABC):
    """Abstract base class for USD spot price sources."""

    def __init__(self, config: GazelleSettings):
        """Initialize the adapter with configuration."""
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_usd_price(self, symbol: str) -> DecimalValue:
        """Fetch the USD price of one unit of ``symbol``."""
        ...

    async def fetch_usd_prices(
        self, symbols: Iterable[str]
    ) -> dict[str, DecimalValue | BaseException]:
        """Fetch prices for several symbols concurrently.

        Failures are returned in place of the price so each asset can be
        handled on its own.
        """
        unique = list(dict.fromkeys(symbols))
        results = await asyncio.gather(
            *[self.fetch_usd_price(symbol) for symbol in unique],
            return_exceptions=True,
        )

        prices: dict[str, DecimalValue | BaseException] = {}
        for symbol, result in zip(unique, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Price adapter '%s' failed for %s: %s",
                    self.adapter_name,
                    symbol,
                    result,
                )
            else:
                logger.debug("Price for %s: %s USD", symbol, result)
            prices[symbol] = result
        return prices


class BaseRateAdapter(ABC):
    """Abstract base class for currency exchange-rate sources."""

    def __init__(self, config: GazelleSettings):
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        ...

    @abstractmethod
    async def fetch_eur_usd_rate(self) -> DecimalValue:
        """How many USD one EUR is worth."""
        ...
