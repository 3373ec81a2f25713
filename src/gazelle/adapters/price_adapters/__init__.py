from __future__ import annotations

from .base import BasePriceAdapter, BaseRateAdapter
from .coinmarketcap import CoinMarketCapAdapter
from .exchange_rate import ExchangeRateAdapter

__all__ = [
    "BasePriceAdapter",
    "BaseRateAdapter",
    "CoinMarketCapAdapter",
    "ExchangeRateAdapter",
]
