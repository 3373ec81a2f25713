from __future__ import annotations

from .chain_adapters import BaseChainReader, Web3ChainReader
from .data_adapters import BaseDataAdapter, SubgraphAdapter
from .price_adapters import (
    BasePriceAdapter,
    BaseRateAdapter,
    CoinMarketCapAdapter,
    ExchangeRateAdapter,
)

__all__ = [
    "BaseChainReader",
    "BaseDataAdapter",
    "BasePriceAdapter",
    "BaseRateAdapter",
    "CoinMarketCapAdapter",
    "ExchangeRateAdapter",
    "SubgraphAdapter",
    "Web3ChainReader",
]
