"""Stand-in collaborators for pipeline tests."""

from __future__ import annotations

import logging
from typing import Any

from gazelle.adapters.chain_adapters import BaseChainReader
from gazelle.adapters.data_adapters import BaseDataAdapter
from gazelle.adapters.price_adapters import BasePriceAdapter, BaseRateAdapter
from gazelle.errors import MissingField, UpstreamUnavailable
from gazelle.settings import GazelleSettings
from gazelle.state import AppState
from gazelle.units import DecimalValue


class FakeDataAdapter(BaseDataAdapter):
    def __init__(self, config: GazelleSettings, payload: Any = None, error=None):
        super().__init__(config)
        self.payload = payload
        self.error = error

    @property
    def adapter_name(self) -> str:
        return "fake_subgraph"

    async def fetch_stablecoin_data(self) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        return self.payload


class FakeRateAdapter(BaseRateAdapter):
    @property
    def adapter_name(self) -> str:
        return "fake_rate"

    async def fetch_eur_usd_rate(self) -> DecimalValue:
        return DecimalValue.from_float(1.05)


class FakePriceAdapter(BasePriceAdapter):
    def __init__(self, config: GazelleSettings, prices: dict[str, float]):
        super().__init__(config)
        self.prices = prices

    @property
    def adapter_name(self) -> str:
        return "fake_prices"

    async def fetch_usd_price(self, symbol: str) -> DecimalValue:
        if symbol not in self.prices:
            raise MissingField(f"data.{symbol}")
        return DecimalValue.from_float(self.prices[symbol])


class FakeChainReader(BaseChainReader):
    """In-memory chain keyed by lowercase addresses."""

    def __init__(
        self,
        config: GazelleSettings,
        *,
        balances: dict[tuple[str, str], int],
        supplies: dict[str, int] | None = None,
        decimals: dict[str, int] | None = None,
        names: dict[str, tuple[str, str]] | None = None,
        virtual_prices: dict[str, int] | None = None,
        wants: dict[str, str] | None = None,
        broken: set[str] | None = None,
    ):
        super().__init__(config)
        self.balances = balances
        self.supplies = supplies or {}
        self._decimals = decimals or {}
        self.names = names or {}
        self.virtual_prices = virtual_prices or {}
        self.wants = wants or {}
        self.broken = broken or set()

    @property
    def reader_name(self) -> str:
        return "fake chain"

    def _check(self, address: str) -> None:
        if address in self.broken:
            raise UpstreamUnavailable(self.reader_name, f"call to {address} reverted")

    async def balance_of(self, token: str, owner: str) -> int:
        self._check(token)
        return self.balances.get((token, owner), 0)

    async def total_supply(self, token: str) -> int:
        self._check(token)
        return self.supplies[token]

    async def decimals(self, token: str) -> int:
        self._check(token)
        return self._decimals.get(token, 18)

    async def name(self, token: str) -> str:
        self._check(token)
        return self.names[token][0]

    async def symbol(self, token: str) -> str:
        self._check(token)
        return self.names[token][1]

    async def virtual_price(self, pool: str) -> int:
        self._check(pool)
        return self.virtual_prices[pool]

    async def want_token(self, strategy: str) -> str:
        self._check(strategy)
        return self.wants[strategy]


def make_state(**settings: Any) -> AppState:
    return AppState(
        settings=GazelleSettings(**settings), logger=logging.getLogger("test")
    )
