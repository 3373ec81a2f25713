"""Data collection for the stablecoin collateral report."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from ..adapters.data_adapters import BaseDataAdapter, SubgraphAdapter
from ..adapters.price_adapters import (
    BasePriceAdapter,
    BaseRateAdapter,
    CoinMarketCapAdapter,
    ExchangeRateAdapter,
)
from .context import PipelineContext


def _collateral_symbols(payload: Any, stable_name: str | None) -> list[str]:
    """Symbols to price, read leniently; validation happens in the aggregator."""
    data = payload.get("data") if isinstance(payload, Mapping) else None
    entries = data.get("stableDatas") if isinstance(data, Mapping) else None
    if not isinstance(entries, list) or not entries:
        return []

    entry = entries[0]
    if stable_name is not None:
        for candidate in entries:
            if (
                isinstance(candidate, Mapping)
                and str(candidate.get("name", "")).lower() == stable_name.lower()
            ):
                entry = candidate
                break

    collaterals = entry.get("collaterals") if isinstance(entry, Mapping) else None
    if not isinstance(collaterals, list):
        return []
    return [
        c["collatName"]
        for c in collaterals
        if isinstance(c, Mapping) and isinstance(c.get("collatName"), str)
    ]


async def collect_stablecoin_data(
    ctx: PipelineContext,
    data_adapter: BaseDataAdapter | None = None,
    rate_adapter: BaseRateAdapter | None = None,
    price_adapter: BasePriceAdapter | None = None,
) -> None:
    """Fetch the indexed stablecoin data, the EUR/USD rate and collateral prices.

    The payload and the rate are fetched concurrently; either failing aborts
    the run. Price failures are kept per symbol for the aggregator to judge.
    """
    s = ctx.state.settings
    log = ctx.state.logger

    data_adapter = data_adapter or SubgraphAdapter(s)
    rate_adapter = rate_adapter or ExchangeRateAdapter(s)
    price_adapter = price_adapter or CoinMarketCapAdapter(s)

    log.info("Fetching stablecoin data and exchange rate...")
    payload, rate = await asyncio.gather(
        data_adapter.fetch_stablecoin_data(),
        rate_adapter.fetch_eur_usd_rate(),
    )
    ctx.stablecoin_payload = payload
    ctx.exchange_rate = rate
    log.debug("EUR/USD rate: %s", rate)

    symbols = _collateral_symbols(payload, s.stable_name)
    log.info("Fetching prices for %d collateral assets...", len(symbols))
    ctx.prices = await price_adapter.fetch_usd_prices(symbols)
