"""On-chain position collection for the vault report."""

from __future__ import annotations

import asyncio

from ..adapters.chain_adapters import BaseChainReader, Web3ChainReader
from ..adapters.price_adapters import BasePriceAdapter, CoinMarketCapAdapter
from ..domain import (
    AssetPositionFacts,
    Omission,
    OmissionScope,
    PoolShareFacts,
    StablePoolFacts,
)
from ..errors import GazelleError, VenueUnavailable
from ..logger import get_logger
from ..processors import normalize_int, venue_matches
from ..settings import StableSwapVenueSettings, VaultAssetSettings
from ..units import ZERO, DecimalValue
from .context import PipelineContext

logger = get_logger(__name__)

VIRTUAL_PRICE_DECIMALS = 18


async def _held_by(
    reader: BaseChainReader, token: str, decimals: int, owner: str | None
) -> DecimalValue:
    if owner is None:
        return ZERO
    return normalize_int(await reader.balance_of(token, owner), decimals)


async def _constant_product_facts(
    reader: BaseChainReader, token: str, token_decimals: int, pair: str, owner: str
) -> PoolShareFacts:
    pair_decimals = await reader.decimals(pair)
    owned, supply, underlying = await asyncio.gather(
        reader.balance_of(pair, owner),
        reader.total_supply(pair),
        reader.balance_of(token, pair),
    )
    return PoolShareFacts(
        venue=pair,
        owned_lp=normalize_int(owned, pair_decimals),
        lp_total_supply=normalize_int(supply, pair_decimals),
        underlying_balance=normalize_int(underlying, token_decimals),
    )


async def _stable_swap_facts(
    reader: BaseChainReader,
    symbol: str,
    venue: StableSwapVenueSettings,
    owner: str,
) -> StablePoolFacts | None:
    lp_name, lp_symbol = await asyncio.gather(
        reader.name(venue.lp_token), reader.symbol(venue.lp_token)
    )
    if not venue_matches(symbol, lp_name, lp_symbol):
        return None

    lp_decimals = await reader.decimals(venue.lp_token)
    owned = normalize_int(await reader.balance_of(venue.lp_token, owner), lp_decimals)
    staked = None
    if venue.gauge is not None:
        staked = normalize_int(await reader.balance_of(venue.gauge, owner), lp_decimals)
    virtual_price = normalize_int(
        await reader.virtual_price(venue.pool), VIRTUAL_PRICE_DECIMALS
    )
    return StablePoolFacts(
        venue=venue.pool,
        lp_name=lp_name,
        lp_symbol=lp_symbol,
        owned_lp=owned,
        virtual_price=virtual_price,
        staked_lp=staked,
    )


def _venue_omission(symbol: str, venue: str, error: GazelleError) -> Omission:
    failure = VenueUnavailable(venue, str(error))
    logger.warning("Venue %s skipped for %s: %s", venue, symbol, failure)
    return Omission(OmissionScope.VENUE, venue, str(failure))


async def collect_asset_position(
    reader: BaseChainReader,
    asset: VaultAssetSettings,
    constant_product_venues: list[str],
    stable_swap_venues: list[StableSwapVenueSettings],
) -> AssetPositionFacts:
    """Read every component backing one vault asset.

    Failures reading the asset's own balances fail the asset. A venue that
    cannot be read is left out and recorded as an omission.
    """
    token = asset.token
    if token is None:
        token = await reader.want_token(asset.strategy or "")
        logger.debug("Strategy %s wants %s", asset.strategy, token)

    decimals = await reader.decimals(token)
    direct, primary_pool, manager = await asyncio.gather(
        _held_by(reader, token, decimals, asset.holder),
        _held_by(reader, token, decimals, asset.primary_pool),
        _held_by(reader, token, decimals, asset.manager),
    )

    owner = asset.lp_owner_address
    omissions: list[Omission] = []

    cp_results = await asyncio.gather(
        *[
            _constant_product_facts(reader, token, decimals, pair, owner)
            for pair in constant_product_venues
        ],
        return_exceptions=True,
    )
    pool_shares: list[PoolShareFacts] = []
    for pair, result in zip(constant_product_venues, cp_results):
        if isinstance(result, GazelleError):
            omissions.append(_venue_omission(asset.symbol, pair, result))
        elif isinstance(result, BaseException):
            raise result
        else:
            pool_shares.append(result)

    ss_results = await asyncio.gather(
        *[
            _stable_swap_facts(reader, asset.symbol, venue, owner)
            for venue in stable_swap_venues
        ],
        return_exceptions=True,
    )
    stable_pool_shares: list[StablePoolFacts] = []
    for venue, result in zip(stable_swap_venues, ss_results):
        if isinstance(result, GazelleError):
            omissions.append(_venue_omission(asset.symbol, venue.pool, result))
        elif isinstance(result, BaseException):
            raise result
        elif result is not None:
            stable_pool_shares.append(result)

    return AssetPositionFacts(
        symbol=asset.symbol,
        direct=direct,
        primary_pool=primary_pool,
        manager=manager,
        pool_shares=tuple(pool_shares),
        stable_pool_shares=tuple(stable_pool_shares),
        omissions=tuple(omissions),
    )


async def collect_vault_positions(
    ctx: PipelineContext,
    reader: BaseChainReader | None = None,
    price_adapter: BasePriceAdapter | None = None,
) -> None:
    """Collect on-chain facts and prices for every configured vault asset.

    Per-asset failures are kept alongside the asset so the aggregator can
    apply the failure policy. Anything that is not a report error aborts.
    """
    s = ctx.state.settings
    log = ctx.state.logger
    vault = s.vault

    if not vault.assets:
        raise ValueError("vault mode needs at least one entry in vault.assets")

    reader = reader or Web3ChainReader(s)
    price_adapter = price_adapter or CoinMarketCapAdapter(s)

    log.info(
        "Collecting positions for %d vault assets (block %s)...",
        len(vault.assets),
        s.block_number if s.block_number is not None else "latest",
    )
    results = await asyncio.gather(
        *[
            collect_asset_position(
                reader,
                asset,
                vault.constant_product_venues,
                vault.stable_swap_venues,
            )
            for asset in vault.assets
        ],
        return_exceptions=True,
    )

    positions: list[tuple[str, AssetPositionFacts | BaseException]] = []
    for asset, result in zip(vault.assets, results):
        if isinstance(result, GazelleError):
            log.error("Failed to collect position for %s: %s", asset.symbol, result)
        elif isinstance(result, BaseException):
            raise result
        else:
            log.debug(
                "Collected %s: %d pool venues, %d stable venues",
                asset.symbol,
                len(result.pool_shares),
                len(result.stable_pool_shares),
            )
        positions.append((asset.symbol, result))
    ctx.positions = positions

    log.info("Fetching prices for %d vault assets...", len(vault.assets))
    ctx.prices = await price_adapter.fetch_usd_prices(a.symbol for a in vault.assets)
