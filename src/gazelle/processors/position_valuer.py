from __future__ import annotations

import logging
from typing import Iterable

from ..domain import (
    AssetPositionFacts,
    Omission,
    OmissionScope,
    PoolShareFacts,
    PositionValuation,
    StablePoolFacts,
    VenueShare,
)
from ..errors import DivisionByZero
from ..units import ZERO, DecimalValue

logger = logging.getLogger(__name__)


def value_direct(balance: DecimalValue, unit_price: DecimalValue) -> DecimalValue:
    return balance * unit_price


def value_pool_share(
    owned_lp: DecimalValue,
    lp_total_supply: DecimalValue,
    pool_underlying_balance: DecimalValue,
) -> DecimalValue:
    """Pro-rata claim on a constant-product pool's balance of one asset.

    A venue holding none of the asset contributes zero without looking at
    its supply.

    Raises:
        DivisionByZero: If the pool has a balance but no LP supply
    """
    if pool_underlying_balance.is_zero():
        return ZERO
    if lp_total_supply.is_zero():
        raise DivisionByZero("LP total supply is zero")
    return pool_underlying_balance * (owned_lp / lp_total_supply)


def value_stable_pool_share(
    owned_lp: DecimalValue,
    virtual_price: DecimalValue,
    staked_lp: DecimalValue | None = None,
) -> DecimalValue:
    """Redemption value of stable-swap LP tokens, staked ones included."""
    if staked_lp is not None:
        owned_lp = owned_lp + staked_lp
    return owned_lp * virtual_price


def venue_matches(symbol: str, lp_name: str, lp_symbol: str) -> bool:
    """Whether a stable-swap venue's LP token is about ``symbol``."""
    needle = symbol.lower()
    return needle in lp_name.lower() or needle in lp_symbol.lower()


def _pool_shares(
    venues: Iterable[PoolShareFacts], omissions: list[Omission]
) -> list[VenueShare]:
    shares: list[VenueShare] = []
    for venue in venues:
        try:
            amount = value_pool_share(
                venue.owned_lp, venue.lp_total_supply, venue.underlying_balance
            )
        except DivisionByZero as e:
            logger.warning("Skipping pool %s: %s", venue.venue, e)
            omissions.append(Omission(OmissionScope.VENUE, venue.venue, str(e)))
            continue
        if not amount.is_zero():
            shares.append(VenueShare(venue=venue.venue, amount=amount))
    return shares


def _stable_pool_shares(
    symbol: str, venues: Iterable[StablePoolFacts]
) -> list[VenueShare]:
    shares: list[VenueShare] = []
    for venue in venues:
        if not venue_matches(symbol, venue.lp_name, venue.lp_symbol):
            logger.debug(
                "Stable pool %s (%s) not matched for %s",
                venue.venue,
                venue.lp_symbol,
                symbol,
            )
            continue
        amount = value_stable_pool_share(
            venue.owned_lp, venue.virtual_price, venue.staked_lp
        )
        if not amount.is_zero():
            shares.append(VenueShare(venue=venue.venue, amount=amount))
    return shares


def value_position(facts: AssetPositionFacts) -> PositionValuation:
    """Sum every component backing an asset.

    Each venue is valued on its own; one that cannot be valued contributes
    zero and is recorded in the omissions.
    """
    omissions = list(facts.omissions)
    venue_shares = [
        *_pool_shares(facts.pool_shares, omissions),
        *_stable_pool_shares(facts.symbol, facts.stable_pool_shares),
    ]

    total = facts.direct + facts.primary_pool + facts.manager
    for share in venue_shares:
        total = total + share.amount

    return PositionValuation(
        symbol=facts.symbol,
        direct=facts.direct,
        primary_pool=facts.primary_pool,
        manager=facts.manager,
        venue_shares=tuple(venue_shares),
        total=total,
        omissions=tuple(omissions),
    )
