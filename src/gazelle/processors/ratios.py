from __future__ import annotations

from ..errors import DivisionByZero
from ..units import HUNDRED, ZERO, DecimalValue

# Display scales applied at the report boundary.
RATIO_SCALE = 2
AMOUNT_SCALE = 0


def hedge_ratio(
    total_hedge_amount: DecimalValue, stock_user: DecimalValue
) -> DecimalValue:
    """Percentage of user stock covered by hedging agents.

    Raises:
        DivisionByZero: If ``stock_user`` is zero
    """
    if stock_user.is_zero():
        raise DivisionByZero("stock_user is zero")
    return (total_hedge_amount / stock_user) * HUNDRED


def organic_amount(
    total_assets: DecimalValue,
    pooled_amount: DecimalValue,
    margin_amount: DecimalValue,
) -> DecimalValue:
    """Assets left after SLP deposits and hedging margin, floored at zero.

    The difference goes negative under transient on-chain states; that is
    clamped, not raised.
    """
    return max(ZERO, total_assets - (pooled_amount + margin_amount))


def collateralization_ratio(
    backing_value: DecimalValue, minted_value: DecimalValue
) -> DecimalValue:
    """
    Raises:
        DivisionByZero: If ``minted_value`` is zero
    """
    if minted_value.is_zero():
        raise DivisionByZero("minted value is zero")
    return backing_value / minted_value


def organic_share(part: DecimalValue, whole: DecimalValue) -> DecimalValue:
    """Percentage ``part`` makes up of ``whole``."""
    if whole.is_zero():
        raise DivisionByZero("organic TVL is zero")
    return (part / whole) * HUNDRED
