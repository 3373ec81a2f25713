from __future__ import annotations

from dataclasses import dataclass

from ..domain import RawAmount
from ..errors import MalformedNumber
from ..units import DecimalValue


@dataclass(frozen=True)
class FieldScales:
    """Decimals each indexed field is recorded at.

    ``stock_slp_scale_offset`` is added on top of the token's own decimals:
    the share ledger records stockSLP at 18 + token decimals.
    """

    total_minted_decimals: int = 18
    stock_user_decimals: int = 18
    total_hedge_amount_decimals: int = 18
    stock_slp_scale_offset: int = 18


def normalize(raw: RawAmount, protocol_scale_offset: int = 0) -> DecimalValue:
    """Divide a raw magnitude by 10**(decimals + protocol_scale_offset).

    The result keeps full precision and is displayed at scale 0; callers
    rescale at the report boundary.

    Raises:
        MalformedNumber: If the magnitude is not a number
    """
    if protocol_scale_offset < 0:
        raise ValueError(
            f"protocol_scale_offset must be non-negative, got {protocol_scale_offset}"
        )
    if raw.decimals < 0:
        raise MalformedNumber(raw.decimals)
    try:
        return DecimalValue.of_integer_string(
            raw.magnitude, raw.decimals + protocol_scale_offset
        )
    except MalformedNumber as e:
        raise MalformedNumber(raw.magnitude) from e


def normalize_int(value: int, decimals: int) -> DecimalValue:
    """Normalize an integer read from chain (e.g. ``balanceOf``)."""
    return normalize(RawAmount(magnitude=str(int(value)), decimals=decimals))
