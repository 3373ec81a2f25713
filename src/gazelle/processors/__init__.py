from __future__ import annotations

from .aggregator import AggregatorStage, ReportAggregator, resolve_price
from .normalizer import FieldScales, normalize, normalize_int
from .position_valuer import (
    value_direct,
    value_pool_share,
    value_position,
    value_stable_pool_share,
    venue_matches,
)
from .ratios import (
    collateralization_ratio,
    hedge_ratio,
    organic_amount,
    organic_share,
)

__all__ = [
    "AggregatorStage",
    "FieldScales",
    "ReportAggregator",
    "collateralization_ratio",
    "hedge_ratio",
    "normalize",
    "normalize_int",
    "organic_amount",
    "organic_share",
    "resolve_price",
    "value_direct",
    "value_pool_share",
    "value_position",
    "value_stable_pool_share",
    "venue_matches",
]
