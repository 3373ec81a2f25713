"""Domain models for collateral and position reports."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Mapping

from ..errors import MalformedNumber, MissingField
from ..units import DecimalValue


class FailurePolicy(str, Enum):
    """What to do when a single asset cannot be computed."""

    FAIL_FAST = "fail_fast"
    DEGRADE = "degrade"


class OmissionScope(str, Enum):
    ASSET = "asset"
    VENUE = "venue"
    RATIO = "ratio"


@dataclass(frozen=True)
class Omission:
    """Something left out of a report, and why."""

    scope: OmissionScope
    subject: str
    reason: str


@dataclass(frozen=True)
class RawAmount:
    """Integer-string magnitude tagged with the decimals it is recorded at."""

    magnitude: str
    decimals: int


def _require(payload: Mapping[str, Any], name: str) -> Any:
    value = payload.get(name)
    if value is None:
        raise MissingField(name)
    return value


def _require_str(payload: Mapping[str, Any], name: str) -> str:
    value = _require(payload, name)
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise MalformedNumber(value, name)
    return str(value)


def _require_int(payload: Mapping[str, Any], name: str) -> int:
    value = _require(payload, name)
    if isinstance(value, bool):
        raise MalformedNumber(value, name)
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise MalformedNumber(value, name) from e


@dataclass(frozen=True)
class CollateralRecord:
    """One collateral entry of an indexed stablecoin record."""

    symbol: str
    decimals: int
    stock_user: str
    stock_slp: str
    total_hedge_amount: str
    total_margin: str
    total_asset: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CollateralRecord":
        """Validate a raw subgraph collateral object.

        Raises:
            MissingField: If a required key is absent or null
            MalformedNumber: If ``decimals`` is not an integer
        """
        if not isinstance(payload, Mapping):
            raise MissingField("collaterals[]")
        symbol = _require(payload, "collatName")
        if not isinstance(symbol, str) or not symbol:
            raise MissingField("collatName")
        return cls(
            symbol=symbol,
            decimals=_require_int(payload, "decimals"),
            stock_user=_require_str(payload, "stockUser"),
            stock_slp=_require_str(payload, "stockSLP"),
            total_hedge_amount=_require_str(payload, "totalHedgeAmount"),
            total_margin=_require_str(payload, "totalMargin"),
            total_asset=_require_str(payload, "totalAsset"),
        )


@dataclass(frozen=True)
class StablecoinRecord:
    """Portfolio-level fields of an indexed stablecoin record.

    ``collaterals`` keeps the raw payloads in source order; each is validated
    on its own so a bad entry only affects its asset.
    """

    name: str
    total_minted: str
    collaterals: tuple[Mapping[str, Any], ...]

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], stable_name: str | None = None
    ) -> "StablecoinRecord":
        """Pick the stablecoin entry out of a subgraph response.

        Args:
            payload: Full GraphQL response body
            stable_name: Name to select; the first entry is used when None

        Raises:
            MissingField: If the response lacks the expected structure
        """
        data = payload.get("data") if isinstance(payload, Mapping) else None
        if not isinstance(data, Mapping):
            raise MissingField("data")
        stable_datas = data.get("stableDatas")
        if not isinstance(stable_datas, list) or not stable_datas:
            raise MissingField("stableDatas")

        entry: Any = stable_datas[0]
        if stable_name is not None:
            matches = [
                item
                for item in stable_datas
                if isinstance(item, Mapping)
                and str(item.get("name", "")).lower() == stable_name.lower()
            ]
            if not matches:
                raise MissingField(f"stableDatas[name={stable_name}]")
            entry = matches[0]
        if not isinstance(entry, Mapping):
            raise MissingField("stableDatas[0]")

        collaterals = _require(entry, "collaterals")
        if not isinstance(collaterals, list):
            raise MissingField("collaterals")

        return cls(
            name=str(entry.get("name") or stable_name or ""),
            total_minted=_require_str(entry, "totalMinted"),
            collaterals=tuple(collaterals),
        )


@dataclass(frozen=True)
class CollateralReport:
    """Per-asset figures of a stablecoin report.

    Ratios are None when undefined (zero denominator).
    """

    asset_name: str
    hedge_ratio: DecimalValue | None
    organic_tvl: DecimalValue
    organic_tvl_value: DecimalValue
    slp_tvl: DecimalValue
    slp_tvl_value: DecimalValue
    total_tvl: DecimalValue
    total_tvl_value: DecimalValue
    organic_share: DecimalValue | None = None


@dataclass(frozen=True)
class PortfolioReport:
    """Stablecoin-level report."""

    stable_name: str
    total_minted: DecimalValue
    total_minted_value: DecimalValue
    organic_tvl: DecimalValue
    total_tvl: DecimalValue
    organic_collateralization_ratio: DecimalValue | None
    total_collateralization_ratio: DecimalValue | None
    collateral_reports: tuple[CollateralReport, ...]
    omissions: tuple[Omission, ...] = ()

    def to_dict(self) -> dict[str, object]:
        """Convert report to a JSON-friendly dictionary."""
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class VenueShare:
    """Pro-rata amount of an asset held through a liquidity venue."""

    venue: str
    amount: DecimalValue


@dataclass(frozen=True)
class PoolShareFacts:
    """Constant-product venue: owned LP, LP supply and the asset balance it holds."""

    venue: str
    owned_lp: DecimalValue
    lp_total_supply: DecimalValue
    underlying_balance: DecimalValue


@dataclass(frozen=True)
class StablePoolFacts:
    """Stable-swap venue exposing a virtual price per LP token."""

    venue: str
    lp_name: str
    lp_symbol: str
    owned_lp: DecimalValue
    virtual_price: DecimalValue
    staked_lp: DecimalValue | None = None


@dataclass(frozen=True)
class AssetPositionFacts:
    """Normalized on-chain balances backing one asset."""

    symbol: str
    direct: DecimalValue
    primary_pool: DecimalValue
    manager: DecimalValue
    pool_shares: tuple[PoolShareFacts, ...] = ()
    stable_pool_shares: tuple[StablePoolFacts, ...] = ()
    omissions: tuple[Omission, ...] = ()


@dataclass(frozen=True)
class PositionValuation:
    """Summed position of one asset before pricing."""

    symbol: str
    direct: DecimalValue
    primary_pool: DecimalValue
    manager: DecimalValue
    venue_shares: tuple[VenueShare, ...]
    total: DecimalValue
    omissions: tuple[Omission, ...] = ()


@dataclass(frozen=True)
class PositionReport:
    """Per-asset figures of a vault report."""

    asset_name: str
    direct: DecimalValue
    primary_pool: DecimalValue
    manager: DecimalValue
    venue_shares: tuple[VenueShare, ...]
    total: DecimalValue
    unit_price: DecimalValue
    total_value: DecimalValue


@dataclass(frozen=True)
class VaultReport:
    """Vault-level report."""

    vault_name: str
    position_reports: tuple[PositionReport, ...]
    total_value: DecimalValue
    omissions: tuple[Omission, ...] = ()

    def to_dict(self) -> dict[str, object]:
        """Convert report to a JSON-friendly dictionary."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {"amount", "scale"}:
            return str(DecimalValue(value["amount"], value["scale"]))
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    return value


__all__ = [
    "AssetPositionFacts",
    "CollateralRecord",
    "CollateralReport",
    "FailurePolicy",
    "Omission",
    "OmissionScope",
    "PoolShareFacts",
    "PortfolioReport",
    "PositionReport",
    "PositionValuation",
    "RawAmount",
    "StablePoolFacts",
    "StablecoinRecord",
    "VaultReport",
    "VenueShare",
]

