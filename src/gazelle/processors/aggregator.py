from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

from ..domain import (
    AssetPositionFacts,
    CollateralRecord,
    CollateralReport,
    FailurePolicy,
    Omission,
    OmissionScope,
    PortfolioReport,
    PositionReport,
    PositionValuation,
    RawAmount,
    StablecoinRecord,
    VaultReport,
    VenueShare,
)
from ..errors import (
    DivisionByZero,
    GazelleError,
    MalformedNumber,
    MissingField,
    UpstreamUnavailable,
)
from ..units import ZERO, DecimalValue
from .normalizer import FieldScales, normalize
from .position_valuer import value_direct, value_position
from .ratios import (
    AMOUNT_SCALE,
    RATIO_SCALE,
    collateralization_ratio,
    hedge_ratio,
    organic_amount,
    organic_share,
)

logger = logging.getLogger(__name__)

PriceLookup = Mapping[str, "DecimalValue | BaseException"]

# Errors scoped to a single asset; anything else aborts the run.
PER_ASSET_ERRORS = (MissingField, MalformedNumber, UpstreamUnavailable)


class AggregatorStage(str, Enum):
    INIT = "init"
    PER_ASSET_LOOP = "per_asset_loop"
    FINALIZE = "finalize"
    DONE = "done"


@dataclass(frozen=True)
class _CollateralValuation:
    """Full-precision per-asset figures, rescaled only in finalize."""

    symbol: str
    hedge_ratio: DecimalValue | None
    organic: DecimalValue
    organic_value: DecimalValue
    slp: DecimalValue
    slp_value: DecimalValue
    total: DecimalValue
    total_value: DecimalValue


def _rescale_ratio(value: DecimalValue | None) -> DecimalValue | None:
    return value.rescale(RATIO_SCALE) if value is not None else None


def _amount(value: DecimalValue) -> DecimalValue:
    return value.rescale(AMOUNT_SCALE)


def resolve_price(symbol: str, prices: PriceLookup) -> DecimalValue:
    """Look up a fetched price, re-raising the fetch failure if there was one."""
    price = prices.get(symbol)
    if price is None:
        raise UpstreamUnavailable("spot price", f"no price for {symbol}")
    if isinstance(price, GazelleError):
        raise price
    if isinstance(price, BaseException):
        raise UpstreamUnavailable("spot price", str(price)) from price
    return price


def _asset_subject(payload: Any, index: int) -> str:
    if isinstance(payload, Mapping) and isinstance(payload.get("collatName"), str):
        return payload["collatName"]
    return f"collaterals[{index}]"


class ReportAggregator:
    """Folds per-asset figures into a portfolio report.

    Stages run INIT -> PER_ASSET_LOOP -> FINALIZE -> DONE on every build and
    nothing carries over between builds.
    """

    def __init__(
        self,
        field_scales: FieldScales | None = None,
        failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST,
    ):
        self.field_scales = field_scales or FieldScales()
        self.failure_policy = failure_policy
        self.stage = AggregatorStage.INIT

    def _handle_asset_failure(
        self, subject: str, error: Exception, omissions: list[Omission]
    ) -> None:
        if self.failure_policy is FailurePolicy.FAIL_FAST:
            logger.error("Asset %s failed: %s", subject, error)
            raise error
        logger.warning("Dropping asset %s from report: %s", subject, error)
        omissions.append(Omission(OmissionScope.ASSET, subject, str(error)))

    def _value_collateral(
        self,
        payload: Mapping[str, Any],
        prices: PriceLookup,
        omissions: list[Omission],
    ) -> _CollateralValuation:
        scales = self.field_scales
        record = CollateralRecord.from_payload(payload)
        decimals = record.decimals

        stock_slp = normalize(
            RawAmount(record.stock_slp, decimals), scales.stock_slp_scale_offset
        )
        stock_user = normalize(RawAmount(record.stock_user, scales.stock_user_decimals))
        total_hedge = normalize(
            RawAmount(record.total_hedge_amount, scales.total_hedge_amount_decimals)
        )
        total_margin = normalize(RawAmount(record.total_margin, decimals))
        total_assets = normalize(RawAmount(record.total_asset, decimals))
        price = resolve_price(record.symbol, prices)

        try:
            ratio: DecimalValue | None = hedge_ratio(total_hedge, stock_user)
        except DivisionByZero as e:
            logger.warning("Hedge ratio undefined for %s: %s", record.symbol, e)
            omissions.append(
                Omission(OmissionScope.RATIO, f"{record.symbol} hedge ratio", str(e))
            )
            ratio = None

        organic = organic_amount(total_assets, stock_slp, total_margin)
        return _CollateralValuation(
            symbol=record.symbol,
            hedge_ratio=ratio,
            organic=organic,
            organic_value=value_direct(organic, price),
            slp=stock_slp,
            slp_value=value_direct(stock_slp, price),
            total=total_assets,
            total_value=value_direct(total_assets, price),
        )

    def _ratio_or_none(
        self,
        label: str,
        numerator: DecimalValue,
        denominator: DecimalValue,
        omissions: list[Omission],
        compute=collateralization_ratio,
    ) -> DecimalValue | None:
        try:
            return compute(numerator, denominator)
        except DivisionByZero as e:
            logger.warning("%s undefined: %s", label, e)
            omissions.append(Omission(OmissionScope.RATIO, label, str(e)))
            return None

    def build(
        self,
        payload: Mapping[str, Any],
        exchange_rate: DecimalValue,
        prices: PriceLookup,
        stable_name: str | None = None,
    ) -> PortfolioReport:
        """Compute a stablecoin report from a subgraph payload.

        Args:
            payload: Subgraph response body
            exchange_rate: Value of one minted stablecoin unit in USD
            prices: USD price (or fetch failure) per collateral symbol
            stable_name: Stablecoin to select from the payload

        Raises:
            MissingField, MalformedNumber: On portfolio-level fields, or on an
                asset's fields under the fail-fast policy
            UpstreamUnavailable: On a missing price under the fail-fast policy
        """
        self.stage = AggregatorStage.INIT
        try:
            record = StablecoinRecord.from_payload(payload, stable_name)
            total_minted = normalize(
                RawAmount(record.total_minted, self.field_scales.total_minted_decimals)
            )
            total_minted_value = value_direct(total_minted, exchange_rate)
            omissions: list[Omission] = []

            self.stage = AggregatorStage.PER_ASSET_LOOP
            slots: list[_CollateralValuation | None] = [None] * len(record.collaterals)
            for index, collateral in enumerate(record.collaterals):
                try:
                    slots[index] = self._value_collateral(collateral, prices, omissions)
                except PER_ASSET_ERRORS as e:
                    self._handle_asset_failure(
                        _asset_subject(collateral, index), e, omissions
                    )

            self.stage = AggregatorStage.FINALIZE
            valuations = [slot for slot in slots if slot is not None]
            organic_value = ZERO
            total_value = ZERO
            for valuation in valuations:
                organic_value = organic_value + valuation.organic_value
                total_value = total_value + valuation.total_value

            organic_ratio = self._ratio_or_none(
                "Organic collateralization ratio",
                organic_value,
                total_minted_value,
                omissions,
            )
            total_ratio = self._ratio_or_none(
                "Total collateralization ratio",
                total_value,
                total_minted_value,
                omissions,
            )

            collateral_reports = tuple(
                CollateralReport(
                    asset_name=valuation.symbol,
                    hedge_ratio=_rescale_ratio(valuation.hedge_ratio),
                    organic_tvl=_amount(valuation.organic),
                    organic_tvl_value=_amount(valuation.organic_value),
                    slp_tvl=_amount(valuation.slp),
                    slp_tvl_value=_amount(valuation.slp_value),
                    total_tvl=_amount(valuation.total),
                    total_tvl_value=_amount(valuation.total_value),
                    organic_share=_rescale_ratio(
                        self._ratio_or_none(
                            f"{valuation.symbol} share of organic TVL",
                            valuation.organic_value,
                            organic_value,
                            omissions,
                            compute=organic_share,
                        )
                    ),
                )
                for valuation in valuations
            )

            if organic_value > total_value:
                logger.warning(
                    "Organic collateral %s exceeds total collateral %s",
                    organic_value,
                    total_value,
                )

            return PortfolioReport(
                stable_name=record.name,
                total_minted=_amount(total_minted),
                total_minted_value=_amount(total_minted_value),
                organic_tvl=_amount(organic_value),
                total_tvl=_amount(total_value),
                organic_collateralization_ratio=_rescale_ratio(organic_ratio),
                total_collateralization_ratio=_rescale_ratio(total_ratio),
                collateral_reports=collateral_reports,
                omissions=tuple(omissions),
            )
        finally:
            self.stage = AggregatorStage.DONE

    def build_vault(
        self,
        vault_name: str,
        positions: Sequence[tuple[str, AssetPositionFacts | BaseException]],
        prices: PriceLookup,
    ) -> VaultReport:
        """Compute a vault report from collected on-chain positions.

        Args:
            vault_name: Label used in the report title
            positions: Per-asset facts (or collection failure), in source order
            prices: USD price (or fetch failure) per asset symbol
        """
        self.stage = AggregatorStage.INIT
        try:
            omissions: list[Omission] = []

            self.stage = AggregatorStage.PER_ASSET_LOOP
            slots: list[tuple[PositionValuation, DecimalValue] | None] = [None] * len(
                positions
            )
            for index, (symbol, facts) in enumerate(positions):
                try:
                    if isinstance(facts, GazelleError):
                        raise facts
                    if isinstance(facts, BaseException):
                        raise UpstreamUnavailable("on-chain reader", str(facts)) from facts
                    price = resolve_price(symbol, prices)
                    valuation = value_position(facts)
                    omissions.extend(valuation.omissions)
                    slots[index] = (valuation, price)
                except PER_ASSET_ERRORS as e:
                    self._handle_asset_failure(symbol, e, omissions)

            self.stage = AggregatorStage.FINALIZE
            reports: list[PositionReport] = []
            total_value = ZERO
            for slot in slots:
                if slot is None:
                    continue
                valuation, price = slot
                asset_value = value_direct(valuation.total, price)
                total_value = total_value + asset_value
                reports.append(
                    PositionReport(
                        asset_name=valuation.symbol,
                        direct=_amount(valuation.direct),
                        primary_pool=_amount(valuation.primary_pool),
                        manager=_amount(valuation.manager),
                        venue_shares=tuple(
                            VenueShare(share.venue, _amount(share.amount))
                            for share in valuation.venue_shares
                        ),
                        total=_amount(valuation.total),
                        unit_price=price,
                        total_value=_amount(asset_value),
                    )
                )

            return VaultReport(
                vault_name=vault_name,
                position_reports=tuple(reports),
                total_value=_amount(total_value),
                omissions=tuple(omissions),
            )
        finally:
            self.stage = AggregatorStage.DONE
