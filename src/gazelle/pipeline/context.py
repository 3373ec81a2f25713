from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..domain import AssetPositionFacts, PortfolioReport, VaultReport
from ..state import AppState
from ..units import DecimalValue


@dataclass
class PipelineContext:
    state: AppState
    stablecoin_payload: dict[str, Any] | None = None
    exchange_rate: DecimalValue | None = None
    prices: dict[str, DecimalValue | BaseException] = field(default_factory=dict)
    positions: list[tuple[str, AssetPositionFacts | BaseException]] | None = None
    report: PortfolioReport | VaultReport | None = None

    @property
    def stablecoin_payload_required(self) -> dict[str, Any]:
        if self.stablecoin_payload is None:
            raise RuntimeError(
                "Stablecoin data has not been set. Ensure collect_stablecoin_data() is called before accessing this property."
            )
        return self.stablecoin_payload

    @property
    def exchange_rate_required(self) -> DecimalValue:
        if self.exchange_rate is None:
            raise RuntimeError(
                "Exchange rate has not been set. Ensure collect_stablecoin_data() is called before accessing this property."
            )
        return self.exchange_rate

    @property
    def positions_required(self) -> list[tuple[str, AssetPositionFacts | BaseException]]:
        if self.positions is None:
            raise RuntimeError(
                "Vault positions have not been set. Ensure collect_vault_positions() is called before accessing this property."
            )
        return self.positions

    @property
    def report_required(self) -> PortfolioReport | VaultReport:
        if self.report is None:
            raise RuntimeError(
                "Report has not been set. Ensure build_report() is called before accessing this property."
            )
        return self.report
