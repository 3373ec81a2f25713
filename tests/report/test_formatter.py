from __future__ import annotations

import dataclasses
from decimal import Decimal

import pytest
from rich.console import Console

from gazelle.domain import (
    CollateralReport,
    Omission,
    OmissionScope,
    PortfolioReport,
    PositionReport,
    VaultReport,
    VenueShare,
)
from gazelle.report.formatter import (
    format_number,
    format_portfolio_text,
    format_report_table,
    format_vault_text,
    parse_report_text,
)
from gazelle.units import DecimalValue


def d(value, scale=0) -> DecimalValue:
    return DecimalValue.of(value).rescale(scale)


@pytest.fixture
def portfolio() -> PortfolioReport:
    return PortfolioReport(
        stable_name="agEUR",
        total_minted=d(1000000),
        total_minted_value=d(1050000),
        organic_tvl=d(800000),
        total_tvl=d(1050000),
        organic_collateralization_ratio=d("0.76", 2),
        total_collateralization_ratio=d("1.00", 2),
        collateral_reports=(
            CollateralReport(
                asset_name="USDC",
                hedge_ratio=d("90.00", 2),
                organic_tvl=d(800000),
                organic_tvl_value=d(800000),
                slp_tvl=d(200000),
                slp_tvl_value=d(200000),
                total_tvl=d(1050000),
                total_tvl_value=d(1050000),
                organic_share=d("100.00", 2),
            ),
            CollateralReport(
                asset_name="DAI",
                hedge_ratio=None,
                organic_tvl=d(0),
                organic_tvl_value=d(0),
                slp_tvl=d(0),
                slp_tvl_value=d(0),
                total_tvl=d(0),
                total_tvl_value=d(0),
                organic_share=d("0.00", 2),
            ),
        ),
        omissions=(
            Omission(OmissionScope.RATIO, "DAI hedge ratio", "stock_user is zero"),
        ),
    )


def test_format_number_uses_thousands_separators():
    assert format_number(d(1234567)) == "1,234,567"
    assert format_number(d("1234.5", 2)) == "1,234.50"
    assert format_number(None) == "undefined"


def test_portfolio_text(portfolio):
    text = format_portfolio_text(portfolio)

    assert text.splitlines()[:11] == [
        "Daily agEUR Report",
        "-----------",
        "Total agEUR minted: 1,000,000 ($1,050,000)",
        "Total collateralization ratio: 1.00",
        "Organic collateralization ratio: 0.76",
        "-----------",
        "Asset – USDC",
        "Percentage of volatility hedged: 90.00%",
        "Percentage of organic TVL: 100.00%",
        "Organic TVL: 800,000 ($800,000)",
        "Total TVL: 1,050,000 ($1,050,000)",
    ]
    assert "Percentage of volatility hedged: undefined" in text
    assert text.endswith("Omitted – DAI hedge ratio: stock_user is zero")


def test_portfolio_text_round_trips(portfolio):
    parsed = parse_report_text(format_portfolio_text(portfolio))

    assert parsed["title"] == "Daily agEUR Report"
    assert parsed["total_minted"] == portfolio.total_minted.rescale(2).to_decimal()
    assert parsed["total_minted_value"] == Decimal("1050000")
    assert parsed["organic_collateralization_ratio"] == Decimal("0.76")
    assert parsed["total_collateralization_ratio"] == Decimal("1.00")

    usdc = parsed["assets"]["USDC"]
    assert usdc == {
        "hedge_ratio": Decimal("90.00"),
        "organic_share": Decimal("100.00"),
        "organic_tvl": Decimal("800000"),
        "organic_tvl_value": Decimal("800000"),
        "total_tvl": Decimal("1050000"),
        "total_tvl_value": Decimal("1050000"),
    }
    assert parsed["assets"]["DAI"]["hedge_ratio"] is None
    assert parsed["omissions"] == [("DAI hedge ratio", "stock_user is zero")]


@pytest.fixture
def vault() -> VaultReport:
    return VaultReport(
        vault_name="Yield Vault",
        position_reports=(
            PositionReport(
                asset_name="USDC",
                direct=d(1000),
                primary_pool=d(200),
                manager=d(50),
                venue_shares=(VenueShare("0xpair", d(40)),),
                total=d(1290),
                unit_price=DecimalValue.from_float(1.001),
                total_value=d(1291),
            ),
        ),
        total_value=d(1291),
    )


def test_vault_text_round_trips(vault):
    text = format_vault_text(vault)
    parsed = parse_report_text(text)

    assert text.splitlines()[0] == "Yield Vault Report"
    assert "Unit price: $1.001" in text
    assert parsed["total_value"] == Decimal("1291")
    usdc = parsed["assets"]["USDC"]
    assert usdc["direct"] == Decimal("1000")
    assert usdc["venue:0xpair"] == Decimal("40")
    assert usdc["unit_price"] == Decimal("1.001")
    assert usdc["total"] == Decimal("1290")
    assert usdc["total_value"] == Decimal("1291")


def test_multiline_omission_reason_stays_on_one_line(vault):
    report = dataclasses.replace(
        vault,
        omissions=(
            Omission(
                OmissionScope.VENUE,
                "USDC venue 0xpair",
                "call reverted\n  at block 123",
            ),
        ),
    )

    parsed = parse_report_text(format_vault_text(report))

    assert parsed["omissions"] == [("USDC venue 0xpair", "call reverted at block 123")]


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        parse_report_text("Daily agEUR Report\nnot a report line")


def test_report_table_renders(portfolio, vault):
    console = Console(record=True, width=160)

    format_report_table(portfolio, console=console)
    format_report_table(vault, console=console)

    output = console.export_text()
    assert "Daily agEUR Report" in output
    assert "USDC" in output
    assert "Yield Vault Report" in output
    assert "DAI hedge ratio" in output
