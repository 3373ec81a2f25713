"""Plain-text and rich console renderings of a report."""

from __future__ import annotations

import re
from decimal import Decimal

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from ..constants import REPORT_DIVIDER
from ..domain import Omission, PortfolioReport, VaultReport
from ..units import ZERO, DecimalValue

UNDEFINED = "undefined"
ASSET_PREFIX = "Asset – "
OMISSION_PREFIX = "Omitted – "


def format_number(value: DecimalValue | None) -> str:
    """Render a value at its display scale with comma thousands separators."""
    if value is None:
        return UNDEFINED
    return f"{value.to_decimal():,}"


def _money(value: DecimalValue | None) -> str:
    return UNDEFINED if value is None else f"${format_number(value)}"


def _percent(value: DecimalValue | None) -> str:
    return UNDEFINED if value is None else f"{format_number(value)}%"


def _amount_line(label: str, amount: DecimalValue, value: DecimalValue) -> str:
    return f"{label}: {format_number(amount)} ({_money(value)})"


def _one_line(text: str) -> str:
    return " ".join(text.split())


def _omission_lines(omissions: tuple[Omission, ...]) -> list[str]:
    if not omissions:
        return []
    return [
        REPORT_DIVIDER,
        *(
            f"{OMISSION_PREFIX}{_one_line(o.subject)}: {_one_line(o.reason)}"
            for o in omissions
        ),
    ]


def format_portfolio_text(report: PortfolioReport) -> str:
    """Render the daily stablecoin report message."""
    lines = [
        f"Daily {report.stable_name} Report",
        REPORT_DIVIDER,
        _amount_line(
            f"Total {report.stable_name} minted",
            report.total_minted,
            report.total_minted_value,
        ),
        f"Total collateralization ratio: {format_number(report.total_collateralization_ratio)}",
        f"Organic collateralization ratio: {format_number(report.organic_collateralization_ratio)}",
    ]
    for collateral in report.collateral_reports:
        lines.extend(
            [
                REPORT_DIVIDER,
                f"{ASSET_PREFIX}{collateral.asset_name}",
                f"Percentage of volatility hedged: {_percent(collateral.hedge_ratio)}",
                f"Percentage of organic TVL: {_percent(collateral.organic_share)}",
                _amount_line(
                    "Organic TVL", collateral.organic_tvl, collateral.organic_tvl_value
                ),
                _amount_line(
                    "Total TVL", collateral.total_tvl, collateral.total_tvl_value
                ),
            ]
        )
    lines.extend(_omission_lines(report.omissions))
    return "\n".join(lines)


def format_vault_text(report: VaultReport) -> str:
    """Render the vault holdings message."""
    lines = [
        f"{report.vault_name} Report",
        REPORT_DIVIDER,
        f"Total value: {_money(report.total_value)}",
    ]
    for position in report.position_reports:
        lines.extend(
            [
                REPORT_DIVIDER,
                f"{ASSET_PREFIX}{position.asset_name}",
                f"Direct: {format_number(position.direct)}",
                f"Primary pool: {format_number(position.primary_pool)}",
                f"Manager: {format_number(position.manager)}",
                *(
                    f"Venue {share.venue}: {format_number(share.amount)}"
                    for share in position.venue_shares
                ),
                f"Unit price: {_money(position.unit_price)}",
                _amount_line("Total", position.total, position.total_value),
            ]
        )
    lines.extend(_omission_lines(report.omissions))
    return "\n".join(lines)


def format_report_text(report: PortfolioReport | VaultReport) -> str:
    if isinstance(report, VaultReport):
        return format_vault_text(report)
    return format_portfolio_text(report)


_LABEL_KEYS = {
    "Total collateralization ratio": "total_collateralization_ratio",
    "Organic collateralization ratio": "organic_collateralization_ratio",
    "Percentage of volatility hedged": "hedge_ratio",
    "Percentage of organic TVL": "organic_share",
    "Organic TVL": "organic_tvl",
    "Total TVL": "total_tvl",
    "Total value": "total_value",
    "Direct": "direct",
    "Primary pool": "primary_pool",
    "Manager": "manager",
    "Unit price": "unit_price",
    "Total": "total",
}
_MINTED_LABEL = re.compile(r"^Total (?P<stable>.+) minted$")
_NUMBER = r"-?[\d,]+(?:\.\d+)?"
_VALUE = re.compile(
    rf"^(?:(?P<undefined>{UNDEFINED})"
    rf"|\$?(?P<number>{_NUMBER})%?(?: \(\$?(?P<usd>{_NUMBER}|{UNDEFINED})\))?)$"
)


def _parse_number(text: str | None) -> Decimal | None:
    if text is None or text == UNDEFINED:
        return None
    return Decimal(text.replace(",", ""))


def _label_key(label: str) -> str:
    if label in _LABEL_KEYS:
        return _LABEL_KEYS[label]
    if _MINTED_LABEL.match(label):
        return "total_minted"
    if label.startswith("Venue "):
        return f"venue:{label[len('Venue '):]}"
    return re.sub(r"\W+", "_", label.strip().lower())


def parse_report_text(text: str) -> dict:
    """Recover the numeric fields of a rendered report.

    Returns a dict with the header fields at the top level, an ``assets``
    mapping of per-asset fields keyed by symbol and an ``omissions`` list of
    ``(subject, reason)`` pairs. Undefined values come back as None and
    ``$`` values get a ``_value`` suffix on their key.
    """
    lines = text.splitlines()
    parsed: dict = {"title": lines[0] if lines else "", "assets": {}, "omissions": []}
    section = parsed

    for line in lines[1:]:
        if not line or line == REPORT_DIVIDER:
            continue
        if line.startswith(ASSET_PREFIX):
            section = parsed["assets"].setdefault(line[len(ASSET_PREFIX):], {})
            continue
        if line.startswith(OMISSION_PREFIX):
            subject, _, reason = line[len(OMISSION_PREFIX):].partition(": ")
            parsed["omissions"].append((subject, reason))
            continue

        label, sep, raw_value = line.partition(": ")
        match = _VALUE.match(raw_value) if sep else None
        if match is None:
            raise ValueError(f"Unrecognized report line: {line!r}")

        key = _label_key(label)
        if match.group("undefined"):
            section[key] = None
            continue
        section[key] = _parse_number(match.group("number"))
        if match.group("usd") is not None:
            section[f"{key}_value"] = _parse_number(match.group("usd"))

    return parsed


def _portfolio_panel(report: PortfolioReport) -> Panel:
    summary = Table(show_header=False, box=None, padding=(0, 1))
    summary.add_column("Key", style="dim")
    summary.add_column("Value", style="green")
    summary.add_row(
        f"Total {report.stable_name} minted",
        f"{format_number(report.total_minted)} ({_money(report.total_minted_value)})",
    )
    summary.add_row("Organic TVL", _money(report.organic_tvl))
    summary.add_row("Total TVL", _money(report.total_tvl))
    summary.add_row(
        "Total collateralization", format_number(report.total_collateralization_ratio)
    )
    summary.add_row(
        "Organic collateralization",
        format_number(report.organic_collateralization_ratio),
    )

    assets = Table(expand=True, show_lines=False)
    assets.add_column("Asset", style="cyan", no_wrap=True)
    assets.add_column("Hedged", justify="right", style="yellow")
    assets.add_column("Organic share", justify="right", style="yellow")
    assets.add_column("Organic TVL", justify="right")
    assets.add_column("Total TVL", justify="right")
    assets.add_column("Total value", justify="right", style="green")
    for c in report.collateral_reports:
        assets.add_row(
            c.asset_name,
            _percent(c.hedge_ratio),
            _percent(c.organic_share),
            format_number(c.organic_tvl),
            format_number(c.total_tvl),
            _money(c.total_tvl_value),
        )

    return Panel(
        Group(
            Panel(summary, title="[bold]Summary[/]", border_style="green"),
            "",
            Panel(assets, title="[bold]Collateral Breakdown[/]", border_style="cyan"),
        ),
        title=f"[bold white]Daily {report.stable_name} Report[/]",
        border_style="white",
        padding=(1, 2),
    )


def _vault_panel(report: VaultReport) -> Panel:
    positions = Table(expand=True, show_lines=False)
    positions.add_column("Asset", style="cyan", no_wrap=True)
    positions.add_column("Direct", justify="right", style="dim")
    positions.add_column("Primary pool", justify="right", style="dim")
    positions.add_column("Manager", justify="right", style="dim")
    positions.add_column("Venues", justify="right", style="dim")
    positions.add_column("Total", justify="right")
    positions.add_column("Price", justify="right", style="yellow")
    positions.add_column("Value", justify="right", style="green")
    for p in report.position_reports:
        venues = ZERO
        for share in p.venue_shares:
            venues = venues + share.amount
        positions.add_row(
            p.asset_name,
            format_number(p.direct),
            format_number(p.primary_pool),
            format_number(p.manager),
            format_number(venues),
            format_number(p.total),
            _money(p.unit_price),
            _money(p.total_value),
        )
    positions.add_row(
        "[bold]TOTAL[/]", "", "", "", "", "", "", f"[bold]{_money(report.total_value)}[/]"
    )

    return Panel(
        positions,
        title=f"[bold white]{report.vault_name} Report[/]",
        border_style="white",
        padding=(1, 2),
    )


def format_report_table(
    report: PortfolioReport | VaultReport, console: Console | None = None
) -> None:
    """Print a rich dashboard of the report to stdout."""
    console = console or Console()
    panel = (
        _vault_panel(report)
        if isinstance(report, VaultReport)
        else _portfolio_panel(report)
    )

    console.print()
    console.print(panel)
    if report.omissions:
        omitted = Table(show_header=True, box=None, padding=(0, 1))
        omitted.add_column("Scope", style="dim")
        omitted.add_column("Subject", style="yellow")
        omitted.add_column("Reason")
        for o in report.omissions:
            omitted.add_row(o.scope.value, o.subject, o.reason)
        console.print(Panel(omitted, title="[bold]Omitted[/]", border_style="red"))
    console.print()
