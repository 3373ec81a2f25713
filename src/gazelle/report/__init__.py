from __future__ import annotations

from .formatter import (
    format_number,
    format_portfolio_text,
    format_report_table,
    format_report_text,
    format_vault_text,
    parse_report_text,
)
from .publisher import TelegramPublisher, publish_report, publish_to_stdout, split_message

__all__ = [
    "TelegramPublisher",
    "format_number",
    "format_portfolio_text",
    "format_report_table",
    "format_report_text",
    "format_vault_text",
    "parse_report_text",
    "publish_report",
    "publish_to_stdout",
    "split_message",
]
