from __future__ import annotations

import json
import logging

from ..adapters.http import request_json
from ..constants import TELEGRAM_MAX_MESSAGE_LENGTH
from ..domain import PortfolioReport, VaultReport
from ..errors import UpstreamUnavailable
from ..settings import DryRunFormat, GazelleSettings
from .formatter import format_report_table, format_report_text

logger = logging.getLogger(__name__)


def split_message(text: str, limit: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> list[str]:
    """Split a message on line boundaries into chunks of at most ``limit`` characters.

    A single line longer than the limit is hard-wrapped.
    """
    chunks: list[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


class TelegramPublisher:
    """Sends report text to a chat through the Telegram Bot API."""

    def __init__(self, config: GazelleSettings):
        if config.telegram_token is None:
            raise ValueError("telegram_token required to broadcast the report")
        if not config.telegram_chat_id:
            raise ValueError("telegram_chat_id required to broadcast the report")
        self.config = config
        self.chat_id = config.telegram_chat_id
        self._url = (
            f"{config.telegram_api_url.rstrip('/')}"
            f"/bot{config.telegram_token.get_secret_value()}/sendMessage"
        )

    async def publish(self, text: str) -> None:
        """Send ``text``, split into as many messages as needed.

        Raises:
            UpstreamUnavailable: If a message is rejected or cannot be sent
        """
        chunks = split_message(text)
        for index, chunk in enumerate(chunks, start=1):
            body = await request_json(
                "POST",
                self._url,
                source="telegram",
                max_tries=self.config.http_max_tries,
                timeout=self.config.http_timeout,
                json={"chat_id": self.chat_id, "text": chunk},
            )
            if isinstance(body, dict) and body.get("ok") is False:
                raise UpstreamUnavailable(
                    "telegram", str(body.get("description", "message rejected"))
                )
            logger.debug("Sent message part %d of %d", index, len(chunks))


async def publish_to_stdout(
    report: PortfolioReport | VaultReport,
    dry_run_format: DryRunFormat = DryRunFormat.TEXT,
) -> None:
    """Print the report (dry run mode)."""
    if dry_run_format == DryRunFormat.JSON:
        print(json.dumps(report.to_dict(), indent=2))
    elif dry_run_format == DryRunFormat.TABLE:
        format_report_table(report)
    else:
        print(format_report_text(report))


async def publish_report(
    config: GazelleSettings,
    report: PortfolioReport | VaultReport,
    publisher: TelegramPublisher | None = None,
) -> None:
    """Publish the report to the chat channel, or to stdout in dry-run mode.

    Raises:
        UpstreamUnavailable: If the chat channel rejects the message
    """
    if not config.is_broadcast:
        if not config.dry_run:
            logger.warning("telegram_token not set, printing report instead")
        await publish_to_stdout(report, config.dry_run_format)
        return

    publisher = publisher or TelegramPublisher(config)
    await publisher.publish(format_report_text(report))
    logger.info("Report sent to chat %s", publisher.chat_id)
