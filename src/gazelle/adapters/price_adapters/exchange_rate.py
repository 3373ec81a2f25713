from __future__ import annotations

import logging

from ...errors import MalformedNumber, MissingField, UpstreamUnavailable
from ...settings import GazelleSettings
from ...units import DecimalValue
from ..http import request_json
from .base import BaseRateAdapter

logger = logging.getLogger(__name__)


class ExchangeRateAdapter(BaseRateAdapter):
    """Adapter for the apilayer exchange-rates conversion endpoint."""

    def __init__(self, config: GazelleSettings):
        super().__init__(config)
        self.url = config.exchange_rate_url
        self.api_key = (
            config.exchange_rate_api_key.get_secret_value()
            if config.exchange_rate_api_key
            else None
        )

    @property
    def adapter_name(self) -> str:
        return "exchange_rate"

    async def fetch_eur_usd_rate(self) -> DecimalValue:
        """Convert 1 EUR to USD, fixed to 3 decimals.

        Raises:
            MissingField: If the response carries no result
            MalformedNumber: If the rate is not a positive number
            UpstreamUnavailable: On transport failure or an unsuccessful conversion
        """
        headers = {"apikey": self.api_key} if self.api_key else {}
        body = await request_json(
            "GET",
            self.url,
            source=self.adapter_name,
            max_tries=self.config.http_max_tries,
            timeout=self.config.http_timeout,
            headers=headers,
        )

        if not isinstance(body, dict):
            raise MissingField("result")
        if body.get("success") is False:
            raise UpstreamUnavailable(self.adapter_name, str(body.get("error", body)))
        if body.get("result") is None:
            raise MissingField("result")

        rate = DecimalValue.from_float(body["result"])
        if rate.is_negative() or rate.is_zero():
            raise MalformedNumber(body["result"], "result")

        logger.debug("EUR/USD exchange rate: %s", rate)
        return rate
