from __future__ import annotations

import logging
from typing import Any

from ...constants import STABLECOIN_DATA_QUERY
from ...errors import UpstreamUnavailable
from ...settings import GazelleSettings
from ..http import request_json
from .base import BaseDataAdapter

logger = logging.getLogger(__name__)


class SubgraphAdapter(BaseDataAdapter):
    """Reads stablecoin and collateral records from a GraphQL subgraph."""

    def __init__(self, config: GazelleSettings, query: str = STABLECOIN_DATA_QUERY):
        super().__init__(config)
        self.url = config.subgraph_url
        self.query = query

    @property
    def adapter_name(self) -> str:
        return "subgraph"

    async def fetch_stablecoin_data(self) -> dict[str, Any]:
        """POST the stablecoin query and return the response body untouched.

        Field validation happens later, when the body is turned into records.

        Raises:
            UpstreamUnavailable: On transport failure or GraphQL errors
        """
        body = await request_json(
            "POST",
            self.url,
            source=self.adapter_name,
            max_tries=self.config.http_max_tries,
            timeout=self.config.http_timeout,
            json={"query": self.query},
        )

        if not isinstance(body, dict):
            raise UpstreamUnavailable(self.adapter_name, f"unexpected response: {body!r}")

        errors = body.get("errors")
        if errors:
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            raise UpstreamUnavailable(self.adapter_name, messages)

        logger.debug("Subgraph returned %s", body)
        return body
