"""Shared HTTP plumbing for the collaborator adapters."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import backoff
import requests

from ..constants import RETRYABLE_STATUS_CODES
from ..errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


def _is_permanent(e: Exception) -> bool:
    return (
        isinstance(e, requests.exceptions.HTTPError)
        and e.response is not None
        and e.response.status_code not in RETRYABLE_STATUS_CODES
    )


async def request_json(
    method: str,
    url: str,
    *,
    source: str,
    max_tries: int = 5,
    timeout: float = 10.0,
    **kwargs: Any,
) -> Any:
    """Send a request with retries and return the decoded JSON body.

    Raises:
        UpstreamUnavailable: If retries are exhausted, the status is not
            retryable, or the body is not JSON
    """

    def _on_backoff(details: Any) -> None:
        logger.warning(
            "%s request failed (attempt %d of %d): %s",
            source,
            details["tries"],
            max_tries,
            details.get("exception"),
        )

    @backoff.on_exception(
        backoff.expo,
        requests.exceptions.RequestException,
        max_tries=max_tries,
        giveup=_is_permanent,
        jitter=backoff.full_jitter,
        on_backoff=_on_backoff,
    )
    async def _send() -> requests.Response:
        logger.debug("%s %s", method, url)
        response = await asyncio.to_thread(
            requests.request, method, url, timeout=timeout, **kwargs
        )
        response.raise_for_status()
        return response

    try:
        response = await _send()
    except requests.exceptions.RequestException as e:
        raise UpstreamUnavailable(source, str(e)) from e

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamUnavailable(source, "invalid JSON response") from e
