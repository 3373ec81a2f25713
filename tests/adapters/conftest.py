from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests

from gazelle.settings import GazelleSettings


def _make_response(body=None, status_code: int = 200) -> Mock:
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = body
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error", response=response
        )
    return response


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def config() -> GazelleSettings:
    return GazelleSettings(
        price_api_key="cmc-key",
        exchange_rate_api_key="fx-key",
        http_max_tries=1,
    )


@pytest.fixture
def mock_request(monkeypatch):
    mock = Mock()
    monkeypatch.setattr(requests, "request", mock)
    return mock
