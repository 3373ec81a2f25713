from __future__ import annotations

import pytest

from gazelle.adapters.data_adapters.subgraph import SubgraphAdapter
from gazelle.constants import STABLECOIN_DATA_QUERY
from gazelle.errors import UpstreamUnavailable


@pytest.mark.asyncio
async def test_fetch_stablecoin_data(config, mock_request, make_response):
    body = {"data": {"stableDatas": [{"name": "agEUR", "collaterals": []}]}}
    mock_request.return_value = make_response(body)

    result = await SubgraphAdapter(config).fetch_stablecoin_data()

    assert result == body
    args, kwargs = mock_request.call_args
    assert args == ("POST", config.subgraph_url)
    assert kwargs["json"] == {"query": STABLECOIN_DATA_QUERY}


@pytest.mark.asyncio
async def test_graphql_errors(config, mock_request, make_response):
    mock_request.return_value = make_response(
        {"errors": [{"message": "indexing error"}]}
    )

    with pytest.raises(UpstreamUnavailable, match="indexing error"):
        await SubgraphAdapter(config).fetch_stablecoin_data()


@pytest.mark.asyncio
async def test_non_object_body(config, mock_request, make_response):
    mock_request.return_value = make_response(["unexpected"])

    with pytest.raises(UpstreamUnavailable):
        await SubgraphAdapter(config).fetch_stablecoin_data()
