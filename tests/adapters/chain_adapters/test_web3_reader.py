from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from web3 import Web3

from gazelle.adapters.chain_adapters.web3_reader import Web3ChainReader
from gazelle.errors import UpstreamUnavailable
from gazelle.settings import GazelleSettings

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


@pytest.fixture
def reader() -> Web3ChainReader:
    config = GazelleSettings(rpc_url="http://localhost:8545", rpc_delay=0, rpc_jitter=0)
    return Web3ChainReader(config, w3=Web3(Web3.HTTPProvider(config.rpc_url)))


def test_block_identifier_defaults_to_latest(reader):
    assert reader.block_identifier == "latest"


def test_block_identifier_pinned():
    config = GazelleSettings(rpc_url="http://localhost:8545", block_number=123)
    assert Web3ChainReader(config).block_identifier == 123


def test_rpc_url_required():
    with pytest.raises(ValueError, match="rpc_url"):
        Web3ChainReader(GazelleSettings())


@pytest.mark.asyncio
async def test_malformed_address(reader):
    with pytest.raises(UpstreamUnavailable, match="invalid address"):
        await reader.total_supply("not-an-address")


@pytest.mark.asyncio
async def test_malformed_owner(reader):
    with pytest.raises(UpstreamUnavailable, match="invalid address"):
        await reader.balance_of(USDC, "0x123")


@pytest.mark.asyncio
async def test_decimals_are_cached(reader, monkeypatch):
    call = AsyncMock(return_value=6)
    monkeypatch.setattr(reader, "_call", call)

    assert await reader.decimals(USDC) == 6
    assert await reader.decimals(USDC.lower()) == 6
    call.assert_awaited_once()


@pytest.mark.asyncio
async def test_call_failure_becomes_upstream_unavailable(reader, monkeypatch):
    async def failing_rpc(fn, *args, **kwargs):
        raise ValueError("execution reverted")

    monkeypatch.setattr(reader, "_rpc", failing_rpc)

    with pytest.raises(UpstreamUnavailable, match="totalSupply"):
        await reader.total_supply(USDC)
