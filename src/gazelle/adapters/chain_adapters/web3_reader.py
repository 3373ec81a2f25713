from __future__ import annotations

import asyncio
import random

import backoff
from requests import RequestException
from web3 import Web3
from web3.exceptions import ProviderConnectionError, Web3Exception

from ...abi import load_erc20_abi, load_stable_swap_pool_abi, load_strategy_abi
from ...errors import UpstreamUnavailable
from ...logger import TRACE, get_logger
from ...settings import GazelleSettings
from .base import BaseChainReader

logger = get_logger(__name__)


class Web3ChainReader(BaseChainReader):
    """Chain reader backed by a web3 HTTP provider."""

    def __init__(self, config: GazelleSettings, w3: Web3 | None = None):
        super().__init__(config)
        self.w3 = w3 or Web3(
            Web3.HTTPProvider(
                config.rpc_url_required,
                request_kwargs={"timeout": config.http_timeout},
            )
        )
        self.block_identifier = (
            config.block_number if config.block_number is not None else "latest"
        )
        self._decimals: dict[str, int] = {}

        self._rpc_sem = asyncio.Semaphore(config.rpc_max_concurrent_calls)
        self._rpc_delay = config.rpc_delay
        self._rpc_jitter = config.rpc_jitter

    @property
    def reader_name(self) -> str:
        return "on-chain reader"

    @backoff.on_exception(
        backoff.expo, (ProviderConnectionError), max_time=30, jitter=backoff.full_jitter
    )
    async def _rpc(self, fn, *args, **kwargs):
        """Throttle + backoff a single RPC."""
        async with self._rpc_sem:
            try:
                return await asyncio.to_thread(fn, *args, **kwargs)
            finally:
                delay = self._rpc_delay + random.random() * self._rpc_jitter
                if delay > 0:
                    await asyncio.sleep(delay)

    def _contract(self, address: str, abi: list[dict]):
        try:
            checksum = self.w3.to_checksum_address(address)
        except (ValueError, TypeError) as e:
            raise UpstreamUnavailable(
                self.reader_name, f"invalid address {address!r}"
            ) from e
        return self.w3.eth.contract(address=checksum, abi=abi)

    async def _call(self, address: str, abi: list[dict], method: str, *args):
        contract = self._contract(address, abi)
        fn = getattr(contract.functions, method)(*args)
        try:
            result = await self._rpc(fn.call, block_identifier=self.block_identifier)
        except (Web3Exception, RequestException, ValueError) as e:
            logger.debug("RPC %s on %s failed: %s", method, address, e)
            raise UpstreamUnavailable(
                self.reader_name, f"{method} on {address} failed: {e}"
            ) from e
        logger.log(TRACE, "RPC %s(%s) on %s -> %s", method, args, address, result)
        return result

    async def balance_of(self, token: str, owner: str) -> int:
        try:
            owner = self.w3.to_checksum_address(owner)
        except (ValueError, TypeError) as e:
            raise UpstreamUnavailable(
                self.reader_name, f"invalid address {owner!r}"
            ) from e
        return int(await self._call(token, load_erc20_abi(), "balanceOf", owner))

    async def total_supply(self, token: str) -> int:
        return int(await self._call(token, load_erc20_abi(), "totalSupply"))

    async def decimals(self, token: str) -> int:
        key = token.lower()
        if key not in self._decimals:
            self._decimals[key] = int(
                await self._call(token, load_erc20_abi(), "decimals")
            )
        return self._decimals[key]

    async def name(self, token: str) -> str:
        return str(await self._call(token, load_erc20_abi(), "name"))

    async def symbol(self, token: str) -> str:
        return str(await self._call(token, load_erc20_abi(), "symbol"))

    async def virtual_price(self, pool: str) -> int:
        return int(
            await self._call(pool, load_stable_swap_pool_abi(), "get_virtual_price")
        )

    async def want_token(self, strategy: str) -> str:
        return str(await self._call(strategy, load_strategy_abi(), "want"))
