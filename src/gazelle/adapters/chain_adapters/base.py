from __future__ import annotations

from abc import ABC, abstractmethod

from ...settings import GazelleSettings


class BaseChainReader(ABC):
    """Read-only view of the contracts a vault position touches.

    Balances and supplies are returned as raw integers; callers normalize
    them with the token's decimals.
    """

    def __init__(self, config: GazelleSettings):
        self.config = config

    @property
    @abstractmethod
    def reader_name(self) -> str:
        ...

    @abstractmethod
    async def balance_of(self, token: str, owner: str) -> int:
        ...

    @abstractmethod
    async def total_supply(self, token: str) -> int:
        ...

    @abstractmethod
    async def decimals(self, token: str) -> int:
        ...

    @abstractmethod
    async def name(self, token: str) -> str:
        ...

    @abstractmethod
    async def symbol(self, token: str) -> str:
        ...

    @abstractmethod
    async def virtual_price(self, pool: str) -> int:
        """Redemption price of one LP token of a stable-swap pool, 18 decimals."""
        ...

    @abstractmethod
    async def want_token(self, strategy: str) -> str:
        """Address of the token a strategy farms."""
        ...
