from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ...settings import GazelleSettings


class BaseDataAdapter(ABC):
    """Abstract base class for indexed-data sources."""

    def __init__(self, config: GazelleSettings):
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_stablecoin_data(self) -> dict[str, Any]:
        """Fetch the raw stablecoin and collateral records."""
        ...
