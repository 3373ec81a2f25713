from __future__ import annotations

from .base import BaseChainReader
from .web3_reader import Web3ChainReader

__all__ = ["BaseChainReader", "Web3ChainReader"]
