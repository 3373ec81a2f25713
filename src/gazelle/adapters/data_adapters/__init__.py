from __future__ import annotations

from .base import BaseDataAdapter
from .subgraph import SubgraphAdapter

__all__ = ["BaseDataAdapter", "SubgraphAdapter"]
