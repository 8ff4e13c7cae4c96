from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class MarketSource(ABC):
    """Supplies one platform's raw market payloads for a scan cycle."""

    name: str

    @abstractmethod
    async def fetch_markets(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def close(self) -> None:
        return None
