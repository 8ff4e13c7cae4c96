from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import httpx

from crossarb.config.constants import API_MAX_RETRIES
from crossarb.config.settings import SourceSettings
from crossarb.connectors.base import MarketSource
from crossarb.utils.logging import get_logger
from crossarb.utils.retry import retry_with_backoff


logger = get_logger("kalshi")


def extract_markets(data: Any) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """Return ``(markets, next_cursor)`` from a ``/markets`` or ``/events`` payload."""
    if isinstance(data, list):
        return [m for m in data if isinstance(m, dict)], None
    if not isinstance(data, dict):
        return [], None
    markets = [m for m in data.get("markets") or [] if isinstance(m, dict)]
    # v1 events payloads nest markets one level down
    for event in data.get("events") or []:
        if isinstance(event, dict):
            markets.extend(m for m in event.get("markets") or [] if isinstance(m, dict))
    return markets, data.get("cursor") or None


class KalshiSource(MarketSource):
    name = "kalshi"

    def __init__(self, config: Optional[SourceSettings] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or SourceSettings()
        self.headers = {"accept": "application/json"}
        if self.config.kalshi_bearer:
            self.headers["Authorization"] = f"Bearer {self.config.kalshi_bearer}"
        self._client = client or httpx.AsyncClient(timeout=self.config.timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_markets(self) -> List[Dict[str, Any]]:
        """Fetch open markets, following the cursor for up to ``max_pages`` pages."""
        markets: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        for _ in range(self.config.max_pages):
            params: Dict[str, Any] = {"limit": self.config.page_limit, "status": "open"}
            if cursor:
                params["cursor"] = cursor

            async def _call() -> Any:
                resp = await self._client.get(self.config.kalshi_url, params=params, headers=self.headers)
                resp.raise_for_status()
                return resp.json()

            items, cursor = extract_markets(await retry_with_backoff(_call, max_retries=API_MAX_RETRIES))
            markets.extend(items)
            if not cursor or not items:
                break

        logger.info("Kalshi fetched: markets=%d", len(markets))
        return markets
