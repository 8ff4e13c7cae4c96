from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from crossarb.config.constants import API_MAX_RETRIES
from crossarb.config.settings import SourceSettings
from crossarb.connectors.base import MarketSource
from crossarb.utils.logging import get_logger
from crossarb.utils.retry import retry_with_backoff


logger = get_logger("polymarket")


def _is_live(m: Dict[str, Any]) -> bool:
    # Treat missing fields as unknown/okay; only exclude explicit negatives
    if bool(m.get("archived")):
        return False
    if m.get("closed") is True:
        return False
    if m.get("active") is False:
        return False
    return True


def flatten_events(events: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Pull the markets out of Gamma ``/events`` rows, tagging each with its event slug."""
    markets: List[Dict[str, Any]] = []
    for event in events:
        if not isinstance(event, dict):
            continue
        for market in event.get("markets") or []:
            if not isinstance(market, dict) or not _is_live(market):
                continue
            item = dict(market)
            if event.get("slug"):
                item.setdefault("eventSlug", event["slug"])
            markets.append(item)
    return markets


class PolymarketSource(MarketSource):
    name = "polymarket"

    def __init__(self, config: Optional[SourceSettings] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or SourceSettings()
        self._client = client or httpx.AsyncClient(
            timeout=self.config.timeout,
            headers={"accept": "application/json", "origin": "https://polymarket.com"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_page(self, offset: int) -> List[Dict[str, Any]]:
        params = {
            "limit": self.config.page_limit,
            "offset": offset,
            "active": "true",
            "archived": "false",
            "closed": "false",
            "order": "volume24hr",
            "ascending": "false",
        }

        async def _call() -> Any:
            resp = await self._client.get(self.config.polymarket_url, params=params)
            resp.raise_for_status()
            return resp.json()

        data = await retry_with_backoff(_call, max_retries=API_MAX_RETRIES)
        if isinstance(data, dict):
            for key in ("events", "data", "result"):
                if isinstance(data.get(key), list):
                    return list(data[key])
            return []
        return data if isinstance(data, list) else []

    async def fetch_markets(self) -> List[Dict[str, Any]]:
        """Fetch active binary markets from the Gamma events endpoint (read-only)."""
        events: List[Dict[str, Any]] = []
        offset = 0
        for _ in range(self.config.max_pages):
            batch = await self._get_page(offset)
            if not batch:
                break
            events.extend(batch)
            if len(batch) < self.config.page_limit:
                break
            offset += len(batch)

        markets = flatten_events(events)
        logger.info("Polymarket fetched: events=%d, markets=%d", len(events), len(markets))
        return markets
