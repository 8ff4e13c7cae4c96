from __future__ import annotations

import json
import random
from typing import Any, Dict, List, Optional

from crossarb.connectors.base import MarketSource


# (id, question, yes, no, volume24hr)
POLYMARKET_MARKETS = [
    ("pm-btc-100k", "Will Bitcoin reach $100,000 by end of 2025?", 0.40, 0.60, 182_000.0),
    ("pm-fed-dec", "Will the Fed cut rates in December 2025?", 0.62, 0.38, 95_500.0),
    ("pm-lakers", "Will the Lakers win the 2026 NBA Championship?", 0.08, 0.92, 12_300.0),
    ("pm-eth-5k", "Will Ethereum reach $5k in 2025?", 0.22, 0.78, 40_100.0),
]

# (ticker, title, yes_ask cents, no_ask cents, dollar volume)
KALSHI_MARKETS = [
    ("KXBTC-25-100K", "Will Bitcoin hit $100k in 2025?", 55, 45, 51_000),
    ("KXFED-25DEC-CUT", "Fed cuts rates in December 2025?", 58, 44, 77_000),
    ("KXNBA-26-LAL", "Lakers win the 2026 NBA Championship?", 9, 92, 8_000),
    ("KXSENATE-26-D", "Will Democrats win the Senate in 2026?", 47, 55, 20_000),
]


def _jitter(rng: Optional[random.Random], price: float) -> float:
    if rng is None:
        return price
    return max(0.01, min(0.99, round(price + rng.uniform(-0.02, 0.02), 2)))


def polymarket_payload(seed: Optional[int] = None) -> List[Dict[str, Any]]:
    rng = random.Random(seed) if seed is not None else None
    markets: List[Dict[str, Any]] = []
    for market_id, question, yes, no, volume in POLYMARKET_MARKETS:
        markets.append(
            {
                "id": market_id,
                "question": question,
                "slug": market_id,
                "outcomes": json.dumps(["Yes", "No"]),
                "outcomePrices": json.dumps([f"{_jitter(rng, yes):.2f}", f"{_jitter(rng, no):.2f}"]),
                "volume24hr": volume,
                "active": True,
                "closed": False,
            }
        )
    # Categorical market; the normalizer must skip it
    markets.append(
        {
            "id": "pm-superbowl-winner",
            "question": "Super Bowl LX winner",
            "outcomes": json.dumps(["Chiefs", "Eagles"]),
            "outcomePrices": json.dumps(["0.55", "0.45"]),
            "volume24hr": 1_000.0,
        }
    )
    return markets


def kalshi_payload(seed: Optional[int] = None) -> List[Dict[str, Any]]:
    rng = random.Random(seed + 1) if seed is not None else None
    markets: List[Dict[str, Any]] = []
    for ticker, title, yes_cents, no_cents, volume in KALSHI_MARKETS:
        markets.append(
            {
                "ticker": ticker,
                "title": title,
                "yes_ask": int(round(_jitter(rng, yes_cents / 100) * 100)),
                "no_ask": int(round(_jitter(rng, no_cents / 100) * 100)),
                "dollar_recent_volume": volume,
                "status": "open",
            }
        )
    # No quote on either side; the normalizer must skip it
    markets.append({"ticker": "KXEMPTY", "title": "Will the S&P 500 close above 7000 in 2025?", "yes_ask": 0})
    return markets


class DemoSource(MarketSource):
    """Offline source backed by the fixed payloads above."""

    def __init__(self, name: str, seed: Optional[int] = None):
        if name not in {"polymarket", "kalshi"}:
            raise ValueError(f"Unknown demo source {name!r}")
        self.name = name
        self.seed = seed

    async def fetch_markets(self) -> List[Dict[str, Any]]:
        if self.name == "polymarket":
            return polymarket_payload(self.seed)
        return kalshi_payload(self.seed)
