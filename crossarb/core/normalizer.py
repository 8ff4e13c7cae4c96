"""Turn raw provider payloads into uniform ``MarketListing`` records.

Polymarket (Gamma API) quotes outcome prices as fractions inside JSON-encoded
string arrays; Kalshi quotes integer cents, sometimes with ``*_dollars``
string fields alongside. Both end up as probabilities in [0, 1].
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from crossarb.core.categories import classify
from crossarb.core.models import MarketListing
from crossarb.utils.links import kalshi_market_url, polymarket_market_url
from crossarb.utils.logging import get_logger
from crossarb.utils.validation import (
    InvalidPriceError,
    MatchingError,
    ValidationError,
    validate_price,
    validate_title,
    validate_volume,
)


logger = get_logger("normalizer")


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value.strip():
        try:
            parsed = json.loads(value)
        except ValueError:
            return [s.strip().strip('"') for s in value.strip("[]").split(",") if s.strip()]
        if isinstance(parsed, list):
            return parsed
    return []


def _to_float(value: Any, label: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidPriceError(f"{label} is not a number: {value!r}") from exc


def _first_present(market: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = market.get(key)
        if value not in (None, ""):
            return value
    return None


def _yes_no_index(outcomes: List[Any]) -> tuple[int, int]:
    # Gamma lists ["Yes", "No"]; trust the labels over the position when present
    if not outcomes:
        return 0, 1
    labels = [str(o).strip().lower() for o in outcomes]
    if len(labels) != 2 or set(labels) != {"yes", "no"}:
        raise InvalidPriceError(f"not a Yes/No market: outcomes={outcomes!r}")
    return labels.index("yes"), labels.index("no")


def normalize_polymarket_market(market: Mapping[str, Any]) -> MarketListing:
    title = validate_title(_first_present(market, "question", "title") or "", "question")
    if not title.strip():
        raise MatchingError("market has no question")

    prices = _as_list(market.get("outcomePrices"))
    if len(prices) != 2:
        raise InvalidPriceError(f"expected two outcome prices, got {len(prices)}")
    yes_idx, no_idx = _yes_no_index(_as_list(market.get("outcomes")))
    yes_price = validate_price(_to_float(prices[yes_idx], "yes price"), "yes price")
    no_price = validate_price(_to_float(prices[no_idx], "no price"), "no price")

    market_id = str(_first_present(market, "id", "conditionId", "slug") or "")
    slug = _first_present(market, "eventSlug", "slug")
    return MarketListing(
        exchange="polymarket",
        source_id=market_id,
        title=title,
        category=classify(title),
        yes_price=yes_price,
        no_price=no_price,
        volume=validate_volume(_first_present(market, "volume24hr", "volumeNum", "volume")),
        url=polymarket_market_url(market_id, slug),
        raw=dict(market),
    )


def _kalshi_price(market: Mapping[str, Any], dollar_keys: Iterable[str], cent_keys: Iterable[str]) -> Optional[float]:
    # Prefer dollar fields (already 0-1); fall back to integer cents. Zero means no quote.
    for key in dollar_keys:
        value = market.get(key)
        if value not in (None, ""):
            price = _to_float(value, key)
            if price:
                return price
    for key in cent_keys:
        value = market.get(key)
        if value not in (None, ""):
            price = _to_float(value, key) / 100.0
            if price:
                return price
    return None


def normalize_kalshi_market(market: Mapping[str, Any]) -> MarketListing:
    title = validate_title(_first_present(market, "title", "subtitle", "ticker") or "", "title")
    if not title.strip():
        raise MatchingError("market has no title")

    yes_price = _kalshi_price(market, ("yes_ask_dollars", "yes_bid_dollars"), ("yes_ask", "yes_bid", "last_price"))
    if yes_price is None:
        raise InvalidPriceError("no resolvable yes price")
    yes_price = validate_price(yes_price, "yes price")

    no_price = _kalshi_price(market, ("no_ask_dollars",), ("no_ask",))
    if no_price is None:
        no_price = round(1.0 - yes_price, 4)
    no_price = validate_price(no_price, "no price")

    ticker = str(_first_present(market, "ticker", "ticker_name", "id") or "")
    return MarketListing(
        exchange="kalshi",
        source_id=ticker,
        title=title,
        category=classify(title),
        yes_price=yes_price,
        no_price=no_price,
        volume=validate_volume(_first_present(market, "dollar_recent_volume", "volume_24h", "volume")),
        url=kalshi_market_url(ticker) if ticker else None,
        raw=dict(market),
    )


NORMALIZERS: Dict[str, Callable[[Mapping[str, Any]], MarketListing]] = {
    "polymarket": normalize_polymarket_market,
    "kalshi": normalize_kalshi_market,
}


def normalize_listings(raw_markets: Iterable[Mapping[str, Any]], exchange: str) -> List[MarketListing]:
    """Normalize a batch; malformed listings are logged and skipped."""
    try:
        normalize = NORMALIZERS[exchange]
    except KeyError:
        raise ValueError(f"Unknown exchange {exchange!r}") from None

    listings: List[MarketListing] = []
    skipped = 0
    for market in raw_markets or ():
        if not isinstance(market, Mapping):
            skipped += 1
            continue
        try:
            listings.append(normalize(market))
        except ValidationError as exc:
            skipped += 1
            logger.debug("Skipping %s market %s: %s", exchange, market.get("id") or market.get("ticker"), exc)
    logger.info("Normalized %s listings: kept=%d, skipped=%d", exchange, len(listings), skipped)
    return listings
