"""Generate links to market pages on the two exchanges."""

from typing import Optional


def polymarket_market_url(market_id: str, slug: Optional[str] = None) -> str:
    """Generate Polymarket market URL.

    Args:
        market_id: Market identifier, used when no slug is known
        slug: Event slug from the Gamma API, preferred when present

    Returns:
        URL to Polymarket market page
    """
    if slug:
        return f"https://polymarket.com/event/{slug}"
    return f"https://polymarket.com/market/{market_id}"


def kalshi_market_url(market_id: str) -> str:
    """Generate Kalshi market URL.

    Args:
        market_id: Market ticker

    Returns:
        URL to Kalshi market page
    """
    clean_id = market_id.replace("kalshi-", "").replace("KALSHI-", "")
    return f"https://kalshi.com/markets/{clean_id.lower()}"


def market_url(exchange: str, market_id: str, slug: Optional[str] = None) -> Optional[str]:
    """Link for any supported exchange, or None when there is nothing to link."""
    if not market_id or market_id == "None":
        return None
    if exchange.lower() == "polymarket":
        return polymarket_market_url(market_id, slug)
    if exchange.lower() == "kalshi":
        return kalshi_market_url(market_id)
    return None
