from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from crossarb.config.constants import MAX_DISPLAY_TITLE
from crossarb.core.arb import describe_strategy
from crossarb.core.models import ArbitrageResult
from crossarb.utils.links import market_url


def _dedupe_key(result: ArbitrageResult) -> str:
    title = result.listing_a.title if result.listing_a else ""
    return title.lower().strip()


def aggregate(results: Iterable[Optional[ArbitrageResult]]) -> List[ArbitrageResult]:
    """Drop empty slots, keep the first result per side-A title, best margin first.

    The sort is stable, so equal margins keep their input order.
    """
    seen = set()
    kept: List[ArbitrageResult] = []
    for result in results:
        if result is None:
            continue
        key = _dedupe_key(result)
        if key in seen:
            continue
        seen.add(key)
        kept.append(result)
    kept.sort(key=lambda r: r.margin_fraction, reverse=True)
    return kept


def _short(title: str) -> str:
    return title if len(title) <= MAX_DISPLAY_TITLE else title[: MAX_DISPLAY_TITLE - 3] + "..."


def opportunity_rows(results: Iterable[ArbitrageResult]) -> List[Dict[str, object]]:
    """Flatten results into display rows for tables and logs."""
    rows: List[Dict[str, object]] = []
    for r in results:
        a, b = r.listing_a, r.listing_b
        rows.append(
            {
                "event A": _short(a.title) if a else "",
                "event B": _short(b.title) if b else "",
                "category": a.category if a else "",
                "margin %": round(r.margin_fraction * 100.0, 2),
                "strategy": describe_strategy(r),
                "A yes/no": f"{a.yes_price:.2f}/{a.no_price:.2f}" if a else "",
                "B yes/no": f"{b.yes_price:.2f}/{b.no_price:.2f}" if b else "",
                "delta yes (pp)": round(r.price_delta_yes, 2),
                "delta no (pp)": round(r.price_delta_no, 2),
                "confidence": round(r.confidence, 3),
                "volume A": a.volume if a else 0.0,
                "volume B": b.volume if b else 0.0,
                "link A": (a.url or market_url(a.exchange, a.source_id)) if a else None,
                "link B": (b.url or market_url(b.exchange, b.source_id)) if b else None,
                "commentary": r.commentary or "",
            }
        )
    return rows
