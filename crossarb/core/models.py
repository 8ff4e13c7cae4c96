"""Core data models for market listings, matches and arbitrage results.

Everything here is immutable and rebuilt from scratch on every scan cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Literal, Mapping, Optional

Category = Literal["crypto", "politics", "sports", "finance", "other"]
Strategy = Literal["BUY_YES_A_NO_B", "BUY_NO_A_YES_B"]

BUY_YES_A_NO_B: Strategy = "BUY_YES_A_NO_B"
BUY_NO_A_YES_B: Strategy = "BUY_NO_A_YES_B"


@dataclass(frozen=True)
class MarketListing:
    exchange: str
    source_id: str
    title: str
    category: Category
    yes_price: float  # probability in [0, 1]
    no_price: float  # priced independently; yes + no need not be 1
    volume: float = 0.0  # display only
    url: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class MatchResult:
    is_match: bool
    confidence: float
    common_keywords: FrozenSet[str] = frozenset()


NO_MATCH = MatchResult(is_match=False, confidence=0.0)


@dataclass(frozen=True)
class MatchCandidate:
    listing_a: MarketListing
    listing_b: MarketListing
    confidence: float
    matched_keywords: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class ArbitrageResult:
    """Best complementary-leg trade for a matched pair.

    ``margin_fraction`` is ``1 - (cost of both legs)``; the price deltas are in
    percentage points (``(a - b) * 100``) for display.
    """

    strategy: Strategy
    margin_fraction: float
    price_delta_yes: float
    price_delta_no: float
    listing_a: Optional[MarketListing] = None
    listing_b: Optional[MarketListing] = None
    confidence: float = 0.0
    commentary: Optional[str] = None
