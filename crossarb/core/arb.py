"""Arbitrage evaluation for matched market pairs.

Given the Yes/No prices of the same event on two platforms, pick the
complementary pair of legs (Yes on one side, No on the other) that costs the
least and report ``1 - cost`` as the margin. A margin is only accepted inside
a strict ``(min_margin, max_margin)`` band; the upper bound is a sanity filter
against mismatched markets, not a trading limit.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional, Sequence

from crossarb.config.constants import MARGIN_PRECISION
from crossarb.config.settings import ArbSettings
from crossarb.core.models import BUY_NO_A_YES_B, BUY_YES_A_NO_B, ArbitrageResult, MatchCandidate
from crossarb.utils.logging import get_logger
from crossarb.utils.validation import InvalidPriceError, validate_legs, validate_price


logger = get_logger("arb")


def compute_margin(yes_price: float, no_price: float) -> float:
    """Profit per unit stake from buying ``yes_price`` on one venue and ``no_price`` on the other.

    Rounded so cent-to-fraction conversion noise (``1 - (0.50 + 0.49)`` is
    ``0.010000000000000009`` in binary floating point) cannot push a margin
    across the acceptance band.
    """
    return round(1.0 - (yes_price + no_price), MARGIN_PRECISION)


def evaluate(
    yes_a: Any,
    no_a: Any,
    yes_b: Any,
    no_b: Any,
    config: Optional[ArbSettings] = None,
) -> Optional[ArbitrageResult]:
    config = config or ArbSettings()
    yes_a = validate_price(yes_a, "yes_a")
    no_a = validate_price(no_a, "no_a")
    yes_b = validate_price(yes_b, "yes_b")
    no_b = validate_price(no_b, "no_b")

    margin1 = compute_margin(yes_a, no_b)  # buy Yes on A, No on B
    margin2 = compute_margin(yes_b, no_a)  # buy No on A, Yes on B
    if margin1 >= margin2:
        best, strategy = margin1, BUY_YES_A_NO_B
    else:
        best, strategy = margin2, BUY_NO_A_YES_B

    if not config.min_margin < best < config.max_margin:
        return None

    return ArbitrageResult(
        strategy=strategy,
        margin_fraction=best,
        price_delta_yes=round((yes_a - yes_b) * 100.0, MARGIN_PRECISION),
        price_delta_no=round((no_a - no_b) * 100.0, MARGIN_PRECISION),
    )


def evaluate_legs(
    prices_a: Sequence[Any],
    prices_b: Sequence[Any],
    config: Optional[ArbSettings] = None,
) -> Optional[ArbitrageResult]:
    """Evaluate two ``(yes, no)`` price pairs; each must have exactly two legs."""
    yes_a, no_a = validate_legs(prices_a, "prices_a")
    yes_b, no_b = validate_legs(prices_b, "prices_b")
    return evaluate(yes_a, no_a, yes_b, no_b, config)


def evaluate_candidate(candidate: MatchCandidate, config: Optional[ArbSettings] = None) -> Optional[ArbitrageResult]:
    """Evaluate one matched pair; a bad price drops only this pair."""
    a, b = candidate.listing_a, candidate.listing_b
    try:
        result = evaluate(a.yes_price, a.no_price, b.yes_price, b.no_price, config)
    except InvalidPriceError as exc:
        logger.warning("Skipping pair %s / %s: %s", a.source_id, b.source_id, exc)
        return None
    if result is None:
        return None
    return replace(result, listing_a=a, listing_b=b, confidence=candidate.confidence)


def describe_strategy(result: ArbitrageResult) -> str:
    a, b = result.listing_a, result.listing_b
    venue_a = a.exchange if a else "A"
    venue_b = b.exchange if b else "B"
    if result.strategy == BUY_YES_A_NO_B:
        legs = (("YES", venue_a, a.yes_price if a else None), ("NO", venue_b, b.no_price if b else None))
    else:
        legs = (("NO", venue_a, a.no_price if a else None), ("YES", venue_b, b.yes_price if b else None))
    parts = []
    for outcome, venue, price in legs:
        parts.append(f"Buy {outcome} on {venue}" + (f" @ ${price:.3f}" if price is not None else ""))
    return " + ".join(parts)
