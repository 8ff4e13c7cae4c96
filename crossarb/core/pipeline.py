"""One scan cycle: normalize, match, evaluate, aggregate.

Side A is Polymarket and side B is Kalshi throughout. Everything below
``run_cycle`` is pure: plain data in, a fresh ordered list out.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from crossarb.config.settings import Settings
from crossarb.connectors.base import MarketSource
from crossarb.core.aggregator import aggregate
from crossarb.core.arb import evaluate_candidate
from crossarb.core.matching import EventMatcher, MatchStrategy, get_matcher
from crossarb.core.models import ArbitrageResult, MarketListing
from crossarb.core.normalizer import normalize_listings
from crossarb.utils.logging import get_logger
from crossarb.utils.timing import TimingTracker, timer


logger = get_logger("pipeline")


class MarketDataUnavailableError(RuntimeError):
    """Neither source produced any listings this cycle."""


def scan(
    listings_a: Iterable[MarketListing],
    listings_b: Iterable[MarketListing],
    matcher: Optional[MatchStrategy] = None,
    config: Optional[Settings] = None,
    tracker: Optional[TimingTracker] = None,
) -> List[ArbitrageResult]:
    config = config or Settings()
    strategy = matcher or get_matcher(config=config.matching)
    side_a, side_b = list(listings_a), list(listings_b)
    if not side_a or not side_b:
        logger.info("Nothing to pair: side A=%d, side B=%d listings", len(side_a), len(side_b))
        return []

    with timer("match", tracker):
        candidates = EventMatcher(strategy).build_candidates(side_a, side_b)
    with timer("evaluate", tracker):
        evaluated = [evaluate_candidate(c, config.arb) for c in candidates]
        results = aggregate(evaluated)
    logger.info("Opportunities: %d from %d matched pairs", len(results), len(candidates))
    return results


def find_opportunities(
    raw_polymarket: Iterable[Mapping[str, Any]],
    raw_kalshi: Iterable[Mapping[str, Any]],
    config: Optional[Settings] = None,
    matcher: Optional[MatchStrategy] = None,
    tracker: Optional[TimingTracker] = None,
) -> List[ArbitrageResult]:
    with timer("normalize", tracker):
        side_a = normalize_listings(raw_polymarket, "polymarket")
        side_b = normalize_listings(raw_kalshi, "kalshi")
    return scan(side_a, side_b, matcher=matcher, config=config, tracker=tracker)


def _annotate_one(result: ArbitrageResult, annotator: Callable[[ArbitrageResult], str]) -> ArbitrageResult:
    try:
        text = annotator(result)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Commentary failed for %r: %s", result.listing_a.title if result.listing_a else "?", exc)
        return result
    return replace(result, commentary=text or None)


def annotate_opportunities(
    results: Sequence[ArbitrageResult],
    annotator: Callable[[ArbitrageResult], str],
) -> List[ArbitrageResult]:
    """Attach commentary to each result independently; failures leave that result as is."""
    return [_annotate_one(result, annotator) for result in results]


async def annotate_opportunities_async(
    results: Sequence[ArbitrageResult],
    annotator: Callable[[ArbitrageResult], str],
) -> List[ArbitrageResult]:
    """Like ``annotate_opportunities`` but each blocking call runs in a worker thread, all at once."""
    annotated = await asyncio.gather(*(asyncio.to_thread(_annotate_one, r, annotator) for r in results))
    return list(annotated)


async def _fetch(source: MarketSource) -> List[Mapping[str, Any]]:
    try:
        return await source.fetch_markets()
    finally:
        await source.close()


async def fetch_both(
    source_a: MarketSource,
    source_b: MarketSource,
) -> Tuple[List[Mapping[str, Any]], List[Mapping[str, Any]], List[Tuple[str, Exception]]]:
    """Fetch both sources concurrently and close them.

    Returns ``(raw_a, raw_b, errors)``; a failed source comes back as an empty
    list with its ``(name, exception)`` in ``errors``.
    """
    fetched = await asyncio.gather(_fetch(source_a), _fetch(source_b), return_exceptions=True)

    raw: List[List[Mapping[str, Any]]] = []
    errors: List[Tuple[str, Exception]] = []
    for source, outcome in zip((source_a, source_b), fetched):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("Fetch failed for %s, continuing without it: %s", source.name, outcome)
            errors.append((source.name, outcome))
            raw.append([])
        else:
            raw.append(list(outcome or []))
    return raw[0], raw[1], errors


async def run_cycle(
    source_a: MarketSource,
    source_b: MarketSource,
    config: Optional[Settings] = None,
    matcher: Optional[MatchStrategy] = None,
    annotator: Optional[Callable[[ArbitrageResult], str]] = None,
) -> List[ArbitrageResult]:
    """Fetch both sides concurrently and scan them.

    A failed source counts as an empty one; only when both come back with
    nothing does the cycle fail with ``MarketDataUnavailableError``.
    """
    tracker = TimingTracker()
    with timer("fetch", tracker):
        raw_a, raw_b, errors = await fetch_both(source_a, source_b)

    with timer("normalize", tracker):
        side_a = normalize_listings(raw_a, source_a.name)
        side_b = normalize_listings(raw_b, source_b.name)
    if not side_a and not side_b:
        raise MarketDataUnavailableError(
            f"no usable listings from {source_a.name} or {source_b.name}"
            + (f" ({len(errors)} fetch error(s))" if errors else "")
        ) from (errors[-1][1] if errors else None)

    results = scan(side_a, side_b, matcher=matcher, config=config, tracker=tracker)
    if annotator is not None and results:
        with timer("annotate", tracker):
            results = await annotate_opportunities_async(results, annotator)
    logger.info("Cycle timings: %s", tracker.summary())
    return results
