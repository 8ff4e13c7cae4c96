from __future__ import annotations

import asyncio
import os
from typing import Callable, List, Optional, Tuple

from crossarb.config.settings import Settings, settings
from crossarb.connectors.base import MarketSource
from crossarb.connectors.demo import DemoSource
from crossarb.core.aggregator import opportunity_rows
from crossarb.core.models import ArbitrageResult
from crossarb.core.pipeline import run_cycle
from crossarb.utils.logging import get_logger


logger = get_logger("main")


def build_sources(live: bool, config: Settings) -> Tuple[MarketSource, MarketSource]:
    if not live:
        return DemoSource("polymarket"), DemoSource("kalshi")
    # Lazy import so demo mode never opens HTTP clients
    from crossarb.connectors.kalshi import KalshiSource
    from crossarb.connectors.polymarket import PolymarketSource

    return PolymarketSource(config.sources), KalshiSource(config.sources)


def build_annotator(config: Settings) -> Optional[Callable[[ArbitrageResult], str]]:
    """Commentary writer for the cycle, or None when disabled or the client cannot be built."""
    if not config.enrichment.enabled:
        return None
    from openai import OpenAIError

    from crossarb.utils.commentary import CommentaryWriter

    try:
        return CommentaryWriter(
            model=config.enrichment.model,
            api_key=config.enrichment.api_key,
            base_url=config.enrichment.base_url,
            timeout=config.enrichment.timeout,
        )
    except OpenAIError as exc:
        logger.warning("Commentary disabled for this run: %s", exc)
        return None


async def run_once(live: bool = False, config: Optional[Settings] = None) -> List[ArbitrageResult]:
    config = config or settings
    source_a, source_b = build_sources(live, config)
    results = await run_cycle(source_a, source_b, config=config, annotator=build_annotator(config))
    if not results:
        logger.info("No opportunities found.")
        return results

    logger.info("Found %d opportunities", len(results))
    for row in opportunity_rows(results):
        logger.info(
            "%.2f%% | %s <-> %s | %s",
            row["margin %"],
            row["event A"],
            row["event B"],
            row["strategy"],
        )
        if row["commentary"]:
            logger.info("    %s", row["commentary"])
    return results


def cli():
    live = os.environ.get("CROSSARB_DATA", "demo").lower() in {"live", "1", "true"}
    asyncio.run(run_once(live=live))


if __name__ == "__main__":
    cli()
