import asyncio

import httpx
import pytest

from crossarb.config.settings import EnrichmentSettings, Settings
from crossarb.connectors.base import MarketSource
from crossarb.connectors.demo import DemoSource, kalshi_payload, polymarket_payload
from crossarb.core.models import BUY_YES_A_NO_B
from crossarb.core.pipeline import (
    MarketDataUnavailableError,
    annotate_opportunities,
    fetch_both,
    find_opportunities,
    run_cycle,
    scan,
)
from crossarb.main import build_annotator, run_once


class FakeSource(MarketSource):
    def __init__(self, name, payload=None, error=None):
        self.name = name
        self.payload = payload or []
        self.error = error
        self.closed = False

    async def fetch_markets(self):
        if self.error is not None:
            raise self.error
        return self.payload

    async def close(self):
        self.closed = True


def test_run_cycle_demo_sources():
    results = asyncio.run(run_cycle(DemoSource("polymarket"), DemoSource("kalshi")))
    assert [r.listing_a.source_id for r in results] == ["pm-btc-100k", "pm-fed-dec"]
    assert results[0].strategy == BUY_YES_A_NO_B


def test_one_failed_source_degrades_to_empty_scan():
    poly = FakeSource("polymarket", polymarket_payload())
    kalshi = FakeSource("kalshi", error=httpx.ConnectError("connection refused"))
    assert asyncio.run(run_cycle(poly, kalshi)) == []
    assert poly.closed and kalshi.closed


def test_both_sources_failing_raises():
    poly = FakeSource("polymarket", error=httpx.ConnectError("down"))
    kalshi = FakeSource("kalshi", error=httpx.ReadTimeout("slow"))
    with pytest.raises(MarketDataUnavailableError) as excinfo:
        asyncio.run(run_cycle(poly, kalshi))
    assert isinstance(excinfo.value.__cause__, httpx.HTTPError)
    assert poly.closed and kalshi.closed


def test_both_sources_without_usable_listings_raise():
    poly = FakeSource("polymarket", [{"id": "x", "question": "Super Bowl winner", "outcomes": ["A", "B"], "outcomePrices": [0.5, 0.5]}])
    kalshi = FakeSource("kalshi", [])
    with pytest.raises(MarketDataUnavailableError):
        asyncio.run(run_cycle(poly, kalshi))


def test_annotator_failures_are_isolated():
    def annotator(result):
        if result.listing_a.source_id == "pm-btc-100k":
            raise RuntimeError("rate limited")
        return "Resolution dates differ by a day."

    results = asyncio.run(
        run_cycle(FakeSource("polymarket", polymarket_payload()), FakeSource("kalshi", kalshi_payload()), annotator=annotator)
    )
    assert [r.listing_a.source_id for r in results] == ["pm-btc-100k", "pm-fed-dec"]
    assert results[0].commentary is None
    assert results[1].commentary == "Resolution dates differ by a day."


def test_commentary_without_credentials_does_not_fail_the_cycle(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    config = Settings(enrichment=EnrichmentSettings(enabled=True, api_key=None))
    assert build_annotator(config) is None

    results = asyncio.run(run_once(live=False, config=config))
    assert [r.listing_a.source_id for r in results] == ["pm-btc-100k", "pm-fed-dec"]
    assert all(r.commentary is None for r in results)


def test_fetch_both_degrades_a_failed_source_and_closes_both():
    poly = FakeSource("polymarket", polymarket_payload())
    error = httpx.ConnectError("connection refused")
    kalshi = FakeSource("kalshi", error=error)
    raw_a, raw_b, errors = asyncio.run(fetch_both(poly, kalshi))
    assert raw_a == poly.payload
    assert raw_b == []
    assert errors == [("kalshi", error)]
    assert poly.closed and kalshi.closed


def test_annotate_opportunities_keeps_order_and_inputs():
    results = find_opportunities(polymarket_payload(), kalshi_payload())
    annotated = annotate_opportunities(results, lambda r: "")
    assert [r.listing_a.title for r in annotated] == [r.listing_a.title for r in results]
    assert all(r.commentary is None for r in annotated)
    assert all(r.commentary is None for r in results)


def test_scan_with_an_empty_side():
    assert scan([], []) == []


def test_find_opportunities_is_repeatable():
    poly, kalshi = polymarket_payload(), kalshi_payload()
    assert find_opportunities(poly, kalshi) == find_opportunities(poly, kalshi)
