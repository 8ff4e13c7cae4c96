import asyncio
import json
from types import SimpleNamespace

from crossarb.connectors.demo import kalshi_payload, polymarket_payload
from crossarb.core.arb import describe_strategy
from crossarb.core.pipeline import annotate_opportunities, annotate_opportunities_async, find_opportunities
from crossarb.utils.commentary import CommentaryWriter


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _writer(content):
    completions = FakeCompletions(content)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return CommentaryWriter(model="test-model", client=client), completions


def _best_result():
    return find_opportunities(polymarket_payload(), kalshi_payload())[0]


def test_request_carries_both_markets_and_the_trade():
    writer, completions = _writer("  Buy both legs; check the resolution source.  ")
    result = _best_result()

    assert writer(result) == "Buy both legs; check the resolution source."

    (call,) = completions.calls
    assert call["model"] == "test-model"
    assert call["temperature"] == 0
    system, user = call["messages"]
    assert system["role"] == "system"
    payload = json.loads(user["content"])
    assert payload["market_a"]["title"] == "Will Bitcoin reach $100,000 by end of 2025?"
    assert payload["market_b"]["title"] == "Will Bitcoin hit $100k in 2025?"
    assert payload["trade"] == describe_strategy(result)
    assert payload["margin_pct"] == 15.0


def test_empty_reply_becomes_no_commentary():
    for content in (None, ""):
        writer, _ = _writer(content)
        result = _best_result()
        assert writer(result) == ""
        (annotated,) = annotate_opportunities([result], writer)
        assert annotated.commentary is None


def test_async_annotation_keeps_order():
    writer, completions = _writer("Looks consistent.")
    results = find_opportunities(polymarket_payload(), kalshi_payload())
    annotated = asyncio.run(annotate_opportunities_async(results, writer))
    assert [r.listing_a.title for r in annotated] == [r.listing_a.title for r in results]
    assert all(r.commentary == "Looks consistent." for r in annotated)
    assert len(completions.calls) == len(results)
