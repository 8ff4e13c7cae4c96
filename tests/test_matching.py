import pytest

from crossarb.config.settings import MatchingSettings
from crossarb.core.matching import (
    EventMatcher,
    KeywordSimilarityMatcher,
    NumericFactMatcher,
    get_matcher,
)
from crossarb.core.models import MarketListing
from crossarb.utils.validation import MatchingError


def _listing(exchange, title, category="crypto", yes=0.5, no=0.5):
    return MarketListing(
        exchange=exchange,
        source_id=f"{exchange}:{title}",
        title=title,
        category=category,
        yes_price=yes,
        no_price=no,
    )


@pytest.fixture
def keyword():
    return KeywordSimilarityMatcher(min_confidence=0.65, min_common_keywords=2)


@pytest.fixture
def numeric():
    return NumericFactMatcher(min_similarity=0.75)


def test_same_event_different_wording_matches(keyword):
    result = keyword.match("Will Bitcoin reach $100,000 by end of 2025?", "Will Bitcoin hit $100k in 2025?")
    assert result.is_match
    assert "bitcoin" in result.common_keywords
    assert 0.65 < result.confidence <= 1.0


def test_category_mismatch_short_circuits(keyword):
    result = keyword.match("Will Bitcoin hit $100k?", "Who wins the World Cup?")
    assert not result.is_match
    assert result.confidence == 0.0
    assert result.common_keywords == frozenset()


def test_same_category_different_asset_does_not_match(keyword):
    result = keyword.match("Will Bitcoin hit $100k in 2025?", "Will Ethereum hit $5k in 2025?")
    assert not result.is_match
    assert result.confidence < 0.65


def test_match_is_symmetric(keyword):
    a = "Will the Fed cut rates in December 2025?"
    b = "Fed cuts rates in December 2025?"
    assert keyword.match(a, b) == keyword.match(b, a)


def test_empty_titles_never_match(keyword, numeric):
    for matcher in (keyword, numeric):
        result = matcher.match("", "")
        assert not result.is_match
        assert result.confidence == 0.0


def test_min_common_keywords_is_enforced():
    strict = KeywordSimilarityMatcher(min_confidence=0.0, min_common_keywords=3)
    result = strict.match("Bitcoin ETF approved?", "Bitcoin ETF rejected?")
    assert result.common_keywords == frozenset({"bitcoin", "etf"})
    assert not result.is_match


def test_non_string_title_raises(keyword):
    with pytest.raises(MatchingError):
        keyword.match(None, "Will Bitcoin hit $100k?")
    with pytest.raises(MatchingError):
        keyword.score("Will Bitcoin hit $100k?", 42)


def test_numeric_strategy_requires_identical_facts(keyword, numeric):
    base = "Will Bitcoin be above $100k on December 31, 2025?"
    assert numeric.match(base, "Bitcoin above $100k on December 31, 2025?").is_match

    # Same wording, different strike or date: the heuristic pairs them, the strict strategy does not
    for other in (
        "Will Bitcoin be above $120k on December 31, 2025?",
        "Will Bitcoin be above $100k on November 30, 2025?",
    ):
        assert keyword.match(base, other).is_match
        assert not numeric.match(base, other).is_match


def test_get_matcher_selects_strategy_from_config():
    config = MatchingSettings(strategy="numeric", min_similarity=0.8)
    matcher = get_matcher(config=config)
    assert isinstance(matcher, NumericFactMatcher)
    assert matcher.min_similarity == 0.8
    assert isinstance(get_matcher("keyword", config), KeywordSimilarityMatcher)
    with pytest.raises(ValueError):
        get_matcher("llm")


def test_build_candidates_only_pairs_within_category(keyword):
    poly = [
        _listing("polymarket", "Will Bitcoin reach $100,000 by end of 2025?"),
        _listing("polymarket", "Will the Fed cut rates in December 2025?", category="finance"),
    ]
    kalshi = [
        _listing("kalshi", "Fed cuts rates in December 2025?", category="other"),
        _listing("kalshi", "Will Bitcoin hit $100k in 2025?"),
    ]
    candidates = EventMatcher(keyword).build_candidates(poly, kalshi)
    assert [(c.listing_a.title, c.listing_b.title) for c in candidates] == [
        ("Will Bitcoin reach $100,000 by end of 2025?", "Will Bitcoin hit $100k in 2025?"),
    ]


def test_build_candidates_orders_best_match_first(keyword):
    poly = [_listing("polymarket", "Will Bitcoin reach $100,000 by end of 2025?")]
    kalshi = [
        _listing("kalshi", "Will Bitcoin reach $100k in 2025 or 2026?"),
        _listing("kalshi", "Will Bitcoin reach $100,000 by end of 2025?"),
    ]
    candidates = EventMatcher(keyword).build_candidates(poly, kalshi)
    assert len(candidates) == 2
    assert candidates[0].listing_b.title == "Will Bitcoin reach $100,000 by end of 2025?"
    assert candidates[0].confidence >= candidates[1].confidence


def test_build_candidates_skips_malformed_pairs(keyword):
    poly = [_listing("polymarket", "Will Bitcoin reach $100,000 by end of 2025?")]
    kalshi = [
        MarketListing("kalshi", "bad", None, "crypto", 0.5, 0.5),
        _listing("kalshi", "Will Bitcoin hit $100k in 2025?"),
    ]
    candidates = EventMatcher(keyword).build_candidates(poly, kalshi)
    assert [c.listing_b.source_id for c in candidates] == ["kalshi:Will Bitcoin hit $100k in 2025?"]


def test_build_candidates_tolerates_empty_sides(keyword):
    assert EventMatcher(keyword).build_candidates([], [_listing("kalshi", "Will Bitcoin hit $100k?")]) == []
    assert EventMatcher(keyword).build_candidates([_listing("polymarket", "Will Bitcoin hit $100k?")], []) == []
