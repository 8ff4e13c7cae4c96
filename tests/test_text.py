from crossarb.utils.text import dice_coefficient, extract_numeric_facts, keyword_tokens, normalize_text, similarity


def test_normalize_expands_amounts_and_aliases():
    assert normalize_text("Will BTC hit $100k?") == "will bitcoin reach 100000"
    assert normalize_text("Bitcoin above $100,000 on Dec 31st") == "bitcoin above 100000 on december 31"
    assert normalize_text("GDP over 2.5 million") == "gdp over 2500000"


def test_keyword_tokens_drop_stop_words_and_short_tokens():
    assert keyword_tokens("Will the US be in a recession by 2026?") == frozenset({"recession", "2026"})
    assert keyword_tokens("") == frozenset()


def test_similarity_is_symmetric_and_bounded():
    a = "Will Bitcoin reach $100,000 by end of 2025?"
    b = "Will Bitcoin hit $100k in 2025?"
    assert similarity(a, b) == similarity(b, a)
    assert 0.0 <= similarity(a, b) <= 1.0
    assert similarity(a, a) == 1.0


def test_dice_edge_cases():
    assert dice_coefficient("", "") == 0.0
    assert dice_coefficient("a", "b") == 0.0
    assert dice_coefficient("night", "nacht") == 0.25


def test_extract_numeric_facts():
    facts = extract_numeric_facts("Will Bitcoin be above $100k on December 31, 2025?")
    assert facts.numbers == frozenset({"100000", "31"})
    assert facts.months == frozenset({"december"})
    assert facts.years == frozenset({"2025"})
    assert extract_numeric_facts("Bitcoin above $100,000 on Dec 31 2025") == facts


def test_normalize_keeps_decimals_and_splits_hyphens():
    assert normalize_text("Jan-Feb CPI above 2.5%?") == "january february cpi above 2.5"
    assert normalize_text("Will SpaceX raise $1.5B?") == "will spacex raise 1500000000"
    assert normalize_text("  ") == ""


def test_numeric_facts_differ_on_strike():
    assert extract_numeric_facts("Bitcoin above $100k") != extract_numeric_facts("Bitcoin above $120k")
    assert not any(extract_numeric_facts("No numbers here"))
