"""Constants used throughout the application.

This module centralizes the tunable thresholds and fixed vocabularies used by
the matcher and the arbitrage evaluator. Settings take their defaults from
here; change the defaults here, override per run through ``Settings``.
"""

# Matching algorithm constants
DEFAULT_MATCH_STRATEGY = "keyword"
DEFAULT_MIN_CONFIDENCE = 0.65
DEFAULT_MIN_COMMON_KEYWORDS = 2
DEFAULT_MIN_SIMILARITY = 0.75  # numeric/date-fact strategy
KEYWORD_WEIGHT = 0.5
SIMILARITY_WEIGHT = 0.5

# Arbitrage acceptance band (strict on both ends)
DEFAULT_MIN_MARGIN = 0.01
# Spreads this wide are almost always a bad match, not free money
DEFAULT_MAX_MARGIN = 0.5
MARGIN_PRECISION = 9

# Token extraction constants
MIN_TOKEN_LENGTH = 3
STOP_WORDS = frozenset(
    {"will", "the", "be", "in", "by", "at", "on", "for", "of", "to", "and", "or", "a", "an"}
)

# Category keywords, checked in this order; first hit wins
CATEGORY_KEYWORDS = (
    ("crypto", ("bitcoin", "btc", "ethereum", "eth", "crypto", "solana", "dogecoin", "xrp")),
    (
        "politics",
        (
            "election",
            "president",
            "senate",
            "congress",
            "democrat",
            "republican",
            "governor",
            "nominee",
            "speaker",
        ),
    ),
    (
        "sports",
        ("league", "championship", "match", "nba", "nfl", "mlb", "nhl", "super bowl", "world cup", "playoff"),
    ),
    ("finance", ("rate", "fed", "federal reserve", "index", "inflation", "cpi", "gdp", "recession", "nasdaq", "s&p")),
)
DEFAULT_CATEGORY = "other"
# Keywords this short (tickers, acronyms) must match a whole word: "eth" is not "ethics"
WHOLE_WORD_MAX_LENGTH = 3

# API and pagination constants
POLYMARKET_EVENTS_URL = "https://gamma-api.polymarket.com/events"
KALSHI_MARKETS_URL = "https://api.elections.kalshi.com/trade-api/v2/markets"
DEFAULT_MAX_PAGES = 3
DEFAULT_PAGE_LIMIT = 100
API_TIMEOUT_SECONDS = 15
API_MAX_RETRIES = 3

# Enrichment
DEFAULT_LLM_MODEL = "gpt-4o-mini"
LLM_TIMEOUT_SECONDS = 20
LLM_MAX_RETRIES = 1

# Progress reporting intervals
PROGRESS_REPORT_INTERVAL = 200  # Report progress every N listings

# Display
MAX_DISPLAY_TITLE = 60
