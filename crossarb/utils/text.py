import re
import unicodedata
from collections import Counter
from functools import lru_cache
from typing import FrozenSet, NamedTuple

from crossarb.config.constants import MIN_TOKEN_LENGTH, STOP_WORDS


_MULTIPLIERS = {
    "k": 1_000,
    "thousand": 1_000,
    "m": 1_000_000,
    "million": 1_000_000,
    "b": 1_000_000_000,
    "bn": 1_000_000_000,
    "billion": 1_000_000_000,
}

_ALIASES = {
    "btc": "bitcoin",
    "eth": "ethereum",
    "hit": "reach",
    "hits": "reach",
    "reaches": "reach",
    "wins": "win",
    "jan": "january",
    "feb": "february",
    "mar": "march",
    "apr": "april",
    "jun": "june",
    "jul": "july",
    "aug": "august",
    "sep": "september",
    "sept": "september",
    "oct": "october",
    "nov": "november",
    "dec": "december",
}

MONTHS = frozenset(
    {
        "january",
        "february",
        "march",
        "april",
        "may",
        "june",
        "july",
        "august",
        "september",
        "october",
        "november",
        "december",
    }
)

_THOUSANDS_SEP = re.compile(r"(?<=\d),(?=\d{3}\b)")
_SHORT_SCALE = re.compile(r"(\d+(?:\.\d+)?)(k|m|bn|b)\b")
_LONG_SCALE = re.compile(r"(\d+(?:\.\d+)?)\s+(thousand|million|billion)\b")
_ORDINAL = re.compile(r"\b(\d+)(st|nd|rd|th)\b")
# Punctuation, except a decimal point between two digits
_PUNCT = re.compile(r"(?!(?<=\d)\.(?=\d))[^\w\s]")
_YEAR = re.compile(r"20\d\d")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def _expand_scale(match: "re.Match[str]") -> str:
    value = float(match.group(1)) * _MULTIPLIERS[match.group(2)]
    return str(int(round(value)))


@lru_cache(maxsize=8192)
def normalize_text(value: str) -> str:
    """Canonical form of a title used by every matching signal.

    Lowercases, strips punctuation, expands ``$100k``/``2.5 million`` style
    amounts into plain integers and folds a few aliases (``btc`` -> ``bitcoin``,
    ``dec`` -> ``december``) so equivalent phrasings share tokens.
    """
    value = unicodedata.normalize("NFKC", value)
    value = value.lower()
    value = re.sub(r"[‘’]", "'", value)
    value = re.sub(r"[“”]", '"', value)
    value = _THOUSANDS_SEP.sub("", value)
    value = _SHORT_SCALE.sub(_expand_scale, value)
    value = _LONG_SCALE.sub(_expand_scale, value)
    value = _ORDINAL.sub(r"\1", value)
    value = re.sub(r"[-/_]", " ", value)
    value = _PUNCT.sub("", value)
    return " ".join(_ALIASES.get(tok, tok) for tok in value.split())


def keyword_tokens(value: str) -> FrozenSet[str]:
    """Content tokens of a title: no stop words, nothing shorter than 3 chars."""
    return frozenset(
        tok for tok in normalize_text(value).split() if tok not in STOP_WORDS and len(tok) >= MIN_TOKEN_LENGTH
    )


def _bigrams(value: str) -> Counter:
    return Counter(value[i : i + 2] for i in range(len(value) - 1))


def dice_coefficient(a: str, b: str) -> float:
    """Sørensen-Dice coefficient over character bigrams (multiset)."""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0
    shared = sum((_bigrams(a) & _bigrams(b)).values())
    return 2.0 * shared / ((len(a) - 1) + (len(b) - 1))


def similarity(a: str, b: str) -> float:
    return dice_coefficient(normalize_text(a), normalize_text(b))


class NumericFacts(NamedTuple):
    numbers: FrozenSet[str]
    months: FrozenSet[str]
    years: FrozenSet[str]


def extract_numeric_facts(value: str) -> NumericFacts:
    """Amounts, month names and 2000-2099 years mentioned in a title."""
    numbers = set()
    months = set()
    years = set()
    for tok in normalize_text(value).split():
        if tok in MONTHS:
            months.add(tok)
        elif _YEAR.fullmatch(tok):
            years.add(tok)
        elif _NUMBER.fullmatch(tok):
            numbers.add(tok)
    return NumericFacts(frozenset(numbers), frozenset(months), frozenset(years))
