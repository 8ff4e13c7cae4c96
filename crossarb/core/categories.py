"""Coarse topic classifier used to bucket titles before pairwise matching."""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Tuple

from crossarb.config.constants import CATEGORY_KEYWORDS, DEFAULT_CATEGORY, WHOLE_WORD_MAX_LENGTH
from crossarb.core.models import Category
from crossarb.utils.validation import validate_title


def _compile(keywords: Iterable[str]) -> "re.Pattern[str]":
    # Anchor at a word start; short tickers must also end the word ("eth" skips "whether" and "ethics")
    alternatives = []
    for k in sorted(keywords, key=len, reverse=True):
        escaped = re.escape(k)
        alternatives.append(escaped + r"(?!\w)" if len(k) <= WHOLE_WORD_MAX_LENGTH else escaped)
    return re.compile(rf"(?<!\w)(?:{'|'.join(alternatives)})")


_PATTERNS: List[Tuple[Category, "re.Pattern[str]"]] = [
    (category, _compile(keywords)) for category, keywords in CATEGORY_KEYWORDS
]


def classify(title: Any) -> Category:
    title = validate_title(title)
    low = title.lower()
    for category, pattern in _PATTERNS:
        if pattern.search(low):
            return category
    return DEFAULT_CATEGORY

