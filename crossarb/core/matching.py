from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional

from crossarb.config.constants import KEYWORD_WEIGHT, PROGRESS_REPORT_INTERVAL, SIMILARITY_WEIGHT
from crossarb.config.settings import MatchingSettings
from crossarb.core.categories import classify
from crossarb.core.models import NO_MATCH, MarketListing, MatchCandidate, MatchResult
from crossarb.utils.logging import get_logger
from crossarb.utils.text import extract_numeric_facts, keyword_tokens, similarity
from crossarb.utils.validation import MatchingError, validate_title


logger = get_logger("matching")


class MatchStrategy(ABC):
    """Decides whether two titles describe the same binary event."""

    name: str

    def match(self, title_a: str, title_b: str) -> MatchResult:
        if classify(title_a) != classify(title_b):
            return NO_MATCH
        return self._score(title_a, title_b)

    def score(self, title_a: str, title_b: str) -> MatchResult:
        """Score two titles already known to share a category."""
        return self._score(validate_title(title_a, "title_a"), validate_title(title_b, "title_b"))

    @abstractmethod
    def _score(self, title_a: str, title_b: str) -> MatchResult:
        raise NotImplementedError


class KeywordSimilarityMatcher(MatchStrategy):
    """Half keyword overlap, half bigram similarity, plus a shared-keyword floor."""

    name = "keyword"

    def __init__(self, min_confidence: float, min_common_keywords: int):
        self.min_confidence = min_confidence
        self.min_common_keywords = min_common_keywords

    def _score(self, title_a: str, title_b: str) -> MatchResult:
        kw_a = keyword_tokens(title_a)
        kw_b = keyword_tokens(title_b)
        common = kw_a & kw_b
        denom = max(len(kw_a), len(kw_b))
        keyword_score = len(common) / denom if denom else 0.0
        confidence = KEYWORD_WEIGHT * keyword_score + SIMILARITY_WEIGHT * similarity(title_a, title_b)
        is_match = confidence > self.min_confidence and len(common) >= self.min_common_keywords
        return MatchResult(is_match=is_match, confidence=confidence, common_keywords=common)


class NumericFactMatcher(MatchStrategy):
    """Strict variant: amounts, months and years must agree exactly.

    Lower recall than the keyword strategy, but markets that differ only by a
    date or a price level never pair up.
    """

    name = "numeric"

    def __init__(self, min_similarity: float):
        self.min_similarity = min_similarity

    def _score(self, title_a: str, title_b: str) -> MatchResult:
        sim = similarity(title_a, title_b)
        common = keyword_tokens(title_a) & keyword_tokens(title_b)
        facts_agree = extract_numeric_facts(title_a) == extract_numeric_facts(title_b)
        return MatchResult(is_match=facts_agree and sim > self.min_similarity, confidence=sim, common_keywords=common)


def get_matcher(name: Optional[str] = None, config: Optional[MatchingSettings] = None) -> MatchStrategy:
    config = config or MatchingSettings()
    name = (name or config.strategy).strip().lower()
    if name == KeywordSimilarityMatcher.name:
        return KeywordSimilarityMatcher(config.min_confidence, config.min_common_keywords)
    if name == NumericFactMatcher.name:
        return NumericFactMatcher(config.min_similarity)
    raise ValueError(f"Unknown match strategy {name!r}; expected 'keyword' or 'numeric'")


class EventMatcher:
    def __init__(self, strategy: MatchStrategy):
        self.strategy = strategy

    def build_candidates(
        self,
        listings_a: Iterable[MarketListing],
        listings_b: Iterable[MarketListing],
        *,
        progress_cb: Optional[Callable[[float], None]] = None,
    ) -> List[MatchCandidate]:
        """Return every matching (A, B) pair within the same category bucket.

        Output is grouped by listing A in input order; inside a group the
        best-confidence match comes first, so the first occurrence of a title
        is always its strongest pairing.
        """
        by_category_b: Dict[str, List[MarketListing]] = defaultdict(list)
        for lb in listings_b:
            by_category_b[lb.category].append(lb)

        side_a = list(listings_a)
        candidates: List[MatchCandidate] = []
        compared = 0
        total = max(1, len(side_a))
        for idx, la in enumerate(side_a):
            group: List[MatchCandidate] = []
            for lb in by_category_b.get(la.category, ()):
                compared += 1
                try:
                    result = self.strategy.score(la.title, lb.title)
                except MatchingError as exc:
                    logger.warning("Skipping pair %s / %s: %s", la.source_id, lb.source_id, exc)
                    continue
                if result.is_match:
                    group.append(
                        MatchCandidate(
                            listing_a=la,
                            listing_b=lb,
                            confidence=result.confidence,
                            matched_keywords=result.common_keywords,
                        )
                    )
            group.sort(key=lambda c: c.confidence, reverse=True)
            candidates.extend(group)

            if progress_cb and (idx + 1) % PROGRESS_REPORT_INTERVAL == 0:
                progress_cb((idx + 1) / total)

        logger.info(
            "Matched %d pairs out of %d same-category comparisons (strategy=%s)",
            len(candidates),
            compared,
            self.strategy.name,
        )
        if progress_cb:
            progress_cb(1.0)
        return candidates
