from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from crossarb.config import constants as C


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class MatchingSettings:
    strategy: str = C.DEFAULT_MATCH_STRATEGY  # "keyword" or "numeric"
    min_confidence: float = C.DEFAULT_MIN_CONFIDENCE
    min_common_keywords: int = C.DEFAULT_MIN_COMMON_KEYWORDS
    min_similarity: float = C.DEFAULT_MIN_SIMILARITY


@dataclass
class ArbSettings:
    min_margin: float = C.DEFAULT_MIN_MARGIN
    max_margin: float = C.DEFAULT_MAX_MARGIN


@dataclass
class SourceSettings:
    polymarket_url: str = C.POLYMARKET_EVENTS_URL
    kalshi_url: str = C.KALSHI_MARKETS_URL
    kalshi_bearer: Optional[str] = None
    page_limit: int = C.DEFAULT_PAGE_LIMIT
    max_pages: int = C.DEFAULT_MAX_PAGES
    timeout: float = C.API_TIMEOUT_SECONDS


@dataclass
class EnrichmentSettings:
    enabled: bool = False
    model: str = C.DEFAULT_LLM_MODEL
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = C.LLM_TIMEOUT_SECONDS


@dataclass
class Settings:
    matching: MatchingSettings = field(default_factory=MatchingSettings)
    arb: ArbSettings = field(default_factory=ArbSettings)
    sources: SourceSettings = field(default_factory=SourceSettings)
    enrichment: EnrichmentSettings = field(default_factory=EnrichmentSettings)
    env: str = "dev"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``CROSSARB_*`` environment variables."""
        return cls(
            matching=MatchingSettings(
                strategy=os.environ.get("CROSSARB_MATCH_STRATEGY", C.DEFAULT_MATCH_STRATEGY).strip().lower(),
                min_confidence=_env_float("CROSSARB_MIN_CONFIDENCE", C.DEFAULT_MIN_CONFIDENCE),
                min_common_keywords=_env_int("CROSSARB_MIN_COMMON_KEYWORDS", C.DEFAULT_MIN_COMMON_KEYWORDS),
                min_similarity=_env_float("CROSSARB_MIN_SIMILARITY", C.DEFAULT_MIN_SIMILARITY),
            ),
            arb=ArbSettings(
                min_margin=_env_float("CROSSARB_MIN_MARGIN", C.DEFAULT_MIN_MARGIN),
                max_margin=_env_float("CROSSARB_MAX_MARGIN", C.DEFAULT_MAX_MARGIN),
            ),
            sources=SourceSettings(
                polymarket_url=os.environ.get("POLYMARKET_EVENTS_URL", C.POLYMARKET_EVENTS_URL),
                kalshi_url=os.environ.get("KALSHI_MARKETS_URL", C.KALSHI_MARKETS_URL),
                kalshi_bearer=os.environ.get("KALSHI_BEARER") or os.environ.get("KALSHI_SESSION_TOKEN"),
                page_limit=_env_int("CROSSARB_PAGE_LIMIT", C.DEFAULT_PAGE_LIMIT),
                max_pages=_env_int("CROSSARB_MAX_PAGES", C.DEFAULT_MAX_PAGES),
                timeout=_env_float("CROSSARB_TIMEOUT", C.API_TIMEOUT_SECONDS),
            ),
            enrichment=EnrichmentSettings(
                enabled=_env_flag("CROSSARB_COMMENTARY"),
                model=os.environ.get("CROSSARB_LLM_MODEL", C.DEFAULT_LLM_MODEL),
                api_key=os.environ.get("OPENAI_API_KEY"),
                base_url=os.environ.get("OPENAI_BASE_URL") or None,
                timeout=_env_float("CROSSARB_LLM_TIMEOUT", C.LLM_TIMEOUT_SECONDS),
            ),
            env=os.environ.get("CROSSARB_ENV", "dev"),
        )


settings = Settings.from_env()
