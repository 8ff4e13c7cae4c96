from __future__ import annotations

import json
import os
from typing import Any, Optional

from openai import OpenAI

from crossarb.config.constants import DEFAULT_LLM_MODEL, LLM_MAX_RETRIES, LLM_TIMEOUT_SECONDS
from crossarb.core.arb import describe_strategy
from crossarb.core.models import ArbitrageResult


_SYSTEM = (
    "You are a terse prediction-market analyst."
    " Given two markets from different exchanges that were matched as the same event,"
    " and a proposed two-leg trade, write at most two sentences: what the trade is,"
    " and the most likely reason the titles might NOT resolve identically."
    " No preamble, no disclaimers."
)


class CommentaryWriter:
    """Best-effort one-paragraph commentary for an opportunity via an OpenAI chat model."""

    def __init__(
        self,
        model: str = DEFAULT_LLM_MODEL,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = LLM_TIMEOUT_SECONDS,
        client: Optional[Any] = None,
    ):
        self.model = model
        # Raises openai.OpenAIError when no API key is configured
        self._client = client or OpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url or os.getenv("OPENAI_BASE_URL") or None,
            timeout=timeout,
            max_retries=LLM_MAX_RETRIES,
        )

    def _prompt(self, result: ArbitrageResult) -> str:
        a, b = result.listing_a, result.listing_b
        payload = {
            "market_a": {"exchange": a.exchange, "title": a.title, "yes": a.yes_price, "no": a.no_price} if a else None,
            "market_b": {"exchange": b.exchange, "title": b.title, "yes": b.yes_price, "no": b.no_price} if b else None,
            "trade": describe_strategy(result),
            "margin_pct": round(result.margin_fraction * 100.0, 2),
            "match_confidence": round(result.confidence, 3),
        }
        return json.dumps(payload)

    def __call__(self, result: ArbitrageResult) -> str:
        resp = self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "system", "content": _SYSTEM}, {"role": "user", "content": self._prompt(result)}],
            temperature=0,
            max_tokens=160,
        )
        return (resp.choices[0].message.content or "").strip()
