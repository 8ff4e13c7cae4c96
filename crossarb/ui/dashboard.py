from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Tuple

# Ensure project root is on sys.path when running via Streamlit
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import streamlit as st

from crossarb.config.settings import ArbSettings, MatchingSettings, settings
from crossarb.core.aggregator import opportunity_rows
from crossarb.core.matching import get_matcher
from crossarb.core.pipeline import annotate_opportunities, fetch_both, find_opportunities
from crossarb.main import build_annotator, build_sources
from crossarb.utils.timing import TimingTracker


st.set_page_config(page_title="Polymarket–Kalshi Arbitrage", layout="wide")
st.title("Polymarket–Kalshi Arbitrage Scanner")


@st.cache_data(ttl=30)
def load_raw(live: bool) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]], List[str]]:
    raw_poly, raw_kalshi, errors = asyncio.run(fetch_both(*build_sources(live, settings)))
    return raw_poly, raw_kalshi, [f"{name}: {exc}" for name, exc in errors]


with st.sidebar:
    st.markdown("### Data")
    data_mode = st.radio("Source", ["Demo data", "Live data (read-only)"], index=0)
    if st.button("Refresh data", type="primary"):
        load_raw.clear()

    st.markdown("### Matching")
    strategy = st.selectbox(
        "Strategy",
        ["keyword", "numeric"],
        index=0 if settings.matching.strategy == "keyword" else 1,
        help="keyword: overlap + similarity. numeric: amounts, months and years must agree exactly.",
    )
    min_confidence = st.slider("Min confidence (keyword)", 0.5, 0.95, float(settings.matching.min_confidence), 0.01)
    min_common = st.number_input("Min shared keywords", 1, 6, int(settings.matching.min_common_keywords), 1)
    min_similarity = st.slider("Min similarity (numeric)", 0.5, 0.95, float(settings.matching.min_similarity), 0.01)

    st.markdown("### Acceptance band")
    min_margin = st.number_input("Min margin", 0.0, 0.2, float(settings.arb.min_margin), 0.005, format="%.3f")
    max_margin = st.number_input("Max margin", 0.05, 1.0, float(settings.arb.max_margin), 0.05, format="%.2f")
    st.caption("Margins at or above the max are treated as probable mismatches, not opportunities.")

    use_commentary = st.checkbox("LLM commentary (OpenAI)", value=settings.enrichment.enabled)

raw_poly, raw_kalshi, fetch_errors = load_raw(data_mode != "Demo data")
for err in fetch_errors:
    st.warning(f"Fetch failed, continuing without it: {err}")
if not raw_poly and not raw_kalshi:
    st.error("No market data from either exchange.")
    st.stop()

config = replace(
    settings,
    matching=MatchingSettings(
        strategy=strategy,
        min_confidence=float(min_confidence),
        min_common_keywords=int(min_common),
        min_similarity=float(min_similarity),
    ),
    arb=ArbSettings(min_margin=float(min_margin), max_margin=float(max_margin)),
)

tracker = TimingTracker()
results = find_opportunities(raw_poly, raw_kalshi, config=config, matcher=get_matcher(config=config.matching), tracker=tracker)
if use_commentary and results:
    annotator = build_annotator(replace(config, enrichment=replace(config.enrichment, enabled=True)))
    if annotator is None:
        st.warning("Commentary unavailable: no OpenAI credentials configured.")
    else:
        with st.spinner("Writing commentary..."):
            results = annotate_opportunities(results, annotator)

c1, c2, c3 = st.columns(3)
c1.metric("Polymarket markets", len(raw_poly))
c2.metric("Kalshi markets", len(raw_kalshi))
c3.metric("Opportunities", len(results))

if not results:
    st.info("No opportunities inside the acceptance band.")
else:
    best = results[0]
    st.markdown("#### Best opportunity")
    b1, b2, b3 = st.columns(3)
    b1.metric("Margin", f"{best.margin_fraction * 100:.2f}%")
    b2.metric("Match confidence", f"{best.confidence:.2f}")
    b3.metric("Yes delta (pp)", f"{best.price_delta_yes:+.1f}")
    st.dataframe(
        opportunity_rows(results),
        width="stretch",
        hide_index=True,
        column_config={
            "link A": st.column_config.LinkColumn("Market A", display_text="Open"),
            "link B": st.column_config.LinkColumn("Market B", display_text="Open"),
        },
    )

st.caption("Timings: " + ", ".join(f"{k}={v}" for k, v in tracker.summary().items()))
