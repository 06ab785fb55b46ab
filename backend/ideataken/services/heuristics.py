"""Deterministic fallback analysis.

Used whenever the model is unavailable or returns something unusable.
Score is driven only by how many direct competitors the app, launch and
repository sources turned up.
"""

from __future__ import annotations

from typing import List

from ..constants import (
    GREAT_OPPORTUNITY_THRESHOLD,
    HEURISTIC_CONFIDENCE,
    HEURISTIC_MAX_COMPETITORS,
    HEURISTIC_PENALTY_PER_COMPETITOR,
)
from ..schemas.analysis_schema import Analysis, CompetitorSummary, verdict_for_score
from ..schemas.source_schema import AggregateSources

NICHE_OPPORTUNITIES = [
    "Target a specific industry vertical (e.g., healthcare, education)",
    "Focus on an underserved demographic (e.g., seniors, students)",
    "Specialize in a unique use case or workflow",
]

UNIQUE_ANGLES = [
    "AI-powered automation to reduce manual work",
    "Superior UX with focus on simplicity",
]

MARKET_GAPS = (
    "Existing solutions may lack personalization, modern UX, or affordable pricing. "
    "Consider what pain points remain unsolved."
)

_RECOMMENDATION_TAIL = (
    "Find your niche by targeting a specific segment, offering unique features, "
    "or building a better user experience than existing solutions."
)


def heuristic_score(sources: AggregateSources) -> int:
    return max(0, 100 - HEURISTIC_PENALTY_PER_COMPETITOR * sources.competitor_count())


def top_competitors(sources: AggregateSources) -> List[CompetitorSummary]:
    """First few competitors, app listings before launches before repositories."""
    n = HEURISTIC_MAX_COMPETITORS
    candidates = (
        [
            CompetitorSummary(name=a.name, url=a.url, description=f"{a.rating} stars", source="App Store")
            for a in sources.app_store[:n]
        ]
        + [
            CompetitorSummary(name=p.name, url=p.url, description=p.tagline, source="Product Hunt")
            for p in sources.product_hunt[:n]
        ]
        + [
            CompetitorSummary(name=g.name, url=g.url, description=g.description, source="GitHub")
            for g in sources.github[:n]
        ]
    )
    return candidates[:n]


def recommendation_for(score: int) -> str:
    if score > GREAT_OPPORTUNITY_THRESHOLD:
        return f"Great opportunity! {_RECOMMENDATION_TAIL}"
    return f"Market is competitive but not impossible. {_RECOMMENDATION_TAIL}"


def heuristic_analysis(sources: AggregateSources) -> Analysis:
    score = heuristic_score(sources)
    return Analysis(
        overall_score=score,
        verdict=verdict_for_score(score),
        confidence_score=HEURISTIC_CONFIDENCE,
        top_competitors=top_competitors(sources),
        niche_opportunities=list(NICHE_OPPORTUNITIES),
        unique_angles=list(UNIQUE_ANGLES),
        market_gaps=MARKET_GAPS,
        recommendation=recommendation_for(score),
        sentiment="Neutral",
        analysis_source="heuristic",
    )
