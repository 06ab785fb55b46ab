from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, computed_field, model_validator

from ..constants import CROWDED_MAX, OPPORTUNITY_MAX, TAKEN_MAX


class Verdict(str, Enum):
    """Market-competitiveness tiers, most open first."""

    WIDE_OPEN = "Wide Open"
    OPPORTUNITY = "Opportunity"
    CROWDED = "Crowded"
    TAKEN = "Taken"

    @property
    def rank(self) -> int:
        """0 for Taken up to 3 for Wide Open."""
        return _VERDICT_RANK[self]


_VERDICT_RANK = {
    Verdict.TAKEN: 0,
    Verdict.CROWDED: 1,
    Verdict.OPPORTUNITY: 2,
    Verdict.WIDE_OPEN: 3,
}


def verdict_for_score(score: int) -> Verdict:
    """Canonical score → verdict banding.  Total over [0, 100]."""
    if score <= TAKEN_MAX:
        return Verdict.TAKEN
    if score <= CROWDED_MAX:
        return Verdict.CROWDED
    if score <= OPPORTUNITY_MAX:
        return Verdict.OPPORTUNITY
    return Verdict.WIDE_OPEN


class CompetitorSummary(BaseModel):
    name: str
    url: str = ""
    description: str = ""
    source: str = Field("", description="Source tag, e.g. 'App Store', 'Product Hunt', 'GitHub'")


class Analysis(BaseModel):
    """Viability analysis for one idea, produced by the model or the heuristic."""

    overall_score: int = Field(..., ge=0, le=100)
    verdict: Verdict
    confidence_score: int = Field(..., ge=0, le=100)
    top_competitors: list[CompetitorSummary] = Field(default_factory=list)
    key_risks: list[str] = Field(default_factory=list)
    niche_opportunities: list[str] = Field(default_factory=list)
    unique_angles: list[str] = Field(default_factory=list)
    market_gaps: str = ""
    recommendation: str
    sentiment: Literal["Positive", "Neutral", "Critical"] = "Neutral"
    analysis_source: Literal["ai", "heuristic"] = "heuristic"
    verdict_adjusted: bool = Field(
        False,
        description="True when the model's verdict label disagreed with its score and was re-banded",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def confidence_level(self) -> Literal["High", "Medium", "Low"]:
        if self.confidence_score >= 75:
            return "High"
        if self.confidence_score >= 50:
            return "Medium"
        return "Low"

    @model_validator(mode="after")
    def verdict_matches_score(self) -> "Analysis":
        expected = verdict_for_score(self.overall_score)
        if self.verdict is not expected:
            raise ValueError(
                f"verdict {self.verdict.value!r} is inconsistent with score "
                f"{self.overall_score} (expected {expected.value!r})"
            )
        return self
