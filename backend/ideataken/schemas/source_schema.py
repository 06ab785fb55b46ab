"""Normalized result shapes, one model per source kind.

Every adapter produces exactly one of these shapes.  ``AggregateSources``
is the fixed-shape record the pipeline hands to synthesis and persists in
the cache: every key is always present, and a failed adapter contributes
its kind's neutral default instead of leaving a hole.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..constants import NEUTRAL_TREND_INTEREST, TREND_KEYWORD_MAX_CHARS


class SourceKind(str, Enum):
    DOMAIN = "domain"
    APP = "app"
    LAUNCH_POST = "launch_post"
    DISCUSSION = "discussion"
    REPO = "repo"
    WEB_PAGE = "web_page"
    NEWS_STORY = "news_story"
    RESEARCH = "research"
    TREND = "trend"
    TRADEMARK = "trademark"


class _SourceResult(BaseModel):
    model_config = ConfigDict(frozen=True)


class DomainResult(_SourceResult):
    domain: str
    available: bool = Field(..., description="False whenever availability could not be confirmed")
    extension: str


class AppStoreResult(_SourceResult):
    name: str
    url: str
    rating: float = Field(0.0, ge=0.0, le=5.0)
    downloads: str = ""
    similarity: int = Field(0, ge=0, le=100, description="Token overlap with the idea text, 0-100")


class ProductHuntResult(_SourceResult):
    name: str
    url: str
    tagline: str = ""
    upvotes: int = 0
    launch_date: str = ""


class RedditResult(_SourceResult):
    title: str
    url: str
    subreddit: str = ""
    upvotes: int = 0
    comments: int = 0


class GitHubResult(_SourceResult):
    name: str
    url: str
    description: str = "No description"
    stars: int = 0
    language: str = "Unknown"


class WebResult(_SourceResult):
    name: str
    url: str
    description: str = ""


class HackerNewsResult(_SourceResult):
    title: str
    url: str
    points: int = 0
    comments: int = 0
    created_at: str = ""


class ResearchPaperResult(_SourceResult):
    title: str
    url: str
    snippet: str = ""
    authors: str = "Unknown Authors"
    citations: int = 0


class TrendsData(_SourceResult):
    keyword: str = ""
    interest: int = Field(NEUTRAL_TREND_INTEREST, ge=0, le=100)
    trend: Literal["rising", "stable", "declining"] = "stable"


class TrademarkMatch(_SourceResult):
    name: str
    status: str = ""
    serial_number: str = ""


class TrademarkResult(_SourceResult):
    found: bool = False
    matches: list[TrademarkMatch] = Field(default_factory=list)


# Kind → field on AggregateSources.  Must cover every SourceKind.
SOURCE_FIELDS: dict[SourceKind, str] = {
    SourceKind.DOMAIN: "domains",
    SourceKind.APP: "app_store",
    SourceKind.LAUNCH_POST: "product_hunt",
    SourceKind.DISCUSSION: "reddit",
    SourceKind.REPO: "github",
    SourceKind.WEB_PAGE: "google",
    SourceKind.NEWS_STORY: "hacker_news",
    SourceKind.RESEARCH: "research",
    SourceKind.TREND: "trends",
    SourceKind.TRADEMARK: "trademark",
}


def neutral_trends(idea: str) -> TrendsData:
    return TrendsData(
        keyword=idea[:TREND_KEYWORD_MAX_CHARS],
        interest=NEUTRAL_TREND_INTEREST,
        trend="stable",
    )


def default_for(kind: SourceKind, idea: str) -> Any:
    """Neutral value substituted when the adapter for *kind* fails."""
    if kind is SourceKind.TREND:
        return neutral_trends(idea)
    if kind is SourceKind.TRADEMARK:
        return TrademarkResult(found=False, matches=[])
    return []


class AggregateSources(BaseModel):
    """All source results for one idea.  Never partially shaped."""

    model_config = ConfigDict(frozen=True)

    domains: list[DomainResult] = Field(default_factory=list)
    app_store: list[AppStoreResult] = Field(default_factory=list)
    product_hunt: list[ProductHuntResult] = Field(default_factory=list)
    reddit: list[RedditResult] = Field(default_factory=list)
    github: list[GitHubResult] = Field(default_factory=list)
    google: list[WebResult] = Field(default_factory=list)
    hacker_news: list[HackerNewsResult] = Field(default_factory=list)
    research: list[ResearchPaperResult] = Field(default_factory=list)
    trends: TrendsData = Field(default_factory=TrendsData)
    trademark: TrademarkResult = Field(default_factory=TrademarkResult)

    @classmethod
    def empty(cls, idea: str) -> "AggregateSources":
        return cls.from_values(idea, {})

    @classmethod
    def from_values(cls, idea: str, values: dict[SourceKind, Any]) -> "AggregateSources":
        """Build the record from per-kind values, defaulting every missing kind."""
        fields = {
            field: values[kind] if kind in values else default_for(kind, idea)
            for kind, field in SOURCE_FIELDS.items()
        }
        return cls(**fields)

    def competitor_count(self) -> int:
        return len(self.app_store) + len(self.product_hunt) + len(self.github)
