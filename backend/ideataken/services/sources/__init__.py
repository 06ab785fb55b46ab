"""Source adapters: one per external data source, all behind ``SourceAdapter``."""

from .app_store import AppStoreAdapter
from .base import SourceAdapter, SourceError
from .domains import DomainAdapter
from .github import GitHubAdapter
from .hacker_news import HackerNewsAdapter
from .product_hunt import ProductHuntAdapter
from .reddit import RedditAdapter
from .serpapi import ResearchAdapter, TrendsAdapter, WebSearchAdapter
from .trademarks import TrademarkAdapter


def default_adapters() -> list[SourceAdapter]:
    """The full adapter set, one per source kind."""
    return [
        DomainAdapter(),
        AppStoreAdapter(),
        ProductHuntAdapter(),
        RedditAdapter(),
        GitHubAdapter(),
        WebSearchAdapter(),
        HackerNewsAdapter(),
        ResearchAdapter(),
        TrendsAdapter(),
        TrademarkAdapter(),
    ]


__all__ = [
    "AppStoreAdapter",
    "DomainAdapter",
    "GitHubAdapter",
    "HackerNewsAdapter",
    "ProductHuntAdapter",
    "RedditAdapter",
    "ResearchAdapter",
    "SourceAdapter",
    "SourceError",
    "TrademarkAdapter",
    "TrendsAdapter",
    "WebSearchAdapter",
    "default_adapters",
]
