"""
Async HTTP Client Configuration

Timeout presets for each external source and a factory for the
``httpx.AsyncClient`` shared by one aggregation round.
"""

import httpx

from ..constants import _env_float


# Timeout configurations (in seconds)
class Timeouts:
    """Timeout presets for external services."""
    ITUNES = 8.0
    PRODUCT_HUNT = 8.0
    REDDIT = 8.0
    GITHUB = 8.0
    SERPAPI = 10.0      # Google search, Trends and Scholar via SerpAPI
    HACKER_NEWS = 6.0
    USPTO = 8.0
    OPENAI = 12.0
    DNS = 4.0

    # Per-adapter deadline; a slower adapter is treated as failed
    ADAPTER_MAX = _env_float("ADAPTER_TIMEOUT_SECONDS", 10.0)
    # Domain adapter runs a name-generation call before its DNS lookups
    DOMAIN_ADAPTER_MAX = _env_float("DOMAIN_ADAPTER_TIMEOUT_SECONDS", 15.0)


# Status codes where a second attempt cannot help
NON_RETRYABLE_CODES = {400, 401, 402, 403, 404, 422}


def build_client() -> httpx.AsyncClient:
    """New pooled client for one aggregation round.  Caller closes it."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(10.0, connect=5.0),
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=50),
        follow_redirects=True,
        headers={"User-Agent": "IdeaTaken/1.0"},
    )


def get_timeout(service: str) -> httpx.Timeout:
    """Get timeout configuration for a service."""
    timeouts = {
        "itunes": Timeouts.ITUNES,
        "product_hunt": Timeouts.PRODUCT_HUNT,
        "reddit": Timeouts.REDDIT,
        "github": Timeouts.GITHUB,
        "serpapi": Timeouts.SERPAPI,
        "hacker_news": Timeouts.HACKER_NEWS,
        "uspto": Timeouts.USPTO,
        "openai": Timeouts.OPENAI,
    }
    seconds = timeouts.get(service.lower(), 10.0)
    return httpx.Timeout(seconds, connect=5.0)


def is_non_retryable_error(status_code: int) -> bool:
    """Check if an HTTP error should not be retried."""
    return status_code in NON_RETRYABLE_CODES
