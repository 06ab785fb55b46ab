"""SerpAPI-backed adapters: Google web search, Google Scholar and Google Trends.

All three share one endpoint and one key (``SERP_API_KEY``); they differ
only in the ``engine`` parameter and in how the reply is normalized.
"""

from __future__ import annotations

from typing import Any, Dict, List

import httpx

from ...constants import NEUTRAL_TREND_INTEREST, TREND_KEYWORD_MAX_CHARS
from ...schemas.source_schema import (
    ResearchPaperResult,
    SourceKind,
    TrendsData,
    WebResult,
)
from ..http_client import get_timeout
from .base import SourceAdapter, SourceError, raise_for_upstream, require_env

_SERPAPI_URL = "https://serpapi.com/search"


async def serpapi_search(client: httpx.AsyncClient, params: Dict[str, Any]) -> Dict[str, Any]:
    api_key = require_env("SERP_API_KEY")
    response = await client.get(
        _SERPAPI_URL,
        params={**params, "api_key": api_key},
        timeout=get_timeout("serpapi"),
    )
    raise_for_upstream(response, "SerpAPI")
    body = response.json()
    if body.get("error"):
        raise SourceError(f"SerpAPI error: {body['error']}")
    return body


class WebSearchAdapter(SourceAdapter):
    kind = SourceKind.WEB_PAGE
    name = "google"

    async def _search(self, idea: str, client: httpx.AsyncClient) -> List[WebResult]:
        body = await serpapi_search(
            client, {"engine": "google", "q": f"{idea} startup app website", "num": 10}
        )
        return [
            WebResult(
                name=r.get("title") or "",
                url=r.get("link") or "",
                description=r.get("snippet") or "",
            )
            for r in body.get("organic_results", [])
        ]


class ResearchAdapter(SourceAdapter):
    kind = SourceKind.RESEARCH
    name = "research"

    async def _search(self, idea: str, client: httpx.AsyncClient) -> List[ResearchPaperResult]:
        body = await serpapi_search(client, {"engine": "google_scholar", "q": idea, "num": 5})
        papers = []
        for r in body.get("organic_results", []):
            cited_by = (r.get("inline_links") or {}).get("cited_by") or {}
            papers.append(
                ResearchPaperResult(
                    title=r.get("title") or "",
                    url=r.get("link") or "",
                    snippet=r.get("snippet") or "",
                    authors=(r.get("publication_info") or {}).get("summary") or "Unknown Authors",
                    citations=int(cited_by.get("total") or 0),
                )
            )
        return papers


def trend_label(interest: int) -> str:
    if interest > 60:
        return "rising"
    if interest > 40:
        return "stable"
    return "declining"


def latest_interest(body: Dict[str, Any]) -> int:
    """Interest value of the most recent timeline point, clamped to 0-100."""
    timeline = (body.get("interest_over_time") or {}).get("timeline_data") or []
    if not timeline:
        return NEUTRAL_TREND_INTEREST
    values = timeline[-1].get("values") or []
    if not values:
        return NEUTRAL_TREND_INTEREST
    raw = values[0].get("extracted_value", values[0].get("value"))
    try:
        interest = int(raw)
    except (TypeError, ValueError):
        return NEUTRAL_TREND_INTEREST
    return max(0, min(100, interest))


class TrendsAdapter(SourceAdapter):
    kind = SourceKind.TREND
    name = "trends"

    async def _search(self, idea: str, client: httpx.AsyncClient) -> TrendsData:
        body = await serpapi_search(client, {"engine": "google_trends", "q": idea})
        interest = latest_interest(body)
        return TrendsData(
            keyword=idea[:TREND_KEYWORD_MAX_CHARS],
            interest=interest,
            trend=trend_label(interest),
        )
