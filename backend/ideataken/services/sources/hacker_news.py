"""Hacker News adapter: stories from the Algolia HN search API (no key needed)."""

from __future__ import annotations

from typing import List

import httpx

from ...schemas.source_schema import HackerNewsResult, SourceKind
from ..http_client import get_timeout
from .base import SourceAdapter, raise_for_upstream

_ALGOLIA_URL = "https://hn.algolia.com/api/v1/search"
_ITEM_URL = "https://news.ycombinator.com/item?id={}"


class HackerNewsAdapter(SourceAdapter):
    kind = SourceKind.NEWS_STORY
    name = "hacker_news"

    async def _search(self, idea: str, client: httpx.AsyncClient) -> List[HackerNewsResult]:
        response = await client.get(
            _ALGOLIA_URL,
            params={"query": idea, "tags": "story", "hitsPerPage": 5},
            timeout=get_timeout("hacker_news"),
        )
        raise_for_upstream(response, "Hacker News")

        return [
            HackerNewsResult(
                title=hit.get("title") or "",
                url=hit.get("url") or _ITEM_URL.format(hit.get("objectID", "")),
                points=int(hit.get("points") or 0),
                comments=int(hit.get("num_comments") or 0),
                created_at=hit.get("created_at") or "",
            )
            for hit in response.json().get("hits", [])
        ]
