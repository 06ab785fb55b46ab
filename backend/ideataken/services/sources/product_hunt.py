"""Product Hunt adapter: recent high-vote launches that share words with the idea.

The v2 GraphQL API has no free-text post search, so the adapter pulls the
most-voted recent launches and keeps the ones whose name or tagline
shares at least one meaningful token with the idea.
"""

from __future__ import annotations

import re
from typing import List

import httpx

from ...schemas.source_schema import ProductHuntResult, SourceKind
from ..http_client import get_timeout
from .base import SourceAdapter, SourceError, raise_for_upstream, require_env

_GRAPHQL_URL = "https://api.producthunt.com/v2/api/graphql"
_MAX_RESULTS = 5
_TOKEN_RE = re.compile(r"[a-z0-9]+")

_POSTS_QUERY = """
query RecentLaunches($first: Int!, $postedAfter: DateTime) {
  posts(first: $first, order: VOTES, postedAfter: $postedAfter) {
    edges {
      node { name tagline votesCount createdAt url }
    }
  }
}
"""


def _keywords(text: str) -> set[str]:
    return {t for t in _TOKEN_RE.findall(text.lower()) if len(t) > 2}


class ProductHuntAdapter(SourceAdapter):
    kind = SourceKind.LAUNCH_POST
    name = "product_hunt"

    posted_after = "2023-01-01T00:00:00Z"

    async def _search(self, idea: str, client: httpx.AsyncClient) -> List[ProductHuntResult]:
        token = require_env("PRODUCT_HUNT_TOKEN")
        response = await client.post(
            _GRAPHQL_URL,
            json={
                "query": _POSTS_QUERY,
                "variables": {"first": 50, "postedAfter": self.posted_after},
            },
            headers={"Authorization": f"Bearer {token}"},
            timeout=get_timeout("product_hunt"),
        )
        raise_for_upstream(response, "Product Hunt")

        body = response.json()
        if body.get("errors"):
            raise SourceError(f"Product Hunt GraphQL error: {body['errors'][0].get('message', '')}")

        wanted = _keywords(idea)
        results = []
        for edge in (body.get("data") or {}).get("posts", {}).get("edges", []):
            node = edge.get("node") or {}
            text = f"{node.get('name', '')} {node.get('tagline', '')}"
            if not wanted & _keywords(text):
                continue
            results.append(
                ProductHuntResult(
                    name=node.get("name") or "",
                    url=node.get("url") or "",
                    tagline=node.get("tagline") or "",
                    upvotes=int(node.get("votesCount") or 0),
                    launch_date=(node.get("createdAt") or "").split("T")[0],
                )
            )
            if len(results) >= _MAX_RESULTS:
                break
        return results
