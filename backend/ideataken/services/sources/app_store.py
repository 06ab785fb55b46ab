"""App Store adapter: software titles from the public iTunes search API."""

from __future__ import annotations

from typing import List

import httpx

from ...schemas.source_schema import AppStoreResult, SourceKind
from ..http_client import get_timeout
from .base import SourceAdapter, raise_for_upstream

_ITUNES_URL = "https://itunes.apple.com/search"


def _tokens(text: str) -> set[str]:
    return set(text.lower().split())


def calculate_similarity(idea: str, text: str) -> int:
    """Shared lowercase whitespace tokens over the larger token set, scaled to 0-100.

    Punctuation stays attached to its token, so "tracker:" does not match "tracker".
    """
    a, b = _tokens(idea), _tokens(text)
    if not a or not b:
        return 0
    score = round(len(a & b) / max(len(a), len(b)) * 100)
    return max(0, min(100, score))


class AppStoreAdapter(SourceAdapter):
    kind = SourceKind.APP
    name = "app_store"

    async def _search(self, idea: str, client: httpx.AsyncClient) -> List[AppStoreResult]:
        response = await client.get(
            _ITUNES_URL,
            params={"term": idea, "entity": "software", "limit": 10},
            timeout=get_timeout("itunes"),
        )
        raise_for_upstream(response, "iTunes")

        results = []
        for app in response.json().get("results", []):
            name = app.get("trackName") or ""
            if not name:
                continue
            rating = float(app.get("averageUserRating") or 0.0)
            results.append(
                AppStoreResult(
                    name=name,
                    url=app.get("trackViewUrl") or "",
                    rating=max(0.0, min(5.0, rating)),
                    downloads=f"{app.get('userRatingCount') or 0}+ reviews",
                    similarity=calculate_similarity(
                        idea, f"{name} {app.get('description') or ''}"[:500]
                    ),
                )
            )
        return results
