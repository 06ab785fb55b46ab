"""GitHub adapter: repositories matching the idea, most-starred first."""

from __future__ import annotations

import os
from typing import List

import httpx

from ...schemas.source_schema import GitHubResult, SourceKind
from ..http_client import get_timeout
from .base import SourceAdapter, raise_for_upstream

_SEARCH_URL = "https://api.github.com/search/repositories"


class GitHubAdapter(SourceAdapter):
    kind = SourceKind.REPO
    name = "github"

    async def _search(self, idea: str, client: httpx.AsyncClient) -> List[GitHubResult]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        token = os.getenv("GITHUB_TOKEN")
        if token:
            headers["Authorization"] = f"token {token}"

        response = await client.get(
            _SEARCH_URL,
            params={"q": idea, "sort": "stars", "order": "desc", "per_page": 10},
            headers=headers,
            timeout=get_timeout("github"),
        )
        raise_for_upstream(response, "GitHub")

        return [
            GitHubResult(
                name=repo.get("name") or "",
                url=repo.get("html_url") or "",
                description=repo.get("description") or "No description",
                stars=int(repo.get("stargazers_count") or 0),
                language=repo.get("language") or "Unknown",
            )
            for repo in response.json().get("items", [])
        ]
