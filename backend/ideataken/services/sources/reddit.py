"""Reddit adapter: discussion threads across r/all via the official API (PRAW).

PRAW is synchronous, so the search runs on a worker thread and the
adapter deadline still applies to it.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import List

import httpx
import praw

from ...schemas.source_schema import RedditResult, SourceKind
from .base import SourceAdapter

logger = logging.getLogger(__name__)

_POST_LIMIT = 10


def get_reddit_client() -> praw.Reddit:
    """Build a read-only PRAW Reddit instance from environment variables.

    Required env vars:
        REDDIT_CLIENT_ID
        REDDIT_CLIENT_SECRET
        REDDIT_USER_AGENT   (optional)
    """
    client_id = os.getenv("REDDIT_CLIENT_ID")
    client_secret = os.getenv("REDDIT_CLIENT_SECRET")
    user_agent = os.getenv("REDDIT_USER_AGENT", "IdeaTaken/1.0 (competition check)")

    if not client_id or not client_secret:
        raise EnvironmentError(
            "REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET environment variables must be set"
        )

    return praw.Reddit(
        client_id=client_id,
        client_secret=client_secret,
        user_agent=user_agent,
        check_for_async=False,
    )


def _search_sync(idea: str) -> List[RedditResult]:
    reddit = get_reddit_client()
    results = []
    for submission in reddit.subreddit("all").search(idea, sort="relevance", limit=_POST_LIMIT):
        results.append(
            RedditResult(
                title=submission.title or "",
                url=f"https://reddit.com{submission.permalink}",
                subreddit=str(submission.subreddit),
                upvotes=submission.score or 0,
                comments=submission.num_comments or 0,
            )
        )
    return results


class RedditAdapter(SourceAdapter):
    kind = SourceKind.DISCUSSION
    name = "reddit"

    async def _search(self, idea: str, client: httpx.AsyncClient) -> List[RedditResult]:
        return await asyncio.to_thread(_search_sync, idea)
