"""USPTO trademark adapter (RapidAPI).  Searches on the idea's first three words."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from ...schemas.source_schema import SourceKind, TrademarkMatch, TrademarkResult
from ..http_client import get_timeout
from .base import SourceAdapter, raise_for_upstream, require_env

_RAPIDAPI_HOST = "uspto-trademark.p.rapidapi.com"
_SEARCH_URL = f"https://{_RAPIDAPI_HOST}/v1/trademarkSearch/{{}}"
_MAX_MATCHES = 5


class TrademarkAdapter(SourceAdapter):
    kind = SourceKind.TRADEMARK
    name = "trademark"

    async def _search(self, idea: str, client: httpx.AsyncClient) -> TrademarkResult:
        api_key = require_env("RAPID_API_KEY")
        keywords = " ".join(idea.split()[:3])

        response = await client.get(
            _SEARCH_URL.format(quote(keywords, safe="")),
            headers={"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": _RAPIDAPI_HOST},
            timeout=get_timeout("uspto"),
        )
        raise_for_upstream(response, "USPTO")

        items = response.json().get("items") or []
        matches = [
            TrademarkMatch(
                name=item.get("markIdentification") or "",
                status=item.get("status") or "",
                serial_number=str(item.get("serialNumber") or ""),
            )
            for item in items[:_MAX_MATCHES]
        ]
        return TrademarkResult(found=bool(items), matches=matches)
