"""
Domain Availability Adapter

Generates short brandable names for the idea, then checks each
candidate under the checked extensions with a DNS lookup.  A name
that resolves is taken; a name the resolver reports as nonexistent is
reported available.  Any other resolver failure counts as unavailable.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import socket
from typing import List

import httpx
from openai import AsyncOpenAI

from ...constants import DOMAIN_EXTENSION, MAX_DOMAIN_CANDIDATES
from ...schemas.source_schema import DomainResult, SourceKind
from ..http_client import Timeouts
from .base import SourceAdapter

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^[a-z]+$")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_NAME_MODEL = "gpt-4o-mini"


def fallback_names(idea: str) -> List[str]:
    """Deterministic candidates built from the idea's longer words."""
    words = [_NON_ALNUM_RE.sub("", w) for w in idea.lower().split()]
    words = [w for w in words if len(w) > 3][:3]
    if not words:
        return ["myapp", "getapp", "useapp"]

    base = words[0]
    candidates = [base, f"{base}app", f"{base}hq", f"get{base}", f"{base}io"]
    if len(words) > 1:
        candidates.append(f"{words[0]}{words[1]}")
    return list(dict.fromkeys(candidates))[:6]


def clean_names(text: str) -> List[str]:
    """One name per line; keep only lowercase alphabetic names, deduplicated, capped."""
    names = [line.strip().lower() for line in text.splitlines()]
    names = [n for n in names if _NAME_RE.match(n)]
    return list(dict.fromkeys(names))[:MAX_DOMAIN_CANDIDATES]


async def generate_names(idea: str) -> List[str]:
    """Ask the model for brandable names; fall back to word-derived names."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        return fallback_names(idea)

    prompt = f"""
    Generate 8 creative, brandable domain names for this startup idea: "{idea}"

    Short (5-12 characters), memorable, easy to spell. Portmanteaus, made-up
    words and metaphors are fine; avoid literal descriptions.

    Return ONLY the names, one per line, no extensions or explanations.
    """
    try:
        client = AsyncOpenAI(api_key=api_key, timeout=Timeouts.OPENAI)
        response = await client.chat.completions.create(
            model=_NAME_MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.7,
            max_tokens=120,
        )
        names = clean_names(response.choices[0].message.content or "")
    except Exception as exc:
        logger.warning("[DOMAINS] Name generation failed, using fallback names: %s", exc)
        return fallback_names(idea)

    return names or fallback_names(idea)


async def is_available(domain: str) -> bool:
    """True only when the resolver says the name does not exist."""
    loop = asyncio.get_running_loop()
    try:
        await asyncio.wait_for(loop.getaddrinfo(domain, None), timeout=Timeouts.DNS)
    except socket.gaierror as exc:
        return exc.errno == socket.EAI_NONAME
    except (asyncio.TimeoutError, OSError):
        return False
    return False


class DomainAdapter(SourceAdapter):
    kind = SourceKind.DOMAIN
    name = "domains"
    timeout = Timeouts.DOMAIN_ADAPTER_MAX

    extension = DOMAIN_EXTENSION

    async def _search(self, idea: str, client: httpx.AsyncClient) -> List[DomainResult]:
        names = await generate_names(idea)
        domains = [f"{n}{self.extension}" for n in names]
        available = await asyncio.gather(*(is_available(d) for d in domains))
        return [
            DomainResult(domain=d, available=ok, extension=self.extension)
            for d, ok in zip(domains, available)
        ]
