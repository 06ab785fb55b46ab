"""Centralized constants shared across the pipeline, the governor, and routes.

This module is the SINGLE SOURCE OF TRUTH for verdict bands, quota
ceilings, and prompt excerpt sizes.  Values that operators may need to
tune are read from the environment with safe defaults.
"""

from __future__ import annotations

import os


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


# ── Idea input bounds ───────────────────────────────────────────────────
IDEA_MIN_LENGTH: int = 3
IDEA_MAX_LENGTH: int = 500

# ── Anonymous (network identity) rate limit ─────────────────────────────
RATE_LIMIT: int = _env_int("RATE_LIMIT", 10)                      # requests per window
RATE_LIMIT_WINDOW_SECONDS: float = _env_float("RATE_LIMIT_WINDOW_SECONDS", 60.0)
RATE_LIMIT_MAX_IDENTITIES: int = _env_int("RATE_LIMIT_MAX_IDENTITIES", 10_000)
UNKNOWN_IDENTITY: str = "unknown"

# ── Per-user daily quota by plan ────────────────────────────────────────
PLAN_FREE: str = "free"
PLAN_PRO: str = "pro"
FREE_TIER_DAILY_LIMIT: int = _env_int("FREE_TIER_DAILY_LIMIT", 3)

# None means unlimited.
PLAN_DAILY_LIMITS: dict[str, int | None] = {
    PLAN_FREE: FREE_TIER_DAILY_LIMIT,
    PLAN_PRO: None,
}

# ── Verdict bands ───────────────────────────────────────────────────────
# Upper bounds (inclusive).  Anything above OPPORTUNITY_MAX is "Wide Open".
TAKEN_MAX: int = 25
CROWDED_MAX: int = 60
OPPORTUNITY_MAX: int = 85

# Score strictly above this earns the "Great opportunity!" recommendation.
GREAT_OPPORTUNITY_THRESHOLD: int = 60

# ── Heuristic scorer ────────────────────────────────────────────────────
HEURISTIC_PENALTY_PER_COMPETITOR: int = 10
HEURISTIC_CONFIDENCE: int = 70
HEURISTIC_MAX_COMPETITORS: int = 3

# Confidence assumed when the model omits one.
DEFAULT_AI_CONFIDENCE: int = 85

# ── Prompt excerpt sizes (items per source) ─────────────────────────────
PROMPT_EXCERPT_LIMITS: dict[str, int] = {
    "app_store": 5,
    "google": 5,
    "product_hunt": 3,
    "reddit": 3,
    "hacker_news": 3,
    "research": 3,
    "github": 3,
}

# ── Source adapters ─────────────────────────────────────────────────────
TREND_KEYWORD_MAX_CHARS: int = 50
NEUTRAL_TREND_INTEREST: int = 50
DOMAIN_EXTENSION: str = ".com"
MAX_DOMAIN_CANDIDATES: int = 8
