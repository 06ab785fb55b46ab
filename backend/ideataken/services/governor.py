"""Admission gates in front of the costly pipeline.

The network gate runs first and is cheap; the quota reservation only
happens for requests that pass it, and counts the search when admitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from ..constants import UNKNOWN_IDENTITY
from .quota import QuotaDecision, reserve_user_search
from .rate_limiter import RateDecision, RateLimiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateResult:
    rate: RateDecision
    quota: Optional[QuotaDecision] = None

    @property
    def allowed(self) -> bool:
        return self.rate.allowed and (self.quota is None or self.quota.allowed)


def client_identity(request: Request) -> str:
    """First address in X-Forwarded-For, else "unknown"."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    return first or UNKNOWN_IDENTITY


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def evaluate_gates(
    limiter: RateLimiter,
    db: Session,
    identity: str,
    user_id: Optional[str],
) -> GateResult:
    rate = limiter.check(identity)
    if not rate.allowed:
        logger.info("[GATE] Rate limit exceeded for %s (retry in %ds)", identity, rate.retry_after)
        return GateResult(rate=rate)

    quota = reserve_user_search(db, user_id)
    if not quota.allowed:
        logger.info("[GATE] Daily quota exhausted for user %s", user_id)
    return GateResult(rate=rate, quota=quota)
