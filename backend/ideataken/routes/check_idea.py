"""Idea Check Route.

Gates the request (network rate limit, then per-user quota), then hands
off to ``IdeaCheckService``.  The route is thin: it only translates gate
decisions and faults into HTTP responses and sets the response headers.
"""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.check_schema import IdeaCheckRequest, IdeaCheckResult
from ..services import analytics
from ..services.aggregator import FanOutAggregator
from ..services.fingerprint import IdeaQuery
from ..services.governor import client_identity, evaluate_gates
from ..services.idea_check_service import IdeaCheckService
from ..services.rate_limiter import RateLimiter
from ..services.synthesis import AnalysisSynthesizer
from .dependencies import get_aggregator, get_rate_limiter, get_synthesizer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Idea Check"])


@router.post(
    "/check-idea",
    response_model=IdeaCheckResult,
    summary="Check a Startup Idea",
    response_description="Aggregated sources and the viability analysis",
    responses={
        400: {"description": "Invalid idea text"},
        403: {"description": "Daily search limit reached"},
        429: {"description": "Too many requests from this address"},
    },
)
async def check_idea(
    payload: IdeaCheckRequest,
    request: Request,
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
    aggregator: FanOutAggregator = Depends(get_aggregator),
    synthesizer: AnalysisSynthesizer = Depends(get_synthesizer),
):
    """Validate one idea against every source, served from cache when seen before."""
    start = time.perf_counter()
    identity = client_identity(request)

    gates = evaluate_gates(limiter, db, identity, payload.user_id)
    rate_headers = {
        "X-RateLimit-Limit": str(gates.rate.limit),
        "X-RateLimit-Remaining": str(gates.rate.remaining),
    }

    if not gates.rate.allowed:
        return JSONResponse(
            status_code=429,
            content={
                "error": "Too many requests. Please try again later.",
                "retry_after": gates.rate.retry_after,
            },
            headers={**rate_headers, "Retry-After": str(gates.rate.retry_after)},
        )

    if gates.quota is not None and not gates.quota.allowed:
        return JSONResponse(
            status_code=403,
            content={
                "error": gates.quota.reason,
                "searches_remaining": 0,
                "upgrade_required": True,
            },
            headers=rate_headers,
        )

    query = IdeaQuery.parse(payload.idea)
    service = IdeaCheckService(db, aggregator, synthesizer)
    try:
        result = await service.check(query, user_id=payload.user_id)
    except Exception as exc:
        logger.exception("[CHECK] Pipeline failed for %r", query.raw[:60])
        analytics.track_event(
            db,
            analytics.SEARCH_ERROR,
            {"idea": query.raw, "error": str(exc)},
            user_id=payload.user_id,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "Failed to check idea",
                "detail": str(exc),
            },
        )

    duration_ms = (time.perf_counter() - start) * 1000
    return JSONResponse(
        content=result.model_dump(mode="json"),
        headers={
            **rate_headers,
            "X-Cache": "HIT" if result.cached else "MISS",
            "X-Response-Time": f"{duration_ms:.0f}ms",
        },
    )
