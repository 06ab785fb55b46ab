"""Idea check pipeline: cache lookup, then fan-out, synthesis and persistence on a miss.

The admission gates (which also count the search against the user quota)
run in the route before this service is reached.
Analytics and history writes never fail the request.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from ..models.idea_check import utcnow
from ..schemas.check_schema import IdeaCheckResult
from . import analytics
from .aggregator import FanOutAggregator
from .cache_store import CacheStore
from .fingerprint import IdeaQuery
from .history import save_user_search
from .synthesis import AnalysisSynthesizer
from .timing import StepTimer

logger = logging.getLogger(__name__)


class IdeaCheckService:
    def __init__(
        self,
        db: Session,
        aggregator: FanOutAggregator,
        synthesizer: AnalysisSynthesizer,
    ):
        self.db = db
        self.aggregator = aggregator
        self.synthesizer = synthesizer
        self.cache = CacheStore(db)

    def _save_history(self, user_id: Optional[str], idea: str, result: IdeaCheckResult) -> None:
        check_id = result.id if not result.id.startswith("check_") else None
        save_user_search(self.db, user_id, idea, result.analysis, idea_check_id=check_id)

    async def check(self, query: IdeaQuery, user_id: Optional[str] = None) -> IdeaCheckResult:
        timer = StepTimer("check_idea")
        analytics.track_event(
            self.db, analytics.SEARCH_STARTED, {"idea": query.raw}, user_id=user_id
        )

        with timer.step("cache_lookup"):
            hit = self.cache.lookup(query.fingerprint)

        if hit is not None:
            logger.info(
                "[CHECK] Cache HIT %s (requested %d times)", query.fingerprint[:12], hit.times_requested
            )
            result = IdeaCheckResult(
                id=hit.id,
                idea=hit.idea,
                timestamp=hit.created_at,
                cached=True,
                sources=hit.sources,
                analysis=hit.analysis,
            )
            self._save_history(user_id, query.raw, result)
            analytics.track_event(
                self.db,
                analytics.SEARCH_CACHE_HIT,
                {"idea": query.raw, "times_requested": hit.times_requested},
                user_id=user_id,
            )
            timer.summary()
            return result

        logger.info("[CHECK] Cache MISS %s, fanning out", query.fingerprint[:12])
        async with timer.async_step("fan_out"):
            report = await self.aggregator.aggregate_with_report(query.raw)

        async with timer.async_step("synthesis"):
            analysis = await self.synthesizer.synthesize(query.raw, report.sources)

        with timer.step("cache_store"):
            stored = self.cache.store(
                query.fingerprint, query.raw, report.sources, analysis, user_id=user_id
            )

        result = IdeaCheckResult(
            id=stored.id if stored else f"check_{uuid.uuid4().hex}",
            idea=query.raw,
            timestamp=stored.created_at if stored else utcnow(),
            cached=False,
            sources=report.sources,
            analysis=analysis,
        )
        self._save_history(user_id, query.raw, result)
        analytics.track_event(
            self.db,
            analytics.SEARCH_COMPLETED,
            {
                "idea": query.raw,
                "score": analysis.overall_score,
                "verdict": analysis.verdict.value,
                "analysis_source": analysis.analysis_source,
                "failed_sources": report.failed_kinds,
                "duration_ms": round(report.duration_ms),
            },
            user_id=user_id,
        )
        timer.summary()
        return result
