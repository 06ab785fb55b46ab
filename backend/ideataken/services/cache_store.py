"""Fingerprint-keyed cache of completed idea checks.

A hit bumps the row's request counter with a single atomic UPDATE, so
concurrent hits never lose increments.  The cache is an optimization:
lookup errors read as a miss and store errors are logged and swallowed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.idea_check import IdeaCheck, utcnow
from ..schemas.analysis_schema import Analysis
from ..schemas.source_schema import AggregateSources

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedCheckRecord:
    id: str
    fingerprint: str
    idea: str
    sources: AggregateSources
    analysis: Analysis
    created_at: datetime
    times_requested: int
    cached: bool


def _to_record(row: IdeaCheck, cached: bool) -> CachedCheckRecord:
    return CachedCheckRecord(
        id=str(row.id),
        fingerprint=row.fingerprint,
        idea=row.idea,
        sources=AggregateSources.model_validate(json.loads(row.sources_json)),
        analysis=Analysis.model_validate(json.loads(row.analysis_json)),
        created_at=row.created_at,
        times_requested=row.times_requested,
        cached=cached,
    )


class CacheStore:
    def __init__(self, db: Session):
        self.db = db

    def _bump(self, fingerprint: str) -> int:
        result = self.db.execute(
            update(IdeaCheck)
            .where(IdeaCheck.fingerprint == fingerprint)
            .values(
                times_requested=IdeaCheck.times_requested + 1,
                last_requested_at=utcnow(),
            )
        )
        self.db.commit()
        return result.rowcount

    def _get(self, fingerprint: str) -> Optional[IdeaCheck]:
        return self.db.query(IdeaCheck).filter(IdeaCheck.fingerprint == fingerprint).first()

    def lookup(self, fingerprint: str) -> Optional[CachedCheckRecord]:
        """Exact-match lookup.  A hit counts as one more request for the idea.

        A row that no longer decodes reads as a miss and is not counted;
        the recomputed check repairs it through ``store``.
        """
        try:
            row = self._get(fingerprint)
            if row is None:
                return None
            _to_record(row, cached=True)  # decode before counting
            if not self._bump(fingerprint):
                return None
            return _to_record(self._get(fingerprint), cached=True)
        except (SQLAlchemyError, ValueError) as exc:
            self.db.rollback()
            logger.warning("[CACHE] Lookup failed, treating as miss: %s", exc)
            return None

    def _repair_if_undecodable(self, existing: IdeaCheck, columns: dict) -> None:
        try:
            _to_record(existing, cached=False)
            return
        except ValueError as exc:
            logger.warning("[CACHE] Replacing undecodable entry %s: %s", existing.fingerprint[:12], exc)
        self.db.execute(
            update(IdeaCheck)
            .where(IdeaCheck.fingerprint == existing.fingerprint)
            .values(**columns)
        )

    def store(
        self,
        fingerprint: str,
        idea: str,
        sources: AggregateSources,
        analysis: Analysis,
        user_id: Optional[str] = None,
    ) -> Optional[CachedCheckRecord]:
        """Insert the completed check.

        On a fingerprint race the first row is kept and counted; an
        existing row that no longer decodes is overwritten with this one.
        """
        columns = dict(
            overall_score=analysis.overall_score,
            verdict=analysis.verdict.value,
            recommendation=analysis.recommendation,
            sources_json=sources.model_dump_json(),
            analysis_json=analysis.model_dump_json(),
        )
        row = IdeaCheck(fingerprint=fingerprint, idea=idea, user_id=user_id, **columns)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return _to_record(row, cached=False)
        except IntegrityError:
            self.db.rollback()
            logger.info("[CACHE] Fingerprint %s already stored; counting the request", fingerprint[:12])
            try:
                existing = self._get(fingerprint)
                if existing is None:
                    return None
                self._repair_if_undecodable(existing, columns)
                self._bump(fingerprint)
                return _to_record(self._get(fingerprint), cached=False)
            except Exception:
                self.db.rollback()
                logger.exception("[CACHE] Failed to update existing entry")
                return None
        except Exception:
            self.db.rollback()
            logger.exception("[CACHE] Failed to store idea check")
            return None
