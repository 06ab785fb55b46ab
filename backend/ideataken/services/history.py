"""Per-user search history and the popular-ideas listing."""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.idea_check import IdeaCheck
from ..models.user_search import UserSearch
from ..schemas.analysis_schema import Analysis
from ..schemas.history_schema import PopularIdea, UserSearchItem

logger = logging.getLogger(__name__)


def save_user_search(
    db: Session,
    user_id: Optional[str],
    idea: str,
    analysis: Analysis,
    idea_check_id: Optional[str] = None,
) -> None:
    """Append to the user's history.  Anonymous requests are not recorded."""
    if not user_id:
        return
    try:
        db.add(
            UserSearch(
                user_id=user_id,
                idea_check_id=uuid.UUID(idea_check_id) if idea_check_id else None,
                idea=idea,
                overall_score=analysis.overall_score,
                verdict=analysis.verdict.value,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("[HISTORY] Failed to save search for %s", user_id)


def get_user_search_history(db: Session, user_id: str, limit: int = 20) -> List[UserSearchItem]:
    rows = (
        db.query(UserSearch)
        .filter(UserSearch.user_id == user_id)
        .order_by(UserSearch.created_at.desc())
        .limit(limit)
        .all()
    )
    return [
        UserSearchItem(
            id=str(row.id),
            idea=row.idea,
            idea_check_id=str(row.idea_check_id) if row.idea_check_id else None,
            overall_score=row.overall_score,
            verdict=row.verdict,
            created_at=row.created_at,
        )
        for row in rows
    ]


def get_popular_ideas(db: Session, limit: int = 10) -> List[PopularIdea]:
    """Ideas requested more than once, most requested first."""
    rows = (
        db.query(IdeaCheck)
        .filter(IdeaCheck.times_requested > 1)
        .order_by(IdeaCheck.times_requested.desc(), IdeaCheck.last_requested_at.desc())
        .limit(limit)
        .all()
    )
    return [
        PopularIdea(
            idea=row.idea,
            overall_score=row.overall_score,
            verdict=row.verdict,
            times_requested=row.times_requested,
        )
        for row in rows
    ]
