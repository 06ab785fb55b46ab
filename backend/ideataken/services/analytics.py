"""Product analytics events.  Writes are fire-and-forget."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models.analytics_event import AnalyticsEvent

logger = logging.getLogger(__name__)

SEARCH_STARTED = "idea_search_started"
SEARCH_CACHE_HIT = "idea_search_cache_hit"
SEARCH_COMPLETED = "idea_search_completed"
SEARCH_ERROR = "idea_search_error"
SEARCH_CHALLENGED = "idea_search_challenged"


def track_event(
    db: Session,
    event_name: str,
    data: Optional[dict[str, Any]] = None,
    user_id: Optional[str] = None,
    session_id: Optional[str] = None,
) -> None:
    """Record one event.  Failures are logged and never reach the caller."""
    try:
        db.add(
            AnalyticsEvent(
                user_id=user_id,
                event_name=event_name,
                event_data_json=json.dumps(data or {}, default=str),
                session_id=session_id,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("[ANALYTICS] Failed to track %s", event_name)
