"""Per-user daily search quota.

Counters on the ``users`` row are scoped to a UTC calendar day: a
counter stamped with an earlier day reads as zero.  Admission and
counting happen in one conditional UPDATE, so concurrent requests from
the same user cannot overshoot the plan limit.  The quota fails open
when the profile cannot be read or written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from sqlalchemy import case, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import PLAN_DAILY_LIMITS, PLAN_FREE
from ..models.idea_check import utcnow
from ..models.user import User

logger = logging.getLogger(__name__)

LIMIT_REACHED = "Daily search limit reached. Upgrade to Pro for unlimited searches."


@dataclass(frozen=True)
class QuotaDecision:
    allowed: bool
    reason: str = ""
    searches_remaining: Optional[int] = None  # None means unlimited
    plan: Optional[str] = None


def _today() -> date:
    return utcnow().date()


def searches_used_today(user: User, today: date) -> int:
    if user.searches_day != today:
        return 0
    return user.searches_today or 0


def _counted(today: date) -> dict[str, Any]:
    """Column updates for one more search on *today*."""
    return {
        "searches_today": case((User.searches_day == today, User.searches_today + 1), else_=1),
        "searches_day": today,
        "searches_this_month": User.searches_this_month + 1,
        "total_searches": User.total_searches + 1,
        "last_search_at": utcnow(),
    }


def reserve_user_search(db: Session, user_id: Optional[str], today: Optional[date] = None) -> QuotaDecision:
    """Admit one search against the user's daily quota and count it.

    Anonymous and unknown users are allowed without counting.  A denied
    request leaves the counters untouched.
    """
    if not user_id:
        return QuotaDecision(allowed=True)

    today = today or _today()
    try:
        user = db.get(User, user_id)
        if user is None:
            return QuotaDecision(allowed=True)

        plan = user.plan or PLAN_FREE
        limit = PLAN_DAILY_LIMITS.get(plan, PLAN_DAILY_LIMITS[PLAN_FREE])
        stmt = update(User).where(User.id == user_id)
        if limit is not None:
            stmt = stmt.where(
                or_(
                    User.searches_day.is_(None),
                    User.searches_day != today,
                    User.searches_today < limit,
                )
            )
        result = db.execute(stmt.values(**_counted(today)).execution_options(synchronize_session=False))
        db.commit()
        if limit is None:
            return QuotaDecision(allowed=True, plan=plan)
        if result.rowcount == 0:
            return QuotaDecision(allowed=False, reason=LIMIT_REACHED, searches_remaining=0, plan=plan)
        db.refresh(user)
        remaining = max(0, limit - searches_used_today(user, today))
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("[QUOTA] Could not reserve a search for %s, allowing: %s", user_id, exc)
        return QuotaDecision(allowed=True)

    return QuotaDecision(allowed=True, searches_remaining=remaining, plan=plan)
