from sqlalchemy import Column, Date, DateTime, Integer, String

from ..database import Base
from .idea_check import utcnow


class User(Base):
    """Subscriber profile.  Identity comes from the external auth provider."""

    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    email = Column(String, unique=True, index=True, nullable=True)
    plan = Column(String(16), default="free", nullable=False)  # "free" | "pro"

    # Day-scoped quota counter; stale when searches_day != today (UTC)
    searches_today = Column(Integer, default=0, nullable=False)
    searches_day = Column(Date, nullable=True)

    searches_this_month = Column(Integer, default=0, nullable=False)
    total_searches = Column(Integer, default=0, nullable=False)
    last_search_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
