import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.types import TypeDecorator, CHAR


from ..database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite stores DateTime without tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class GUID(TypeDecorator):
    """Platform-independent UUID type.

    Uses CHAR(36) to store UUIDs as strings, compatible with all backends
    including SQLite.
    """

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return uuid.UUID(value)
        return value


class IdeaCheck(Base):
    """A cached idea check, keyed by the fingerprint of the normalized idea."""

    __tablename__ = "idea_checks"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    fingerprint = Column(String(64), nullable=False, unique=True, index=True)
    idea = Column(Text, nullable=False)

    # Identity that triggered the first computation (external auth id)
    user_id = Column(String(128), nullable=True, default=None)

    # Denormalized for popular-ideas listing without parsing JSON
    overall_score = Column(Integer, nullable=False)
    verdict = Column(String(32), nullable=False)
    recommendation = Column(Text, nullable=True)

    sources_json = Column(Text, nullable=False)
    analysis_json = Column(Text, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    times_requested = Column(Integer, default=1, nullable=False)
    last_requested_at = Column(DateTime, default=utcnow, nullable=False)
