import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from ..database import Base
from .idea_check import GUID, utcnow


class UserSearch(Base):
    __tablename__ = "user_searches"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(128), nullable=False, index=True)
    idea_check_id = Column(GUID(), ForeignKey("idea_checks.id"), nullable=True)
    idea = Column(Text, nullable=False)
    overall_score = Column(Integer, nullable=False)
    verdict = Column(String(32), nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)
