import uuid

from sqlalchemy import Column, DateTime, String, Text

from ..database import Base
from .idea_check import GUID, utcnow


class AnalyticsEvent(Base):
    __tablename__ = "analytics_events"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(128), nullable=True)
    event_name = Column(String(64), nullable=False, index=True)
    event_data_json = Column(Text, nullable=False, default="{}")
    session_id = Column(String(128), nullable=True)
    created_at = Column(DateTime, default=utcnow)
