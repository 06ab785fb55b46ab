from .analytics_event import AnalyticsEvent
from .idea_check import IdeaCheck
from .user import User
from .user_search import UserSearch

__all__ = ["AnalyticsEvent", "IdeaCheck", "User", "UserSearch"]
