from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserSearchItem(BaseModel):
    id: str
    idea: str
    idea_check_id: Optional[str] = None
    overall_score: int
    verdict: str
    created_at: datetime


class UserSearchHistoryResponse(BaseModel):
    user_id: str
    searches: list[UserSearchItem] = Field(default_factory=list)


class PopularIdea(BaseModel):
    idea: str
    overall_score: int
    verdict: str
    times_requested: int = Field(..., ge=1)


class PopularIdeasResponse(BaseModel):
    ideas: list[PopularIdea] = Field(default_factory=list)
