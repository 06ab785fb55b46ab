from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import IDEA_MAX_LENGTH, IDEA_MIN_LENGTH
from .analysis_schema import Analysis
from .source_schema import AggregateSources


def validate_idea_text(value: str) -> str:
    """Strip surrounding whitespace and enforce the idea length bounds."""
    stripped = value.strip()
    if len(stripped) < IDEA_MIN_LENGTH:
        raise ValueError(f"Idea must be at least {IDEA_MIN_LENGTH} characters long")
    if len(stripped) > IDEA_MAX_LENGTH:
        raise ValueError(f"Idea must be at most {IDEA_MAX_LENGTH} characters long")
    return stripped


class IdeaCheckRequest(BaseModel):
    """Request body for POST /check-idea."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"idea": "AI meal planner for busy parents", "userId": None},
        },
    )

    idea: str = Field(
        ...,
        description="The startup idea to check, 3-500 characters.",
        examples=["AI meal planner", "habit tracker app"],
    )
    user_id: Optional[str] = Field(
        default=None,
        alias="userId",
        max_length=128,
        description="Authenticated user id; enables per-user daily quota and search history.",
    )

    @field_validator("idea")
    @classmethod
    def idea_within_bounds(cls, v: str) -> str:
        return validate_idea_text(v)


class IdeaCheckResult(BaseModel):
    """Response body for a successful idea check (fresh or cached)."""

    id: str
    idea: str
    timestamp: datetime
    cached: bool = Field(..., description="True when served from the fingerprint cache")
    sources: AggregateSources
    analysis: Analysis
