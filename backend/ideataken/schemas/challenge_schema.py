from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .analysis_schema import Analysis
from .check_schema import validate_idea_text
from .source_schema import AggregateSources


class ChallengeRequest(BaseModel):
    """Request body for POST /challenge-ai.

    The founder disputes a prior analysis in free text; the synthesis step
    is re-run with the challenge folded into its prompt.
    """

    model_config = ConfigDict(populate_by_name=True)

    idea: str
    sources: AggregateSources = Field(default_factory=AggregateSources)
    user_challenge: str = Field(
        ...,
        alias="userChallenge",
        max_length=2000,
        description="The founder's objection or extra context",
    )
    previous_analysis: Optional[Analysis] = Field(default=None, alias="previousAnalysis")
    user_id: Optional[str] = Field(default=None, alias="userId", max_length=128)

    @field_validator("idea")
    @classmethod
    def idea_within_bounds(cls, v: str) -> str:
        return validate_idea_text(v)

    @field_validator("user_challenge")
    @classmethod
    def challenge_not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Challenge text is required")
        return stripped


class ChallengeResponse(BaseModel):
    analysis: Analysis
