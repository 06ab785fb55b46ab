# Schemas package
from .source_schema import AggregateSources, SourceKind
from .analysis_schema import Analysis, CompetitorSummary, Verdict, verdict_for_score
from .check_schema import IdeaCheckRequest, IdeaCheckResult
from .challenge_schema import ChallengeRequest, ChallengeResponse
from .history_schema import PopularIdeasResponse, UserSearchHistoryResponse

__all__ = [
    "AggregateSources",
    "SourceKind",
    "Analysis",
    "CompetitorSummary",
    "Verdict",
    "verdict_for_score",
    "IdeaCheckRequest",
    "IdeaCheckResult",
    "ChallengeRequest",
    "ChallengeResponse",
    "PopularIdeasResponse",
    "UserSearchHistoryResponse",
]
