from .aggregator import AggregationReport, FanOutAggregator
from .cache_store import CachedCheckRecord, CacheStore
from .fingerprint import IdeaQuery, canonicalize, compute_fingerprint
from .governor import evaluate_gates
from .heuristics import heuristic_analysis
from .idea_check_service import IdeaCheckService
from .quota import QuotaDecision, reserve_user_search
from .rate_limiter import RateDecision, RateLimiter
from .synthesis import AnalysisSynthesizer

__all__ = [
    "AggregationReport",
    "AnalysisSynthesizer",
    "CacheStore",
    "CachedCheckRecord",
    "FanOutAggregator",
    "IdeaCheckService",
    "IdeaQuery",
    "QuotaDecision",
    "RateDecision",
    "RateLimiter",
    "canonicalize",
    "compute_fingerprint",
    "evaluate_gates",
    "heuristic_analysis",
    "reserve_user_search",
]
