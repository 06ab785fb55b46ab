"""Injected services.  Tests replace these through ``app.dependency_overrides``."""

from ..services.aggregator import FanOutAggregator
from ..services.governor import get_rate_limiter
from ..services.synthesis import AnalysisSynthesizer


def get_aggregator() -> FanOutAggregator:
    return FanOutAggregator()


def get_synthesizer() -> AnalysisSynthesizer:
    return AnalysisSynthesizer()


__all__ = ["get_aggregator", "get_rate_limiter", "get_synthesizer"]
