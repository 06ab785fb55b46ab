"""
Fan-Out Aggregator

Runs every source adapter concurrently against one idea and folds the
outcomes into a single ``AggregateSources`` record.

The join is settle-all: a failing or slow adapter never cancels its
siblings, and every kind is present in the result, either with real
data or with its neutral default.  Total latency is bounded by the
slowest adapter's deadline rather than by the sum of calls.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import httpx

from ..schemas.source_schema import AggregateSources, SourceKind
from .http_client import build_client
from .outcome import Ok
from .sources import SourceAdapter, default_adapters
from .timing import elapsed_ms, log_timing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationReport:
    sources: AggregateSources
    failures: Dict[SourceKind, str] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def failed_kinds(self) -> List[str]:
        return sorted(kind.value for kind in self.failures)


class FanOutAggregator:
    """Concurrent, failure-tolerant fan-out over a set of source adapters."""

    def __init__(
        self,
        adapters: Optional[Sequence[SourceAdapter]] = None,
        client_factory: Callable[[], httpx.AsyncClient] = build_client,
    ):
        self.adapters = list(adapters) if adapters is not None else default_adapters()
        self.client_factory = client_factory

    async def aggregate_with_report(self, idea: str) -> AggregationReport:
        start = time.perf_counter()
        async with self.client_factory() as client:
            outcomes = await asyncio.gather(
                *(adapter.run(idea, client) for adapter in self.adapters),
                return_exceptions=True,
            )

        values = {}
        failures: Dict[SourceKind, str] = {}
        for adapter, outcome in zip(self.adapters, outcomes):
            if isinstance(outcome, Ok):
                values[adapter.kind] = outcome.value
            elif isinstance(outcome, BaseException):
                # run() converts errors itself; this is a bug in an adapter
                failures[adapter.kind] = f"{type(outcome).__name__}: {outcome}"
            else:
                failures[adapter.kind] = outcome.reason

        sources = AggregateSources.from_values(idea, values)
        duration = elapsed_ms(start)

        if failures:
            logger.warning(
                "[AGGREGATOR] %d/%d sources failed: %s",
                len(failures),
                len(self.adapters),
                ", ".join(f"{k.value} ({r})" for k, r in failures.items()),
            )
        log_timing("aggregator", f"FAN-OUT {len(self.adapters)} sources", duration)

        return AggregationReport(sources=sources, failures=failures, duration_ms=duration)

    async def aggregate(self, idea: str) -> AggregateSources:
        return (await self.aggregate_with_report(idea)).sources
