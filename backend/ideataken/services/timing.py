"""
Timing Utilities for Latency Instrumentation

Context managers for logging execution times of adapters, the fan-out
round and the request handler.
"""

import logging
import time
from contextlib import asynccontextmanager, contextmanager
from typing import Optional

logger = logging.getLogger("ideataken.timing")


def log_timing(node_name: str, action: str, duration_ms: Optional[float] = None):
    """Log a timing event in standard format."""
    if duration_ms is not None:
        logger.info("[TIMING] %s: %s duration=%.0fms", node_name, action, duration_ms)
    else:
        logger.info("[TIMING] %s: %s", node_name, action)


def elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class StepTimer:
    """
    Utility class for timing multiple steps within a request.

    Usage:
        timer = StepTimer("check_idea")
        with timer.step("cache_lookup"):
            cache.lookup(fp)
        async with timer.async_step("fan_out"):
            await aggregator.aggregate_with_report(idea)
        timer.summary()
    """

    def __init__(self, node_name: str):
        self.node_name = node_name
        self.steps: dict[str, float] = {}
        self.start_time = time.perf_counter()

    @contextmanager
    def step(self, step_name: str):
        """Time a single step."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.steps[step_name] = elapsed_ms(start)
            log_timing(self.node_name, step_name, self.steps[step_name])

    @asynccontextmanager
    async def async_step(self, step_name: str):
        """Time a single async step."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.steps[step_name] = elapsed_ms(start)
            log_timing(self.node_name, step_name, self.steps[step_name])

    def total_ms(self) -> float:
        return elapsed_ms(self.start_time)

    def summary(self) -> float:
        """Log summary of all steps."""
        total = self.total_ms()
        log_timing(self.node_name, "TOTAL", total)
        return total
