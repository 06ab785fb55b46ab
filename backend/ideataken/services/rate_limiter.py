"""Fixed-window rate limiter keyed by network identity.

Single-process and best-effort: the map lives in memory and is not shared
between workers.  The map is bounded; expired entries are swept once it
grows past a threshold, and the oldest windows are evicted if it is
still over ``max_identities``.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..constants import RATE_LIMIT, RATE_LIMIT_MAX_IDENTITIES, RATE_LIMIT_WINDOW_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int = 0


class RateLimiter:
    def __init__(
        self,
        limit: int = RATE_LIMIT,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        max_identities: int = RATE_LIMIT_MAX_IDENTITIES,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self.max_identities = max_identities
        self.sweep_threshold = max(1, max_identities // 2)
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def _sweep(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._windows.items() if reset_at <= now]
        for key in expired:
            del self._windows[key]

        overflow = len(self._windows) - self.max_identities
        if overflow > 0:
            oldest = sorted(self._windows, key=lambda k: self._windows[k][1])[:overflow]
            for key in oldest:
                del self._windows[key]
            logger.warning("[RATE] Identity map full; evicted %d oldest windows", overflow)

    def check(self, identity: str, now: Optional[float] = None) -> RateDecision:
        """Count one request for *identity* and decide whether it may proceed."""
        now = time.monotonic() if now is None else now
        with self._lock:
            if len(self._windows) >= self.sweep_threshold:
                self._sweep(now)

            count, reset_at = self._windows.get(identity, (0, 0.0))
            if reset_at <= now:
                self._windows[identity] = (1, now + self.window_seconds)
                return RateDecision(True, self.limit, self.limit - 1)

            if count >= self.limit:
                retry_after = max(1, math.ceil(reset_at - now))
                return RateDecision(False, self.limit, 0, retry_after)

            self._windows[identity] = (count + 1, reset_at)
            return RateDecision(True, self.limit, self.limit - count - 1)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
