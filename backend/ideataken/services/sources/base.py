"""Source Adapter interface.

Defines the ``SourceAdapter`` abstract base.  The aggregator interacts
only with this interface, so sources can be added or swapped without
touching the fan-out logic.

Adding a new source
-------------------
1. Add a ``SourceKind`` member and its result model in
   ``schemas/source_schema.py`` (and its field in ``SOURCE_FIELDS``).
2. Subclass ``SourceAdapter`` and implement ``_search``.
3. Register it in ``sources.default_adapters()``.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import os
from typing import Any, ClassVar

import httpx

from ...schemas.source_schema import SourceKind, default_for
from ..http_client import Timeouts, is_non_retryable_error
from ..outcome import Fallback, Ok, Outcome
from ..timing import log_timing

logger = logging.getLogger(__name__)


class SourceError(Exception):
    """An upstream source answered, but not with something usable."""


def require_env(name: str) -> str:
    """Read a credential from the environment.  Raises EnvironmentError if missing."""
    value = os.getenv(name, "").strip()
    if not value:
        raise EnvironmentError(f"{name} environment variable not set")
    return value


def raise_for_upstream(response: httpx.Response, source: str) -> None:
    """Turn a non-200 upstream reply into a SourceError."""
    if response.status_code == 200:
        return
    kind = "non-retryable" if is_non_retryable_error(response.status_code) else "transient"
    raise SourceError(f"{source} {kind} HTTP {response.status_code}")


class SourceAdapter(abc.ABC):
    """Interface that every external source must implement.

    ``_search`` performs the outbound call and normalizes the reply into
    the kind's result shape.  It may raise anything; ``run`` converts
    every exception, including a missed deadline, into a ``Fallback``
    holding the kind's neutral default.  ``fetch`` never raises.
    """

    kind: ClassVar[SourceKind]
    name: ClassVar[str]
    timeout: ClassVar[float] = Timeouts.ADAPTER_MAX

    @abc.abstractmethod
    async def _search(self, idea: str, client: httpx.AsyncClient) -> Any:
        ...

    def default(self, idea: str) -> Any:
        return default_for(self.kind, idea)

    async def run(self, idea: str, client: httpx.AsyncClient) -> Outcome:
        """Run the search under the adapter deadline, failing soft."""
        start = asyncio.get_running_loop().time()
        try:
            value = await asyncio.wait_for(self._search(idea, client), timeout=self.timeout)
        except asyncio.TimeoutError:
            reason = f"timed out after {self.timeout:.0f}s"
        except Exception as exc:
            reason = f"{type(exc).__name__}: {exc}"
        else:
            log_timing(self.name, "OK", (asyncio.get_running_loop().time() - start) * 1000)
            return Ok(value)

        logger.warning("[%s] falling back to default: %s", self.name.upper(), reason)
        return Fallback(self.default(idea), reason)

    async def fetch(self, idea: str, client: httpx.AsyncClient) -> Any:
        """The adapter's value, or its default on any failure."""
        return (await self.run(idea, client)).value


__all__ = [
    "SourceAdapter",
    "SourceError",
    "raise_for_upstream",
    "require_env",
]
