"""Two-tier result type for fail-soft steps.

``Ok`` carries a value produced by the real call.  ``Fallback`` carries
the substitute value together with the reason the real call was not
usable.  Both expose ``.value`` so callers that only need the data can
ignore which tier they got.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Fallback(Generic[T]):
    value: T
    reason: str

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Ok[T], Fallback[T]]
