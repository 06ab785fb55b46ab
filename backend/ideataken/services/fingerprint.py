"""Content fingerprint for idea deduplication.

Two submissions that differ only in case or whitespace are the same
question and must share one cache entry.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

from ..schemas.check_schema import validate_idea_text

_WHITESPACE_RE = re.compile(r"\s+")


def canonicalize(idea: str) -> str:
    """Lowercase, trim, and collapse internal whitespace runs to one space."""
    return _WHITESPACE_RE.sub(" ", idea.strip().lower())


def compute_fingerprint(idea: str) -> str:
    """SHA-256 hex digest of the canonical form."""
    return hashlib.sha256(canonicalize(idea).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class IdeaQuery:
    raw: str
    canonical: str
    fingerprint: str

    @classmethod
    def parse(cls, idea: str) -> "IdeaQuery":
        """Validate the raw text and derive its canonical form and fingerprint.

        Raises ValueError when the stripped text is outside the length bounds.
        """
        raw = validate_idea_text(idea)
        canonical = canonicalize(raw)
        return cls(raw=raw, canonical=canonical, fingerprint=compute_fingerprint(raw))
