"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class UrlStatus(str, Enum):
    PENDING = "pending"
    CLASSIFYING = "classifying"
    CRAWLING = "crawling"
    CRAWLED = "crawled"
    SKIPPED = "skipped"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({UrlStatus.CRAWLED, UrlStatus.SKIPPED, UrlStatus.FAILED})

# Status -> the statuses a record may hold immediately before entering it.
ALLOWED_PREDECESSORS: dict[UrlStatus, frozenset[UrlStatus]] = {
    UrlStatus.CLASSIFYING: frozenset({UrlStatus.PENDING}),
    UrlStatus.SKIPPED: frozenset({UrlStatus.CLASSIFYING}),
    UrlStatus.CRAWLING: frozenset({UrlStatus.CLASSIFYING}),
    UrlStatus.CRAWLED: frozenset({UrlStatus.CRAWLING}),
    UrlStatus.FAILED: frozenset(
        {UrlStatus.PENDING, UrlStatus.CLASSIFYING, UrlStatus.CRAWLING}
    ),
}


@dataclass
class UrlRecord:
    url: str
    status: UrlStatus
    classification: str | None
    confidence: float | None
    content: str | None
    error_message: str | None
    created_at: int
    updated_at: int

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------
    def to_dict(self, include_content: bool = True) -> dict[str, Any]:
        """Return a JSON-friendly dict; ``content`` can be left out for listings."""
        data = asdict(self)
        data["status"] = self.status.value
        if not include_content:
            data.pop("content")
        return data
