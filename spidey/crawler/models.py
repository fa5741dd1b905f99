"""Value types passed between the crawl stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Classification:
    """The classification service's verdict for a URL."""

    label: str
    confidence: float


@dataclass
class Extraction:
    """Visible text and outbound links pulled from one HTML document."""

    text: str
    links: List[str] = field(default_factory=list)
