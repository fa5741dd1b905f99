"""Exception types raised across the crawler.

Every failure a crawl can hit maps to exactly one of these, so the pipeline
can attribute it to the stage that produced it.
"""

from __future__ import annotations


class SpideyError(Exception):
    """Base class for all crawler errors."""


class ClassificationError(SpideyError):
    """The classification service could not produce a usable label."""


class FetchError(SpideyError):
    """The page could not be retrieved as an HTML document."""


class ExtractionError(SpideyError):
    """The fetched body could not be parsed as a document at all."""


class PersistenceError(SpideyError):
    """A store read or write failed."""


class UnexpectedFault(SpideyError):
    """An exception nobody anticipated escaped a pipeline stage."""

    @classmethod
    def from_exception(cls, exc: BaseException) -> "UnexpectedFault":
        return cls(f"internal fault: {type(exc).__name__}: {exc}")
