"""Queries against the ``urls`` table.

These functions never commit: transaction boundaries belong to the caller
(normally :class:`~spidey.db.store.UrlStore`).  Status writes are
compare-and-set against :data:`~spidey.db.models.ALLOWED_PREDECESSORS`, so a
record can only ever move forward through its lifecycle.
"""

from __future__ import annotations

import sqlite3
from time import time
from typing import Any, Optional

from spidey.db.models import ALLOWED_PREDECESSORS, UrlRecord, UrlStatus
from spidey.errors import PersistenceError


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_record(row: sqlite3.Row) -> UrlRecord:
    return UrlRecord(
        url=row["url"],
        status=UrlStatus(row["status"]),
        classification=row["classification"],
        confidence=row["confidence"],
        content=row["content"],
        error_message=row["error_message"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _transition(
    conn: sqlite3.Connection,
    url: str,
    status: UrlStatus,
    **columns: Any,
) -> None:
    """Move *url* into *status*, setting any extra *columns* in the same write.

    Raises:
        PersistenceError: If no record for *url* is in a state that may
            legally move to *status*.
    """
    previous = sorted(s.value for s in ALLOWED_PREDECESSORS[status])
    assignments = {"status": status.value, **columns, "updated_at": int(time())}
    set_clause = ", ".join(f"{col} = ?" for col in assignments)
    placeholders = ", ".join("?" for _ in previous)

    cursor = conn.execute(
        f"UPDATE urls SET {set_clause} WHERE url = ? AND status IN ({placeholders})",  # noqa: S608
        [*assignments.values(), url, *previous],
    )
    if cursor.rowcount == 0:
        raise PersistenceError(
            f"no record for {url!r} can move to {status.value!r}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_url(conn: sqlite3.Connection, url: str) -> bool:
    """Insert a ``pending`` record for *url* unless one already exists.

    Returns:
        ``True`` if a new row was inserted, ``False`` if *url* was already
        known (a no-op, not an error).
    """
    now = int(time())
    cursor = conn.execute(
        """
        INSERT INTO urls (url, status, created_at, updated_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT (url) DO NOTHING
        """,
        (url, UrlStatus.PENDING.value, now, now),
    )
    return cursor.rowcount == 1


def get_url(conn: sqlite3.Connection, url: str) -> Optional[UrlRecord]:
    """Fetch a single record by URL.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM urls WHERE url = ?", (url,)).fetchone()
    return _row_to_record(row) if row else None


def list_urls(
    conn: sqlite3.Connection,
    status: Optional[UrlStatus] = None,
    limit: Optional[int] = None,
) -> list[UrlRecord]:
    """Return records, newest first, optionally filtered by *status*."""
    query = "SELECT * FROM urls"
    params: list[Any] = []
    if status is not None:
        query += " WHERE status = ?"
        params.append(UrlStatus(status).value)
    query += " ORDER BY id DESC"
    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)
    return [_row_to_record(r) for r in conn.execute(query, params).fetchall()]


def update_url_status(conn: sqlite3.Connection, url: str, status: UrlStatus) -> None:
    """Set the status of *url* (``classifying`` or ``crawling``)."""
    _transition(conn, url, UrlStatus(status))


def update_url_classification(
    conn: sqlite3.Connection,
    url: str,
    classification: str,
    confidence: float,
) -> None:
    """Store the classifier's label and score on a ``classifying`` record."""
    cursor = conn.execute(
        """
        UPDATE urls
        SET classification = ?, confidence = ?, updated_at = ?
        WHERE url = ? AND status = ?
        """,
        (classification, confidence, int(time()), url, UrlStatus.CLASSIFYING.value),
    )
    if cursor.rowcount == 0:
        raise PersistenceError(f"no classifying record for {url!r}")


def mark_url_skipped(conn: sqlite3.Connection, url: str) -> None:
    _transition(conn, url, UrlStatus.SKIPPED)


def mark_url_crawled(conn: sqlite3.Connection, url: str, content: str) -> None:
    _transition(conn, url, UrlStatus.CRAWLED, content=content)


def mark_url_failed(conn: sqlite3.Connection, url: str, error_message: str) -> None:
    _transition(conn, url, UrlStatus.FAILED, error_message=error_message)
