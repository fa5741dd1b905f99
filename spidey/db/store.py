"""Thread-safe store used by the crawl pipeline and the outer layers.

:class:`UrlStore` wraps one SQLite connection.  Every public method holds a
re-entrant lock for its duration and commits (or rolls back) on exit, so
concurrent crawl tasks never interleave statements inside each other's
transactions.  :meth:`UrlStore.transaction` holds the lock across several
writes and commits them as one unit.

All :class:`sqlite3.Error` exceptions are re-raised as
:class:`~spidey.errors.PersistenceError`.
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from spidey.db import urls
from spidey.db.models import UrlRecord, UrlStatus
from spidey.errors import PersistenceError

T = TypeVar("T")


class UrlStore:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._lock = threading.RLock()
        self._tx_depth = 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _run(self, fn: Callable[..., T], *args, write: bool = True) -> T:
        with self._lock:
            # Inside transaction() the outer block owns commit/rollback.
            if self._tx_depth or not write:
                try:
                    return fn(self.conn, *args)
                except sqlite3.Error as exc:
                    raise PersistenceError(str(exc)) from exc
            try:
                with self.conn:
                    return fn(self.conn, *args)
            except sqlite3.Error as exc:
                raise PersistenceError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator["UrlStore"]:
        """Run several writes as one all-or-nothing unit.

        Usage::

            with store.transaction() as tx:
                tx.mark_crawled(url, text)
                tx.create_url(link)

        Any exception raised inside the block rolls everything back and
        propagates; :class:`sqlite3.Error` is re-raised as
        :class:`PersistenceError`.
        """
        with self._lock:
            if self._tx_depth:
                raise PersistenceError("nested transactions are not supported")
            self._tx_depth += 1
            try:
                with self.conn:
                    yield self
            except sqlite3.Error as exc:
                raise PersistenceError(str(exc)) from exc
            finally:
                self._tx_depth -= 1

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_url(self, url: str) -> Optional[UrlRecord]:
        return self._run(urls.get_url, url, write=False)

    def list_urls(
        self,
        status: Optional[UrlStatus] = None,
        limit: Optional[int] = None,
    ) -> list[UrlRecord]:
        return self._run(urls.list_urls, status, limit, write=False)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create_url(self, url: str) -> bool:
        """Insert a ``pending`` record; ``False`` means it already existed."""
        return self._run(urls.create_url, url)

    def update_status(self, url: str, status: UrlStatus) -> None:
        self._run(urls.update_url_status, url, status)

    def update_classification(self, url: str, label: str, confidence: float) -> None:
        self._run(urls.update_url_classification, url, label, confidence)

    def mark_skipped(self, url: str) -> None:
        self._run(urls.mark_url_skipped, url)

    def mark_failed(self, url: str, error_message: str) -> None:
        self._run(urls.mark_url_failed, url, error_message)

    def mark_crawled(self, url: str, content: str) -> None:
        self._run(urls.mark_url_crawled, url, content)
