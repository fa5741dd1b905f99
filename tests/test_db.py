"""Tests for the database layer.

All tests use an in-memory SQLite database so they are:
- Fast (no disk I/O)
- Isolated (each fixture gets a fresh DB)
- Side-effect free (nothing written to ~/.spidey_data)
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from spidey.db.connection import get_connection
from spidey.db.migrations import init_db
from spidey.db.models import TERMINAL_STATUSES, UrlRecord, UrlStatus
from spidey.db.store import UrlStore
from spidey.errors import PersistenceError

_URL = "https://blog.example.com/"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")
    init_db(connection)
    yield connection
    connection.close()


@pytest.fixture()
def store(conn: sqlite3.Connection) -> UrlStore:
    return UrlStore(conn)


def _advance(store: UrlStore, url: str, *statuses: UrlStatus) -> None:
    for status in statuses:
        store.update_status(url, status)


# ---------------------------------------------------------------------------
# connection / init
# ---------------------------------------------------------------------------

class TestInitDb:
    def test_urls_table_exists(self, conn: sqlite3.Connection) -> None:
        tables = {
            r[0]
            for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert "urls" in tables

    def test_idempotent(self, conn: sqlite3.Connection) -> None:
        init_db(conn)
        init_db(conn)

    def test_on_disk_database(self, tmp_path) -> None:
        path = tmp_path / "nested" / "spidey.db"
        connection = get_connection(db_path=path)
        init_db(connection)
        UrlStore(connection).create_url(_URL)
        connection.close()

        reopened = UrlStore(get_connection(db_path=path))
        assert reopened.get_url(_URL) is not None
        reopened.conn.close()


# ---------------------------------------------------------------------------
# create / read
# ---------------------------------------------------------------------------

class TestCreateUrl:
    def test_new_record_is_pending(self, store: UrlStore) -> None:
        assert store.create_url(_URL) is True

        record = store.get_url(_URL)
        assert isinstance(record, UrlRecord)
        assert record.status is UrlStatus.PENDING
        assert record.classification is None
        assert record.confidence is None
        assert record.content is None
        assert record.error_message is None

    def test_duplicate_is_a_no_op(self, store: UrlStore) -> None:
        store.create_url(_URL)
        _advance(store, _URL, UrlStatus.CLASSIFYING)

        assert store.create_url(_URL) is False
        assert len(store.list_urls()) == 1
        assert store.get_url(_URL).status is UrlStatus.CLASSIFYING

    def test_get_unknown_returns_none(self, store: UrlStore) -> None:
        assert store.get_url("https://nowhere.example.com/") is None


class TestListUrls:
    def test_newest_first_and_filtered(self, store: UrlStore) -> None:
        for i in range(3):
            store.create_url(f"https://e.com/{i}")
        _advance(store, "https://e.com/1", UrlStatus.CLASSIFYING)

        assert [r.url for r in store.list_urls()] == [
            "https://e.com/2",
            "https://e.com/1",
            "https://e.com/0",
        ]
        assert [r.url for r in store.list_urls(status=UrlStatus.CLASSIFYING)] == [
            "https://e.com/1"
        ]
        assert len(store.list_urls(limit=2)) == 2

    def test_to_dict_can_omit_content(self, store: UrlStore) -> None:
        store.create_url(_URL)
        data = store.get_url(_URL).to_dict(include_content=False)
        assert data["status"] == "pending"
        assert "content" not in data


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------

class TestTransitions:
    def test_full_crawl_lifecycle(self, store: UrlStore) -> None:
        store.create_url(_URL)
        _advance(store, _URL, UrlStatus.CLASSIFYING)
        store.update_classification(_URL, "PERSONAL_BLOG", 0.9)
        _advance(store, _URL, UrlStatus.CRAWLING)
        store.mark_crawled(_URL, "hello world")

        record = store.get_url(_URL)
        assert record.status is UrlStatus.CRAWLED
        assert record.classification == "PERSONAL_BLOG"
        assert record.confidence == pytest.approx(0.9)
        assert record.content == "hello world"

    def test_skip_after_classifying(self, store: UrlStore) -> None:
        store.create_url(_URL)
        _advance(store, _URL, UrlStatus.CLASSIFYING)
        store.mark_skipped(_URL)
        assert store.get_url(_URL).status is UrlStatus.SKIPPED

    @pytest.mark.parametrize(
        "path",
        [
            (),
            (UrlStatus.CLASSIFYING,),
            (UrlStatus.CLASSIFYING, UrlStatus.CRAWLING),
        ],
    )
    def test_failed_reachable_from_any_non_terminal(self, store: UrlStore, path) -> None:
        store.create_url(_URL)
        _advance(store, _URL, *path)
        store.mark_failed(_URL, "boom")

        record = store.get_url(_URL)
        assert record.status is UrlStatus.FAILED
        assert record.error_message == "boom"

    def test_cannot_skip_classifying(self, store: UrlStore) -> None:
        store.create_url(_URL)
        with pytest.raises(PersistenceError):
            store.update_status(_URL, UrlStatus.CRAWLING)
        with pytest.raises(PersistenceError):
            store.mark_crawled(_URL, "text")
        assert store.get_url(_URL).status is UrlStatus.PENDING

    def test_second_claim_is_rejected(self, store: UrlStore) -> None:
        store.create_url(_URL)
        _advance(store, _URL, UrlStatus.CLASSIFYING)
        with pytest.raises(PersistenceError):
            store.update_status(_URL, UrlStatus.CLASSIFYING)

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_states_are_final(self, store: UrlStore, terminal: UrlStatus) -> None:
        store.create_url(_URL)
        _advance(store, _URL, UrlStatus.CLASSIFYING)
        if terminal is UrlStatus.SKIPPED:
            store.mark_skipped(_URL)
        elif terminal is UrlStatus.FAILED:
            store.mark_failed(_URL, "x")
        else:
            _advance(store, _URL, UrlStatus.CRAWLING)
            store.mark_crawled(_URL, "x")

        with pytest.raises(PersistenceError):
            store.mark_failed(_URL, "late failure")
        with pytest.raises(PersistenceError):
            store.update_status(_URL, UrlStatus.CLASSIFYING)
        assert store.get_url(_URL).status is terminal

    def test_unknown_url_raises(self, store: UrlStore) -> None:
        with pytest.raises(PersistenceError):
            store.update_status("https://nowhere.example.com/", UrlStatus.CLASSIFYING)

    def test_classification_requires_classifying(self, store: UrlStore) -> None:
        store.create_url(_URL)
        with pytest.raises(PersistenceError):
            store.update_classification(_URL, "NEWS", 0.5)

    def test_confidence_out_of_range_rejected(self, store: UrlStore) -> None:
        store.create_url(_URL)
        _advance(store, _URL, UrlStatus.CLASSIFYING)
        with pytest.raises(PersistenceError):
            store.update_classification(_URL, "NEWS", 1.5)
        assert store.get_url(_URL).classification is None

    def test_overlong_error_message_rejected(self, store: UrlStore) -> None:
        store.create_url(_URL)
        with pytest.raises(PersistenceError):
            store.mark_failed(_URL, "x" * 1025)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

class TestTransaction:
    def _crawling(self, store: UrlStore) -> None:
        store.create_url(_URL)
        _advance(store, _URL, UrlStatus.CLASSIFYING, UrlStatus.CRAWLING)

    def test_commits_all_writes(self, store: UrlStore) -> None:
        self._crawling(store)
        with store.transaction() as tx:
            tx.mark_crawled(_URL, "text")
            tx.create_url("https://e.com/a")

        assert store.get_url(_URL).status is UrlStatus.CRAWLED
        assert store.get_url("https://e.com/a").status is UrlStatus.PENDING

    def test_rolls_back_on_error(self, store: UrlStore) -> None:
        self._crawling(store)
        with pytest.raises(RuntimeError):
            with store.transaction() as tx:
                tx.mark_crawled(_URL, "text")
                tx.create_url("https://e.com/a")
                raise RuntimeError("abort")

        assert store.get_url(_URL).status is UrlStatus.CRAWLING
        assert store.get_url(_URL).content is None
        assert store.get_url("https://e.com/a") is None

    def test_failed_statement_does_not_abort_transaction(self, store: UrlStore) -> None:
        self._crawling(store)
        with store.transaction() as tx:
            tx.mark_crawled(_URL, "text")
            with pytest.raises(PersistenceError):
                tx.mark_crawled(_URL, "again")
            tx.create_url("https://e.com/a")

        assert store.get_url(_URL).content == "text"
        assert store.get_url("https://e.com/a") is not None

    def test_nested_transaction_rejected(self, store: UrlStore) -> None:
        with pytest.raises(PersistenceError):
            with store.transaction():
                with store.transaction():
                    pass

    def test_closed_connection_raises_persistence_error(self, store: UrlStore) -> None:
        store.conn.close()
        with pytest.raises(PersistenceError):
            store.create_url(_URL)
        with pytest.raises(PersistenceError):
            store.get_url(_URL)
