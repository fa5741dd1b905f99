"""Database layer package.

Public re-exports so callers can write::

    from spidey.db import get_connection, init_db, UrlStore
"""

from spidey.db.connection import get_connection
from spidey.db.migrations import init_db
from spidey.db.models import UrlRecord, UrlStatus
from spidey.db.store import UrlStore

__all__ = ["get_connection", "init_db", "UrlRecord", "UrlStatus", "UrlStore"]
