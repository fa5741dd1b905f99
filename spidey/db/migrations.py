"""Database initialisation.

``init_db(conn)`` is idempotent and can run against an existing database.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from spidey.config import settings


def _read_schema(schema_path: Optional[Path] = None) -> str:
    """Load the bundled ``schema.sql``."""
    return (schema_path or settings.schema_path).read_text(encoding="utf-8")


def init_db(conn: sqlite3.Connection) -> None:
    """Create the ``urls`` table and its indexes.

    This function is **idempotent**: every DDL statement uses ``IF NOT EXISTS``
    so calling it multiple times on the same database is safe.

    Args:
        conn: An open, configured SQLite connection.
    """
    # executescript() issues an implicit COMMIT before execution, which is
    # fine for a DDL-only script.
    conn.executescript(_read_schema())
