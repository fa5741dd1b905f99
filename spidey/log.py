"""Logging bootstrap shared by the API server and the CLI."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO", fmt: str | None = None) -> None:
    """Configure the root logger to write to stdout.

    Unknown level names fall back to ``INFO``.  Calling this more than once
    replaces the previous handlers.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt or "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # httpx logs every request at INFO; one line per crawl stage is enough.
    logging.getLogger("httpx").setLevel(logging.WARNING)
