"""Spidey CLI — entry-point for local crawler operations.

Usage:
    spidey --help
    python cli/main.py --help

Commands:
    db init   → create the schema
    submit    → queue a URL and crawl it in the foreground
    show      → print one record
    list      → list records
    serve     → run the submission API
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from spidey.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from typing import Optional

import typer

from spidey.config import settings
from spidey.crawler.pipeline import build_pipeline
from spidey.db import UrlStatus, UrlStore, get_connection, init_db
from spidey.db.models import UrlRecord
from spidey.log import setup_logging
from spidey.validate import is_valid_http_url

app = typer.Typer(
    name="spidey",
    help="Spidey crawler CLI.",
    no_args_is_help=True,
)

db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


def _open_store() -> UrlStore:
    conn = get_connection()
    init_db(conn)
    return UrlStore(conn)


def _echo_record(record: UrlRecord, with_content: bool = False) -> None:
    typer.echo(f"  url            : {record.url}")
    typer.echo(f"  status         : {record.status.value}")
    if record.classification is not None:
        typer.echo(f"  classification : {record.classification} ({record.confidence:.2f})")
    if record.error_message:
        typer.echo(f"  error          : {record.error_message}")
    if with_content and record.content:
        typer.echo("")
        typer.echo(record.content)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    store = _open_store()
    store.conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Crawl commands
# ---------------------------------------------------------------------------
@app.command("submit")
def submit(
    url: str = typer.Argument(..., help="Absolute http(s) URL to crawl."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each pipeline stage."),
) -> None:
    """Queue *url* and run the crawl pipeline in the foreground."""
    if verbose:
        setup_logging(settings.log_level, settings.log_format)

    if not is_valid_http_url(url):
        typer.echo(f"[submit] Invalid URL provided: {url!r}")
        raise typer.Exit(1)

    store = _open_store()
    try:
        if not store.create_url(url):
            record = store.get_url(url)
            if record is not None and record.status is not UrlStatus.PENDING:
                typer.echo(f"[submit] {url!r} is already {record.status.value!r}.")
                raise typer.Exit(1)

        typer.echo(f"[submit] Processing {url!r} …")
        build_pipeline(store, settings).process(url)

        record = store.get_url(url)
    finally:
        store.conn.close()

    if record is None:
        typer.echo(f"[submit] {url!r} vanished from the store.")
        raise typer.Exit(1)
    _echo_record(record)
    if record.status is UrlStatus.FAILED:
        raise typer.Exit(1)


@app.command("show")
def show(
    url: str = typer.Argument(..., help="URL of the record."),
    content: bool = typer.Option(False, "--content", help="Also print the crawled text."),
) -> None:
    """Print one record."""
    store = _open_store()
    try:
        record = store.get_url(url)
    finally:
        store.conn.close()

    if record is None:
        typer.echo(f"[show] No record for {url!r}.")
        raise typer.Exit(1)
    _echo_record(record, with_content=content)


@app.command("list")
def list_cmd(
    status: Optional[UrlStatus] = typer.Option(None, "--status", help="Filter by status."),
    limit: int = typer.Option(50, "--limit", min=1, help="Maximum records to show."),
) -> None:
    """List records, newest first."""
    store = _open_store()
    try:
        records = store.list_urls(status=status, limit=limit)
    finally:
        store.conn.close()

    if not records:
        typer.echo("[list] No records found.")
        return
    for r in records:
        typer.echo(f"  [{r.status.value:<11}] {r.url}")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (defaults to API_HOST)."),
    port: Optional[int] = typer.Option(None, help="Bind port (defaults to API_PORT)."),
) -> None:
    """Run the submission API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "spidey.api.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
