"""FastAPI application factory.

Lifespan
--------
On startup the app configures logging, opens a single SQLite connection,
initialises the schema, and builds the store, crawl pipeline and dispatcher
on ``app.state``.  On shutdown it gives in-flight crawls a grace period and
then closes the connection.

Routers
-------
    /        — URL submission
    /urls    — record lookups
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from spidey.api.routers import submit as submit_router
from spidey.api.routers import urls as urls_router
from spidey.config import settings
from spidey.crawler.dispatcher import Dispatcher
from spidey.crawler.pipeline import build_pipeline
from spidey.db import UrlStore, get_connection, init_db
from spidey.log import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the DB and start the dispatcher on startup; drain and close on shutdown."""
    setup_logging(settings.log_level, settings.log_format)
    conn = get_connection()
    init_db(conn)
    store = UrlStore(conn)
    app.state.store = store
    app.state.dispatcher = Dispatcher(build_pipeline(store, settings))
    logger.info("Database ready at %s", settings.db_path)
    try:
        yield
    finally:
        dispatcher = app.state.dispatcher
        if not await asyncio.to_thread(dispatcher.wait, settings.shutdown_grace):
            logger.warning(
                "Shutting down with %d crawl(s) still running", len(dispatcher.in_flight())
            )
        conn.close()


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Spidey API",
        description=(
            "Accepts URLs for classification and crawling, and exposes the "
            "resulting crawl records."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(submit_router.router, tags=["submit"])
    app.include_router(urls_router.router, prefix="/urls", tags=["urls"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn spidey.api.app:app
app = create_app()
