"""URL submission endpoint.

Routes
------
POST /    Body: {"url": "https://..."}    → create a pending record and crawl it

The response only says whether the URL was *accepted*; the crawl outcome is
read back later from the record (``GET /urls/record``).
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from spidey.db.models import TERMINAL_STATUSES, UrlStatus
from spidey.errors import PersistenceError
from spidey.validate import is_valid_http_url

router = APIRouter()

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class AddUrlRequest(BaseModel):
    url: str = ""


class AddUrlResponse(BaseModel):
    message: str
    url: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/", response_model=AddUrlResponse, status_code=202)
def add_url(body: AddUrlRequest, request: Request) -> dict[str, Any]:
    """Store *url* as a pending record and hand it to the dispatcher.

    A URL already known to the store is only dispatched again while it is
    still ``pending`` and not already being processed.
    """
    store = request.app.state.store
    dispatcher = request.app.state.dispatcher

    url = body.url
    if not url:
        raise HTTPException(status_code=400, detail='Missing "url" field in request body')
    if not is_valid_http_url(url):
        logger.warning("Invalid URL provided: %r", url)
        raise HTTPException(status_code=400, detail="Invalid URL provided")

    try:
        created = store.create_url(url)
        existing = None if created else store.get_url(url)
    except PersistenceError as exc:
        logger.error("Database insertion error for %s: %s", url, exc)
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc

    if existing is not None:
        if existing.status in TERMINAL_STATUSES:
            raise HTTPException(
                status_code=409,
                detail=f"URL already processed with status {existing.status.value!r}",
            )
        if existing.status is not UrlStatus.PENDING or url in dispatcher.in_flight():
            raise HTTPException(
                status_code=409,
                detail=f"URL is already being crawled (status {existing.status.value!r})",
            )

    dispatcher.submit(url)
    logger.info("URL accepted for crawling: %s", url)
    return {"message": "URL accepted for crawling.", "url": url}
