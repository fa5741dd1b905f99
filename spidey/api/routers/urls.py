"""Read-only endpoints for URL records.

Routes
------
GET /urls            List records (optional ?status= and ?limit=)
GET /urls/record     Fetch one record by ?url=, including its content
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from spidey.db.models import UrlStatus
from spidey.errors import PersistenceError

router = APIRouter()


class UrlSummary(BaseModel):
    url: str
    status: UrlStatus
    classification: Optional[str]
    confidence: Optional[float]
    error_message: Optional[str]
    created_at: int
    updated_at: int


class UrlDetail(UrlSummary):
    content: Optional[str]


@router.get("", response_model=list[UrlSummary])
def list_urls_endpoint(
    request: Request,
    status: Optional[UrlStatus] = Query(None, description="Filter by status."),
    limit: int = Query(100, ge=1, le=1000),
) -> list[dict[str, Any]]:
    """Return records, newest first."""
    try:
        records = request.app.state.store.list_urls(status=status, limit=limit)
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc
    return [r.to_dict(include_content=False) for r in records]


@router.get("/record", response_model=UrlDetail)
def get_url_endpoint(
    request: Request,
    url: str = Query(..., description="The exact URL of the record."),
) -> dict[str, Any]:
    """Return a single record, or 404 if the URL is unknown."""
    try:
        record = request.app.state.store.get_url(url)
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc
    if record is None:
        raise HTTPException(status_code=404, detail=f"URL not found: {url!r}")
    return record.to_dict()
