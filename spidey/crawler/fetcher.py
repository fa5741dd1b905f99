"""HTTP fetcher for pages selected for crawling."""

from __future__ import annotations

import httpx

from spidey.errors import FetchError

DEFAULT_USER_AGENT = "Spidey-Crawler/1.0 (+python-httpx)"

_HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


def _is_html(content_type: str) -> bool:
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime in _HTML_CONTENT_TYPES


class Fetcher:
    """GET pages and hand back the raw HTML body."""

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, timeout: float = 30.0) -> None:
        self.user_agent = user_agent
        self.timeout = timeout

    def fetch(self, url: str) -> bytes:
        """Fetch *url* and return its body.

        Redirects are followed.  No retries.

        Raises:
            FetchError: If the request cannot be built or sent, times out,
                ends in a non-2xx status, or the ``Content-Type`` is not HTML.
        """
        try:
            with httpx.Client(
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
                follow_redirects=True,
            ) as client:
                response = client.get(url)
        except httpx.TimeoutException as exc:
            raise FetchError(f"failed to fetch url: timed out: {exc}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(f"failed to fetch url: {exc}") from exc

        if not response.is_success:
            raise FetchError(
                f"failed to fetch url: status {response.status_code} {response.reason_phrase}".rstrip()
            )

        content_type = response.headers.get("Content-Type", "")
        if not _is_html(content_type):
            raise FetchError(f"content is not HTML, but {content_type or 'unspecified'}")

        return response.content
