"""Text and link extraction: turns raw HTML into an :class:`Extraction`."""

from __future__ import annotations

from typing import Union

import httpx
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import PreformattedString

from spidey.crawler.models import Extraction
from spidey.errors import ExtractionError

# Text is kept only when its *immediate* parent is one of these tags.
# Anything else (script, style, title, ...) is dropped by omission.
TEXT_TAGS = frozenset(
    {
        "p", "div", "span", "a",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "li", "th", "td",
        "article", "main", "section", "pre",
    }
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _parse(html: Union[bytes, str]) -> BeautifulSoup:
    """Parse *html*, keeping the first value when an attribute is repeated."""
    try:
        return BeautifulSoup(html, "html.parser", on_duplicate_attribute="ignore")
    except ParserRejectedMarkup as exc:
        raise ExtractionError(f"could not parse document: {exc}") from exc


def _is_text_node(node: object) -> bool:
    # Comments, doctypes, CDATA and processing instructions are all
    # PreformattedString subclasses; only plain character data counts.
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def _resolve(base_url: str, href: str) -> str | None:
    """Resolve *href* against *base_url*; ``None`` if it cannot be resolved.

    The result is percent-encoded, so ``/my post.html`` and ``/café`` come
    back as ``/my%20post.html`` and ``/caf%C3%A9``.
    """
    try:
        return str(httpx.URL(base_url).join(href.strip()))
    except (httpx.InvalidURL, ValueError):
        return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract(html: Union[bytes, str], base_url: str) -> Extraction:
    """Extract normalised visible text and absolute links from *html*.

    The document is walked depth-first in document order.  Text nodes whose
    parent tag is in :data:`TEXT_TAGS` are trimmed and joined with single
    spaces, then every whitespace run is collapsed so the result is one line.
    Every ``<a href>`` is resolved against *base_url* and collected into a set.

    Args:
        html: Raw document bytes (encoding is sniffed) or an already decoded
            string.
        base_url: The URL the document was fetched from.

    Returns:
        An :class:`Extraction`.  ``links`` holds no duplicates; its order is
        not significant.

    Raises:
        ExtractionError: If the parser rejects the markup outright.
    """
    soup = _parse(html)

    fragments: list[str] = []
    links: set[str] = set()

    for node in soup.descendants:
        if _is_text_node(node):
            parent = node.parent
            if parent is not None and parent.name in TEXT_TAGS:
                fragment = node.strip()
                if fragment:
                    fragments.append(fragment)
        elif isinstance(node, Tag) and node.name == "a":
            href = node.get("href")
            if isinstance(href, str):
                resolved = _resolve(base_url, href)
                if resolved is not None:
                    links.add(resolved)

    text = " ".join(" ".join(fragments).split())
    return Extraction(text=text, links=sorted(links))
