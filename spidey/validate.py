"""URL syntax validation used at submission time and for discovered links."""

from __future__ import annotations

from pydantic import HttpUrl, TypeAdapter, ValidationError

_HTTP_URL: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)


def is_valid_http_url(value: str) -> bool:
    """Return ``True`` if *value* is an absolute ``http``/``https`` URL with a host.

    Strings containing whitespace are rejected outright: the URL parser would
    silently strip or percent-encode it, and the stored record must match the
    submitted string exactly.
    """
    if not isinstance(value, str) or not value:
        return False
    if any(ch.isspace() for ch in value):
        return False
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError:
        return False
    return True
