"""Client for the external URL classification service.

The service exposes a single endpoint::

    POST {base_url}/predict        {"url": "https://..."}
    200                            {"prediction": "personal_blog", "confidence": 0.91}

One attempt per call; retry policy belongs to the caller.
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel, Field, ValidationError

from spidey.crawler.models import Classification
from spidey.errors import ClassificationError


class _PredictResponse(BaseModel):
    prediction: str = Field(strict=True)
    confidence: float = Field(strict=True, ge=0.0, le=1.0)


class Classifier:
    """Ask the model service whether a URL is worth crawling."""

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/predict"

    def classify(self, url: str) -> Classification:
        """Return the upper-cased label and confidence for *url*.

        Raises:
            ClassificationError: If the request cannot be built or sent, times
                out, returns a non-2xx status, or the body is not
                ``{"prediction": str, "confidence": number}``.
        """
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    self.endpoint,
                    json={"url": url},
                    headers={"Accept": "application/json"},
                )
        except httpx.TimeoutException as exc:
            raise ClassificationError(f"model api request timed out: {exc}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ClassificationError(f"model api request failed: {exc}") from exc

        if not response.is_success:
            raise ClassificationError(
                f"model api returned status {response.status_code}: {response.text}"
            )

        try:
            body = _PredictResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise ClassificationError(f"failed to decode model response: {exc}") from exc

        return Classification(label=body.prediction.upper(), confidence=body.confidence)
