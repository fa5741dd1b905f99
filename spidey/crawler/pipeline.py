"""Per-URL crawl pipeline.

``Pipeline.process`` drives one URL through its whole lifecycle:

    classifying → classify → store label → (skipped | crawling)
                → fetch → extract → crawled + new pending links

Every stage has its own failure branch, so a failed record always names the
stage that broke.  Nothing escapes ``process``: the outcome lives only in the
record's ``status`` and ``error_message``.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from spidey.config import Settings
from spidey.crawler.classifier import Classifier
from spidey.crawler.extractor import extract
from spidey.crawler.fetcher import Fetcher
from spidey.crawler.models import Extraction
from spidey.db.models import UrlStatus
from spidey.db.store import UrlStore
from spidey.errors import (
    ClassificationError,
    ExtractionError,
    FetchError,
    PersistenceError,
    UnexpectedFault,
)
from spidey.validate import is_valid_http_url

TARGET_LABEL = "PERSONAL_BLOG"
MAX_ERROR_LENGTH = 1024

logger = logging.getLogger(__name__)


def truncate_error(message: str, limit: int = MAX_ERROR_LENGTH) -> str:
    """Cap *message* at *limit* characters for the ``error_message`` column."""
    return message if len(message) <= limit else message[:limit]


class Pipeline:
    """Classify, fetch, extract and persist a single URL.

    Args:
        store: Where records are read and written.
        classifier: Client for the model service.
        fetcher: Client used to download pages.
        extractor: ``(html, base_url) -> Extraction``; defaults to
            :func:`~spidey.crawler.extractor.extract`.
        target_label: The label that earns a URL a full crawl.
        log: Logger for stage transitions; defaults to this module's logger.
    """

    def __init__(
        self,
        store: UrlStore,
        classifier: Classifier,
        fetcher: Fetcher,
        extractor: Callable[[bytes, str], Extraction] = extract,
        target_label: str = TARGET_LABEL,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.store = store
        self.classifier = classifier
        self.fetcher = fetcher
        self.extractor = extractor
        self.target_label = target_label.upper()
        self.log = log or logger

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def process(self, url: str) -> None:
        """Run the pipeline for *url*.  Never raises."""
        self.log.info("Starting to process %s", url)
        try:
            self._run(url)
        except Exception as exc:  # noqa: BLE001
            fault = UnexpectedFault.from_exception(exc)
            self.log.exception("Unexpected fault while processing %s", url)
            self._mark_failed(url, str(fault))

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def _run(self, url: str) -> None:
        try:
            self.store.update_status(url, UrlStatus.CLASSIFYING)
        except PersistenceError as exc:
            self.log.error("Failed to update status of %s to classifying: %s", url, exc)
            return

        try:
            result = self.classifier.classify(url)
        except ClassificationError as exc:
            self.log.error("Failed to classify %s: %s", url, exc)
            self._mark_failed(url, str(exc))
            return
        self.log.info(
            "Classified %s as %s (confidence %.2f)", url, result.label, result.confidence
        )

        try:
            self.store.update_classification(url, result.label, result.confidence)
        except PersistenceError as exc:
            self.log.error("Failed to store classification of %s: %s", url, exc)
            self._mark_failed(url, "failed to update classification")
            return

        if result.label != self.target_label:
            self.log.info("%s is not %s, skipping crawl", url, self.target_label)
            try:
                self.store.mark_skipped(url)
            except PersistenceError as exc:
                self.log.error("Failed to mark %s as skipped: %s", url, exc)
            return

        try:
            self.store.update_status(url, UrlStatus.CRAWLING)
        except PersistenceError as exc:
            self.log.error("Failed to update status of %s to crawling: %s", url, exc)
            return

        try:
            body = self.fetcher.fetch(url)
            page = self.extractor(body, url)
        except (FetchError, ExtractionError) as exc:
            self.log.error("Failed to fetch and parse %s: %s", url, exc)
            self._mark_failed(url, str(exc))
            return
        self.log.info("Fetched and parsed %s, %d link(s) found", url, len(page.links))

        try:
            added = self._store_crawl(url, page)
        except PersistenceError as exc:
            self.log.error("Database transaction failed for %s: %s", url, exc)
            self._mark_failed(url, "database transaction failed")
            return

        self.log.info("Crawled %s, queued %d new link(s)", url, added)

    def _store_crawl(self, url: str, page: Extraction) -> int:
        """Save the content and queue discovered links as one transaction.

        Returns the number of links that were new to the store.
        """
        added = 0
        with self.store.transaction() as tx:
            tx.mark_crawled(url, page.text)
            for link in page.links:
                if not is_valid_http_url(link):
                    continue
                try:
                    if tx.create_url(link):
                        added += 1
                except PersistenceError as exc:
                    self.log.warning("Failed to insert new link %s: %s", link, exc)
        return added

    def _mark_failed(self, url: str, message: str) -> None:
        try:
            self.store.mark_failed(url, truncate_error(message))
        except PersistenceError as exc:
            self.log.error("Failed to mark %s as failed: %s", url, exc)


def build_pipeline(
    store: UrlStore,
    settings: Settings,
    log: Optional[logging.Logger] = None,
) -> Pipeline:
    """Wire a :class:`Pipeline` from explicit *settings*."""
    return Pipeline(
        store=store,
        classifier=Classifier(settings.model_api_url, timeout=settings.request_timeout),
        fetcher=Fetcher(user_agent=settings.user_agent, timeout=settings.request_timeout),
        target_label=settings.target_label,
        log=log,
    )
