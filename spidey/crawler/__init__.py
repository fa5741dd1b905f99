"""Crawler package — classify, fetch, extract and persist URLs."""

from spidey.crawler.classifier import Classifier
from spidey.crawler.dispatcher import Dispatcher
from spidey.crawler.extractor import extract
from spidey.crawler.fetcher import Fetcher
from spidey.crawler.models import Classification, Extraction
from spidey.crawler.pipeline import Pipeline, build_pipeline

__all__ = [
    "Classifier",
    "Classification",
    "Dispatcher",
    "Extraction",
    "Fetcher",
    "Pipeline",
    "build_pipeline",
    "extract",
]
