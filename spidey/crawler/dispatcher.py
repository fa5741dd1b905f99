"""Fire-and-forget dispatch of crawl tasks.

Each submitted URL gets its own daemon thread running
:meth:`~spidey.crawler.pipeline.Pipeline.process`.  There is no pool bound and
no backpressure: ``submit`` returns as soon as the thread has started.  Tasks
share nothing but the store.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from spidey.crawler.pipeline import Pipeline
from spidey.errors import UnexpectedFault

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(self, pipeline: Pipeline) -> None:
        self.pipeline = pipeline
        self._lock = threading.Lock()
        self._tasks: dict[threading.Thread, str] = {}

    def submit(self, url: str) -> threading.Thread:
        """Start processing *url* in the background and return its thread."""
        thread = threading.Thread(
            target=self._task,
            args=(url,),
            name=f"crawl-{url}",
            daemon=True,
        )
        # Registered and started under the lock so wait() never sees an
        # unstarted thread.
        with self._lock:
            self._tasks[thread] = url
            thread.start()
        return thread

    def _task(self, url: str) -> None:
        try:
            self.pipeline.process(url)
        except Exception as exc:  # noqa: BLE001
            # process() has its own boundary; this only guards the thread.
            logger.error("%s", UnexpectedFault.from_exception(exc), exc_info=True)
        finally:
            with self._lock:
                self._tasks.pop(threading.current_thread(), None)

    def in_flight(self) -> list[str]:
        """URLs whose tasks have not finished yet."""
        with self._lock:
            return list(self._tasks.values())

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Join in-flight tasks.

        Returns ``True`` if every task finished within *timeout* seconds
        (``None`` waits indefinitely).
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                threads = list(self._tasks)
            if not threads:
                return True
            for thread in threads:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                thread.join(remaining)
