"""Crawl progress counters."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class CrawlProgress:
    """``processed``/``stored``/``skipped`` counters for one crawl run.

    Every terminal outcome goes through :meth:`record_stored` or
    :meth:`record_skipped`, so ``processed == stored + skipped`` holds at
    all times. A progress line is logged at most once per
    ``log_interval`` seconds.
    """

    log_interval: float = 30.0
    processed: int = 0
    stored: int = 0
    skipped: int = 0
    _last_log: float = field(default=float("-inf"), repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_stored(self) -> None:
        self._record(stored=True)

    def record_skipped(self) -> None:
        self._record(stored=False)

    def _record(self, *, stored: bool) -> None:
        with self._lock:
            self.processed += 1
            if stored:
                self.stored += 1
            else:
                self.skipped += 1
            now = time.monotonic()
            if now - self._last_log < self.log_interval:
                return
            self._last_log = now
            snapshot = (self.processed, self.stored, self.skipped)
        logger.info("Progress: processed %d pages (%d stored, %d skipped)", *snapshot)

    def as_dict(self) -> dict[str, int]:
        return {"processed": self.processed, "stored": self.stored, "skipped": self.skipped}
