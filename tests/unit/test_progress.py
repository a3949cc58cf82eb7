"""Unit tests for crawl progress counters."""

from __future__ import annotations

import logging
import threading

import pytest

from legal_docs_rag.ingestion.progress import CrawlProgress


def test_counters_stay_consistent() -> None:
    progress = CrawlProgress(log_interval=0.0)
    for _ in range(3):
        progress.record_stored()
    progress.record_skipped()
    assert progress.as_dict() == {"processed": 4, "stored": 3, "skipped": 1}


def test_concurrent_updates_are_not_lost() -> None:
    progress = CrawlProgress(log_interval=3600.0)

    def work() -> None:
        for i in range(500):
            if i % 2:
                progress.record_stored()
            else:
                progress.record_skipped()

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert progress.as_dict() == {"processed": 2000, "stored": 1000, "skipped": 1000}


def test_progress_log_is_rate_limited(caplog: pytest.LogCaptureFixture) -> None:
    progress = CrawlProgress(log_interval=3600.0)
    with caplog.at_level(logging.INFO, logger="legal_docs_rag.ingestion.progress"):
        for _ in range(5):
            progress.record_stored()
    assert len([r for r in caplog.records if r.message.startswith("Progress:")]) == 1
