"""Unit tests for settings and logging setup."""

from __future__ import annotations

import logging

import pytest

from legal_docs_rag.config import Settings, configure_logging


def test_defaults() -> None:
    s = Settings(_env_file=None)
    assert (s.chunk_size, s.chunk_overlap) == (4000, 200)
    assert (s.context_threshold, s.context_limit) == (0.6, 5)
    assert (s.citation_threshold, s.citation_limit) == (0.5, 4)
    assert s.crawl_max_concurrency == 2


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRAWL_MAX_REQUESTS", "25")
    monkeypatch.setenv("ANCHOR_KEYWORDS", '["food truck"]')
    s = Settings(_env_file=None)
    assert s.crawl_max_requests == 25
    assert s.anchor_keywords == ["food truck"]


def test_configure_logging_quiets_third_party(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    configure_logging("debug")
    assert calls[0]["level"] == "DEBUG"
    assert logging.getLogger("chromadb").level == logging.WARNING
