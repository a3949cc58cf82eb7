"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from legal_docs_rag.errors import FetchError, StoreError
from legal_docs_rag.ingestion.embedder import Embedder
from legal_docs_rag.ingestion.fetcher import Fetcher
from legal_docs_rag.ingestion.models import FetchResponse
from legal_docs_rag.retrieval.base import VectorStoreBase
from legal_docs_rag.retrieval.models import IndexedVector, MetadataFilter


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fake vector store ───────────────────────────────────────────────────


class FakeVectorStore(VectorStoreBase):
    """In-memory store that records writes and returns canned search hits."""

    def __init__(self, hits: list[dict[str, Any]] | None = None, fail_ids: set[str] | None = None) -> None:
        super().__init__("test-collection")
        self.records: dict[str, IndexedVector] = {}
        self.add_calls: list[list[str]] = []
        self.delete_calls: list[list[MetadataFilter]] = []
        self._hits: list[dict[str, Any]] = hits or []
        self._fail_ids = fail_ids or set()
        self.last_k: int | None = None
        self.last_filters: list[MetadataFilter] | None = None

    def add(self, records: list[IndexedVector]) -> None:
        self.add_calls.append([r.id for r in records])
        for record in records:
            if record.id in self._fail_ids:
                raise StoreError(f"rejected {record.id}")
            self.records[record.id] = record

    def delete(self, filters: list[MetadataFilter]) -> None:
        self.delete_calls.append(filters)
        for record_id, record in list(self.records.items()):
            if all(record.metadata.get(f.field) == f.value for f in filters):
                del self.records[record_id]

    def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        self.last_k = k
        self.last_filters = filters
        return self._hits[:k]

    def health_check(self) -> bool:
        return True


# ── Fake embeddings ─────────────────────────────────────────────────────


class FakeEmbeddings:
    """Deterministic stand-in for a LangChain embedding model.

    Texts containing any of ``fail_on`` always raise; the first
    ``fail_times`` calls raise regardless of input.
    """

    def __init__(self, fail_on: tuple[str, ...] = (), fail_times: int = 0) -> None:
        self.fail_on = fail_on
        self.fail_times = fail_times
        self.calls: list[str] = []

    async def aembed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ConnectionError("rate limited")
        if any(marker in text for marker in self.fail_on):
            raise ConnectionError(f"cannot embed {text[:20]!r}")
        return [float(len(text)), 1.0, 0.0]


def make_embedder(embeddings: FakeEmbeddings | None = None, **kwargs: Any) -> Embedder:
    """Embedder with zero delays, suitable for tests."""
    options = {"max_retries": 2, "initial_delay": 0.0, "max_delay": 0.0, "batch_pause": 0.0}
    options.update(kwargs)
    return Embedder(embeddings or FakeEmbeddings(), **options)


# ── Fake fetcher ────────────────────────────────────────────────────────


def html_response(url: str, body: str, status: int = 200) -> FetchResponse:
    return FetchResponse(url=url, status=status, content_type="text/html; charset=utf-8", body=body.encode())


class FakeFetcher(Fetcher):
    """Serves scripted responses keyed by URL.

    A value may be a :class:`FetchResponse`, an exception instance, or a
    list of either consumed one per call. Unknown URLs raise a
    non-transient 404 :class:`FetchError`.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        outcome = self.routes.get(url)
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if outcome is None:
            raise FetchError(f"HTTP 404 for {url}", transient=False, status=404)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture()
def fake_embeddings() -> FakeEmbeddings:
    return FakeEmbeddings()
