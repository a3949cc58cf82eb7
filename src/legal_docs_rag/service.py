"""Ingestion and query entrypoints.

These are the two operations an outer layer (HTTP API, worker process,
notebook) calls. Both validate their input and normalise the state name
before touching the pipeline, so documents and queries always share the
same state partition key.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from legal_docs_rag.answer.composer import AnswerComposer
from legal_docs_rag.answer.suggestions import build_suggestions
from legal_docs_rag.errors import InvalidRequestError
from legal_docs_rag.ingestion.crawler import DocumentCrawler
from legal_docs_rag.ingestion.progress import CrawlProgress
from legal_docs_rag.jobs import InMemoryJobStore, JobStatus, JobStore
from legal_docs_rag.retrieval.base import VectorStoreBase
from legal_docs_rag.retrieval.retriever import StateRetriever
from legal_docs_rag.states import normalize_state

logger = logging.getLogger(__name__)

NOT_FOUND_ANSWER = "I couldn't find documentation for {state} that answers this question."


class SourceReference(BaseModel):
    """A cited source returned to the caller."""

    url: str
    title: str = "Untitled Document"
    score: float = Field(ge=0.0, le=1.0)


class QueryResult(BaseModel):
    """Answer, cited sources, and fallback suggestions for one question.

    ``sources`` empty implies exactly three ``suggestions``; otherwise
    ``suggestions`` is empty.
    """

    answer: str
    sources: list[SourceReference] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


def _require_state(state: object) -> str:
    if not state:
        raise InvalidRequestError("state is required")
    canonical = normalize_state(state)
    if canonical is None:
        raise InvalidRequestError(f"Unknown state: {state!r}")
    return canonical


def _require_urls(urls: object) -> list[str]:
    if not isinstance(urls, list) or not urls:
        raise InvalidRequestError("urls must be a non-empty list")
    for url in urls:
        if not isinstance(url, str) or urlparse(url).scheme not in ("http", "https") or not urlparse(url).netloc:
            raise InvalidRequestError(f"Invalid URL: {url!r}")
    return list(urls)


class IngestionService:
    """Runs crawls and reports job-status transitions.

    Parameters
    ----------
    crawler_factory:
        Builds a fresh :class:`DocumentCrawler` per run.
    job_store:
        Receives ``running`` / ``completed`` / ``failed`` transitions.
    """

    def __init__(
        self,
        crawler_factory: Callable[[], DocumentCrawler],
        job_store: JobStore | None = None,
    ) -> None:
        self._crawler_factory = crawler_factory
        self.job_store = job_store or InMemoryJobStore()
        self._background: set[asyncio.Task] = set()

    async def ingest(self, urls: list[str], state: str) -> CrawlProgress:
        """Crawl *urls* for *state* and return the final counters."""
        urls = _require_urls(urls)
        state = _require_state(state)
        crawler = self._crawler_factory()
        try:
            return await crawler.run(urls, state)
        finally:
            await crawler.close()

    async def run_job(self, job_id: str, urls: list[str], state: str) -> None:
        """Run :meth:`ingest`, recording the outcome under *job_id*."""
        self.job_store.update(job_id, JobStatus.RUNNING, urls=urls, state=state, error=None)
        try:
            progress = await self.ingest(urls, state)
        except Exception as exc:
            logger.exception("Ingestion job %s failed", job_id)
            self.job_store.update(job_id, JobStatus.FAILED, error=str(exc))
            return
        self.job_store.update(job_id, JobStatus.COMPLETED, result=progress.as_dict())

    def submit(self, urls: list[str], state: str) -> str:
        """Validate, then start :meth:`run_job` in the background.

        Must be called from a running event loop. Returns the job id.
        """
        urls = _require_urls(urls)
        state = _require_state(state)
        job_id = uuid.uuid4().hex
        task = asyncio.get_running_loop().create_task(self.run_job(job_id, urls, state))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        logger.info("Submitted ingestion job %s for %s (%d URL(s))", job_id, state, len(urls))
        return job_id


class QueryService:
    """Answers a question for one state from the indexed documentation."""

    def __init__(self, retriever: StateRetriever, composer: AnswerComposer) -> None:
        self._retriever = retriever
        self._composer = composer

    async def answer(self, question: str, state: str) -> QueryResult:
        """Retrieve, then either compose a grounded answer or suggest rephrasings.

        Retrieval or LLM failures propagate; no partial result is returned.
        """
        if not isinstance(question, str) or not question.strip():
            raise InvalidRequestError("question is required")
        state = _require_state(state)

        outcome = await self._retriever.retrieve(question, state)
        if not outcome.citations:
            logger.info("No sources above threshold for %s; returning suggestions", state)
            return QueryResult(
                answer=NOT_FOUND_ANSWER.format(state=state),
                sources=[],
                suggestions=build_suggestions(question),
            )

        answer = await self._composer.compose(question, state, outcome.context)
        return QueryResult(
            answer=answer,
            sources=[
                SourceReference(url=s.url, title=s.title or "Untitled Document", score=s.score)
                for s in outcome.citations
            ],
        )


# ---------------------------------------------------------------------------
# Factories wired from global settings
# ---------------------------------------------------------------------------


def _connect_store() -> VectorStoreBase:
    from legal_docs_rag.retrieval.chroma_store import ChromaVectorStore

    store = ChromaVectorStore()
    if not store.health_check():
        logger.warning("Vector store %r is not reachable yet; requests will fail until it is", store.collection_name)
    return store


def build_query_service() -> QueryService:
    """Query service backed by Chroma, the configured embeddings and chat model."""
    from legal_docs_rag.ingestion.embedder import Embedder

    return QueryService(StateRetriever(_connect_store(), Embedder()), AnswerComposer())


def build_ingestion_service(job_store: JobStore | None = None) -> IngestionService:
    """Ingestion service whose crawlers share one Chroma store and embedder."""
    from legal_docs_rag.ingestion.embedder import Embedder
    from legal_docs_rag.ingestion.fetcher import HttpFetcher
    from legal_docs_rag.ingestion.indexer import Indexer

    indexer = Indexer(_connect_store(), Embedder())

    def crawler_factory() -> DocumentCrawler:
        return DocumentCrawler(HttpFetcher(), indexer)

    return IngestionService(crawler_factory, job_store)
