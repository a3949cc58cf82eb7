"""Bounded-concurrency crawl scheduler.

A shared :class:`asyncio.Queue` frontier is drained by a small pool of
worker coroutines. Each task passes through the stages
``fetch → classify/normalise → index → discover links``; the stages that
do not touch the network (:func:`extract_links`, :func:`in_scope`,
:func:`retry_delay`, the normaliser and chunker) are plain functions or
objects that can be tested in isolation.

Per-task lifecycle::

    Queued → Fetching → Normalizing → Chunking → Embedding → Indexing → Stored
                      ↘ Skipped
                      ↘ Failed(retryable) → Queued (after backoff)
                      ↘ Failed(terminal)  (counted as skipped)
"""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from legal_docs_rag.config import settings
from legal_docs_rag.errors import ContentError, FetchError
from legal_docs_rag.ingestion.fetcher import Fetcher
from legal_docs_rag.ingestion.indexer import Indexer
from legal_docs_rag.ingestion.models import ContentKind, CrawlTask, FetchResponse, origin_of
from legal_docs_rag.ingestion.normalizer import Normalizer
from legal_docs_rag.ingestion.progress import CrawlProgress
from legal_docs_rag.ingestion.robots import RobotsPolicy

logger = logging.getLogger(__name__)


def retry_delay(retry_count: int, base_delay: float, max_delay: float) -> float:
    """Backoff before retry number *retry_count*: doubling, capped at *max_delay*."""
    return min(base_delay * 2**retry_count, max_delay)


def normalize_url(url: str) -> str:
    """Drop the fragment so ``page#a`` and ``page#b`` are visited once."""
    return urldefrag(url)[0]


def in_scope(url: str, base_path: str) -> bool:
    """``True`` when *url* lies under *base_path*."""
    root = base_path.rstrip("/")
    return url == root or url.startswith(root + "/")


def extract_links(html: str, page_url: str, base_path: str) -> list[str]:
    """Absolute, fragment-free, in-scope http(s) links found in *html*.

    Order of first appearance is preserved and duplicates are removed.
    """
    soup = BeautifulSoup(html, "html.parser")
    links: list[str] = []
    seen: set[str] = set()
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href:
            continue
        absolute = normalize_url(urljoin(page_url, href))
        if urlparse(absolute).scheme not in ("http", "https"):
            continue
        if absolute in seen or not in_scope(absolute, base_path):
            continue
        seen.add(absolute)
        links.append(absolute)
    return links


class DocumentCrawler:
    """Crawls seed URLs for one state and indexes every supported document.

    All collaborators are injected so the crawler can run against fakes.

    Parameters
    ----------
    fetcher:
        HTTP client used for pages, PDFs and robots.txt.
    indexer:
        Receives every canonical document that survives normalisation.
    normalizer:
        Content-type classification and extraction.
    robots:
        robots.txt policy; defaults to one sharing *fetcher*.
    max_requests:
        Ceiling on fetch attempts for the whole run.
    max_concurrency:
        Number of worker coroutines.
    max_retries:
        Transient failures tolerated per URL before it is abandoned.
    politeness_delay:
        Seconds each worker waits before processing a task.
    retry_base_delay / retry_max_delay:
        Exponential backoff bounds for transient fetch failures.
    progress_interval:
        Minimum seconds between progress log lines.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        indexer: Indexer,
        normalizer: Normalizer | None = None,
        robots: RobotsPolicy | None = None,
        *,
        max_requests: int = settings.crawl_max_requests,
        max_concurrency: int = settings.crawl_max_concurrency,
        max_retries: int = settings.crawl_max_retries,
        politeness_delay: float = settings.crawl_politeness_delay,
        retry_base_delay: float = settings.crawl_retry_base_delay,
        retry_max_delay: float = settings.crawl_retry_max_delay,
        progress_interval: float = settings.crawl_progress_interval,
    ) -> None:
        self._fetcher = fetcher
        self._indexer = indexer
        self._normalizer = normalizer or Normalizer()
        self._robots = robots or RobotsPolicy(fetcher)
        self.max_requests = max_requests
        self.max_concurrency = max_concurrency
        self.max_retries = max_retries
        self.politeness_delay = politeness_delay
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self.progress_interval = progress_interval

    async def run(self, seed_urls: list[str], state: str) -> CrawlProgress:
        """Crawl from *seed_urls* and return the final counters."""
        progress = CrawlProgress(log_interval=self.progress_interval)
        queue: asyncio.Queue[CrawlTask] = asyncio.Queue()
        seen: set[str] = set()
        requests_made = 0

        logger.info("Starting crawl for %s from %d URL(s)", state, len(seed_urls))

        def enqueue(url: str, base_path: str) -> bool:
            url = normalize_url(url)
            if url in seen:
                return False
            seen.add(url)
            queue.put_nowait(CrawlTask(url=url, state=state, base_path=base_path))
            return True

        for seed in seed_urls:
            enqueue(seed, origin_of(seed))

        async def worker(worker_id: int) -> None:
            nonlocal requests_made
            while True:
                task = await queue.get()
                try:
                    if requests_made >= self.max_requests:
                        logger.debug("Request ceiling reached; dropping %s", task.url)
                        continue
                    requests_made += 1
                    await self._process(task, queue, enqueue, progress)
                except Exception:
                    logger.exception("Worker %d failed on %s", worker_id, task.url)
                    progress.record_skipped()
                finally:
                    queue.task_done()

        workers = [asyncio.create_task(worker(i)) for i in range(self.max_concurrency)]
        try:
            await queue.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        if requests_made >= self.max_requests:
            logger.info("Reached request ceiling of %d", self.max_requests)
        logger.info(
            "Crawl completed for %s. Processed: %d, stored: %d, skipped: %d",
            state,
            progress.processed,
            progress.stored,
            progress.skipped,
        )
        return progress

    async def close(self) -> None:
        await self._fetcher.close()

    async def _process(self, task: CrawlTask, queue: asyncio.Queue, enqueue, progress: CrawlProgress) -> None:
        if self.politeness_delay > 0:
            await asyncio.sleep(self.politeness_delay)

        if not await self._robots.is_allowed(task.url):
            logger.info("Skipping %s: blocked by robots.txt", task.url)
            progress.record_skipped()
            return

        response = await self._fetch(task, queue, progress)
        if response is None:
            return

        try:
            document = await self._normalizer.normalize(response, self._fetcher)
        except (ContentError, FetchError) as exc:
            logger.error("Error processing %s: %s", task.url, exc)
            progress.record_skipped()
            return

        if document is None:
            progress.record_skipped()
            return

        if await self._indexer.index_document(document, task.state):
            progress.record_stored()
        else:
            logger.warning("Nothing stored for %s", task.url)
            progress.record_skipped()

        if document.content_type is ContentKind.HTML:
            links = extract_links(response.text(), response.url, task.base_path)
            added = sum(enqueue(link, task.base_path) for link in links)
            if added:
                logger.info("Found %d new in-scope links on %s", added, response.url)

    async def _fetch(self, task: CrawlTask, queue: asyncio.Queue, progress: CrawlProgress) -> FetchResponse | None:
        """Fetch *task*, re-enqueueing it after backoff on a transient failure."""
        try:
            return await self._fetcher.fetch(task.url)
        except FetchError as exc:
            if exc.transient and task.retry_count < self.max_retries:
                task.retry_count += 1
                delay = retry_delay(task.retry_count, self.retry_base_delay, self.retry_max_delay)
                logger.warning(
                    "Retry %d/%d for %s in %.1fs: %s", task.retry_count, self.max_retries, task.url, delay, exc
                )
                await asyncio.sleep(delay)
                queue.put_nowait(task)
            else:
                logger.error("Giving up on %s after %d retries: %s", task.url, task.retry_count, exc)
                progress.record_skipped()
            return None
