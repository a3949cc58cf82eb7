"""HTTP fetch client used by the crawler and the robots policy."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

import aiohttp

from legal_docs_rag.config import settings
from legal_docs_rag.errors import FetchError
from legal_docs_rag.ingestion.models import FetchResponse

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


class Fetcher(ABC):
    """Backend-agnostic fetch interface.

    Implementations raise :class:`~legal_docs_rag.errors.FetchError` on
    failure, with ``transient=True`` when a retry may succeed.
    """

    @abstractmethod
    async def fetch(self, url: str) -> FetchResponse:
        """Fetch *url*, following redirects."""
        ...

    async def close(self) -> None:  # noqa: B027
        """Release network resources. Optional."""


class HttpFetcher(Fetcher):
    """``aiohttp``-backed fetcher with a per-request total timeout.

    Parameters
    ----------
    timeout:
        Total seconds allowed for one request, body download included.
    user_agent:
        ``User-Agent`` header sent with every request.
    """

    def __init__(
        self,
        *,
        timeout: float = settings.crawl_request_timeout,
        user_agent: str = settings.crawl_user_agent,
    ) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._user_agent = user_agent
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HttpFetcher:
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": self._user_agent},
            )
        return self._session

    async def fetch(self, url: str) -> FetchResponse:
        session = self._ensure_session()
        try:
            async with session.get(url, allow_redirects=True) as response:
                if response.status >= 400:
                    transient = response.status in RETRYABLE_STATUS_CODES
                    raise FetchError(
                        f"HTTP {response.status} for {url}",
                        transient=transient,
                        status=response.status,
                    )
                body = await response.read()
                return FetchResponse(
                    url=str(response.url),
                    status=response.status,
                    content_type=response.headers.get("Content-Type", ""),
                    body=body,
                )
        except asyncio.TimeoutError as exc:
            raise FetchError(f"Timeout fetching {url}", transient=True) from exc
        except aiohttp.ClientError as exc:
            raise FetchError(f"Network error fetching {url}: {exc}", transient=True) from exc

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None
