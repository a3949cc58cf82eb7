"""Embedding generation with text cleaning, batching and retries."""

from __future__ import annotations

import asyncio
import logging
import random
import re
from typing import TYPE_CHECKING, Any

from legal_docs_rag.config import settings
from legal_docs_rag.errors import EmbeddingError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_NON_BASIC_RE = re.compile(r"[^\w\s.,?!-]")


def get_embedding_function() -> Embeddings:
    """Return the configured LangChain embedding model."""
    if settings.embedding_provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=settings.embedding_model)
    if settings.embedding_provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        return OpenAIEmbeddings(model=settings.embedding_model, api_key=settings.openai_api_key or None)
    raise ValueError(f"Unsupported embedding_provider={settings.embedding_provider!r}")


def clean_text(text: str) -> str:
    """Collapse whitespace and strip non-basic punctuation before embedding."""
    text = _WHITESPACE_RE.sub(" ", text)
    text = _NON_BASIC_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def backoff_delay(attempt: int, initial_delay: float, max_delay: float) -> float:
    """Delay before retry number *attempt* (1-based).

    Jitter is drawn from ``[0, initial_delay)``, which is never larger than
    the doubling step, so successive delays are non-decreasing.
    """
    base = initial_delay * 2 ** (attempt - 1)
    return min(base + random.uniform(0, initial_delay), max_delay)


class Embedder:
    """Wraps a LangChain :class:`Embeddings` with cleaning and retry logic.

    Parameters
    ----------
    embeddings:
        Any LangChain embedding model. Defaults to
        :func:`get_embedding_function`.
    max_retries:
        Retries after the first failed call before giving up.
    initial_delay / max_delay:
        Exponential backoff bounds in seconds.
    batch_pause:
        Pause between consecutive batches in :meth:`embed_batch`.
    """

    def __init__(
        self,
        embeddings: Embeddings | None = None,
        *,
        max_retries: int = settings.embedding_max_retries,
        initial_delay: float = settings.embedding_initial_delay,
        max_delay: float = settings.embedding_max_delay,
        batch_pause: float = settings.embedding_batch_pause,
    ) -> None:
        self._embeddings = embeddings if embeddings is not None else get_embedding_function()
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.batch_pause = batch_pause

    async def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Raises
        ------
        EmbeddingError
            When every attempt failed.
        """
        cleaned = clean_text(text)
        attempt = 0
        while True:
            try:
                return await self._embeddings.aembed_query(cleaned)
            except Exception as exc:
                attempt += 1
                if attempt > self.max_retries:
                    raise EmbeddingError(f"Failed to generate embedding after {self.max_retries} retries: {exc}") from exc
                delay = backoff_delay(attempt, self.initial_delay, self.max_delay)
                logger.warning("Embedding retry %d/%d after %.2fs: %s", attempt, self.max_retries, delay, exc)
                await asyncio.sleep(delay)

    async def embed_batch(
        self,
        texts: list[str],
        batch_size: int = settings.embedding_batch_size,
        *,
        return_exceptions: bool = False,
    ) -> list[Any]:
        """Embed *texts* in sequential batches, in parallel within a batch.

        With ``return_exceptions=True`` a failed text yields its
        :class:`EmbeddingError` in place of a vector, as
        :func:`asyncio.gather` does.
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        results: list[Any] = []
        for start in range(0, len(texts), batch_size):
            if start > 0 and self.batch_pause > 0:
                await asyncio.sleep(self.batch_pause)
            batch = texts[start : start + batch_size]
            results.extend(
                await asyncio.gather(*(self.embed(t) for t in batch), return_exceptions=return_exceptions)
            )
            logger.debug("  embedded %d / %d", len(results), len(texts))
        return results
