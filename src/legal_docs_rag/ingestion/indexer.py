"""Persist a document's chunks into the vector store.

Chunks from an earlier crawl of the same URL are removed before the new
ones are written. A failure on one chunk (embedding exhausted or store
write rejected) is logged and that chunk is skipped; the rest of the
document is still stored.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from legal_docs_rag.config import settings
from legal_docs_rag.errors import StoreError
from legal_docs_rag.ingestion.chunker import TextChunker
from legal_docs_rag.ingestion.embedder import Embedder
from legal_docs_rag.ingestion.models import CanonicalDocument, Chunk
from legal_docs_rag.retrieval.base import VectorStoreBase
from legal_docs_rag.retrieval.models import IndexedVector, MetadataFilter, vector_id

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, int, float, bool)


def build_record(chunk: Chunk, document: CanonicalDocument, state: str) -> IndexedVector:
    """Flatten a chunk and its document into a storable record."""
    # Chroma metadata values must be flat str/int/float/bool
    meta: dict[str, Any] = {k: v for k, v in document.metadata.items() if isinstance(v, _SCALAR_TYPES)}
    meta.update({k: v for k, v in chunk.metadata.items() if isinstance(v, _SCALAR_TYPES)})
    meta.update(
        {
            "url": document.url,
            "title": document.title,
            "state": state,
            "content_type": document.content_type.value,
            "chunk_index": chunk.index,
            "chunk_total": chunk.total,
        }
    )
    return IndexedVector(
        id=vector_id(document.url, chunk.index),
        text=chunk.text,
        embedding=chunk.embedding,
        metadata=meta,
    )


class Indexer:
    """Chunk, embed and store canonical documents.

    Parameters
    ----------
    store:
        Target vector store.
    embedder:
        Embedding wrapper used for chunk texts.
    chunker:
        Splitter; defaults to the configured :class:`TextChunker`.
    batch_size:
        Number of chunk texts embedded concurrently.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder,
        chunker: TextChunker | None = None,
        *,
        batch_size: int = settings.embedding_batch_size,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._chunker = chunker or TextChunker()
        self.batch_size = batch_size

    async def index_document(self, document: CanonicalDocument, state: str) -> list[Chunk]:
        """Store every chunk of *document* under *state*.

        Returns
        -------
        list[Chunk]
            The chunks that were stored, in index order.
        """
        chunks = self._chunker.chunk_document(document)
        embeddings = await self._embedder.embed_batch(
            [c.text for c in chunks], self.batch_size, return_exceptions=True
        )

        if chunks and not any(isinstance(e, list) for e in embeddings):
            logger.error("No chunk of %s could be embedded; keeping previously stored version", document.url)
            return []
        await self._purge(document.url)

        stored: list[Chunk] = []
        for chunk, embedding in zip(chunks, embeddings):
            if isinstance(embedding, BaseException):
                logger.error("Error embedding chunk %d of %s: %s", chunk.index, document.url, embedding)
                continue
            chunk = chunk.with_embedding(embedding)
            try:
                await asyncio.to_thread(self._store.add, [build_record(chunk, document, state)])
            except StoreError as exc:
                logger.error("Error storing chunk %d of %s: %s", chunk.index, document.url, exc)
                continue
            stored.append(chunk)

        logger.info("Stored %d/%d chunks for %s", len(stored), len(chunks), document.url)
        return stored

    async def _purge(self, url: str) -> None:
        """Drop chunks from an earlier crawl of *url* so indices stay ``0..total-1``."""
        try:
            await asyncio.to_thread(self._store.delete, [MetadataFilter.equals("url", url)])
        except StoreError as exc:
            logger.warning("Could not remove previous chunks of %s: %s", url, exc)
