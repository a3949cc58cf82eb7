"""
Retrieval — state-filtered vector search, score boosting, and source merging.

Public surface
--------------
- :class:`StateRetriever` — main entry point; returns context and citation sources.
- :class:`VectorStoreBase` — abstract backend.
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`MetadataFilter`, :class:`IndexedVector`, :class:`ScoredChunk`, :class:`MergedSource` — data models.
"""

from legal_docs_rag.retrieval.base import VectorStoreBase
from legal_docs_rag.retrieval.models import IndexedVector, MergedSource, MetadataFilter, ScoredChunk
from legal_docs_rag.retrieval.retriever import RetrievalOutcome, StateRetriever

__all__ = [
    "ChromaVectorStore",
    "IndexedVector",
    "MergedSource",
    "MetadataFilter",
    "RetrievalOutcome",
    "ScoredChunk",
    "StateRetriever",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from legal_docs_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
