"""Abstract base class for vector-store backends.

Adding a new backend (pgvector, Qdrant …) only requires subclassing
:class:`VectorStoreBase` and implementing the abstract methods. The
indexer and retriever are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from legal_docs_rag.retrieval.models import IndexedVector, MetadataFilter


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def add(self, records: list[IndexedVector]) -> None:
        """Insert or overwrite *records* keyed by their ``id``.

        Raises
        ------
        StoreError
            When the backend rejects the write.
        """
        ...

    @abstractmethod
    def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        """Return the top-*k* results matching *query_embedding*.

        Each result dict **must** contain:

        * ``"id"`` – chunk identifier
        * ``"content"`` – the textual content
        * ``"score"`` – cosine similarity in ``[0, 1]`` (higher = more similar)
        * ``"metadata"`` – associated metadata dict
        """
        ...

    @abstractmethod
    def delete(self, filters: list[MetadataFilter]) -> None:
        """Remove every record whose metadata matches all *filters*.

        Raises
        ------
        StoreError
            When the backend rejects the delete.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
