"""Domain models for stored vectors, scored candidates and merged sources."""

from __future__ import annotations

import hashlib
from typing import Any

from pydantic import BaseModel, Field


class MetadataFilter(BaseModel):
    """Declarative metadata filter for vector-store queries.

    Attributes
    ----------
    field:
        The metadata key to filter on (e.g. ``"state"``, ``"url"``).
    operator:
        Comparison operator — one of ``eq``, ``ne``, ``gt``, ``gte``,
        ``lt``, ``lte``, ``in``, ``nin``.
    value:
        The value (or list of values for ``in`` / ``nin``) to compare against.
    """

    field: str
    operator: str = "eq"
    value: Any = None

    @classmethod
    def equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, operator="eq", value=value)

    @classmethod
    def one_of(cls, field: str, values: list[Any]) -> MetadataFilter:
        return cls(field=field, operator="in", value=values)


def vector_id(url: str, chunk_index: int) -> str:
    """Deterministic store key for chunk *chunk_index* of *url*."""
    return f"{hashlib.sha256(url.encode()).hexdigest()[:16]}_{chunk_index}"


class IndexedVector(BaseModel):
    """A chunk as persisted in the vector store.

    ``metadata`` holds only flat ``str``/``int``/``float``/``bool`` values
    and always includes ``url``, ``state``, ``chunk_index`` and
    ``chunk_total``.
    """

    id: str
    text: str
    embedding: list[float]
    metadata: dict[str, str | int | float | bool] = Field(default_factory=dict)


class ScoredChunk(BaseModel):
    """A similarity-search candidate after score adjustment."""

    id: str = ""
    url: str
    title: str = ""
    chunk_index: int = 0
    content: str
    similarity: float
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class MergedSource(BaseModel):
    """All retrieved chunks of one source URL merged into a single result."""

    url: str
    title: str = ""
    content: str
    score: float
    chunk_indices: list[int] = Field(default_factory=list)
