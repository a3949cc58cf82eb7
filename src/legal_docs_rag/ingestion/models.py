"""Domain models flowing through the ingestion pipeline.

``CrawlTask`` and ``FetchResponse`` are plain dataclasses (they never leave
the crawler); documents and chunks are Pydantic models because they cross
into the indexer and vector store.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field


class ContentKind(str, Enum):
    """Closed set of content types the normaliser understands."""

    HTML = "text/html"
    PDF = "application/pdf"
    CALENDAR = "text/calendar"


@dataclass
class CrawlTask:
    """One URL waiting in (or re-entering) the crawl frontier.

    Attributes
    ----------
    url:
        Absolute URL to fetch.
    state:
        Canonical state name the resulting documents are partitioned under.
    base_path:
        Scope root; discovered links must start with it to be enqueued.
    retry_count:
        Number of transient failures already seen for this URL.
    """

    url: str
    state: str
    base_path: str
    retry_count: int = 0


@dataclass
class FetchResponse:
    """Raw HTTP result handed from the fetch client to the normaliser."""

    url: str
    status: int
    content_type: str
    body: bytes

    @property
    def mime_type(self) -> str:
        return self.content_type.split(";")[0].strip().lower()

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` for *url*."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


class CanonicalDocument(BaseModel):
    """Normalised (title, text, metadata) extracted from one response."""

    url: str
    title: str = ""
    content: str
    content_type: ContentKind
    metadata: dict[str, Any] = Field(default_factory=dict)


class Chunk(BaseModel):
    """A bounded, overlapping segment of a canonical document.

    ``index`` runs ``0..total-1`` for a document. Chunks are frozen; the
    indexer attaches the embedding with :meth:`with_embedding`.
    """

    model_config = ConfigDict(frozen=True)

    document_url: str
    index: int
    total: int
    text: str
    embedding: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def with_embedding(self, embedding: list[float]) -> Chunk:
        return self.model_copy(update={"embedding": list(embedding)})
