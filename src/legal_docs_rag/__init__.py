"""
Legal Docs RAG — state-scoped retrieval-augmented answers over public legal documentation.

Public API
----------
- :class:`IngestionService` — crawl seed URLs for a state into the vector store.
- :class:`QueryService` — answer a question for a state with cited sources.
- :func:`build_ingestion_service` / :func:`build_query_service` — factories wired from settings.
"""

from legal_docs_rag.service import (
    IngestionService,
    QueryResult,
    QueryService,
    SourceReference,
    build_ingestion_service,
    build_query_service,
)

__all__ = [
    "IngestionService",
    "QueryResult",
    "QueryService",
    "SourceReference",
    "build_ingestion_service",
    "build_query_service",
]
