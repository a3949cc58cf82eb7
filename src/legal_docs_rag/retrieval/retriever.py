"""State-scoped retriever — question in, ranked and merged sources out.

Usage::

    from legal_docs_rag.retrieval.retriever import StateRetriever

    retriever = StateRetriever(store, embedder)
    outcome = await retriever.retrieve("Do I need a food permit?", "Texas")
    for source in outcome.citations:
        print(source.url, source.score)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from legal_docs_rag.config import settings
from legal_docs_rag.ingestion.embedder import Embedder
from legal_docs_rag.retrieval.base import VectorStoreBase
from legal_docs_rag.retrieval.models import MergedSource, MetadataFilter
from legal_docs_rag.retrieval.scoring import merge_by_source, score_hits, select_sources

logger = logging.getLogger(__name__)


@dataclass
class RetrievalOutcome:
    """Merged sources split by the two thresholds.

    Attributes
    ----------
    context:
        Sources good enough to ground the LLM answer.
    citations:
        Sources good enough to show the caller.
    """

    context: list[MergedSource] = field(default_factory=list)
    citations: list[MergedSource] = field(default_factory=list)


class StateRetriever:
    """Similarity search restricted to one state, followed by re-scoring.

    Parameters
    ----------
    store:
        Vector-store backend holding the indexed chunks.
    embedder:
        Used to embed the expanded search query. Failures propagate.
    top_k:
        Number of raw candidates requested from the store.
    context_threshold / context_limit:
        Gate and cap for sources passed to the LLM.
    citation_threshold / citation_limit:
        Gate and cap for sources returned to the caller.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder,
        *,
        top_k: int = settings.retrieval_top_k,
        context_threshold: float = settings.context_threshold,
        context_limit: int = settings.context_limit,
        citation_threshold: float = settings.citation_threshold,
        citation_limit: int = settings.citation_limit,
        anchor_keywords: list[str] | None = None,
        search_terms: list[str] | None = None,
        section_url_boost: float = settings.section_url_boost,
        section_content_boost: float = settings.section_content_boost,
        anchor_keyword_boost: float = settings.anchor_keyword_boost,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self.top_k = top_k
        self.context_threshold = context_threshold
        self.context_limit = context_limit
        self.citation_threshold = citation_threshold
        self.citation_limit = citation_limit
        self.anchor_keywords = anchor_keywords if anchor_keywords is not None else list(settings.anchor_keywords)
        self.search_terms = search_terms if search_terms is not None else list(settings.search_terms)
        self.section_url_boost = section_url_boost
        self.section_content_boost = section_content_boost
        self.anchor_keyword_boost = anchor_keyword_boost

    def build_search_query(self, question: str, state: str) -> str:
        """Question expanded with the state and domain-anchor vocabulary."""
        return " ".join(part for part in (state, question.strip(), " ".join(self.search_terms)) if part)

    async def retrieve(self, question: str, state: str) -> RetrievalOutcome:
        search_query = self.build_search_query(question, state)
        embedding = await self._embedder.embed(search_query)
        hits = await asyncio.to_thread(
            self._store.similarity_search,
            embedding,
            k=self.top_k,
            filters=[MetadataFilter.equals("state", state)],
        )

        scored = score_hits(
            hits,
            question,
            anchor_keywords=self.anchor_keywords,
            section_url_boost=self.section_url_boost,
            section_content_boost=self.section_content_boost,
            anchor_keyword_boost=self.anchor_keyword_boost,
        )
        merged = merge_by_source(scored)
        outcome = RetrievalOutcome(
            context=select_sources(merged, self.context_threshold, self.context_limit),
            citations=select_sources(merged, self.citation_threshold, self.citation_limit),
        )
        logger.info(
            "Retrieved %d candidates → %d sources (%d context, %d cited) for %s",
            len(hits),
            len(merged),
            len(outcome.context),
            len(outcome.citations),
            state,
        )
        return outcome
