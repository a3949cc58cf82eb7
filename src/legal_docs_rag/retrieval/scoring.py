"""Deterministic score adjustment and per-source merging.

Every function here is pure: given the same candidates and question they
always produce the same ranking.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Any

from legal_docs_rag.retrieval.models import MergedSource, ScoredChunk

_SECTION_RE = re.compile(r"§?\s*(\d+)")


def extract_section_number(question: str) -> str | None:
    """First run of digits in *question* (optionally after ``§``), if any."""
    match = _SECTION_RE.search(question)
    return match.group(1) if match else None


def adjust_score(
    similarity: float,
    url: str,
    content: str,
    section: str | None,
    *,
    anchor_keywords: Iterable[str],
    section_url_boost: float,
    section_content_boost: float,
    anchor_keyword_boost: float,
) -> float:
    """Apply additive boosts to a raw similarity, capped at ``1.0``."""
    score = similarity
    lowered = content.lower()
    if section and f"/{section}" in url:
        score += section_url_boost
    if section and f"section {section}" in lowered:
        score += section_content_boost
    if any(keyword in lowered for keyword in anchor_keywords):
        score += anchor_keyword_boost
    return min(score, 1.0)


def score_hits(
    hits: Sequence[dict[str, Any]],
    question: str,
    *,
    anchor_keywords: Iterable[str],
    section_url_boost: float,
    section_content_boost: float,
    anchor_keyword_boost: float,
) -> list[ScoredChunk]:
    """Convert raw store hits to :class:`ScoredChunk` sorted by adjusted score."""
    section = extract_section_number(question)
    keywords = [k.lower() for k in anchor_keywords]
    scored: list[ScoredChunk] = []
    for hit in hits:
        meta = hit.get("metadata") or {}
        url = str(meta.get("url", ""))
        content = hit.get("content", "") or ""
        similarity = float(hit.get("score") or 0.0)
        scored.append(
            ScoredChunk(
                id=str(hit.get("id", "")),
                url=url,
                title=str(meta.get("title") or ""),
                chunk_index=int(meta.get("chunk_index") or 0),
                content=content,
                similarity=similarity,
                score=adjust_score(
                    similarity,
                    url,
                    content,
                    section,
                    anchor_keywords=keywords,
                    section_url_boost=section_url_boost,
                    section_content_boost=section_content_boost,
                    anchor_keyword_boost=anchor_keyword_boost,
                ),
                metadata=meta,
            )
        )
    scored.sort(key=lambda c: c.score, reverse=True)
    return scored


def merge_by_source(chunks: Iterable[ScoredChunk]) -> list[MergedSource]:
    """Group chunks by URL into one result per source.

    Content is joined in ascending chunk index; the source score is the
    best chunk score. Sources are returned best-first, ties keeping the
    order in which each source first appeared.
    """
    groups: dict[str, list[ScoredChunk]] = {}
    for chunk in chunks:
        groups.setdefault(chunk.url, []).append(chunk)

    merged: list[MergedSource] = []
    for url, group in groups.items():
        ordered = sorted(group, key=lambda c: c.chunk_index)
        merged.append(
            MergedSource(
                url=url,
                title=next((c.title for c in ordered if c.title), ""),
                content="\n\n".join(c.content for c in ordered),
                score=max(c.score for c in group),
                chunk_indices=[c.chunk_index for c in ordered],
            )
        )
    merged.sort(key=lambda s: s.score, reverse=True)
    return merged


def select_sources(sources: Sequence[MergedSource], threshold: float, limit: int) -> list[MergedSource]:
    """The first *limit* sources scoring at least *threshold*."""
    return [s for s in sources if s.score >= threshold][:limit]
