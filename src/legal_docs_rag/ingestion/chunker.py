"""Text chunking with a layered separator strategy."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from langchain_text_splitters import RecursiveCharacterTextSplitter

from legal_docs_rag.config import settings
from legal_docs_rag.ingestion.models import CanonicalDocument, Chunk

# Coarsest first: section headers, paragraphs, lines, sentences, words, characters.
SEPARATORS = ["\n## ", "\n\n", "\n", ". ", " ", ""]

_CODE_RE = re.compile(r"```|`[^`]+`")
_LIST_RE = re.compile(r"^[-*]\s", re.MULTILINE)
_TABLE_RE = re.compile(r"\|.*\|")


class TextChunker:
    """Split canonical text into overlapping, size-bounded segments.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of trailing characters of one chunk repeated at the start
        of the next.
    """

    def __init__(
        self,
        chunk_size: int = settings.chunk_size,
        chunk_overlap: int = settings.chunk_overlap,
    ) -> None:
        if chunk_overlap >= chunk_size:
            raise ValueError(f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            length_function=len,
            separators=SEPARATORS,
        )

    def split(self, text: str) -> list[str]:
        """Return the ordered chunk texts for *text*."""
        return self._splitter.split_text(text)

    def chunk_document(self, document: CanonicalDocument) -> list[Chunk]:
        """Split *document* into :class:`Chunk` objects without embeddings."""
        pieces = self.split(document.content)
        timestamp = datetime.now(timezone.utc).isoformat()
        return [
            Chunk(
                document_url=document.url,
                index=index,
                total=len(pieces),
                text=piece,
                metadata={**describe_chunk(piece), "timestamp": timestamp},
            )
            for index, piece in enumerate(pieces)
        ]


def describe_chunk(text: str) -> dict[str, int | bool]:
    """Size and content-shape flags stored alongside each chunk."""
    return {
        "word_count": len(text.split()),
        "char_count": len(text),
        "has_code": bool(_CODE_RE.search(text)),
        "has_list": bool(_LIST_RE.search(text)),
        "has_table": bool(_TABLE_RE.search(text)),
    }
