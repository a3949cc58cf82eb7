"""Content-type classification and normalisation into canonical documents.

Each supported :class:`~legal_docs_rag.ingestion.models.ContentKind` has
exactly one :class:`ContentNormalizer` implementation. :func:`classify`
picks the kind from the URL and ``Content-Type`` header; anything it does
not recognise is skipped rather than treated as an error.
"""

from __future__ import annotations

import io
import logging
import re
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from markdownify import markdownify
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from legal_docs_rag.config import settings
from legal_docs_rag.errors import ContentError
from legal_docs_rag.ingestion.fetcher import Fetcher
from legal_docs_rag.ingestion.models import CanonicalDocument, ContentKind, FetchResponse

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"

NOISE_SELECTORS = ".advertisement, .comments, .social-share, .ad-container"
MAIN_CONTENT_SELECTORS = "main, article, .main-content, .content"

_MIME_KINDS = {kind.value: kind for kind in ContentKind}


def classify(url: str, content_type: str) -> ContentKind | None:
    """Return the content kind for a response, or ``None`` if unsupported.

    A URL path ending in ``.pdf`` wins over the declared header, since
    many state sites serve PDFs as ``application/octet-stream``.
    """
    if urlparse(url).path.lower().endswith(".pdf"):
        return ContentKind.PDF
    mime = content_type.split(";")[0].strip().lower()
    return _MIME_KINDS.get(mime)


def _collapse_blank_lines(text: str) -> str:
    text = re.sub(r"[ \t]+\n", "\n", text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def _looks_like_html(body: bytes) -> bool:
    head = body[:1024].lstrip().lower()
    return head.startswith((b"<!doctype html", b"<html")) or b"<a " in body[:65536].lower()


class ContentNormalizer(ABC):
    """Turns one kind of fetched response into a canonical document."""

    kind: ContentKind

    @abstractmethod
    async def normalize(self, response: FetchResponse, fetcher: Fetcher) -> CanonicalDocument:
        """Extract title, text and metadata from *response*.

        Raises
        ------
        ContentError
            When the body is malformed or yields no text.
        """
        ...


class HtmlNormalizer(ContentNormalizer):
    """Main-content extraction followed by HTML → Markdown conversion."""

    kind = ContentKind.HTML

    async def normalize(self, response: FetchResponse, fetcher: Fetcher) -> CanonicalDocument:
        soup = BeautifulSoup(response.text(), "html.parser")
        title = soup.title.get_text(strip=True) if soup.title else ""
        metadata = self._head_metadata(soup)

        for tag in soup(["script", "style"]):
            tag.decompose()
        for tag in soup.select(NOISE_SELECTORS):
            tag.decompose()

        region = soup.select_one(MAIN_CONTENT_SELECTORS) or soup.body or soup
        content = markdownify(str(region), heading_style="ATX", bullets="-")
        return CanonicalDocument(
            url=response.url,
            title=title,
            content=_collapse_blank_lines(content),
            content_type=self.kind,
            metadata=metadata,
        )

    @staticmethod
    def _head_metadata(soup: BeautifulSoup) -> dict[str, Any]:
        lookups = {
            "author": {"name": "author"},
            "created": {"property": "article:published_time"},
            "modified": {"property": "article:modified_time"},
        }
        metadata: dict[str, Any] = {}
        for key, attrs in lookups.items():
            tag = soup.find("meta", attrs=attrs)
            if tag is not None and tag.get("content"):
                metadata[key] = tag["content"].strip()
        return metadata


class PdfNormalizer(ContentNormalizer):
    """PDF text extraction with pypdf.

    Interstitial HTML pages that merely link to the real PDF are followed
    once before the magic-number check.
    """

    kind = ContentKind.PDF

    async def normalize(self, response: FetchResponse, fetcher: Fetcher) -> CanonicalDocument:
        data = response.body
        if not data.startswith(PDF_MAGIC) and _looks_like_html(data):
            data = await self._follow_pdf_link(response, fetcher)

        if not data:
            raise ContentError(f"Empty PDF buffer received from {response.url}")
        if not data.startswith(PDF_MAGIC):
            raise ContentError(f"Invalid PDF format: missing PDF header in {response.url}")

        text, metadata = self._extract(data, response.url)
        title = metadata.pop("title", None) or "PDF Document"
        return CanonicalDocument(
            url=response.url,
            title=title,
            content=text,
            content_type=self.kind,
            metadata=metadata,
        )

    @staticmethod
    async def _follow_pdf_link(response: FetchResponse, fetcher: Fetcher) -> bytes:
        soup = BeautifulSoup(response.text(), "html.parser")
        link = soup.select_one('a[href$=".pdf"], a[href$=".PDF"]')
        if link is None:
            raise ContentError(f"PDF link not found in HTML response from {response.url}")
        pdf_url = urljoin(response.url, link["href"])
        logger.info("Following PDF link %s from wrapper page %s", pdf_url, response.url)
        pdf_response = await fetcher.fetch(pdf_url)
        return pdf_response.body

    @staticmethod
    def _extract(data: bytes, url: str) -> tuple[str, dict[str, Any]]:
        try:
            reader = PdfReader(io.BytesIO(data))
        except PyPdfError as exc:
            raise ContentError(f"PDF parsing failed for {url}: {exc}") from exc

        pages: list[str] = []
        for number, page in enumerate(reader.pages, 1):
            try:
                pages.append(page.extract_text() or "")
            except Exception as exc:  # noqa: BLE001 - pypdf raises assorted errors per page
                logger.warning("Could not extract page %d of %s: %s", number, url, exc)

        text = "\n".join(p.strip() for p in pages if p.strip())
        if not text:
            raise ContentError(f"No text content extracted from PDF {url}")

        metadata: dict[str, Any] = {"pages": len(reader.pages)}
        header = getattr(reader, "pdf_header", "") or ""
        if header.startswith("%PDF-"):
            metadata["pdf_version"] = header[len("%PDF-"):]
        info = reader.metadata
        if info is not None:
            for key in ("title", "author", "creator", "producer", "subject"):
                value = getattr(info, key, None)
                if value:
                    metadata[key] = str(value)
        return text, metadata


class CalendarNormalizer(ContentNormalizer):
    """iCalendar files are stored verbatim."""

    kind = ContentKind.CALENDAR

    async def normalize(self, response: FetchResponse, fetcher: Fetcher) -> CanonicalDocument:
        return CanonicalDocument(
            url=response.url,
            title="Calendar Events",
            content=response.text(),
            content_type=self.kind,
            metadata={"type": "calendar"},
        )


class Normalizer:
    """Classifies a response and dispatches to the matching normaliser.

    Parameters
    ----------
    min_content_length:
        Documents whose normalised text is shorter than this are skipped.
    """

    def __init__(self, *, min_content_length: int = settings.min_content_length) -> None:
        self.min_content_length = min_content_length
        self._handlers: dict[ContentKind, ContentNormalizer] = {
            handler.kind: handler
            for handler in (HtmlNormalizer(), PdfNormalizer(), CalendarNormalizer())
        }

    async def normalize(self, response: FetchResponse, fetcher: Fetcher) -> CanonicalDocument | None:
        """Return a canonical document, or ``None`` when the response should be skipped.

        ``None`` covers unsupported content types and documents that are
        too short to be useful. Malformed content raises
        :class:`~legal_docs_rag.errors.ContentError`.
        """
        kind = classify(response.url, response.content_type)
        if kind is None:
            logger.info("Skipping unsupported content type %r for %s", response.mime_type, response.url)
            return None

        document = await self._handlers[kind].normalize(response, fetcher)
        if len(document.content.strip()) < self.min_content_length:
            logger.info("Skipping %s: only %d characters of content", response.url, len(document.content.strip()))
            return None
        return document
