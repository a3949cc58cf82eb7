"""robots.txt evaluation for the crawler.

The policy fails open: when ``/robots.txt`` cannot be retrieved the origin
is treated as fully allowed and a warning is logged.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin
from urllib.robotparser import RobotFileParser

from legal_docs_rag.config import settings
from legal_docs_rag.errors import FetchError
from legal_docs_rag.ingestion.fetcher import Fetcher
from legal_docs_rag.ingestion.models import origin_of

logger = logging.getLogger(__name__)


class RobotsPolicy:
    """Per-origin cache of parsed robots.txt rules."""

    def __init__(self, fetcher: Fetcher, user_agent: str = settings.crawl_user_agent) -> None:
        self._fetcher = fetcher
        self._user_agent = user_agent
        self._parsers: dict[str, RobotFileParser] = {}

    async def is_allowed(self, url: str) -> bool:
        parser = await self._parser_for(origin_of(url))
        return parser.can_fetch(self._user_agent, url)

    async def _parser_for(self, origin: str) -> RobotFileParser:
        if origin in self._parsers:
            return self._parsers[origin]

        robots_url = urljoin(origin, "/robots.txt")
        parser = RobotFileParser(robots_url)
        try:
            response = await self._fetcher.fetch(robots_url)
            parser.parse(response.text().splitlines())
        except FetchError as exc:
            logger.warning("Could not fetch robots.txt at %s (%s); allowing all", robots_url, exc)
            parser.allow_all = True
        self._parsers[origin] = parser
        return parser
