"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for a local server)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible chat API. Leave empty to use "
            "OpenAI cloud."
        ),
    )
    llm_temperature: float = 0.3
    llm_max_retries: int = 3

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "legal_documents"

    # Embedding
    embedding_provider: str = Field(default="openai", description="'openai' or 'huggingface'")
    embedding_model: str = "text-embedding-3-small"
    embedding_batch_size: int = 20
    embedding_batch_pause: float = 1.0
    embedding_max_retries: int = 5
    embedding_initial_delay: float = 2.0
    embedding_max_delay: float = 10.0

    # Chunking
    chunk_size: int = 4000
    chunk_overlap: int = 200

    # Crawling
    crawl_max_requests: int = 10_000
    crawl_max_concurrency: int = 2
    crawl_max_retries: int = 5
    crawl_request_timeout: float = 180.0
    crawl_politeness_delay: float = 1.0
    crawl_retry_base_delay: float = 1.0
    crawl_retry_max_delay: float = 30.0
    crawl_user_agent: str = "LegalDocsBot/0.1"
    crawl_progress_interval: float = 30.0
    min_content_length: int = 50

    # Retrieval
    retrieval_top_k: int = 20
    context_threshold: float = 0.6
    context_limit: int = 5
    citation_threshold: float = 0.5
    citation_limit: int = 4
    section_url_boost: float = 0.3
    section_content_boost: float = 0.2
    anchor_keyword_boost: float = 0.2
    anchor_keywords: list[str] = Field(
        default_factory=lambda: ["restaurant", "permit", "license", "business registration"],
    )
    search_terms: list[str] = Field(
        default_factory=lambda: ["restaurant", "permits", "business", "licenses", "regulations"],
        description="Domain-anchor words appended to every similarity search.",
    )

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install a root handler for scripts and workers embedding the library."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    for noisy in ("httpx", "chromadb", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
