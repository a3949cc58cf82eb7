"""Error taxonomy shared by the ingestion and query paths."""

from __future__ import annotations


class InvalidRequestError(ValueError):
    """A caller supplied a missing or malformed URL list, state, or question."""


class FetchError(RuntimeError):
    """Fetching a URL failed.

    ``transient`` marks failures worth retrying (network errors, timeouts,
    HTTP 408/429/5xx).
    """

    def __init__(self, message: str, *, transient: bool = True, status: int | None = None) -> None:
        super().__init__(message)
        self.transient = transient
        self.status = status


class ContentError(RuntimeError):
    """A fetched body could not be turned into a canonical document."""


class EmbeddingError(RuntimeError):
    """The embedding service failed after all retries."""


class StoreError(RuntimeError):
    """A vector-store write failed."""
