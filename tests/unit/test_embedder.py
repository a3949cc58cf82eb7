"""Unit tests for the embedding wrapper."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from conftest import FakeEmbeddings, make_embedder

from legal_docs_rag.errors import EmbeddingError
from legal_docs_rag.ingestion.embedder import backoff_delay, clean_text


def test_clean_text_collapses_whitespace_and_symbols() -> None:
    assert clean_text("  Food\n\tpermit  §12 » fees*  ") == "Food permit 12 fees"


def test_clean_text_keeps_basic_punctuation() -> None:
    assert clean_text("Is a permit required? Yes, always.") == "Is a permit required? Yes, always."


class TestBackoffDelay:
    def test_non_decreasing_and_capped(self) -> None:
        for _ in range(20):
            delays = [backoff_delay(n, 2.0, 10.0) for n in range(1, 7)]
            assert delays == sorted(delays)
            assert max(delays) <= 10.0

    def test_first_delay_within_jitter_window(self) -> None:
        assert 2.0 <= backoff_delay(1, 2.0, 10.0) < 4.0


class TestEmbed:
    @pytest.mark.asyncio
    async def test_returns_vector_for_cleaned_text(self) -> None:
        embeddings = FakeEmbeddings()
        vector = await make_embedder(embeddings).embed("Food   permit\n")
        assert embeddings.calls == ["Food permit"]
        assert vector == [11.0, 1.0, 0.0]

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self) -> None:
        embeddings = FakeEmbeddings(fail_times=2)
        vector = await make_embedder(embeddings, max_retries=2).embed("permit")
        assert vector == [6.0, 1.0, 0.0]
        assert len(embeddings.calls) == 3

    @pytest.mark.asyncio
    async def test_raises_after_retries_exhausted(self) -> None:
        embeddings = FakeEmbeddings(fail_times=10)
        with pytest.raises(EmbeddingError, match="after 2 retries"):
            await make_embedder(embeddings, max_retries=2).embed("permit")
        assert len(embeddings.calls) == 3

    @pytest.mark.asyncio
    async def test_sleeps_between_attempts(self) -> None:
        embeddings = FakeEmbeddings(fail_times=2)
        embedder = make_embedder(embeddings, max_retries=3, initial_delay=1.0, max_delay=3.0)
        with patch("legal_docs_rag.ingestion.embedder.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await embedder.embed("permit")
        delays = [call.args[0] for call in sleep.await_args_list]
        assert len(delays) == 2
        assert delays == sorted(delays)
        assert all(d <= 3.0 for d in delays)


class TestEmbedBatch:
    @pytest.mark.asyncio
    async def test_preserves_input_order(self) -> None:
        texts = ["a", "bb", "ccc", "dddd", "eeeee"]
        vectors = await make_embedder().embed_batch(texts, batch_size=2)
        assert [v[0] for v in vectors] == [1.0, 2.0, 3.0, 4.0, 5.0]

    @pytest.mark.asyncio
    async def test_pauses_between_batches_only(self) -> None:
        embedder = make_embedder(batch_pause=1.0)
        with patch("legal_docs_rag.ingestion.embedder.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await embedder.embed_batch(["a", "b", "c", "d", "e"], batch_size=2)
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 1.0]

    @pytest.mark.asyncio
    async def test_return_exceptions_isolates_failures(self) -> None:
        embedder = make_embedder(FakeEmbeddings(fail_on=("broken",)), max_retries=0)
        results = await embedder.embed_batch(["fine", "broken text", "also fine"], return_exceptions=True)
        assert isinstance(results[1], EmbeddingError)
        assert results[0] == [4.0, 1.0, 0.0]
        assert results[2] == [9.0, 1.0, 0.0]

    @pytest.mark.asyncio
    async def test_failure_propagates_by_default(self) -> None:
        embedder = make_embedder(FakeEmbeddings(fail_on=("broken",)), max_retries=0)
        with pytest.raises(EmbeddingError):
            await embedder.embed_batch(["fine", "broken"])

    @pytest.mark.asyncio
    async def test_rejects_non_positive_batch_size(self) -> None:
        with pytest.raises(ValueError):
            await make_embedder().embed_batch(["a"], batch_size=0)
