"""Unit tests for the Chroma backend, using a mocked client."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from legal_docs_rag.errors import StoreError
from legal_docs_rag.retrieval.chroma_store import ChromaVectorStore, _build_chroma_where, distance_to_similarity
from legal_docs_rag.retrieval.models import IndexedVector, MetadataFilter


@pytest.fixture()
def client() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def store(client: MagicMock) -> ChromaVectorStore:
    return ChromaVectorStore("test-collection", client=client)


def _record(i: int) -> IndexedVector:
    return IndexedVector(id=f"id-{i}", text=f"text {i}", embedding=[0.1 * i], metadata={"url": "u", "chunk_index": i})


class TestWhere:
    def test_no_filters(self) -> None:
        assert _build_chroma_where([]) is None

    def test_single_filter(self) -> None:
        assert _build_chroma_where([MetadataFilter.equals("state", "Ohio")]) == {"state": {"$eq": "Ohio"}}

    def test_multiple_filters_are_anded(self) -> None:
        where = _build_chroma_where(
            [MetadataFilter.equals("state", "Ohio"), MetadataFilter.one_of("content_type", ["text/html"])]
        )
        assert where == {"$and": [{"state": {"$eq": "Ohio"}}, {"content_type": {"$in": ["text/html"]}}]}

    def test_unknown_operator(self) -> None:
        with pytest.raises(ValueError):
            _build_chroma_where([MetadataFilter(field="x", operator="like", value="y")])


def test_distance_to_similarity_is_clamped() -> None:
    assert distance_to_similarity(0.0) == 1.0
    assert distance_to_similarity(0.25) == pytest.approx(0.75)
    assert distance_to_similarity(1.6) == 0.0


class TestChromaVectorStore:
    def test_collection_uses_cosine_space(self, store: ChromaVectorStore, client: MagicMock) -> None:
        client.get_or_create_collection.assert_called_once_with(
            name="test-collection", metadata={"hnsw:space": "cosine"}
        )

    def test_add_upserts_records(self, store: ChromaVectorStore, client: MagicMock) -> None:
        store.add([_record(0), _record(1)])
        collection = client.get_or_create_collection.return_value
        kwargs = collection.upsert.call_args.kwargs
        assert kwargs["ids"] == ["id-0", "id-1"]
        assert kwargs["documents"] == ["text 0", "text 1"]
        assert kwargs["metadatas"][1]["chunk_index"] == 1

    def test_add_empty_is_noop(self, store: ChromaVectorStore, client: MagicMock) -> None:
        store.add([])
        client.get_or_create_collection.return_value.upsert.assert_not_called()

    def test_add_failure_raises_store_error(self, store: ChromaVectorStore, client: MagicMock) -> None:
        client.get_or_create_collection.return_value.upsert.side_effect = RuntimeError("disk full")
        with pytest.raises(StoreError, match="disk full"):
            store.add([_record(0)])

    def test_similarity_search_converts_results(self, store: ChromaVectorStore, client: MagicMock) -> None:
        collection = client.get_or_create_collection.return_value
        collection.query.return_value = {
            "ids": [["a", "b"]],
            "documents": [["first", None]],
            "metadatas": [[{"url": "u1"}, None]],
            "distances": [[0.2, 0.9]],
        }
        hits = store.similarity_search([0.1, 0.2], k=2, filters=[MetadataFilter.equals("state", "Ohio")])

        assert collection.query.call_args.kwargs["where"] == {"state": {"$eq": "Ohio"}}
        assert collection.query.call_args.kwargs["n_results"] == 2
        assert hits[0] == {"id": "a", "content": "first", "score": pytest.approx(0.8), "metadata": {"url": "u1"}}
        assert hits[1]["content"] == ""
        assert hits[1]["metadata"] == {}

    def test_health_check(self, store: ChromaVectorStore, client: MagicMock) -> None:
        assert store.health_check() is True
        client.heartbeat.side_effect = ConnectionError("down")
        assert store.health_check() is False

    def test_delete_by_url(self, store: ChromaVectorStore, client: MagicMock) -> None:
        store.delete([MetadataFilter.equals("url", "https://sos.example.gov/")])
        client.get_or_create_collection.return_value.delete.assert_called_once_with(
            where={"url": {"$eq": "https://sos.example.gov/"}}
        )

    def test_delete_requires_a_filter(self, store: ChromaVectorStore, client: MagicMock) -> None:
        with pytest.raises(ValueError):
            store.delete([])
        client.get_or_create_collection.return_value.delete.assert_not_called()

    def test_delete_failure_raises_store_error(self, store: ChromaVectorStore, client: MagicMock) -> None:
        client.get_or_create_collection.return_value.delete.side_effect = RuntimeError("locked")
        with pytest.raises(StoreError, match="locked"):
            store.delete([MetadataFilter.equals("url", "u")])
