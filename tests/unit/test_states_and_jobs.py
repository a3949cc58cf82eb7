"""Unit tests for state-name normalisation and job tracking."""

from __future__ import annotations

import pytest

from legal_docs_rag.jobs import InMemoryJobStore, JobStatus
from legal_docs_rag.states import STATE_MAPPING, normalize_state


def test_fifty_states() -> None:
    assert len(STATE_MAPPING) == 50


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("texas", "Texas"),
        ("TEXAS", "Texas"),
        ("  north carolina ", "North Carolina"),
        ("District of Columbia", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_state(raw, expected) -> None:
    assert normalize_state(raw) == expected


class TestInMemoryJobStore:
    def test_updates_merge_fields(self) -> None:
        jobs = InMemoryJobStore()
        jobs.update("j1", JobStatus.RUNNING, urls=["https://x.gov"], state="Ohio")
        jobs.update("j1", JobStatus.COMPLETED, result={"processed": 3})

        record = jobs.get("j1")
        assert record["status"] == "completed"
        assert record["state"] == "Ohio"
        assert record["result"] == {"processed": 3}
        assert "updated_at" in record

    def test_unknown_job(self) -> None:
        assert InMemoryJobStore().get("missing") is None

    def test_get_returns_copy(self) -> None:
        jobs = InMemoryJobStore()
        jobs.update("j1", JobStatus.RUNNING)
        jobs.get("j1")["status"] = "tampered"
        assert jobs.get("j1")["status"] == "running"
