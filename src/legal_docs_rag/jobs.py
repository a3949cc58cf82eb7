"""Job-status tracking for background ingestion runs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class JobStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class JobStore(ABC):
    """Receives status transitions keyed by job id."""

    @abstractmethod
    def update(self, job_id: str, status: JobStatus, **fields: Any) -> None:
        """Record *status* (and any extra *fields*) for *job_id*."""
        ...

    @abstractmethod
    def get(self, job_id: str) -> dict[str, Any] | None:
        """Return the latest record for *job_id*, or ``None``."""
        ...


class InMemoryJobStore(JobStore):
    """Process-local job store; records are merged across updates."""

    def __init__(self) -> None:
        self._jobs: dict[str, dict[str, Any]] = {}

    def update(self, job_id: str, status: JobStatus, **fields: Any) -> None:
        record = self._jobs.setdefault(job_id, {})
        record.update(fields)
        record["status"] = status.value
        record["updated_at"] = datetime.now(timezone.utc).isoformat()

    def get(self, job_id: str) -> dict[str, Any] | None:
        record = self._jobs.get(job_id)
        return dict(record) if record is not None else None
