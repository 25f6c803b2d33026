"""
app/services/job_status_store.py

Job status stores keyed by job id.

Writes for one job come only from that job's background task; reads come
from status queries for any job. Both stores refuse updates that would move
a job's lifecycle backwards.
"""

from __future__ import annotations

import threading
import uuid
from typing import Protocol

from sqlalchemy.orm import Session, sessionmaker

from app.domain.items import CommitMode, UploadResult
from app.domain.jobs import JobStatus, JobStep, check_transition
from db.models.ingestion_job import IngestionJob
from db.repositories.ingestion_job_repository import IngestionJobRepository


class JobStatusStore(Protocol):
    def put(self, status: JobStatus) -> None:
        ...

    def get(self, job_id: uuid.UUID) -> JobStatus | None:
        ...


class _Shard:
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: dict[uuid.UUID, JobStatus] = {}


class ShardedJobStatusStore:
    """
    In-memory store split into independently locked shards.

    Jobs hashed to different shards never contend for the same lock.
    Snapshots are immutable, so a reader holding one is never affected by a
    later write.
    """

    def __init__(self, shard_count: int = 16) -> None:
        self._shards = tuple(_Shard() for _ in range(max(1, shard_count)))

    def _shard_for(self, job_id: uuid.UUID) -> _Shard:
        return self._shards[job_id.int % len(self._shards)]

    def put(self, status: JobStatus) -> None:
        shard = self._shard_for(status.job_id)
        with shard.lock:
            previous = shard.entries.get(status.job_id)
            check_transition(previous.step if previous else None, status.step)
            shard.entries[status.job_id] = status

    def get(self, job_id: uuid.UUID) -> JobStatus | None:
        shard = self._shard_for(job_id)
        with shard.lock:
            return shard.entries.get(job_id)

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total


class DatabaseJobStatusStore:
    """
    Store that keeps snapshots in the ``ingestion_jobs`` table so status
    survives process restarts. Each call uses its own session.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        if session_factory is None:
            from db.session import get_session_factory

            session_factory = get_session_factory()
        self._session_factory = session_factory

    def put(self, status: JobStatus) -> None:
        with self._session_factory() as db:
            repository = IngestionJobRepository(db)
            existing = repository.get_job(status.job_id)
            check_transition(JobStep(existing.step) if existing else None, status.step)
            repository.save_snapshot(
                job_id=status.job_id,
                mode=status.mode.value,
                step=status.step.value,
                message=status.message,
                rows_processed=status.rows_processed,
                rows_total=status.rows_total,
                result_payload=status.result.to_payload() if status.result else None,
            )
            db.commit()

    def get(self, job_id: uuid.UUID) -> JobStatus | None:
        with self._session_factory() as db:
            job = IngestionJobRepository(db).get_job(job_id)
            if job is None:
                return None
            return _to_status(job)


def _to_status(job: IngestionJob) -> JobStatus:
    return JobStatus(
        job_id=job.id,
        mode=CommitMode(job.mode),
        step=JobStep(job.step),
        message=job.message,
        rows_processed=job.rows_processed,
        rows_total=job.rows_total,
        result=UploadResult.from_payload(job.result_payload) if job.result_payload else None,
        updated_at=job.updated_at,
    )
