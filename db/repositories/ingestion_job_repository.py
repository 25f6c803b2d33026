"""
Repository for upload job snapshot persistence and status lookup.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.orm import Session

from db.models.ingestion_job import IngestionJob


class IngestionJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_job(self, job_id: uuid.UUID) -> IngestionJob | None:
        return self._session.get(IngestionJob, job_id)

    def save_snapshot(
        self,
        *,
        job_id: uuid.UUID,
        mode: str,
        step: str,
        message: str,
        rows_processed: int,
        rows_total: int | None,
        result_payload: dict[str, Any] | None = None,
    ) -> IngestionJob:
        job = self.get_job(job_id)
        if job is None:
            job = IngestionJob(id=job_id, mode=mode)
            self._session.add(job)
        job.step = step
        job.message = message
        job.rows_processed = rows_processed
        job.rows_total = rows_total
        if result_payload is not None:
            job.result_payload = result_payload
        self._session.flush()
        return job
