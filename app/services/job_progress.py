"""
app/services/job_progress.py

Status writer used by one job's background task.
"""

from __future__ import annotations

import logging
import uuid

from app.domain.items import CommitMode, UploadResult
from app.domain.jobs import JobStatus, JobStep
from app.logging_utils import log_job_event
from app.services.job_status_store import JobStatusStore

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_INTERVAL = 5000


class JobProgress:
    """
    Tracks the current step and row count of one job and writes snapshots.

    Row ticks only reach the store every ``progress_interval`` rows; step
    changes are written immediately.
    """

    def __init__(
        self,
        store: JobStatusStore,
        *,
        job_id: uuid.UUID,
        mode: CommitMode,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    ) -> None:
        self._store = store
        self._job_id = job_id
        self._mode = mode
        self._progress_interval = max(1, progress_interval)
        self._step = JobStep.INIT
        self._rows_processed = 0

    @property
    def job_id(self) -> uuid.UUID:
        return self._job_id

    @property
    def mode(self) -> CommitMode:
        return self._mode

    @property
    def step(self) -> JobStep:
        return self._step

    @property
    def rows_processed(self) -> int:
        return self._rows_processed

    def start(self, message: str) -> JobStatus:
        """Record the INIT snapshot of a freshly accepted job."""
        return self._write(JobStep.INIT, message)

    def advance(self, step: JobStep, message: str) -> None:
        self._write(step, message)

    def row_processed(self) -> None:
        self._rows_processed += 1
        if self._rows_processed % self._progress_interval == 0:
            self._write(self._step, f"Processing rows... {self._rows_processed} processed")

    def committing(self, message: str) -> None:
        """Move to COMMIT (or stay there) before a durability write."""
        self._write(JobStep.COMMIT, message)

    def complete(self, result: UploadResult) -> None:
        self._rows_processed = result.processed
        self._write(
            JobStep.COMPLETE,
            f"Finished. Inserted: {result.inserted}, Failed: {result.failed}",
            rows_total=result.processed,
            result=result,
        )

    def fail(self, message: str) -> None:
        self._write(JobStep.FAILED, message)

    def _write(
        self,
        step: JobStep,
        message: str,
        *,
        rows_total: int | None = None,
        result: UploadResult | None = None,
    ) -> JobStatus:
        status = JobStatus(
            job_id=self._job_id,
            mode=self._mode,
            step=step,
            message=message,
            rows_processed=self._rows_processed,
            rows_total=rows_total,
            result=result,
        )
        self._store.put(status)
        if step is not self._step or step is JobStep.INIT:
            log_job_event(logger, "upload_job_step", status)
        self._step = step
        return status
