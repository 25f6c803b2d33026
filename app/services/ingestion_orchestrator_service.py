"""
Orchestrator service for bulk item uploads.

Accepting an upload is synchronous: the file is staged, a job id is minted
and the INIT snapshot is recorded before the background pass is submitted
to a bounded worker pool. The pass itself runs

    PREFETCH -> PROCESSING -> COMMIT -> COMPLETE | FAILED

on one worker thread, so duplicate detection sees rows in file order. The
staged file is deleted whichever way the pass ends.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, BinaryIO, Protocol

from app.config import get_ingestion_settings
from app.domain.ingestion_errors import RequestRejectedError, StagingError
from app.domain.items import CommitMode, ValidationOutcome
from app.domain.jobs import JobStatus, JobStep
from app.repositories.item_repository import ItemRepository, RecordStore
from app.services.commit_strategies import DEFAULT_CHUNK_SIZE, get_commit_strategy
from app.services.duplicate_index import build_duplicate_index
from app.services.error_sink import ErrorSink, error_report_path
from app.services.job_progress import DEFAULT_PROGRESS_INTERVAL, JobProgress
from app.services.job_status_store import (
    DatabaseJobStatusStore,
    JobStatusStore,
    ShardedJobStatusStore,
)
from app.services.tabular_reader import open_tabular_source
from app.validators.item_row_validator import validate_row
from db.repositories.errors import FileStagingError
from db.repositories.staging import FileStagingBackend, LocalFileStaging, StagedFile

logger = logging.getLogger(__name__)

_MAX_FAILURE_MESSAGE_LENGTH = 2000


class IngestionTaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> Future[None]:
        ...

    def shutdown(self, wait: bool = True) -> None:
        ...


class ThreadPoolJobExecutor:
    """
    Bounded worker pool for upload jobs. ``submit`` returns the job's future.
    """

    def __init__(self, max_workers: int) -> None:
        self._pool = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="upload-job",
        )

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> Future[None]:
        return self._pool.submit(task, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)


@dataclass(frozen=True)
class AcceptedJob:
    """
    Acknowledgement returned to the caller once an upload is staged.
    """

    job_id: uuid.UUID
    status: JobStatus
    completion: Future[None]


def validate_stream(
    rows: Iterable[list[str]],
    seen_ids: set[str],
    progress: JobProgress,
) -> Iterator[tuple[list[str], ValidationOutcome]]:
    """
    Validate rows lazily in file order, ticking job progress per row.
    """

    for row in rows:
        outcome = validate_row(row, seen_ids)
        progress.row_processed()
        yield row, outcome


class IngestionOrchestratorService:
    """
    Coordinates staging, job status, and background execution of uploads.
    """

    def __init__(
        self,
        *,
        record_store: RecordStore,
        status_store: JobStatusStore,
        staging: FileStagingBackend,
        executor: IngestionTaskExecutor,
        error_report_dir: str | Path,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        log_rejected_rows: bool = False,
    ) -> None:
        self._record_store = record_store
        self._status_store = status_store
        self._staging = staging
        self._executor = executor
        self._error_report_dir = Path(error_report_dir)
        self._chunk_size = max(1, chunk_size)
        self._progress_interval = max(1, progress_interval)
        self._log_rejected_rows = log_rejected_rows

    def accept_upload(
        self,
        *,
        stream: BinaryIO,
        file_name: str,
        mode: CommitMode = CommitMode.CHUNKED,
    ) -> AcceptedJob:
        """
        Stage an upload, record its INIT snapshot and schedule processing.

        Raises RequestRejectedError for an empty file and StagingError when
        the upload cannot be copied to staging; no job exists in either case.
        """

        try:
            staged = self._staging.stage(stream, file_name=file_name)
        except FileStagingError as exc:
            raise StagingError(f"Unable to stage upload {file_name!r}.") from exc

        if staged.size_bytes == 0:
            self._delete_staged_quietly(staged)
            raise RequestRejectedError("File must not be empty.")

        job_id = uuid.uuid4()
        progress = JobProgress(
            self._status_store,
            job_id=job_id,
            mode=mode,
            progress_interval=self._progress_interval,
        )
        initial_status = progress.start(
            f"Upload accepted: {staged.file_name} ({staged.size_bytes} bytes) staged for {mode.value} processing."
        )

        try:
            completion = self._executor.submit(self._run_job, progress, staged)
        except Exception:
            self._delete_staged_quietly(staged)
            progress.fail("Failed to schedule upload job.")
            raise

        logger.info(
            "Upload job accepted id=%s mode=%s file=%s bytes=%d checksum=%s",
            job_id,
            mode.value,
            staged.file_name,
            staged.size_bytes,
            staged.checksum,
        )
        return AcceptedJob(job_id=job_id, status=initial_status, completion=completion)

    def get_status(self, job_id: uuid.UUID) -> JobStatus | None:
        return self._status_store.get(job_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _run_job(self, progress: JobProgress, staged: StagedFile) -> None:
        try:
            progress.advance(JobStep.PREFETCH, "Fetching existing external ids...")
            seen_ids = build_duplicate_index(self._record_store)
            progress.advance(
                JobStep.PROCESSING,
                f"Prefetch complete ({len(seen_ids)} known ids). Processing rows...",
            )

            strategy = get_commit_strategy(
                progress.mode,
                self._record_store,
                chunk_size=self._chunk_size,
            )
            report_path = error_report_path(self._error_report_dir, progress.job_id, progress.mode)
            with ErrorSink(report_path, log_rejected_rows=self._log_rejected_rows) as sink:
                with open_tabular_source(staged.path) as rows:
                    result = strategy.commit(validate_stream(rows, seen_ids, progress), sink, progress)

            progress.complete(result)
        except Exception as exc:
            self._mark_job_failed(progress=progress, exc=exc)
        finally:
            self._delete_staged_quietly(staged)

    def _mark_job_failed(self, *, progress: JobProgress, exc: Exception) -> None:
        error_message = f"{type(exc).__name__}: {exc}"
        logger.exception(
            "Upload job failed id=%s step=%s error=%s",
            progress.job_id,
            progress.step.value,
            error_message,
        )
        try:
            progress.fail(f"Processing failed: {error_message}"[:_MAX_FAILURE_MESSAGE_LENGTH])
        except Exception:
            logger.exception("Failed to record failed upload job state id=%s", progress.job_id)

    def _delete_staged_quietly(self, staged: StagedFile) -> None:
        try:
            self._staging.delete(staged)
        except FileStagingError:
            logger.warning("Could not delete staged upload path=%s", staged.path, exc_info=True)


@lru_cache(maxsize=1)
def get_ingestion_orchestrator_service() -> IngestionOrchestratorService:
    """
    Build and cache the orchestrator with env-driven settings.
    """

    settings = get_ingestion_settings()
    status_store: JobStatusStore
    if settings.status_backend == "database":
        status_store = DatabaseJobStatusStore()
    else:
        status_store = ShardedJobStatusStore(shard_count=settings.status_shards)

    return IngestionOrchestratorService(
        record_store=ItemRepository(),
        status_store=status_store,
        staging=LocalFileStaging(settings.staging_dir),
        executor=ThreadPoolJobExecutor(settings.worker_pool_size),
        error_report_dir=settings.error_report_dir,
        chunk_size=settings.chunk_size,
        progress_interval=settings.progress_interval,
        log_rejected_rows=settings.log_rejected_rows,
    )
