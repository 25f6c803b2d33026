"""
app/services/commit_strategies.py

Strategies that turn the validated row stream into durable item writes.

ATOMIC keeps every valid record in memory and writes them in one call at
the end of the file: either all of them are stored or none are. CHUNKED
writes every ``chunk_size`` valid records as an independent unit; a failed
chunk stops the job, while chunks written before it stay committed.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from app.domain.ingestion_errors import ChunkPersistenceError
from app.domain.items import CommitMode, Invalid, ItemRecord, UploadResult, ValidationOutcome
from app.repositories.item_repository import RecordStore
from app.services.error_sink import ErrorSink
from app.services.job_progress import JobProgress

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000

OutcomeStream = Iterable[tuple[Sequence[str], ValidationOutcome]]


class CommitStrategy(ABC):
    """
    Consumes ``(raw_row, outcome)`` pairs, routes rejections to the error
    sink and persists valid records.
    """

    mode: CommitMode

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    @abstractmethod
    def commit(
        self,
        outcomes: OutcomeStream,
        sink: ErrorSink,
        progress: JobProgress,
    ) -> UploadResult:
        ...

    @staticmethod
    def _build_result(*, processed: int, inserted: int, sink: ErrorSink) -> UploadResult:
        sink.finalize()
        return UploadResult(
            processed=processed,
            inserted=inserted,
            failed=sink.failed,
            error_report_path=str(sink.path),
            summary=sink.counts,
        )


class AtomicCommitStrategy(CommitStrategy):
    mode = CommitMode.ATOMIC

    def commit(
        self,
        outcomes: OutcomeStream,
        sink: ErrorSink,
        progress: JobProgress,
    ) -> UploadResult:
        batch: list[ItemRecord] = []
        processed = 0

        for row, outcome in outcomes:
            processed += 1
            if isinstance(outcome, Invalid):
                sink.record(row, outcome.reason, row_number=processed)
                continue
            batch.append(outcome.record)

        inserted = 0
        if batch:
            progress.committing(f"Attempting single database commit of {len(batch)} rows...")
            # PersistenceError propagates: nothing from this file is stored.
            self._store.persist(batch)
            inserted = len(batch)

        return self._build_result(processed=processed, inserted=inserted, sink=sink)


class ChunkedCommitStrategy(CommitStrategy):
    mode = CommitMode.CHUNKED

    def __init__(self, store: RecordStore, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        super().__init__(store)
        self._chunk_size = max(1, chunk_size)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def commit(
        self,
        outcomes: OutcomeStream,
        sink: ErrorSink,
        progress: JobProgress,
    ) -> UploadResult:
        batch: list[ItemRecord] = []
        processed = 0
        inserted = 0
        chunk_number = 0

        for row, outcome in outcomes:
            processed += 1
            if isinstance(outcome, Invalid):
                sink.record(row, outcome.reason, row_number=processed)
            else:
                batch.append(outcome.record)

            if len(batch) >= self._chunk_size:
                chunk_number += 1
                inserted += self._commit_chunk(batch, chunk_number, inserted, progress)
                batch = []

        if batch:
            chunk_number += 1
            inserted += self._commit_chunk(batch, chunk_number, inserted, progress)

        return self._build_result(processed=processed, inserted=inserted, sink=sink)

    def _commit_chunk(
        self,
        chunk: list[ItemRecord],
        chunk_number: int,
        committed: int,
        progress: JobProgress,
    ) -> int:
        progress.committing(
            f"Committing chunk {chunk_number} ({len(chunk)} rows); "
            f"{committed} rows committed, {progress.rows_processed} processed"
        )
        try:
            self._store.persist(chunk)
        except Exception as exc:
            raise ChunkPersistenceError(
                f"Chunk {chunk_number} failed; {committed} rows from earlier chunks remain committed: {exc}",
                committed=committed,
            ) from exc
        logger.debug("Committed chunk=%d rows=%d", chunk_number, len(chunk))
        return len(chunk)


def get_commit_strategy(
    mode: CommitMode,
    store: RecordStore,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> CommitStrategy:
    if mode is CommitMode.ATOMIC:
        return AtomicCommitStrategy(store)
    return ChunkedCommitStrategy(store, chunk_size=chunk_size)
